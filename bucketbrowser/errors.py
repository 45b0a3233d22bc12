class BucketBrowserError(Exception):
    """Base class for failures raised by the listing and cache layers."""


class ConfigMissing(BucketBrowserError):
    """No bucket configured."""


class ListingFailed(BucketBrowserError):
    """The listing call itself failed (non-zero exit, transport error)."""


class ListingParseError(ListingFailed):
    """The listing call succeeded but its output could not be understood."""


class FetchFailed(BucketBrowserError):
    """Copying an object to the local cache failed."""


class InvalidKey(FetchFailed):
    """An object key that cannot be mapped inside the cache root."""


class _NotYetFetched:
    def __repr__(self):
        return 'NOT_YET_FETCHED'

    def __bool__(self):
        return False


# Returned by cache lookups for objects that have not been downloaded yet.
NOT_YET_FETCHED = _NotYetFetched()
