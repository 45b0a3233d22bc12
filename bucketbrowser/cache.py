import os
import sys
import tempfile
import threading

from .errors import NOT_YET_FETCHED, FetchFailed, InvalidKey
from .nodes import DELIMITER
from .providers.base import CloudProvider

DEFAULT_CACHE_DIR = os.path.join(tempfile.gettempdir(), 's3_browser')


class _Fetch:
    """One in-flight download that later callers for the same key wait on."""

    def __init__(self):
        self.done = threading.Event()
        self.error = None


class ObjectCache:
    """Write-once local copies of remote objects, laid out as cache_root/<key>.

    Entries are never refreshed or removed. Concurrent requests for the
    same key share a single download.
    """

    def __init__(self, provider: CloudProvider, cache_root: str = DEFAULT_CACHE_DIR):
        self.provider = provider
        self.cache_root = os.path.abspath(cache_root)
        self._lock = threading.Lock()
        self._in_flight = {}  # {(bucket, key): _Fetch}

    def local_path_for(self, key: str) -> str:
        if not key or key.endswith(DELIMITER):
            raise ValueError(f"Not an object key: {key!r}")
        target = os.path.normpath(os.path.join(self.cache_root, *key.split(DELIMITER)))
        if os.path.commonpath([self.cache_root, target]) != self.cache_root or target == self.cache_root:
            raise InvalidKey(f"Key escapes the cache directory: {key}")
        if os.path.isdir(target):
            raise InvalidKey(f"Key collides with a cached folder: {key}")
        return target

    def locate(self, bucket: str, key: str):
        """Return the cached path for key, or NOT_YET_FETCHED. Never downloads."""
        try:
            target = self.local_path_for(key)
        except (ValueError, InvalidKey):
            return NOT_YET_FETCHED
        if os.path.isfile(target):
            return target
        return NOT_YET_FETCHED

    def ensure_local(self, bucket: str, key: str) -> str:
        """Make sure s3://bucket/key exists under the cache root and return its path."""
        target = self.local_path_for(key)
        try:
            os.makedirs(os.path.dirname(target), exist_ok=True)
        except OSError as e:
            raise FetchFailed(f"Could not create cache directory: {e}") from e

        if os.path.isfile(target):
            print(f"[Cache hit: {target}]", file=sys.stderr)
            return target

        with self._lock:
            pending = self._in_flight.get((bucket, key))
            owner = pending is None
            if owner:
                pending = _Fetch()
                self._in_flight[(bucket, key)] = pending

        if not owner:
            pending.done.wait()
            if pending.error is not None or not os.path.isfile(target):
                raise FetchFailed(str(pending.error or f"Fetch of s3://{bucket}/{key} failed"))
            return target

        try:
            self._fetch(bucket, key, target)
        except FetchFailed as e:
            pending.error = e
            raise
        finally:
            with self._lock:
                self._in_flight.pop((bucket, key), None)
            pending.done.set()
        return target

    def _fetch(self, bucket: str, key: str, target: str):
        # A second caller may have finished between the hit check and the lock.
        if os.path.isfile(target):
            return
        print(f"[Fetch: s3://{bucket}/{key}]", file=sys.stderr)
        try:
            ok = self.provider.run_fetch(bucket, key, target)
            if not ok:
                raise FetchFailed(f"Fetch of s3://{bucket}/{key} reported failure")
        except FetchFailed:
            self._discard_partial(target)
            raise
        except Exception as e:
            self._discard_partial(target)
            raise FetchFailed(str(e)) from e

    def _discard_partial(self, target: str):
        try:
            os.remove(target)
        except FileNotFoundError:
            pass
        except OSError as e:
            print(f"Warning: could not remove partial download {target}: {e}", file=sys.stderr)
