from abc import ABC, abstractmethod
from typing import Any


class CloudProvider(ABC):
    """Abstract base class for cloud storage providers.

    Implementations translate their own failures into
    ``ListingFailed`` / ``FetchFailed`` from ``bucketbrowser.errors``.
    """

    name = 'base'

    @abstractmethod
    def run_listing(self, bucket: str, prefix: str) -> Any:
        """List one level under prefix (delimiter '/').

        Returns either a mapping shaped like the ListObjectsV2 response
        ({'CommonPrefixes': [...], 'Contents': [...]}) or its JSON text.
        """
        pass

    @abstractmethod
    def run_fetch(self, bucket: str, key: str, dest_path: str) -> bool:
        """Copy s3://bucket/key to dest_path. Returns True on success."""
        pass
