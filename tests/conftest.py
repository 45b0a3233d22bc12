from __future__ import annotations

import pytest

from bucketbrowser.cache import ObjectCache
from bucketbrowser.errors import FetchFailed, ListingFailed
from bucketbrowser.providers.base import CloudProvider
from bucketbrowser.tree import Notifier, TreeAdapter


class FakeProvider(CloudProvider):
    name = 'fake'

    def __init__(self, listings: dict | None = None, content: bytes = b"payload") -> None:
        self.listings = dict(listings or {})
        self.content = content
        self.listing_calls: list[tuple[str, str]] = []
        self.fetch_calls: list[tuple[str, str, str]] = []
        self.fail_listing: str | None = None
        self.fail_fetch: str | None = None

    def run_listing(self, bucket: str, prefix: str):
        self.listing_calls.append((bucket, prefix))
        if self.fail_listing:
            raise ListingFailed(self.fail_listing)
        return self.listings.get(prefix, {})

    def run_fetch(self, bucket: str, key: str, dest_path: str) -> bool:
        self.fetch_calls.append((bucket, key, dest_path))
        with open(dest_path, "wb") as f:
            f.write(self.content[: len(self.content) // 2] if self.fail_fetch else self.content)
        if self.fail_fetch:
            raise FetchFailed(self.fail_fetch)
        return True


class RecordingNotifier(Notifier):
    def __init__(self) -> None:
        self.events: list[tuple[str, ...]] = []

    def kinds(self, kind: str) -> list[tuple[str, ...]]:
        return [e for e in self.events if e[0] == kind]

    def info(self, message):
        self.events.append(("info", message))

    def error(self, message):
        self.events.append(("error", message))

    def prompt_config(self, message):
        self.events.append(("prompt_config", message))

    def show_file(self, path):
        self.events.append(("show_file", path))

    def reveal(self, directory):
        self.events.append(("reveal", directory))

    def copy_text(self, text):
        self.events.append(("copy_text", text))

    def status(self, text, tooltip=""):
        self.events.append(("status", text, tooltip))


SAMPLE_LISTINGS = {
    "": {
        "CommonPrefixes": [{"Prefix": "reports/"}, {"Prefix": "archive/"}],
        "Contents": [{"Key": "readme.txt", "Size": 12}],
    },
    "reports/": {
        "CommonPrefixes": [{"Prefix": "reports/2024/"}],
        "Contents": [
            {"Key": "reports/", "Size": 0},
            {"Key": "reports/q1.csv", "Size": 2048},
            {"Key": "reports/empty.csv", "Size": 0},
        ],
    },
}


def make_config(bucket: str = "my-bucket", prefix: str = "") -> dict:
    return {"general": {"bucket": bucket, "prefix": prefix}}


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider(SAMPLE_LISTINGS)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def cache(provider, tmp_path) -> ObjectCache:
    return ObjectCache(provider, str(tmp_path / "cache"))


@pytest.fixture
def adapter(provider, cache, notifier) -> TreeAdapter:
    return TreeAdapter(make_config(), provider, cache, notifier)
