from __future__ import annotations

import json
import locale

import pytest

from bucketbrowser.errors import ConfigMissing, ListingFailed, ListingParseError
from bucketbrowser.listing import list_prefix, normalize_prefix, parse_listing
from bucketbrowser.nodes import NodeKind, TreeNode
from conftest import FakeProvider


def _shape(nodes: list[TreeNode]) -> list[tuple]:
    return [(n.label, n.kind, n.full_key, n.size) for n in nodes]


def test_folder_and_file_with_self_key_skipped() -> None:
    provider = FakeProvider(
        {
            "a/b/": {
                "CommonPrefixes": [{"Prefix": "a/b/sub/"}],
                "Contents": [
                    {"Key": "a/b/file.txt", "Size": 42},
                    {"Key": "a/b/", "Size": 0},
                ],
            }
        }
    )

    nodes = list_prefix(provider, "bkt", "a/b/")

    assert _shape(nodes) == [
        ("sub", NodeKind.FOLDER, "a/b/sub/", None),
        ("file.txt", NodeKind.FILE, "a/b/file.txt", 42),
    ]
    assert all(n.bucket == "bkt" for n in nodes)
    assert provider.listing_calls == [("bkt", "a/b/")]


def test_bare_prefix_is_normalized_to_folder() -> None:
    provider = FakeProvider()

    list_prefix(provider, "bkt", "a/b")
    list_prefix(provider, "bkt", "")

    assert provider.listing_calls == [("bkt", "a/b/"), ("bkt", "")]
    assert normalize_prefix("x") == "x/"
    assert normalize_prefix("x/") == "x/"
    assert normalize_prefix("") == ""


def test_folders_sort_before_files_and_labels_are_ordered() -> None:
    raw = {
        "CommonPrefixes": [{"Prefix": "zeta/"}, {"Prefix": "alpha/"}],
        "Contents": [
            {"Key": "b.txt", "Size": 1},
            {"Key": "a.txt", "Size": 2},
            {"Key": "c.txt", "Size": 3},
        ],
    }

    nodes = parse_listing(raw, "bkt", "")

    assert [n.label for n in nodes] == ["alpha", "zeta", "a.txt", "b.txt", "c.txt"]
    kinds = [n.kind for n in nodes]
    assert kinds == sorted(kinds, key=lambda k: k is NodeKind.FILE)
    for kind in (NodeKind.FOLDER, NodeKind.FILE):
        labels = [locale.strxfrm(n.label) for n in nodes if n.kind is kind]
        assert labels == sorted(labels)


def test_nested_keys_in_contents_never_become_files() -> None:
    raw = {
        "Contents": [
            {"Key": "docs/guide.md", "Size": 10},
            {"Key": "docs/deep/nested.md", "Size": 5},
        ]
    }

    nodes = parse_listing(raw, "bkt", "docs/")

    assert [n.label for n in nodes] == ["guide.md"]
    assert not any("/" in n.label for n in nodes if n.kind is NodeKind.FILE)


def test_json_text_output_is_parsed() -> None:
    text = json.dumps({"CommonPrefixes": [{"Prefix": "logs/"}], "Contents": [{"Key": "x.bin", "Size": 7}]})

    nodes = parse_listing(text, "bkt", "")

    assert _shape(nodes) == [
        ("logs", NodeKind.FOLDER, "logs/", None),
        ("x.bin", NodeKind.FILE, "x.bin", 7),
    ]


@pytest.mark.parametrize("raw", ["", "   \n", b"", None, {}])
def test_empty_output_means_no_children(raw) -> None:
    assert parse_listing(raw, "bkt", "any/") == []


@pytest.mark.parametrize(
    "raw",
    [
        "not json at all",
        "[1, 2, 3]",
        {"CommonPrefixes": [{"Nope": "x/"}]},
        {"Contents": [{"Size": 3}]},
        {"Contents": ["just-a-string"]},
        {"Contents": 5},
        {"CommonPrefixes": 7},
        '{"Contents": true}',
        {"Contents": [{"Key": "a.txt", "Size": "12"}]},
        {"Contents": [{"Key": "a.txt", "Size": True}]},
        {"Contents": [{"Key": "a.txt", "Size": 1.5}]},
    ],
)
def test_malformed_output_raises_parse_error(raw) -> None:
    with pytest.raises(ListingParseError):
        parse_listing(raw, "bkt", "")


def test_listing_twice_gives_equal_but_fresh_nodes() -> None:
    provider = FakeProvider({"": {"CommonPrefixes": [{"Prefix": "a/"}], "Contents": [{"Key": "f", "Size": 1}]}})

    first = list_prefix(provider, "bkt", "")
    second = list_prefix(provider, "bkt", "")

    assert first == second
    assert all(a is not b for a, b in zip(first, second))
    assert provider.listing_calls == [("bkt", ""), ("bkt", "")]


def test_empty_bucket_raises_config_missing_without_calling_provider() -> None:
    provider = FakeProvider()

    with pytest.raises(ConfigMissing):
        list_prefix(provider, "", "a/")

    assert provider.listing_calls == []


def test_provider_failures_become_listing_failed() -> None:
    provider = FakeProvider()
    provider.fail_listing = "boom"
    with pytest.raises(ListingFailed, match="boom"):
        list_prefix(provider, "bkt", "")

    class Exploding(FakeProvider):
        def run_listing(self, bucket, prefix):
            raise RuntimeError("socket closed")

    with pytest.raises(ListingFailed, match="socket closed"):
        list_prefix(Exploding(), "bkt", "")


def test_tree_node_enforces_kind_invariant() -> None:
    with pytest.raises(ValueError):
        TreeNode("a", "bkt", "a", NodeKind.FOLDER)
    with pytest.raises(ValueError):
        TreeNode("a", "bkt", "a/", NodeKind.FILE)
    assert TreeNode("a", "bkt", "x/a", NodeKind.FILE).uri == "s3://bkt/x/a"
