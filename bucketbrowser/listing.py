import json
import locale
from typing import List

from .errors import ConfigMissing, ListingFailed, ListingParseError
from .nodes import DELIMITER, NodeKind, TreeNode
from .providers.base import CloudProvider


def normalize_prefix(prefix: str) -> str:
    """Treat a bare name as a folder: 'a/b' -> 'a/b/'. The root stays ''."""
    if prefix and not prefix.endswith(DELIMITER):
        return prefix + DELIMITER
    return prefix or ''


def _decode(raw) -> dict:
    if isinstance(raw, bytes):
        try:
            raw = raw.decode('utf-8')
        except UnicodeDecodeError as e:
            raise ListingParseError(f"Listing output is not valid UTF-8: {e}") from e
    if isinstance(raw, str):
        if not raw.strip():
            return {}
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ListingParseError(f"Invalid JSON: {e}") from e
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ListingParseError(f"Expected a JSON object, got {type(raw).__name__}")
    return raw


def _strip_prefix(key: str, prefix: str) -> str:
    return key[len(prefix):] if key.startswith(prefix) else key


def _section(data: dict, name: str) -> list:
    entries = data.get(name)
    if entries is None:
        return []
    if not isinstance(entries, list):
        raise ListingParseError(f"{name} should be a list, got {type(entries).__name__}")
    return entries


def parse_listing(raw, bucket: str, prefix: str) -> List[TreeNode]:
    """Build the sorted children of prefix from one delimited listing result."""
    data = _decode(raw)
    nodes = []

    for cp in _section(data, 'CommonPrefixes'):
        full = cp.get('Prefix') if isinstance(cp, dict) else None
        if not isinstance(full, str):
            raise ListingParseError(f"CommonPrefixes entry without a Prefix: {cp!r}")
        label = _strip_prefix(full, prefix).rstrip(DELIMITER)
        if not label:
            continue
        if not full.endswith(DELIMITER):
            full += DELIMITER
        nodes.append(TreeNode(label, bucket, full, NodeKind.FOLDER))

    for obj in _section(data, 'Contents'):
        key = obj.get('Key') if isinstance(obj, dict) else None
        if not isinstance(key, str):
            raise ListingParseError(f"Contents entry without a Key: {obj!r}")
        # Some stores list the folder placeholder object itself.
        if key == prefix:
            continue
        label = _strip_prefix(key, prefix)
        if not label or DELIMITER in label:
            continue
        size = obj.get('Size')
        if size is not None and (isinstance(size, bool) or not isinstance(size, int)):
            raise ListingParseError(f"Bad size for key '{key}': {size!r}")
        nodes.append(TreeNode(label, bucket, key, NodeKind.FILE, size=size))

    nodes.sort(key=lambda n: (n.kind is NodeKind.FILE, locale.strxfrm(n.label)))
    return nodes


def list_prefix(provider: CloudProvider, bucket: str, prefix: str = '') -> List[TreeNode]:
    """List one level of the bucket under prefix, folders first.

    Raises ConfigMissing for an empty bucket, ListingFailed when the
    provider call fails and ListingParseError when its output is garbage.
    """
    if not bucket:
        raise ConfigMissing("No bucket configured")
    prefix = normalize_prefix(prefix)
    try:
        raw = provider.run_listing(bucket, prefix)
    except ListingFailed:
        raise
    except Exception as e:
        raise ListingFailed(str(e)) from e
    return parse_listing(raw, bucket, prefix)
