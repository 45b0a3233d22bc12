import os
import sys
import threading
from abc import ABC, abstractmethod
from typing import Callable, List, Optional

from . import config as config_mod
from .cache import ObjectCache
from .errors import NOT_YET_FETCHED, BucketBrowserError, ListingParseError
from .formatting import FOLDER_ICON, get_file_icon, human_readable_size
from .listing import list_prefix
from .nodes import CollapsibleState, TreeItem, TreeNode
from .providers.base import CloudProvider

CONFIG_PROMPT = "Set general.bucket in the config (or `set bucket <name>`) to browse a bucket."


class Notifier(ABC):
    """Everything the tree adapter needs from the host UI."""

    @abstractmethod
    def info(self, message: str):
        pass

    @abstractmethod
    def error(self, message: str):
        pass

    @abstractmethod
    def prompt_config(self, message: str):
        """Ask the user to fill in missing settings."""
        pass

    @abstractmethod
    def show_file(self, path: str):
        pass

    @abstractmethod
    def reveal(self, directory: str):
        """Show a local directory in the platform file manager."""
        pass

    @abstractmethod
    def copy_text(self, text: str):
        pass

    @abstractmethod
    def status(self, text: str, tooltip: str = ''):
        """Transient status-bar style message."""
        pass


class TreeAdapter:
    """Routes host tree events to the listing engine and the object cache.

    Holds no state of its own apart from the current config and a
    refresh generation used to drop listings that finished after a
    refresh.
    """

    def __init__(self, config: dict, provider: CloudProvider, cache: ObjectCache, notifier: Notifier):
        self.config = config
        self.provider = provider
        self.cache = cache
        self.notifier = notifier
        self._generation = 0
        self._lock = threading.Lock()
        self._listeners: List[Callable[[], None]] = []

    # --- change notification ---

    def on_did_change(self, callback: Callable[[], None]):
        self._listeners.append(callback)

    def refresh(self):
        with self._lock:
            self._generation += 1
        for callback in list(self._listeners):
            callback()

    def on_config_changed(self, config: dict):
        self.config = config
        self.refresh()

    # --- tree data ---

    def get_root_nodes(self, config: Optional[dict] = None) -> List[TreeNode]:
        config = self.config if config is None else config
        bucket = config_mod.get_bucket(config)
        if not bucket:
            self.notifier.prompt_config(CONFIG_PROMPT)
            return []
        return self._list(bucket, config_mod.get_prefix(config))

    def get_children(self, node: Optional[TreeNode] = None) -> List[TreeNode]:
        if node is None:
            return self.get_root_nodes()
        if not node.is_folder:
            return []
        return self._list(node.bucket, node.full_key)

    def _list(self, bucket: str, prefix: str) -> List[TreeNode]:
        generation = self._generation
        print(f"[List: s3://{bucket}/{prefix}]", file=sys.stderr)
        try:
            nodes = list_prefix(self.provider, bucket, prefix)
        except ListingParseError as e:
            self.notifier.error(f"Failed to parse listing output: {e}")
            return []
        except BucketBrowserError as e:
            self.notifier.error(str(e))
            return []
        if generation != self._generation:
            print(f"[Discarded stale listing: s3://{bucket}/{prefix}]", file=sys.stderr)
            return []
        return nodes

    def get_tree_item(self, node: TreeNode) -> TreeItem:
        if node.is_folder:
            return TreeItem(
                label=node.label,
                collapsible=CollapsibleState.COLLAPSED,
                tooltip=node.uri,
                icon=FOLDER_ICON,
            )
        return TreeItem(
            label=node.label,
            collapsible=CollapsibleState.NONE,
            description=human_readable_size(node.size) if node.size else '',
            tooltip=node.uri,
            icon=get_file_icon(node.label),
            command='open',
        )

    # --- commands ---

    def open_node(self, node: TreeNode) -> Optional[str]:
        if node.is_folder:
            self.notifier.error(f"'{node.label}' is a folder, not a file.")
            return None
        try:
            path = self.cache.ensure_local(node.bucket, node.full_key)
        except (BucketBrowserError, ValueError) as e:
            self.notifier.error(f"Failed to open S3 file: {e}")
            return None
        self.notifier.show_file(path)
        return path

    def locate_path(self, node: TreeNode):
        """Local path of an already downloaded file, else NOT_YET_FETCHED."""
        if node.is_folder:
            return NOT_YET_FETCHED
        return self.cache.locate(node.bucket, node.full_key)

    def reveal_node(self, node: TreeNode) -> bool:
        path = self.locate_path(node)
        if path is NOT_YET_FETCHED:
            self.notifier.info("File not yet downloaded. Open it first.")
            return False
        self.notifier.reveal(os.path.dirname(path))
        return True

    def show_path(self, node: Optional[TreeNode]) -> Optional[str]:
        if node is None or not node.bucket or not node.full_key:
            self.notifier.error("No S3 item selected.")
            return None
        uri = node.uri
        self.notifier.copy_text(uri)
        self.notifier.info(f"S3 path copied: {uri}")
        self.notifier.status(os.path.basename(node.full_key.rstrip('/')), uri)
        return uri
