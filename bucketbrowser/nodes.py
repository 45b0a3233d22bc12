from dataclasses import dataclass
from enum import Enum
from typing import Optional

DELIMITER = '/'


class NodeKind(Enum):
    FOLDER = 'folder'
    FILE = 'file'


class CollapsibleState(Enum):
    NONE = 0
    COLLAPSED = 1
    EXPANDED = 2


@dataclass(frozen=True)
class TreeNode:
    """One entry of a bucket listing.

    A node has no identity beyond (bucket, full_key): listing the same
    prefix twice gives equal but distinct instances.
    """
    label: str
    bucket: str
    full_key: str
    kind: NodeKind
    size: Optional[int] = None

    def __post_init__(self):
        if self.kind is NodeKind.FOLDER and not self.full_key.endswith(DELIMITER):
            raise ValueError(f"Folder key must end with '{DELIMITER}': {self.full_key!r}")
        if self.kind is NodeKind.FILE and self.full_key.endswith(DELIMITER):
            raise ValueError(f"File key must not end with '{DELIMITER}': {self.full_key!r}")

    @property
    def is_folder(self) -> bool:
        return self.kind is NodeKind.FOLDER

    @property
    def uri(self) -> str:
        return f"s3://{self.bucket}/{self.full_key}"


@dataclass
class TreeItem:
    """What the host needs to draw a node."""
    label: str
    collapsible: CollapsibleState
    description: str = ''
    tooltip: str = ''
    icon: str = ''
    command: Optional[str] = None
    context_value: str = 's3Item'
