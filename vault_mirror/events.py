"""Event and message models passed through the dispatch channel.

Each source tree change is one variant of ``SyncEvent``; settings changes
travel through the same channel as ``SettingsUpdate`` variants so that they
are ordered relative to the events around them.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from vault_mirror.config import EventKind


class ItemKind(Enum):
    """What a source path points at."""
    FILE = "file"
    DIRECTORY = "directory"
    OTHER = "other"


@dataclass(frozen=True)
class SourceItem:
    """Snapshot of one entry in the source tree.

    Attributes:
        path: Slash-separated path relative to the source root
        kind: File or directory
        mtime_ms: Modification time in whole milliseconds (files only)
        size: Size in bytes (files only)
    """
    path: str
    kind: ItemKind = ItemKind.FILE
    mtime_ms: Optional[int] = None
    size: Optional[int] = None

    @property
    def name(self) -> str:
        """Last component of the path."""
        return self.path.rsplit("/", 1)[-1]


@dataclass(frozen=True)
class Created:
    item: SourceItem
    kind = EventKind.CREATE


@dataclass(frozen=True)
class Modified:
    item: SourceItem
    kind = EventKind.MODIFY


@dataclass(frozen=True)
class Deleted:
    item: SourceItem
    kind = EventKind.DELETE


@dataclass(frozen=True)
class Renamed:
    """An entry moved from ``old_path`` to ``item.path``."""
    item: SourceItem
    old_path: str
    kind = EventKind.RENAME


SyncEvent = Union[Created, Modified, Deleted, Renamed]


@dataclass(frozen=True)
class SetTargetRoot:
    value: str


@dataclass(frozen=True)
class SetNotifyToggle:
    kind: EventKind
    enabled: bool


SettingsUpdate = Union[SetTargetRoot, SetNotifyToggle]
