"""Source tree interfaces and the local-directory implementation.

The mirror only ever observes the source tree. ``SourceTree`` is the read
side (listing, reading, stat) and ``EventSource`` is the subscription side
that delivers change events.
"""

import os
import stat
from abc import ABC, abstractmethod
from fnmatch import fnmatch
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Union

from vault_mirror.config import EventKind
from vault_mirror.events import ItemKind, SourceItem, SyncEvent

EventHandler = Callable[[SyncEvent], None]


def _kind_from_mode(mode: int) -> ItemKind:
    if stat.S_ISDIR(mode):
        return ItemKind.DIRECTORY
    if stat.S_ISREG(mode):
        return ItemKind.FILE
    return ItemKind.OTHER


class SourceTree(ABC):
    """Read access to the managed source tree.

    Paths are always slash-separated and relative to the source root.
    """

    @abstractmethod
    def list_all_files(self) -> List[SourceItem]:
        """Return every file currently in the tree (directories excluded)."""
        pass

    @abstractmethod
    def read_binary(self, relative_path: str) -> bytes:
        """Read the full contents of a file.

        Raises:
            OSError: If the file cannot be read
        """
        pass

    @abstractmethod
    def stat_item(self, relative_path: str) -> Optional[ItemKind]:
        """Return the kind of the entry at relative_path, or None if absent."""
        pass


class EventSource(ABC):
    """Something that emits SyncEvents to subscribed handlers."""

    @abstractmethod
    def subscribe(self, kind: EventKind, handler: EventHandler) -> None:
        """Register handler for events of the given kind."""
        pass


class LocalSourceTree(SourceTree):
    """SourceTree backed by a directory on the local filesystem.

    Attributes:
        root: Source root directory
        exclude_patterns: fnmatch patterns; an entry is skipped if any of
            its path components matches (default skips dot-entries)
    """

    def __init__(
        self,
        root: Union[str, Path],
        exclude_patterns: Optional[List[str]] = None
    ):
        self.root = Path(root)
        self.exclude_patterns = (
            [".*"] if exclude_patterns is None else list(exclude_patterns)
        )

    def is_excluded(self, relative_path: str) -> bool:
        """Check whether any component of relative_path is excluded."""
        for part in relative_path.split("/"):
            if any(fnmatch(part, pattern) for pattern in self.exclude_patterns):
                return True
        return False

    def absolute(self, relative_path: str) -> Path:
        return self.root.joinpath(*relative_path.split("/"))

    def iter_items(self) -> Iterator[SourceItem]:
        """Walk the tree, yielding directories before their contents.

        Entries that vanish or cannot be read mid-walk are skipped.
        """
        for dirpath, dirnames, filenames in os.walk(self.root):
            rel_dir = Path(dirpath).relative_to(self.root).as_posix()
            prefix = "" if rel_dir == "." else f"{rel_dir}/"

            dirnames[:] = sorted(
                d for d in dirnames if not self.is_excluded(d)
            )
            for name in dirnames:
                yield SourceItem(path=prefix + name, kind=ItemKind.DIRECTORY)

            for name in sorted(filenames):
                if self.is_excluded(name):
                    continue
                try:
                    file_stat = os.stat(os.path.join(dirpath, name))
                except OSError:
                    continue
                if not stat.S_ISREG(file_stat.st_mode):
                    continue
                yield SourceItem(
                    path=prefix + name,
                    kind=ItemKind.FILE,
                    mtime_ms=file_stat.st_mtime_ns // 1_000_000,
                    size=file_stat.st_size,
                )

    def list_all_files(self) -> List[SourceItem]:
        return [item for item in self.iter_items() if item.kind == ItemKind.FILE]

    def read_binary(self, relative_path: str) -> bytes:
        return self.absolute(relative_path).read_bytes()

    def stat_item(self, relative_path: str) -> Optional[ItemKind]:
        try:
            item_stat = os.stat(self.absolute(relative_path))
        except FileNotFoundError:
            return None
        return _kind_from_mode(item_stat.st_mode)

