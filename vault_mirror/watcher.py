"""Polling event source for a local source tree.

Each poll takes a snapshot of the tree (files and directories) and diffs it
against the previous one. A deleted file and a created file with the same
size and mtime in the same cycle are reported as a single rename.
"""

from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Tuple
import logging

from vault_mirror.config import EventKind
from vault_mirror.events import (
    Created,
    Deleted,
    ItemKind,
    Modified,
    Renamed,
    SourceItem,
    SyncEvent,
)
from vault_mirror.source import EventHandler, EventSource, LocalSourceTree

logger = logging.getLogger(__name__)

Snapshot = Dict[str, SourceItem]


@dataclass
class WatcherStats:
    """Counters emitted by the watcher for observability."""

    polls: int = 0
    events_emitted: int = 0


class PollingWatcher(EventSource):
    """Emit SyncEvents for changes under a LocalSourceTree."""

    def __init__(self, tree: LocalSourceTree):
        self.tree = tree
        self.stats = WatcherStats()
        self._handlers: Dict[EventKind, List[EventHandler]] = defaultdict(list)
        self._snapshot: Snapshot = {}

    def subscribe(self, kind: EventKind, handler: EventHandler) -> None:
        self._handlers[kind].append(handler)

    def prime(self) -> None:
        """Take the baseline snapshot; changes after this are reported."""
        self._snapshot = self._scan()
        logger.debug(f"Watcher primed with {len(self._snapshot)} entries")

    def poll(self) -> List[SyncEvent]:
        """Scan once and deliver any changes to subscribers.

        If the source root is missing the previous snapshot is kept and
        nothing is emitted.

        Returns:
            The events emitted this cycle
        """
        if not self.tree.root.is_dir():
            logger.warning(f"Source root {self.tree.root} is not available; skipping scan")
            return []

        new_snapshot = self._scan()
        events = diff_snapshots(self._snapshot, new_snapshot)
        self._snapshot = new_snapshot

        for event in events:
            for handler in self._handlers.get(event.kind, []):
                handler(event)

        self.stats.polls += 1
        self.stats.events_emitted += len(events)
        return events

    def _scan(self) -> Snapshot:
        return {item.path: item for item in self.tree.iter_items()}


def _signature(item: SourceItem) -> Tuple[int, int]:
    return (item.size, item.mtime_ms)


def diff_snapshots(old: Snapshot, new: Snapshot) -> List[SyncEvent]:
    """Compute the ordered events that turn old into new.

    Order: deletions that clear the way for a path whose kind changed,
    directory creations (parents first), renames, file creations,
    modifications, file deletions, directory deletions (children first).
    """
    retyped = {p for p in new if p in old and old[p].kind != new[p].kind}
    created = [new[p] for p in sorted(new) if p not in old or p in retyped]
    deleted = [old[p] for p in sorted(old) if p not in new or p in retyped]

    # Old entries at or below a retyped path must go before anything is created there
    blocking = {
        item.path for item in deleted
        if any(item.path == p or item.path.startswith(p + "/") for p in retyped)
    }

    modified = []
    for path in sorted(new):
        if path in old and old[path].kind == new[path].kind == ItemKind.FILE:
            if _signature(old[path]) != _signature(new[path]):
                modified.append(new[path])

    # Pair deleted/created files that share an unambiguous signature
    created_files = defaultdict(list)
    for item in created:
        if item.kind == ItemKind.FILE:
            created_files[_signature(item)].append(item)
    deleted_counts = defaultdict(int)
    for item in deleted:
        if item.kind == ItemKind.FILE and item.path not in blocking:
            deleted_counts[_signature(item)] += 1

    renames: List[Renamed] = []
    for item in deleted:
        if item.kind != ItemKind.FILE or item.path in blocking:
            continue
        signature = _signature(item)
        if deleted_counts[signature] == 1 and len(created_files[signature]) == 1:
            renames.append(Renamed(item=created_files[signature][0], old_path=item.path))

    renamed_old = {r.old_path for r in renames}
    renamed_new = {r.item.path for r in renames}

    events: List[SyncEvent] = []
    events.extend(
        Deleted(item) for item in deleted
        if item.path in blocking and item.kind != ItemKind.DIRECTORY
    )
    events.extend(
        Deleted(item) for item in reversed(deleted)
        if item.path in blocking and item.kind == ItemKind.DIRECTORY
    )
    events.extend(Created(item) for item in created if item.kind == ItemKind.DIRECTORY)
    events.extend(renames)
    events.extend(
        Created(item) for item in created
        if item.kind != ItemKind.DIRECTORY and item.path not in renamed_new
    )
    events.extend(Modified(item) for item in modified)
    events.extend(
        Deleted(item) for item in deleted
        if item.kind != ItemKind.DIRECTORY
        and item.path not in renamed_old and item.path not in blocking
    )
    events.extend(
        Deleted(item) for item in reversed(deleted)
        if item.kind == ItemKind.DIRECTORY and item.path not in blocking
    )
    return events
