"""Event synchronizer: applies single source tree events to the mirror.

Every handler re-resolves the target root and re-checks that it is
available before touching anything. An unavailable target is a logged
no-op for every event kind.

Only rename failures are handled here. Errors from the other handlers
propagate so the dispatcher can drop the event and carry on.
"""

import os
from pathlib import Path
from typing import Callable, Optional
import logging

from vault_mirror.config import EventKind, MirrorConfig
from vault_mirror.events import (
    Created,
    Deleted,
    ItemKind,
    Modified,
    Renamed,
    SyncEvent,
)
from vault_mirror.source import SourceTree
from vault_mirror.target import (
    ensure_parent_directory,
    is_target_available,
    resolve_target_root,
    target_path_for,
)

logger = logging.getLogger(__name__)


class EventSynchronizer:
    """Translate Created/Modified/Deleted/Renamed events into mirror writes.

    Attributes:
        config: Mirror configuration, read fresh by every handler
        source: Source tree to read file contents and kinds from
        notify: Notification sink (fire-and-forget)
    """

    def __init__(
        self,
        config: MirrorConfig,
        source: SourceTree,
        notify: Callable[[str], None],
    ):
        self.config = config
        self.source = source
        self.notify = notify

    def handle(self, event: SyncEvent) -> None:
        """Apply one event to the mirror.

        Raises:
            OSError: From create/modify/delete when the mirror cannot be
                updated
            TypeError: If event is not a SyncEvent variant
        """
        if isinstance(event, Created):
            self.on_created(event)
        elif isinstance(event, Modified):
            self.on_modified(event)
        elif isinstance(event, Deleted):
            self.on_deleted(event)
        elif isinstance(event, Renamed):
            self.on_renamed(event)
        else:
            raise TypeError(f"Not a sync event: {event!r}")

    def _available_root(self) -> Optional[str]:
        target_root = resolve_target_root(self.config)
        if is_target_available(target_root):
            return target_root
        logger.warning(
            f"Target path '{self.config.target_root}' does not exist; "
            f"no syncing will take place."
        )
        return None

    def _notify_if(self, kind: EventKind, message: str) -> None:
        if self.config.notify_enabled(kind):
            self.notify(message)

    def _copy(self, relative_path: str, target_path: Path) -> None:
        content = self.source.read_binary(relative_path)
        target_path.write_bytes(content)

    def on_created(self, event: Created) -> None:
        item = event.item
        logger.info(f"Syncing new file: '{item.path}'")

        target_root = self._available_root()
        if target_root is None:
            return

        item_kind = self.source.stat_item(item.path)

        target_path = target_path_for(target_root, item.path)
        ensure_parent_directory(target_path)

        if item_kind == ItemKind.DIRECTORY:
            # FileExistsError if a non-directory is already there
            target_path.mkdir(exist_ok=True)
        elif item_kind == ItemKind.FILE:
            self._copy(item.path, target_path)
            self._notify_if(EventKind.CREATE, f"Synced new file '{item.name}'")
        else:
            kind_name = item_kind.value if item_kind else None
            logger.warning(f"Unknown file type: '{kind_name}' for '{item.path}'")

    def on_modified(self, event: Modified) -> None:
        item = event.item
        logger.info(f"Syncing modified file: '{item.path}'")

        target_root = self._available_root()
        if target_root is None:
            return

        # Parent may be missing if the create event was never seen
        target_path = target_path_for(target_root, item.path)
        ensure_parent_directory(target_path)

        self._copy(item.path, target_path)
        self._notify_if(EventKind.MODIFY, f"Synced modified file '{item.name}'")

    def on_deleted(self, event: Deleted) -> None:
        item = event.item
        logger.info(f"Syncing deletion of file '{item.path}'")

        target_root = self._available_root()
        if target_root is None:
            return

        target_path = target_path_for(target_root, item.path)
        # Single entry only; a non-empty directory raises
        if target_path.is_dir() and not target_path.is_symlink():
            os.rmdir(target_path)
        else:
            os.remove(target_path)

        self._notify_if(EventKind.DELETE, f"Synced deleted file '{item.name}'")

    def on_renamed(self, event: Renamed) -> None:
        item = event.item
        logger.info(f"Syncing file rename from '{event.old_path}' to '{item.path}'")

        target_root = self._available_root()
        if target_root is None:
            return

        old_target_path = target_path_for(target_root, event.old_path)
        new_target_path = target_path_for(target_root, item.path)
        ensure_parent_directory(new_target_path)

        try:
            os.rename(old_target_path, new_target_path)
        except OSError as e:
            message = f"Failed to rename '{old_target_path}' to '{new_target_path}'"
            logger.error(f"{message}: {e}")
            self.notify(message)
            return

        self._notify_if(
            EventKind.RENAME,
            f"Synced rename file '{item.name}' (was '{event.old_path}')",
        )
