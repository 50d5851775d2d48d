"""Main MirrorManager class - wires the mirror together and drives it.

Example:
    from vault_mirror import MirrorManager, ManagerConfig

    manager = MirrorManager(ManagerConfig(
        source_root=Path("~/vault").expanduser(),
        settings_path=Path("~/vault/.vault_mirror.json").expanduser(),
    ))
    manager.set_target_root("$HOME/backup/vault")
    manager.start()          # subscribe, then reconcile once
    manager.run(stop_event)  # poll and dispatch until stopped
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, Optional

from .config import EventKind, ManagerConfig, MirrorConfig
from .events import SetNotifyToggle, SetTargetRoot
from .settings import SettingsStore
from .source import EventSource, LocalSourceTree, SourceTree
from .sync.dispatcher import EventDispatcher
from .sync.reconcile import ReconcileStats, Reconciler
from .sync.synchronizer import EventSynchronizer
from .target import is_target_available, resolve_target_root
from .utils.hashing import compare_hashes, hash_directory
from .watcher import PollingWatcher


logger = logging.getLogger(__name__)
notify_logger = logging.getLogger("vault_mirror.notify")


def log_notifier(message: str) -> None:
    """Default notification sink: user-facing messages go to the log."""
    notify_logger.info(message)


class MirrorManager:
    """Unified interface for mirroring a source tree into a target directory.

    The manager handles:

    - Loading and persisting settings
    - Subscribing the dispatcher to every event kind before reconciling
    - Running the startup reconciliation pass
    - Driving the poll/dispatch loop
    - The settings surface (target root and notification toggles)

    Attributes:
        config: Manager configuration
        settings: SettingsStore owning the live MirrorConfig
        source: Source tree being mirrored
        event_source: Where change events come from
        dispatcher: Serial queue for events and settings updates
    """

    def __init__(
        self,
        config: ManagerConfig,
        notify: Optional[Callable[[str], None]] = None,
        source: Optional[SourceTree] = None,
        event_source: Optional[EventSource] = None,
    ):
        """Initialize the MirrorManager.

        Args:
            config: Manager configuration
            notify: Notification sink (defaults to log_notifier)
            source: Source tree; defaults to a LocalSourceTree over
                config.source_root
            event_source: Event source; defaults to a PollingWatcher over
                the local source tree
        """
        self.config = config
        self.notify = notify or log_notifier
        self._subscribed = False

        self.settings = SettingsStore(config.settings_path)
        self.settings.load()

        if source is None:
            source = LocalSourceTree(config.source_root, config.exclude_patterns)
        self.source = source

        if event_source is None and isinstance(source, LocalSourceTree):
            event_source = PollingWatcher(source)
        self.event_source = event_source

        self.synchronizer = EventSynchronizer(self.settings.config, self.source, self.notify)
        self.reconciler = Reconciler(self.settings.config, self.source, self.notify)
        self.dispatcher = EventDispatcher(self.synchronizer, self.settings)

        logger.info(
            f"MirrorManager initialized: {config.source_root} -> "
            f"{self.settings.config.target_root}"
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def subscribe(self) -> None:
        """Route every event kind from the event source into the dispatcher."""
        if self._subscribed or self.event_source is None:
            return
        for kind in EventKind:
            self.event_source.subscribe(kind, self.dispatcher.submit)
        if isinstance(self.event_source, PollingWatcher):
            self.event_source.prime()
        self._subscribed = True
        logger.debug("Subscribed to source events")

    def reconcile(self) -> Optional[ReconcileStats]:
        """Run the reconciliation pass.

        A filesystem failure aborts only the pass; event handling is not
        affected.

        Returns:
            ReconcileStats, or None if the pass failed
        """
        try:
            return self.reconciler.run()
        except OSError:
            logger.exception("Reconciliation pass failed")
            return None

    def start(self) -> Optional[ReconcileStats]:
        """Subscribe first, then reconcile once.

        Events raised while reconciliation runs wait in the queue and are
        handled afterwards.
        """
        self.subscribe()
        return self.reconcile()

    def process_pending(self) -> int:
        """Poll the event source once and handle everything queued.

        Returns:
            Number of messages handled
        """
        if isinstance(self.event_source, PollingWatcher):
            self.event_source.poll()
        return self.dispatcher.drain()

    def run(self, stop_event: threading.Event) -> None:
        """Poll and dispatch until stop_event is set."""
        poll = None
        if isinstance(self.event_source, PollingWatcher):
            poll = self.event_source.poll
        logger.info(f"Watching {self.config.source_root} every {self.config.poll_interval}s")
        self.dispatcher.run(stop_event, poll=poll, interval=self.config.poll_interval)

    # ------------------------------------------------------------------
    # Settings surface
    # ------------------------------------------------------------------

    def get_configuration(self) -> MirrorConfig:
        return self.settings.config

    def set_target_root(self, value: str) -> MirrorConfig:
        """Change the target root; applied in order with pending events."""
        self.dispatcher.submit(SetTargetRoot(value))
        self.dispatcher.drain()
        return self.settings.config

    def set_notify_toggle(self, kind: EventKind, enabled: bool) -> MirrorConfig:
        """Change one notification toggle; applied in order with pending events."""
        self.dispatcher.submit(SetNotifyToggle(kind, enabled))
        self.dispatcher.drain()
        return self.settings.config

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def status(self) -> Dict[str, Any]:
        """Compare source and mirror contents.

        Diagnostic only: differences are reported, never acted on.

        Returns:
            Dict with resolved paths, availability and differences
        """
        target_root = resolve_target_root(self.settings.config)
        result: Dict[str, Any] = {
            "source_root": str(self.config.source_root),
            "target_root": target_root,
            "target_available": is_target_available(target_root),
            "in_sync": False,
            "differences": None,
        }

        if not result["target_available"] or not self.config.source_root.is_dir():
            return result

        source_hashes = hash_directory(self.config.source_root, self.config.exclude_patterns)
        target_hashes = hash_directory(target_root, self.config.exclude_patterns)
        diff = compare_hashes(source_hashes, target_hashes)

        result["in_sync"] = not (diff["added"] or diff["removed"] or diff["modified"])
        result["differences"] = {
            "source_only": diff["added"],
            "mirror_only": diff["removed"],
            "modified": diff["modified"],
            "identical": len(diff["unchanged"]),
        }
        return result
