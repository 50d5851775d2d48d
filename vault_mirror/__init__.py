"""Vault Mirror - keep an external copy of a note vault in sync.

Mirrors every file and folder of a source tree into a target directory,
one way, as changes happen. A reconciliation pass at startup catches up on
anything changed while the mirror was not running.

Key Features:
    - Event-driven create/modify/delete/rename mirroring
    - Startup reconciliation by modification time
    - Tolerates a target root that is unmounted or edited externally
    - $HOME expansion in the configured target root
    - Per-event-kind notification toggles, persisted as JSON

Quick Start:
    import threading
    from pathlib import Path
    from vault_mirror import MirrorManager, ManagerConfig

    manager = MirrorManager(ManagerConfig(
        source_root=Path("./vault"),
        settings_path=Path("./vault/.vault_mirror.json"),
    ))
    manager.set_target_root("$HOME/mirror/vault")
    manager.start()
    manager.run(threading.Event())

Classes:
    MirrorManager: Main interface wiring source, settings and sync engine
    MirrorConfig: User-facing settings (target root, notification toggles)
    ManagerConfig: Process-level configuration
    EventKind: Enum of event kinds (CREATE, MODIFY, DELETE, RENAME)
"""

__version__ = "1.0.0"
__license__ = "MIT"

from .config import (
    EventKind,
    ManagerConfig,
    MirrorConfig,
)

from .events import (
    Created,
    Deleted,
    ItemKind,
    Modified,
    Renamed,
    SourceItem,
)

from .manager import MirrorManager, log_notifier
from .source import EventSource, LocalSourceTree, SourceTree
from .sync import EventDispatcher, EventSynchronizer, ReconcileStats, Reconciler
from .watcher import PollingWatcher

__all__ = [
    "__version__",
    "__license__",
    # Main classes
    "MirrorManager",
    "MirrorConfig",
    "ManagerConfig",
    # Enums
    "EventKind",
    "ItemKind",
    # Events
    "SourceItem",
    "Created",
    "Modified",
    "Deleted",
    "Renamed",
    # Source side
    "SourceTree",
    "EventSource",
    "LocalSourceTree",
    "PollingWatcher",
    # Sync components
    "Reconciler",
    "ReconcileStats",
    "EventSynchronizer",
    "EventDispatcher",
    "log_notifier",
]


def create_manager(
    source_root: str,
    target_root: str = None,
    settings_path: str = None,
) -> MirrorManager:
    """Convenience function to create a configured MirrorManager.

    Args:
        source_root: Directory to mirror
        target_root: If given, overrides (and persists) the target root
        settings_path: Settings file (default: <source_root>/.vault_mirror.json)

    Returns:
        Configured MirrorManager instance

    Example:
        manager = create_manager("./vault", target_root="/mnt/usb/vault")
    """
    from pathlib import Path

    from .config import DEFAULT_SETTINGS_FILE

    source_path = Path(source_root)
    config = ManagerConfig(
        source_root=source_path,
        settings_path=Path(settings_path) if settings_path else source_path / DEFAULT_SETTINGS_FILE,
    )

    manager = MirrorManager(config)
    if target_root is not None:
        manager.set_target_root(target_root)
    return manager
