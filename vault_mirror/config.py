"""Configuration dataclasses for Vault Mirror."""

from dataclasses import dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)

# Placeholder substituted with $HOME from the environment at resolve time
HOME_PLACEHOLDER = "$HOME"
DEFAULT_TARGET_ROOT = f"{HOME_PLACEHOLDER}/cs/test-notes"
DEFAULT_SETTINGS_FILE = ".vault_mirror.json"


class EventKind(Enum):
    """Kinds of source tree change the mirror reacts to."""
    CREATE = "create"
    MODIFY = "modify"
    DELETE = "delete"
    RENAME = "rename"


@dataclass
class MirrorConfig:
    """User-facing mirror settings.

    Attributes:
        target_root: Mirror root, may embed the $HOME placeholder
        notify_create: Notify when a new file is synced
        notify_modify: Notify when a file modification is synced
        notify_delete: Notify when a deletion is synced
        notify_rename: Notify when a rename is synced
    """
    target_root: str = DEFAULT_TARGET_ROOT
    notify_create: bool = True
    notify_modify: bool = False
    notify_delete: bool = True
    notify_rename: bool = True

    def notify_enabled(self, kind: EventKind) -> bool:
        """Return the notification toggle for an event kind."""
        return getattr(self, f"notify_{kind.value}")

    def set_notify(self, kind: EventKind, enabled: bool) -> None:
        setattr(self, f"notify_{kind.value}", bool(enabled))

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return {
            "target_root": self.target_root,
            "notify_create": self.notify_create,
            "notify_modify": self.notify_modify,
            "notify_delete": self.notify_delete,
            "notify_rename": self.notify_rename,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MirrorConfig":
        """Overlay stored values on top of the defaults.

        Unknown keys are ignored so that settings written by newer
        versions still load. A value of the wrong type keeps its default.
        """
        config = cls()
        known = {f.name for f in fields(cls)}
        for key, value in data.items():
            if key not in known:
                logger.debug(f"Ignoring unknown setting '{key}'")
                continue
            expected = str if key == "target_root" else bool
            if not isinstance(value, expected):
                logger.warning(
                    f"Ignoring setting '{key}': expected {expected.__name__}, "
                    f"got {value!r}"
                )
                continue
            setattr(config, key, value)
        return config


@dataclass
class ManagerConfig:
    """Global configuration for MirrorManager.

    Attributes:
        source_root: Root of the managed source tree (the vault)
        settings_path: JSON file holding MirrorConfig (None for memory only)
        poll_interval: Seconds between watcher scans
        exclude_patterns: fnmatch patterns for source entries to ignore
    """
    source_root: Path
    settings_path: Optional[Path] = None
    poll_interval: float = 2.0
    exclude_patterns: List[str] = field(default_factory=lambda: [".*"])

    def __post_init__(self):
        """Ensure paths are Path objects."""
        if isinstance(self.source_root, str):
            self.source_root = Path(self.source_root)
        if isinstance(self.settings_path, str):
            self.settings_path = Path(self.settings_path)
