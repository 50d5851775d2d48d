"""Persistent settings for Vault Mirror.

Settings are stored as a small JSON file. Loading overlays the stored values
on the defaults; a missing or corrupt file falls back to the defaults so the
mirror can always start.
"""

import json
from pathlib import Path
from typing import Optional, Union
import logging

from vault_mirror.config import MirrorConfig
from vault_mirror.events import SetNotifyToggle, SetTargetRoot, SettingsUpdate

logger = logging.getLogger(__name__)


class SettingsStore:
    """Load, mutate and persist a MirrorConfig.

    The store owns a single MirrorConfig instance. Every component that reads
    settings holds a reference to that instance, so updates applied here are
    visible to the next handler that runs.

    Attributes:
        path: JSON file the settings live in (None keeps them in memory)
        config: The live configuration
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path) if path is not None else None
        self.config = MirrorConfig()

    def load(self) -> MirrorConfig:
        """Load settings from disk into the live config.

        Returns:
            The live MirrorConfig
        """
        stored = {}
        if self.path is not None and self.path.exists():
            try:
                with open(self.path, "r", encoding="utf-8") as f:
                    stored = json.load(f)
                if not isinstance(stored, dict):
                    logger.warning(f"Ignoring malformed settings in {self.path}")
                    stored = {}
            except (json.JSONDecodeError, OSError) as e:
                logger.warning(f"Failed to load settings from {self.path}: {e}")
                stored = {}

        loaded = MirrorConfig.from_dict(stored)
        # Mutate in place so existing references see the loaded values
        self.config.__dict__.update(loaded.__dict__)
        logger.debug(f"Loaded settings: {self.config.to_dict()}")
        return self.config

    def save(self) -> None:
        """Persist the live config.

        Raises:
            OSError: If the settings file cannot be written
        """
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(self.config.to_dict(), f, indent=2)
        logger.debug(f"Saved settings to {self.path}")

    def apply(self, update: SettingsUpdate) -> MirrorConfig:
        """Apply one settings update and persist the result.

        Raises:
            TypeError: If update is not a SettingsUpdate variant
        """
        if isinstance(update, SetTargetRoot):
            logger.info(f"Target directory: {update.value}")
            self.config.target_root = update.value
        elif isinstance(update, SetNotifyToggle):
            logger.info(f"Notify {update.kind.value}: {update.enabled}")
            self.config.set_notify(update.kind, update.enabled)
        else:
            raise TypeError(f"Not a settings update: {update!r}")

        self.save()
        return self.config
