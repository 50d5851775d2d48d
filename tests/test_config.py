"""Tests for vault_mirror.config module.

Validates configuration dataclasses, enums, defaults and dict round-trips.
"""

from pathlib import Path

import pytest

from vault_mirror.config import (
    DEFAULT_TARGET_ROOT,
    EventKind,
    ManagerConfig,
    MirrorConfig,
)


class TestEventKind:
    """Verify EventKind enum values."""

    def test_values(self):
        assert EventKind.CREATE.value == "create"
        assert EventKind.MODIFY.value == "modify"
        assert EventKind.DELETE.value == "delete"
        assert EventKind.RENAME.value == "rename"

    def test_from_string(self):
        assert EventKind("rename") == EventKind.RENAME

    def test_invalid_raises(self):
        with pytest.raises(ValueError):
            EventKind("move")


class TestMirrorConfig:
    """Test MirrorConfig defaults and toggles."""

    def test_defaults(self):
        config = MirrorConfig()
        assert config.target_root == "$HOME/cs/test-notes"
        assert config.target_root == DEFAULT_TARGET_ROOT
        assert config.notify_create is True
        assert config.notify_modify is False
        assert config.notify_delete is True
        assert config.notify_rename is True

    def test_notify_enabled(self):
        config = MirrorConfig(notify_modify=True, notify_delete=False)
        assert config.notify_enabled(EventKind.MODIFY) is True
        assert config.notify_enabled(EventKind.DELETE) is False

    def test_set_notify(self):
        config = MirrorConfig()
        config.set_notify(EventKind.CREATE, False)
        assert config.notify_create is False
        assert config.notify_enabled(EventKind.CREATE) is False

    def test_to_dict(self):
        d = MirrorConfig(target_root="/mnt/usb").to_dict()
        assert d == {
            "target_root": "/mnt/usb",
            "notify_create": True,
            "notify_modify": False,
            "notify_delete": True,
            "notify_rename": True,
        }

    def test_from_dict_overlays_defaults(self):
        """Stored values win; anything missing keeps its default."""
        config = MirrorConfig.from_dict({"notify_modify": True})
        assert config.notify_modify is True
        assert config.target_root == DEFAULT_TARGET_ROOT
        assert config.notify_create is True

    def test_from_dict_ignores_unknown_keys(self):
        config = MirrorConfig.from_dict({"target_root": "/x", "theme": "dark"})
        assert config.target_root == "/x"
        assert not hasattr(config, "theme")

    def test_from_dict_wrong_types_keep_defaults(self, caplog):
        """Hand-edited strings and nulls are not coerced."""
        config = MirrorConfig.from_dict({
            "target_root": None,
            "notify_create": "false",
            "notify_modify": 1,
            "notify_delete": False,
        })
        assert config.target_root == DEFAULT_TARGET_ROOT
        assert config.notify_create is True
        assert config.notify_modify is False
        assert config.notify_delete is False
        assert "Ignoring setting 'notify_create'" in caplog.text


class TestManagerConfig:
    """Test ManagerConfig dataclass behavior."""

    def test_defaults(self, tmp_path):
        config = ManagerConfig(source_root=tmp_path)
        assert config.settings_path is None
        assert config.poll_interval == 2.0
        assert config.exclude_patterns == [".*"]

    def test_string_path_coercion(self):
        config = ManagerConfig(
            source_root="/vault",
            settings_path="/vault/.vault_mirror.json",
        )
        assert isinstance(config.source_root, Path)
        assert isinstance(config.settings_path, Path)
        assert config.source_root == Path("/vault")
