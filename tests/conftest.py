"""Shared pytest fixtures for Vault Mirror tests.

Provides temp source/target trees, configs pointing at them, and a
notification sink that records messages.
"""

import os
from pathlib import Path

import pytest

from vault_mirror.config import ManagerConfig, MirrorConfig
from vault_mirror.source import LocalSourceTree


class RecordingNotifier:
    """Notification sink that keeps every message."""

    def __init__(self):
        self.messages = []

    def __call__(self, message: str) -> None:
        self.messages.append(message)


def set_mtime_ms(path: Path, mtime_ms: int) -> None:
    """Set a path's atime and mtime to an exact millisecond value."""
    ns = mtime_ms * 1_000_000
    os.utime(path, ns=(ns, ns))


@pytest.fixture
def tmp_dirs(tmp_path):
    """Create temporary source and target directories."""
    source = tmp_path / "vault"
    target = tmp_path / "mirror"
    source.mkdir()
    target.mkdir()
    return {"source": source, "target": target, "root": tmp_path}


@pytest.fixture
def mirror_config(tmp_dirs):
    """MirrorConfig whose target root is the temp target directory."""
    return MirrorConfig(target_root=str(tmp_dirs["target"]))


@pytest.fixture
def source_tree(tmp_dirs):
    return LocalSourceTree(tmp_dirs["source"])


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def populated_source(tmp_dirs):
    """Source tree with nested notes, an attachment and a hidden folder."""
    source = tmp_dirs["source"]

    (source / "inbox.md").write_text("# Inbox")
    (source / "projects").mkdir()
    (source / "projects" / "plan.md").write_text("plan")
    (source / "projects" / "archive").mkdir()
    (source / "projects" / "archive" / "old.md").write_text("old")
    (source / "attachments").mkdir()
    (source / "attachments" / "image.png").write_bytes(b"\x89PNG\x00\x01\x02" * 50)
    (source / ".obsidian").mkdir()
    (source / ".obsidian" / "workspace.json").write_text("{}")

    return tmp_dirs


@pytest.fixture
def manager_config(tmp_dirs):
    return ManagerConfig(
        source_root=tmp_dirs["source"],
        settings_path=tmp_dirs["root"] / "settings" / "vault_mirror.json",
        poll_interval=0.01,
    )
