"""Tests for vault_mirror.manager module.

End-to-end behavior: subscribe, reconcile, poll/dispatch, settings surface
and status reporting.
"""

import json
import logging

import pytest

from vault_mirror import create_manager
from vault_mirror.config import DEFAULT_TARGET_ROOT, EventKind, ManagerConfig
from vault_mirror.events import Created, SourceItem
from vault_mirror.manager import MirrorManager, log_notifier
from vault_mirror.source import EventSource, LocalSourceTree


@pytest.fixture
def manager(tmp_dirs, manager_config, notifier):
    manager = MirrorManager(manager_config, notify=notifier)
    manager.set_target_root(str(tmp_dirs["target"]))
    return manager


class ManualEventSource(EventSource):
    """Event source whose events are pushed by the test."""

    def __init__(self):
        self.handlers = {}

    def subscribe(self, kind, handler):
        self.handlers.setdefault(kind, []).append(handler)

    def emit(self, event):
        for handler in self.handlers.get(event.kind, []):
            handler(event)


class TestMirrorManagerLifecycle:

    def test_defaults_from_fresh_settings(self, manager_config, notifier):
        manager = MirrorManager(manager_config, notify=notifier)
        assert manager.get_configuration().target_root == DEFAULT_TARGET_ROOT

    def test_start_reconciles(self, populated_source, manager, notifier):
        stats = manager.start()

        assert stats.created == 4
        assert (populated_source["target"] / "projects" / "plan.md").read_text() == "plan"
        assert notifier.messages == ["Synced 4 files; 4 created, 0 updated."]

    def test_events_during_reconcile_are_queued(self, tmp_dirs, manager_config, notifier):
        """Subscription happens before reconciliation; events wait their turn."""
        events = ManualEventSource()
        tree = LocalSourceTree(tmp_dirs["source"])
        manager = MirrorManager(manager_config, notify=notifier, source=tree, event_source=events)
        manager.set_target_root(str(tmp_dirs["target"]))

        (tmp_dirs["source"] / "late.md").write_text("late")
        original_run = manager.reconciler.run

        def run_and_emit():
            events.emit(Created(SourceItem("late.md")))
            assert manager.dispatcher.pending == 1
            return original_run()

        manager.reconciler.run = run_and_emit
        manager.start()
        manager.dispatcher.drain()

        assert (tmp_dirs["target"] / "late.md").read_text() == "late"
        # Duplicate write from the overlap is harmless
        assert notifier.messages == [
            "Synced 1 files; 1 created, 0 updated.",
            "Synced new file 'late.md'",
        ]

    def test_subscribe_is_idempotent(self, tmp_dirs, manager_config, notifier):
        events = ManualEventSource()
        manager = MirrorManager(manager_config, notify=notifier, event_source=events)
        manager.subscribe()
        manager.subscribe()
        assert all(len(h) == 1 for h in events.handlers.values())
        assert set(events.handlers) == set(EventKind)

    def test_process_pending_mirrors_changes(self, tmp_dirs, manager, notifier):
        manager.start()
        (tmp_dirs["source"] / "folder").mkdir()
        (tmp_dirs["source"] / "folder" / "new.md").write_text("hello")

        handled = manager.process_pending()

        assert handled == 2
        assert (tmp_dirs["target"] / "folder" / "new.md").read_text() == "hello"
        assert "Synced new file 'new.md'" in notifier.messages

    def test_process_pending_rename_and_delete(self, tmp_dirs, manager):
        note = tmp_dirs["source"] / "draft.md"
        note.write_text("text")
        manager.start()

        note.rename(tmp_dirs["source"] / "final.md")
        manager.process_pending()
        assert (tmp_dirs["target"] / "final.md").read_text() == "text"
        assert not (tmp_dirs["target"] / "draft.md").exists()

        (tmp_dirs["source"] / "final.md").unlink()
        manager.process_pending()
        assert not (tmp_dirs["target"] / "final.md").exists()

    def test_file_replaced_by_directory(self, tmp_dirs, manager):
        thing = tmp_dirs["source"] / "thing"
        thing.write_text("file")
        manager.start()

        thing.unlink()
        thing.mkdir()
        (thing / "a.md").write_text("child")
        manager.process_pending()

        assert (tmp_dirs["target"] / "thing").is_dir()
        assert (tmp_dirs["target"] / "thing" / "a.md").read_text() == "child"
        assert manager.dispatcher.stats.failed == 0

    def test_directory_replaced_by_file(self, tmp_dirs, manager):
        thing = tmp_dirs["source"] / "thing"
        thing.mkdir()
        (thing / "a.md").write_text("child")
        manager.start()
        manager.process_pending()

        (thing / "a.md").unlink()
        thing.rmdir()
        thing.write_text("file now")
        manager.process_pending()

        assert (tmp_dirs["target"] / "thing").read_text() == "file now"
        assert manager.dispatcher.stats.failed == 0

    def test_reconcile_failure_is_contained(self, tmp_dirs, manager, caplog):
        def broken():
            raise PermissionError("denied")

        manager.reconciler.run = broken
        assert manager.reconcile() is None
        assert "Reconciliation pass failed" in caplog.text

    def test_unavailable_target_start_is_noop(self, populated_source, manager_config, notifier):
        manager = MirrorManager(manager_config, notify=notifier)
        manager.set_target_root(str(populated_source["root"] / "unmounted"))

        stats = manager.start()

        assert stats.target_available is False
        assert notifier.messages == []
        assert not (populated_source["root"] / "unmounted").exists()


class TestSettingsSurface:

    def test_set_target_root_persists(self, tmp_dirs, manager, manager_config):
        stored = json.loads(manager_config.settings_path.read_text())
        assert stored["target_root"] == str(tmp_dirs["target"])

    def test_set_notify_toggle(self, manager, manager_config):
        config = manager.set_notify_toggle(EventKind.MODIFY, True)
        assert config.notify_modify is True
        assert json.loads(manager_config.settings_path.read_text())["notify_modify"] is True

    def test_settings_reloaded_by_new_manager(self, tmp_dirs, manager, manager_config, notifier):
        manager.set_notify_toggle(EventKind.DELETE, False)
        again = MirrorManager(manager_config, notify=notifier)
        assert again.get_configuration().target_root == str(tmp_dirs["target"])
        assert again.get_configuration().notify_delete is False

    def test_engine_sees_live_config(self, tmp_dirs, manager):
        assert manager.synchronizer.config is manager.get_configuration()
        assert manager.reconciler.config is manager.get_configuration()


class TestStatus:

    def test_in_sync_after_start(self, populated_source, manager):
        manager.start()
        status = manager.status()
        assert status["target_available"] is True
        assert status["in_sync"] is True
        assert status["differences"]["identical"] == 4

    def test_reports_differences(self, populated_source, manager):
        manager.start()
        target = populated_source["target"]
        (target / "orphan.md").write_text("orphan")
        (target / "inbox.md").write_text("edited in mirror")
        (target / "projects" / "plan.md").unlink()

        status = manager.status()

        assert status["in_sync"] is False
        assert status["differences"]["mirror_only"] == ["orphan.md"]
        assert status["differences"]["modified"] == ["inbox.md"]
        assert status["differences"]["source_only"] == ["projects/plan.md"]
        # Diagnostic only
        assert (target / "orphan.md").exists()

    def test_unavailable_target(self, tmp_dirs, manager):
        manager.set_target_root(str(tmp_dirs["root"] / "unmounted"))
        status = manager.status()
        assert status["target_available"] is False
        assert status["differences"] is None


class TestLogNotifier:

    def test_logs_message(self, caplog):
        with caplog.at_level(logging.INFO, logger="vault_mirror.notify"):
            log_notifier("Synced new file 'a.md'")
        assert "Synced new file 'a.md'" in caplog.text


def test_memory_only_settings(tmp_dirs, notifier):
    manager = MirrorManager(ManagerConfig(source_root=tmp_dirs["source"]), notify=notifier)
    manager.set_target_root(str(tmp_dirs["target"]))
    assert manager.get_configuration().target_root == str(tmp_dirs["target"])
    assert list(tmp_dirs["source"].iterdir()) == []


def test_create_manager(tmp_dirs):
    manager = create_manager(str(tmp_dirs["source"]), target_root=str(tmp_dirs["target"]))

    assert manager.config.settings_path == tmp_dirs["source"] / ".vault_mirror.json"
    assert manager.config.settings_path.exists()
    assert manager.get_configuration().target_root == str(tmp_dirs["target"])
