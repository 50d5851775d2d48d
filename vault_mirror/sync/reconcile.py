"""Startup reconciliation between the source tree and the mirror.

Reconciler walks every file in the source tree once and brings the mirror
up to date:
- missing in the mirror: create it
- older in the mirror (strictly earlier mtime): overwrite it
- anything else: leave it alone

Deletions and renames are never reconciled here; orphans in the mirror stay
until a delete event arrives for them.
"""

import time
from dataclasses import dataclass
from typing import Any, Callable, Dict
import logging

from vault_mirror.config import MirrorConfig
from vault_mirror.source import SourceTree
from vault_mirror.target import (
    ensure_parent_directory,
    is_target_available,
    resolve_target_root,
    safe_stat,
    target_path_for,
)

logger = logging.getLogger(__name__)


@dataclass
class ReconcileStats:
    """Statistics from a reconciliation pass."""

    target_available: bool = True

    # File counts
    files_seen: int = 0
    created: int = 0
    updated: int = 0
    skipped: int = 0

    # Timing
    started_at: float = 0.0
    completed_at: float = 0.0
    duration_ms: float = 0.0

    def summary_message(self) -> str:
        """Human-readable summary sent to the notification sink."""
        return (
            f"Synced {self.files_seen} files; "
            f"{self.created} created, {self.updated} updated."
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert stats to dictionary."""
        return {
            "target_available": self.target_available,
            "files_seen": self.files_seen,
            "created": self.created,
            "updated": self.updated,
            "skipped": self.skipped,
            "duration_ms": self.duration_ms,
        }


def is_stale(target_mtime_ns: int, source_mtime_ms: int) -> bool:
    """A mirror file is stale if its mtime is strictly before the source's.

    The source side is whole milliseconds; the target keeps its native
    resolution. Equal times are not stale.
    """
    return target_mtime_ns < source_mtime_ms * 1_000_000


class Reconciler:
    """One-shot comparison of the whole source tree against the mirror.

    Attributes:
        config: Mirror configuration (read on every run)
        source: Source tree to list and read from
        notify: Sink for the summary message
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

    def run(self) -> ReconcileStats:
        """Create missing and update stale mirror files.

        Returns:
            ReconcileStats; target_available is False (and nothing is
            notified) if the target root could not be reached.

        Raises:
            OSError: If a read or write fails mid-pass
        """
        stats = ReconcileStats(started_at=time.time())

        target_root = resolve_target_root(self.config)
        if not is_target_available(target_root):
            logger.warning(
                f"Target path '{self.config.target_root}' does not exist; "
                f"no syncing will take place."
            )
            stats.target_available = False
            return self._finalize_stats(stats)

        logger.info(f"Syncing existing files to {target_root} ...")

        for item in self.source.list_all_files():
            stats.files_seen += 1
            target_path = target_path_for(target_root, item.path)
            target_stat = safe_stat(target_path)

            if target_stat is None:
                content = self.source.read_binary(item.path)
                ensure_parent_directory(target_path)
                target_path.write_bytes(content)
                stats.created += 1
                logger.debug(f"Created {item.path}")
            elif item.mtime_ms is not None and is_stale(
                target_stat.st_mtime_ns, item.mtime_ms
            ):
                content = self.source.read_binary(item.path)
                target_path.write_bytes(content)
                stats.updated += 1
                logger.debug(f"Updated {item.path}")
            else:
                stats.skipped += 1

        stats = self._finalize_stats(stats)
        message = stats.summary_message()
        logger.info(message)
        self.notify(message)
        return stats

    def _finalize_stats(self, stats: ReconcileStats) -> ReconcileStats:
        stats.completed_at = time.time()
        stats.duration_ms = (stats.completed_at - stats.started_at) * 1000
        return stats
