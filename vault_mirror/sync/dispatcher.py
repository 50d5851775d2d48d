"""Single-consumer dispatch loop for sync events and settings updates.

Messages are processed strictly one at a time in the order they were
submitted. A message that raises is logged and dropped; it never stops the
loop or affects later messages. A failed scan is logged the same way and the
loop carries on with the next cycle.
"""

import logging
import queue
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional, Union

from vault_mirror.events import SetNotifyToggle, SetTargetRoot, SettingsUpdate, SyncEvent
from vault_mirror.settings import SettingsStore
from vault_mirror.sync.synchronizer import EventSynchronizer

logger = logging.getLogger(__name__)

Message = Union[SyncEvent, SettingsUpdate]


@dataclass
class DispatchStats:
    """Counters for messages handled by the dispatcher."""

    processed: int = 0
    failed: int = 0
    settings_applied: int = 0
    scan_failures: int = 0


class EventDispatcher:
    """Queue of pending messages plus the loop that drains it.

    Attributes:
        synchronizer: Handler for SyncEvents
        settings: Store that applies and persists SettingsUpdates
        stats: Running DispatchStats
    """

    def __init__(self, synchronizer: EventSynchronizer, settings: SettingsStore):
        self.synchronizer = synchronizer
        self.settings = settings
        self.stats = DispatchStats()
        self._queue: "queue.Queue[Message]" = queue.Queue()

    def submit(self, message: Message) -> None:
        """Enqueue a message; usable directly as a subscription handler."""
        self._queue.put(message)

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def drain(self) -> int:
        """Process every pending message in FIFO order.

        Returns:
            Number of messages taken off the queue
        """
        count = 0
        while True:
            try:
                message = self._queue.get_nowait()
            except queue.Empty:
                return count
            count += 1
            self._dispatch(message)

    def _dispatch(self, message: Message) -> None:
        try:
            if isinstance(message, (SetTargetRoot, SetNotifyToggle)):
                self.settings.apply(message)
                self.stats.settings_applied += 1
            else:
                self.synchronizer.handle(message)
            self.stats.processed += 1
        except Exception:
            self.stats.failed += 1
            logger.exception(f"Failed to process {message!r}")

    def run(
        self,
        stop_event: threading.Event,
        poll: Optional[Callable[[], None]] = None,
        interval: float = 2.0,
    ) -> None:
        """Loop until stop_event is set: poll for new events, then drain.

        Args:
            stop_event: Set to stop after the current cycle
            poll: Called at the start of each cycle; may submit messages
            interval: Seconds between cycle starts
        """
        cycles = 0
        try:
            while not stop_event.is_set():
                started_at = time.time()
                if poll is not None:
                    try:
                        poll()
                    except Exception:
                        self.stats.scan_failures += 1
                        logger.exception("Scan for source changes failed")
                self.drain()
                cycles += 1
                remaining = max(interval - (time.time() - started_at), 0.0)
                if remaining > 0:
                    stop_event.wait(remaining)
        finally:
            logger.info(
                f"Dispatcher stopped after {cycles} cycles: "
                f"{self.stats.processed} processed, {self.stats.failed} failed"
            )
