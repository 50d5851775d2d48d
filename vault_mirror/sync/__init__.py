"""Synchronization module for Vault Mirror.

One-way: the source tree is truth, the mirror follows.

This module provides:
- Reconciler: One-shot startup pass creating missing and stale mirror files
- EventSynchronizer: Applies single create/modify/delete/rename events
- EventDispatcher: Serial queue feeding events and settings updates through
"""

from vault_mirror.sync.dispatcher import DispatchStats, EventDispatcher
from vault_mirror.sync.reconcile import ReconcileStats, Reconciler
from vault_mirror.sync.synchronizer import EventSynchronizer

__all__ = [
    "Reconciler",
    "ReconcileStats",
    "EventSynchronizer",
    "EventDispatcher",
    "DispatchStats",
]
