"""In-memory copy of the instances index, for reads that skip disk I/O.

Only ever replaced wholesale. Refreshing it from disk is the manager's job.
"""

import threading

from .types import InstanceIndex


class InstanceIndexCache:
    """Lock-guarded index mirror. One reader or writer at a time."""

    def __init__(self, index: InstanceIndex | None = None):
        self._lock = threading.Lock()
        self._index = index.copy() if index is not None else InstanceIndex()

    def read(self) -> InstanceIndex:
        """Return a copy of the cached index."""
        with self._lock:
            return self._index.copy()

    def replace(self, new_index: InstanceIndex) -> None:
        """Swap the cached contents for a copy of new_index."""
        snapshot = new_index.copy()
        with self._lock:
            self._index = snapshot
