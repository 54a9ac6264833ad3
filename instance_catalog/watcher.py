"""Index watcher — refreshes the cache when the index file changes on disk.

Nothing refreshes the cache implicitly; this watcher is just another caller
of refresh_instances_index(), triggered by file changes instead of a user.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from pathlib import Path

from watchfiles import Change, awatch

from .errors import InstanceError
from .logging_config import get_logger
from .manager import get_instances_index, refresh_instances_index
from .state import AppState
from .types import InstanceIndex

logger = get_logger(__name__)

POLL_INTERVAL = 2.0  # Fallback mtime polling interval (seconds)


def _file_signature(path: Path) -> tuple[int, int] | None:
    try:
        st = path.stat()
    except OSError:
        return None
    return (st.st_mtime_ns, st.st_size)


class IndexWatcher:
    """Watches instances.index.json and refreshes the cache on change.

    Uses inotify (via watchfiles) plus mtime polling for filesystems where
    change events don't arrive.
    """

    def __init__(
        self,
        state: AppState,
        on_refresh: Callable[[InstanceIndex], Awaitable[object]],
        poll_interval: float = POLL_INTERVAL,
    ) -> None:
        self._state = state
        self._on_refresh = on_refresh
        self._index_path = state.store().index_path
        self._poll_interval = poll_interval
        self._signature = _file_signature(self._index_path)
        self._stop_event = asyncio.Event()
        self._lock = asyncio.Lock()
        self._tasks: list[asyncio.Task[None]] = []
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Launch the inotify and polling tasks."""
        self._running = True
        self._stop_event.clear()
        self._index_path = self._state.store().index_path
        self._signature = _file_signature(self._index_path)
        self._tasks = [
            asyncio.create_task(self._watch_events()),
            asyncio.create_task(self._poll_index()),
        ]
        logger.info("Watching %s", self._index_path)

    async def stop(self) -> None:
        self._running = False
        self._stop_event.set()
        for task in self._tasks:
            task.cancel()
        for task in self._tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._tasks.clear()

    async def check(self) -> bool:
        """Refresh if the index file changed since the last check.

        Returns True when the cache was refreshed.
        """
        async with self._lock:
            signature = _file_signature(self._index_path)
            if signature == self._signature:
                return False
            self._signature = signature
            try:
                refresh_instances_index(self._state)
            except InstanceError as e:
                logger.warning("Index changed but refresh failed, keeping cached copy: %s", e)
                return False
            index = get_instances_index(self._state)

        logger.info("Index changed on disk, %d instance(s)", len(index.instances))
        try:
            await self._on_refresh(index)
        except Exception:
            logger.exception("Refresh callback failed")
        return True

    async def _watch_events(self) -> None:
        """Wait for change events in the instances directory."""
        index_name = self._index_path.name
        try:
            async for changes in awatch(
                self._index_path.parent,
                watch_filter=lambda change, path: change != Change.deleted and Path(path).name == index_name,
                stop_event=self._stop_event,
                recursive=False,
            ):
                if not self._running:
                    break
                if changes:
                    await self.check()
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("inotify index watch error")

    async def _poll_index(self) -> None:
        while self._running:
            await asyncio.sleep(self._poll_interval)
            if not self._running:
                break
            try:
                await self.check()
            except Exception:
                logger.exception("Index poll error")
