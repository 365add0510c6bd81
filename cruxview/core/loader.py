from __future__ import annotations
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional
import itertools
import threading

from .errors import LoadError
from .fetcher import Fetcher, fetch_and_decode
from .pointcloud import PointCloudBatchSet
from .store import PointCloudStore
from .utils import get_logger

_log = get_logger()


class LoadState(Enum):
    QUEUED = "queued"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class LoadRequest:
    url: str
    collection: str = "default"


@dataclass
class LoadTask:
    """Handle for one background fetch+decode unit."""
    request: LoadRequest
    future: "Future[PointCloudBatchSet]"
    completed_seq: Optional[int] = None

    @property
    def state(self) -> LoadState:
        if not self.future.done():
            return LoadState.RUNNING if self.future.running() else LoadState.QUEUED
        return LoadState.FAILED if self.future.exception() is not None else LoadState.COMPLETED

    def done(self) -> bool:
        return self.future.done()

    @property
    def error(self) -> Optional[BaseException]:
        if not self.future.done():
            return None
        return self.future.exception()

    def result(self) -> PointCloudBatchSet:
        return self.future.result()


class LoadTaskManager:
    """Queue of load requests plus the set of background units in flight.

    ``enqueue`` may be called from any thread; ``drain_and_spawn`` and
    ``poll_completed`` belong to the tick loop. Requests are not
    deduplicated.
    """
    def __init__(self, fetcher: Fetcher, max_workers: Optional[int] = None,
                 executor: Optional[Executor] = None) -> None:
        self.fetcher = fetcher
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(max_workers=max_workers,
                                                        thread_name_prefix="cruxview-load")
        self._lock = threading.Lock()
        self._pending: List[LoadRequest] = []
        self._in_flight: List[LoadTask] = []
        self._completion_counter = itertools.count()

    @property
    def pending(self) -> List[LoadRequest]:
        with self._lock:
            return list(self._pending)

    @property
    def in_flight(self) -> List[LoadTask]:
        return list(self._in_flight)

    def is_idle(self) -> bool:
        with self._lock:
            return not self._pending and not self._in_flight

    def enqueue(self, url: str, collection: str = "default") -> LoadRequest:
        request = LoadRequest(url=url, collection=collection)
        with self._lock:
            self._pending.append(request)
        _log.debug("Queued %s → '%s'", url, collection)
        return request

    def drain_and_spawn(self) -> List[LoadTask]:
        with self._lock:
            drained, self._pending = self._pending, []
        spawned: List[LoadTask] = []
        for request in drained:
            future = self._executor.submit(fetch_and_decode, request.url, self.fetcher)
            task = LoadTask(request=request, future=future)
            future.add_done_callback(lambda _f, t=task: self._mark_completed(t))
            self._in_flight.append(task)
            spawned.append(task)
            _log.info("Loading %s", request.url)
        return spawned

    def poll_completed(self, store: PointCloudStore) -> List[LoadTask]:
        """Install finished loads into ``store`` in completion order; never blocks."""
        finished: List[LoadTask] = []
        still_running: List[LoadTask] = []
        for task in self._in_flight:
            (finished if task.completed_seq is not None else still_running).append(task)
        if not finished:
            return []
        self._in_flight = still_running
        finished.sort(key=lambda t: t.completed_seq)
        for task in finished:
            err = task.error
            if err is None:
                store.install(task.request.collection, task.result())
            elif isinstance(err, LoadError):
                _log.error("Loading %s failed: %s", task.request.url, err)
            else:
                _log.error("Loading %s failed unexpectedly: %r", task.request.url, err)
        return finished

    def _mark_completed(self, task: LoadTask) -> None:
        # runs on the worker thread; only stamps the handle
        task.completed_seq = next(self._completion_counter)

    def shutdown(self, wait: bool = True) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=wait)
