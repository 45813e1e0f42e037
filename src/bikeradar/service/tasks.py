from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
import logging
import threading
from typing import Any, Callable, Optional, TypeVar

from bikeradar.schemas.core import Network, Station


logger = logging.getLogger(__name__)

T = TypeVar("T")


class FetchScope:
    """
    Lifetime of whatever started a set of fetches (a screen, a request, a CLI run).

    Fetches run on a small worker pool. `cancel()` cancels fetches that have not started and
    marks the scope so fetches already in flight drop their result instead of publishing it.
    Leaving the `with` block cancels the scope.
    """

    def __init__(self, *, max_workers: int = 2, name: str = "fetch") -> None:
        self._name = name
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix=f"bikeradar-{name}")
        self._cancelled = threading.Event()
        self._futures: list[Future[Any]] = []
        self._lock = threading.Lock()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def submit(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> Future[T]:
        if self.cancelled:
            raise RuntimeError(f"Fetch scope {self._name!r} is cancelled")
        future = self._executor.submit(fn, *args, **kwargs)
        with self._lock:
            self._futures.append(future)
        return future

    def fetch_networks(self, service: Any) -> Future[list[Network]]:
        return self.submit(service.fetch_networks, scope=self)

    def fetch_stations(self, service: Any, network_id: str) -> Future[list[Station]]:
        return self.submit(service.fetch_stations, network_id, scope=self)

    def cancel(self, *, wait: bool = False) -> None:
        if self.cancelled:
            return
        self._cancelled.set()
        with self._lock:
            pending = [f for f in self._futures if f.cancel()]
        if pending:
            logger.debug("Scope %s cancelled %s pending fetches", self._name, len(pending))
        self._executor.shutdown(wait=wait, cancel_futures=True)

    def __enter__(self) -> "FetchScope":
        return self

    def __exit__(self, exc_type, exc, tb) -> Optional[bool]:
        self.cancel()
        return None
