"""
In-flight request registry.
Collapses concurrent work for the same key into a single call.
"""
import logging
import threading
from concurrent.futures import Future
from typing import Callable, Dict, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class InFlightRegistry:
    """
    Map from key to the pending result of the call currently running for it.

    The first caller for a key runs the work; callers arriving while it is
    still running wait for the same result (or exception). The entry is
    removed once the work finishes, so later callers start fresh.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._pending: Dict[str, Future] = {}

    def run(self, key: str, fn: Callable[[], T]) -> T:
        with self._lock:
            future = self._pending.get(key)
            is_leader = future is None
            if is_leader:
                future = Future()
                self._pending[key] = future

        if not is_leader:
            logger.info("Joining in-flight resolution for %s", key)
            return future.result()

        try:
            result = fn()
        except BaseException as e:
            future.set_exception(e)
            raise
        else:
            future.set_result(result)
            return result
        finally:
            with self._lock:
                self._pending.pop(key, None)

    def is_pending(self, key: str) -> bool:
        with self._lock:
            return key in self._pending
