"""
Worker pool helpers.

The service owns two long-lived bounded pools (tracking + reward matching). This
module builds them from settings and provides a non-blocking fan-in: `when_all`
returns a future that resolves once every input future is done, without parking a
pool thread on the wait.
"""

from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Sequence, TypeVar

T = TypeVar("T")


def build_executor(max_workers: int, *, name: str) -> ThreadPoolExecutor:
    """Create a bounded pool; `max_workers` must be >= 1."""
    if int(max_workers) < 1:
        raise ValueError(f"{name} pool size must be >= 1 (got {max_workers})")
    return ThreadPoolExecutor(max_workers=int(max_workers), thread_name_prefix=name)


def when_all(futures: Sequence[Future], combine: Callable[[Sequence[Future]], T]) -> Future[T]:
    """Resolve to `combine(futures)` after every future in `futures` has finished.

    `combine` runs on whichever thread completes the last input future (or the
    caller's thread when `futures` is empty). If it raises, the returned future
    fails with that exception.
    """
    joined: Future[T] = Future()
    pending = len(futures)
    lock = threading.Lock()

    def _finish() -> None:
        try:
            result = combine(futures)
        except Exception as exc:
            joined.set_exception(exc)
        else:
            joined.set_result(result)

    if pending == 0:
        _finish()
        return joined

    def _on_done(_: Future) -> None:
        nonlocal pending
        with lock:
            pending -= 1
            last = pending == 0
        if last:
            _finish()

    for f in futures:
        f.add_done_callback(_on_done)
    return joined
