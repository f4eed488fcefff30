from __future__ import annotations

import logging
import os
import time
from collections.abc import Callable, Iterable
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def resolve_n_jobs(n_jobs: int | None, n_tasks: int) -> int:
    """Number of worker threads for *n_tasks* tasks.

    ``None`` or ``-1`` means one thread per CPU. The result never exceeds the
    number of tasks and is at least 1.
    """
    if n_jobs is None or n_jobs == -1:
        n_jobs = os.cpu_count() or 4
    if isinstance(n_jobs, bool) or not isinstance(n_jobs, int) or n_jobs < 1:
        raise ValueError(f"`n_jobs` must be a positive integer, -1 or None. Got {n_jobs!r}.")
    return max(1, min(n_jobs, n_tasks))


def fan_out(
    fn: Callable[[T], Any],
    tasks: Iterable[T],
    n_jobs: int | None = None,
    verbose: int = 0,
    desc: str = "Items",
) -> None:
    """Run ``fn(task)`` for every task, one thread-pool job per task.

    Workers report through shared, lock-protected collectors, so return values
    are discarded. The first worker exception cancels the jobs that have not
    started and is re-raised once the running ones finish; nothing is retried.
    """
    tasks = list(tasks)
    if not tasks:
        return

    workers = resolve_n_jobs(n_jobs, len(tasks))
    t0 = time.perf_counter()

    if workers == 1:
        iterator: Iterable[T] = _progress(tasks, len(tasks), desc, verbose)
        for task in iterator:
            fn(task)
    else:
        pool = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="fimkit")
        try:
            futures: dict[Future[Any], T] = {pool.submit(fn, task): task for task in tasks}
            for future in _progress(as_completed(futures), len(futures), desc, verbose):
                # Raises the worker's exception, if any
                future.result()
        except BaseException:
            pool.shutdown(wait=True, cancel_futures=True)
            raise
        else:
            pool.shutdown(wait=True)

    logger.debug("Ran %d tasks on %d worker(s) in %.3fs", len(tasks), workers, time.perf_counter() - t0)


def _progress(iterator: Iterable[T], total: int, desc: str, verbose: int) -> Iterable[T]:
    if verbose:
        from ._dependencies import import_optional_dependency

        tqdm_auto = import_optional_dependency("tqdm.auto", errors="ignore")
        if tqdm_auto is not None:
            return tqdm_auto.tqdm(iterator, total=total, desc=desc)
    return iterator
