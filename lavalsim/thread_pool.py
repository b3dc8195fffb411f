"""A fixed-size pool that spreads a function over a sequence of items."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any, TypeVar

T = TypeVar("T")


def _run_chunk(chunk: Sequence[T], function: Callable[[T], Any]) -> None:
    for item in chunk:
        function(item)


class ThreadPool:
    """Applies a function to items split into one contiguous chunk per worker.

    With a single worker the items are processed in the calling thread.
    """

    def __init__(self, workers: int = 1) -> None:
        if workers < 1:
            raise ValueError(f"A thread pool needs at least one worker, got {workers}")
        self._workers = workers
        self._executor: ThreadPoolExecutor | None = (
            ThreadPoolExecutor(max_workers=workers) if workers > 1 else None
        )
        self._closed = False

    @property
    def workers(self) -> int:
        return self._workers

    def apply(self, items: Iterable[T], function: Callable[[T], Any]) -> None:
        """Call ``function`` on every item and wait until all calls are done.

        Every chunk runs to completion; the first exception raised by a
        worker is then re-raised here.
        """
        if self._closed:
            raise RuntimeError("The thread pool is closed")

        values = list(items)
        if self._executor is None:
            _run_chunk(values, function)
            return

        total = len(values)
        chunks = [
            values[total * worker // self._workers : total * (worker + 1) // self._workers]
            for worker in range(self._workers)
        ]
        futures: list[Future[None]] = [
            self._executor.submit(_run_chunk, chunk, function) for chunk in chunks
        ]
        wait(futures)
        for future in futures:
            error = future.exception()
            if error is not None:
                raise error

    def close(self) -> None:
        """Stop the worker threads; the pool cannot be used afterwards."""
        if self._closed:
            return
        self._closed = True
        if self._executor is not None:
            self._executor.shutdown(wait=True)

    def __enter__(self) -> ThreadPool:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()