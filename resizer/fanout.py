"""
FanOut - Run independent tasks in parallel and wait for all of them.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterable, List, Optional, TypeVar

T = TypeVar('T')


@dataclass
class TaskResult(Generic[T]):
    """
    Result of one fanned-out task.

    Attributes:
        item: The input the task ran for
        value: Return value (None if the task raised)
        error: The exception the task raised, if any
    """
    item: T
    value: Any = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class FanOut:
    """
    Join barrier over a thread pool.

    `run` returns only after every task has finished. A task that raises
    still counts as finished and never cancels the others.
    """

    def __init__(self, max_workers: int = 4, logger: Optional[logging.Logger] = None):
        """
        Initialize fan-out.

        Args:
            max_workers: Maximum number of concurrent worker threads
            logger: Optional logger instance
        """
        self.max_workers = max(1, max_workers)
        self.logger = logger or logging.getLogger(__name__)

    def run(self, func: Callable[[T], Any], items: Iterable[T]) -> List[TaskResult[T]]:
        """
        Call `func` once per item, in parallel.

        Args:
            func: Task body, called with one item
            items: Task inputs

        Returns:
            One TaskResult per item, in input order
        """
        items = list(items)
        if not items:
            return []

        results: List[Optional[TaskResult[T]]] = [None] * len(items)
        workers = min(self.max_workers, len(items))

        with ThreadPoolExecutor(max_workers=workers) as executor:
            future_to_index = {
                executor.submit(func, item): index
                for index, item in enumerate(items)
            }

            for future in as_completed(future_to_index):
                index = future_to_index[future]
                item = items[index]
                try:
                    results[index] = TaskResult(item, value=future.result())
                except Exception as e:
                    self.logger.debug(f"Task for {item} raised {type(e).__name__}: {e}")
                    results[index] = TaskResult(item, error=e)

        return results
