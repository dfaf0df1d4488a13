"""
Parallel fan-out for independent calculations.

Scenario cases and sensitivity cells have no ordering dependency on each
other, so callers may compute them concurrently. Results always come back
in input order.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, List, Optional, TypeVar

T = TypeVar("T")
R = TypeVar("R")


def run_parallel(
    fn: Callable[[T], R], items: Iterable[T], max_workers: Optional[int] = None
) -> List[R]:
    """
    Apply ``fn`` to every item, optionally on a thread pool.

    With ``max_workers`` of None or 1 everything runs inline. Exceptions
    raised by ``fn`` propagate to the caller.
    """
    items = list(items)
    if not max_workers or max_workers <= 1 or len(items) <= 1:
        return [fn(item) for item in items]

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        return list(executor.map(fn, items))
