# Row-partitioned fork-join dispatch
"""
Splits an output image into contiguous row ranges and runs one worker per
non-empty range.

Every filter in the package goes through :func:`dispatch_rows`. A worker
receives a :class:`RowRange` and may only write the destination rows inside
it; the source buffer is shared read-only for the duration of the call.
Because the ranges are disjoint no locking is needed inside a worker.

Fresh threads are started for each call and joined before the call returns,
so no worker outlives a filter invocation.
"""

import math
import threading
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from ..config import settings
from ..utils.errors import ErrorCategory, InvalidDimensionsError, ProcessingError, log_and_continue
from ..utils.logger import get_logger

logger = get_logger(__name__)

RowOperation = Callable[["RowRange"], None]


@dataclass(frozen=True)
class RowRange:
    """Half-open range of rows ``[start, end)`` owned by one worker."""
    start: int
    end: int

    def __len__(self) -> int:
        return max(0, self.end - self.start)

    @property
    def is_empty(self) -> bool:
        return self.end <= self.start

    def as_slice(self) -> slice:
        return slice(self.start, self.end)


@dataclass
class DispatchReport:
    """What a dispatch actually did."""
    total_rows: int
    thread_count: int
    ranges: List[RowRange] = field(default_factory=list)
    workers_started: int = 0
    skipped: List[RowRange] = field(default_factory=list)


def clamp_thread_count(num_threads: int, total_rows: int, max_threads: Optional[int] = None) -> int:
    """Clamp to ``[min_threads, min(max_threads, total_rows)]``."""
    if max_threads is None:
        max_threads = settings.ENGINE_DEFAULTS["max_threads"]
    min_threads = settings.ENGINE_DEFAULTS["min_threads"]
    upper = max(min_threads, min(max_threads, total_rows))
    return max(min_threads, min(int(num_threads), upper))


def partition_rows(total_rows: int, num_threads: int, max_threads: Optional[int] = None) -> List[RowRange]:
    """
    Split ``[0, total_rows)`` into one contiguous range per worker.

    Worker ``i`` gets ``[i * k, min((i + 1) * k, total_rows))`` with
    ``k = ceil(total_rows / threads)``. Trailing ranges can come out empty;
    they are kept in the list so the caller can see the full assignment.
    """
    if total_rows <= 0:
        raise InvalidDimensionsError(f"Cannot partition {total_rows} rows", height=total_rows)

    threads = clamp_thread_count(num_threads, total_rows, max_threads)
    rows_per_worker = math.ceil(total_rows / threads)
    ranges = []
    for i in range(threads):
        start = min(i * rows_per_worker, total_rows)
        end = min((i + 1) * rows_per_worker, total_rows)
        ranges.append(RowRange(start, end))
    return ranges


def dispatch_rows(
    total_rows: int,
    num_threads: int,
    row_op: RowOperation,
    *,
    max_threads: Optional[int] = None,
    step: str = "dispatch",
) -> DispatchReport:
    """
    Run ``row_op`` over ``[0, total_rows)`` on up to ``num_threads`` threads and
    wait for all of them.

    Each non-empty range gets its own thread. A thread that cannot be started
    is logged and its range is skipped: ``row_op`` never runs for it, so the
    destination rows keep their initial contents. If a started worker raises,
    the remaining workers are still joined and a :class:`ProcessingError` is
    raised afterwards.

    Args:
        total_rows: Number of output rows.
        num_threads: Requested worker count (clamped, see :func:`clamp_thread_count`).
        row_op: Called once per non-empty :class:`RowRange`.
        max_threads: Override for the configured thread ceiling.
        step: Name used in logs, thread names and errors.

    Returns:
        DispatchReport describing the ranges and how many workers ran.
    """
    ranges = partition_rows(total_rows, num_threads, max_threads)
    report = DispatchReport(total_rows=total_rows, thread_count=len(ranges), ranges=ranges)
    work = [r for r in ranges if not r.is_empty]
    logger.debug("%s: %d rows -> %s", step, total_rows, [(r.start, r.end) for r in ranges])

    errors: Dict[RowRange, Exception] = {}

    def run(row_range: RowRange):
        try:
            row_op(row_range)
        except Exception as e:  # re-raised on the dispatching thread after the join
            errors[row_range] = e

    workers = []
    for index, row_range in enumerate(work):
        worker = threading.Thread(target=run, args=(row_range,), name=f"{step}-worker-{index}")
        try:
            worker.start()
        except RuntimeError as e:
            log_and_continue(
                f"{step}: could not start worker {index} for rows "
                f"[{row_range.start}, {row_range.end}): {e}",
                category=ErrorCategory.RECOVERABLE,
            )
            report.skipped.append(row_range)
            continue
        workers.append(worker)
    report.workers_started = len(workers)

    # Join-all barrier: nothing below runs until every worker is done
    for worker in workers:
        worker.join()

    if errors:
        failed_range = min(errors, key=lambda r: r.start)
        first_error = errors[failed_range]
        raise ProcessingError(
            f"{step}: worker for rows [{failed_range.start}, {failed_range.end}) failed: {first_error}",
            step=step,
            original_error=first_error,
        ) from first_error

    return report
