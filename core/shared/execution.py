"""
Sweep execution: run independent simulation tasks on a bounded worker pool.

Each task is a module-level function plus its argument tuple so it can be
pickled for ProcessPoolExecutor. Results come back in submission order,
whatever order the workers finish in, so reductions (best score, window
statistics) stay deterministic.
"""
from __future__ import annotations

import logging
import multiprocessing
import threading
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence, Tuple

from .errors import SweepCancelled


logger = logging.getLogger(__name__)


@dataclass
class TaskOutcome:
    """Result of one task: either a value or the error message that replaced it."""
    index: int
    value: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def default_workers() -> int:
    """Worker pool size: one per available core (minimum 1)."""
    return max(1, multiprocessing.cpu_count() or 1)


def _check_cancelled(cancel_event: Optional[threading.Event], completed: int, total: int) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise SweepCancelled(completed, total)


def run_tasks(
    func: Callable[..., Any],
    task_args: Sequence[Tuple],
    max_workers: Optional[int] = None,
    cancel_event: Optional[threading.Event] = None,
    labels: Optional[Sequence[str]] = None,
) -> List[TaskOutcome]:
    """
    Run func(*args) for every args tuple and collect outcomes in input order.

    A task that raises is recorded as failed (TaskOutcome.error) instead of
    aborting the sweep. Cancellation is only checked between tasks; a task
    that already started always runs to completion.

    Args:
        func: Module-level callable (must be picklable when max_workers > 1)
        task_args: One argument tuple per task
        max_workers: Pool size (default: CPU count); 1 = sequential in-process
        cancel_event: When set, pending tasks are cancelled and SweepCancelled is raised
        labels: Optional task names for log messages

    Returns:
        List of TaskOutcome, one per task, ordered like task_args
    """
    total = len(task_args)
    workers = max_workers if max_workers is not None else default_workers()
    workers = max(1, min(workers, total)) if total else 1
    names = list(labels) if labels is not None else [str(i) for i in range(total)]
    outcomes: List[Optional[TaskOutcome]] = [None] * total

    if workers <= 1:
        # Sequential (e.g. testing or single-core machines)
        for i, args in enumerate(task_args):
            _check_cancelled(cancel_event, i, total)
            try:
                outcomes[i] = TaskOutcome(index=i, value=func(*args))
            except Exception as e:
                logger.warning(f"Task {names[i]} failed: {e}")
                outcomes[i] = TaskOutcome(index=i, error=f"{type(e).__name__}: {e}")
        return outcomes

    completed = 0
    with ProcessPoolExecutor(max_workers=workers) as executor:
        futures = {
            executor.submit(func, *args): i
            for i, args in enumerate(task_args)
        }
        try:
            for future in as_completed(futures):
                i = futures[future]
                try:
                    outcomes[i] = TaskOutcome(index=i, value=future.result())
                except Exception as e:
                    logger.warning(f"Task {names[i]} failed: {e}")
                    outcomes[i] = TaskOutcome(index=i, error=f"{type(e).__name__}: {e}")
                completed += 1
                logger.debug(f"[{completed}/{total}] {names[i]} done")
                _check_cancelled(cancel_event, completed, total)
        except SweepCancelled:
            for future in futures:
                future.cancel()
            raise

    return outcomes
