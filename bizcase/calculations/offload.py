"""
Worker Offload

Long projections can be computed in a separate worker process so an
interactive caller is not blocked. The worker receives the full scenario
and replies with either the full result or an error message. A timeout,
a worker error or a broken pool falls back to the in-process synchronous
calculation; nothing is retried. The worker process is terminated when a
call returns, so a timed-out calculation does not keep running.
"""

import logging
import multiprocessing
from typing import Callable, Dict, Optional

from bizcase.calculations.metrics import ScenarioInput, calculate_metrics
from bizcase.config import get_settings

logger = logging.getLogger(__name__)

CALCULATION_COMPLETE = "complete"
CALCULATION_ERROR = "error"


class OffloadError(RuntimeError):
    """The worker could not produce a result."""


def handle_calculation_request(scenario: ScenarioInput) -> Dict:
    """
    Worker entry point: turn a request into a response message.

    Never raises; calculation errors are carried back in the message.
    """
    try:
        return {"type": CALCULATION_COMPLETE, "payload": calculate_metrics(scenario)}
    except Exception as e:
        return {"type": CALCULATION_ERROR, "error": str(e)}


def should_offload(project_duration: int, threshold_months: Optional[int] = None) -> bool:
    """Only projects of at least ``threshold_months`` are worth a worker."""
    if threshold_months is None:
        threshold_months = get_settings().offload_threshold_months
    return project_duration >= threshold_months


def calculate_in_worker(scenario: ScenarioInput, timeout: Optional[float] = None) -> Dict:
    """
    Run the metrics calculation in a worker process.

    Raises:
        OffloadError: On timeout, worker failure or an error response
    """
    if timeout is None:
        timeout = get_settings().offload_timeout_seconds

    # Leaving the block terminates the worker, finished or not
    try:
        with multiprocessing.Pool(processes=1) as pool:
            pending = pool.apply_async(handle_calculation_request, (scenario,))
            message = pending.get(timeout=timeout)
    except multiprocessing.TimeoutError:
        raise OffloadError(f"Worker calculation timeout after {timeout}s")
    except (multiprocessing.ProcessError, OSError) as e:
        raise OffloadError(f"Worker error: {e}")

    if message["type"] == CALCULATION_ERROR:
        logger.error(f"Worker reported calculation error: {message['error']}")
        raise OffloadError(message["error"])
    return message["payload"]


def calculate_with_offload(
    scenario: ScenarioInput,
    sync_calculator: Callable[[ScenarioInput], Dict] = calculate_metrics,
    threshold_months: Optional[int] = None,
    timeout: Optional[float] = None,
) -> Dict:
    """
    Calculate metrics, offloading long projects with synchronous fallback.

    Validation errors surface from the synchronous path, so callers see the
    same exceptions whether or not a worker was tried.
    """
    if should_offload(scenario.project_duration, threshold_months):
        try:
            logger.debug(f"Offloading {scenario.project_duration}-month projection to worker")
            return calculate_in_worker(scenario, timeout)
        except OffloadError as e:
            logger.warning(f"Worker failed, falling back to synchronous calculation: {e}")

    return sync_calculator(scenario)
