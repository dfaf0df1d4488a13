"""
Tests for worker offload with synchronous fallback.
"""

import multiprocessing
from dataclasses import replace

import pytest

from bizcase.calculations import offload
from bizcase.calculations.metrics import calculate_metrics
from bizcase.calculations.offload import (
    CALCULATION_COMPLETE,
    CALCULATION_ERROR,
    OffloadError,
    calculate_in_worker,
    calculate_with_offload,
    handle_calculation_request,
    should_offload,
)
from bizcase.calculations.validation import InputValidationError


class TestWorkerProtocol:
    """Test the request/response messages the worker produces."""

    def test_complete_message(self, short_scenario):
        message = handle_calculation_request(short_scenario)
        assert message["type"] == CALCULATION_COMPLETE
        assert message["payload"] == calculate_metrics(short_scenario)

    def test_error_message(self, short_scenario):
        """Calculation errors come back as a message, not an exception."""
        message = handle_calculation_request(replace(short_scenario, initial_investment=-1))
        assert message["type"] == CALCULATION_ERROR
        assert "initial_investment" in message["error"]


class TestOffload:
    """Test offload threshold and fallback behavior."""

    def test_threshold(self):
        assert should_offload(12, threshold_months=24) is False
        assert should_offload(24, threshold_months=24) is True

    def test_short_projection_runs_inline(self, short_scenario, monkeypatch):
        def fail(*args, **kwargs):
            raise AssertionError("worker should not be used")

        monkeypatch.setattr(offload, "calculate_in_worker", fail)
        result = calculate_with_offload(short_scenario, threshold_months=24)
        assert result == calculate_metrics(short_scenario)

    def test_worker_failure_falls_back(self, base_scenario, monkeypatch):
        """A failed worker falls back to the synchronous calculation."""

        def broken(*args, **kwargs):
            raise OffloadError("Worker calculation timeout after 0.01s")

        monkeypatch.setattr(offload, "calculate_in_worker", broken)
        calls = []

        def sync(scenario):
            calls.append(scenario)
            return calculate_metrics(scenario)

        result = calculate_with_offload(base_scenario, sync_calculator=sync, threshold_months=24)
        assert calls == [base_scenario]
        assert result == calculate_metrics(base_scenario)

    def test_validation_error_surfaces_after_fallback(self, base_scenario, monkeypatch):
        def broken(*args, **kwargs):
            raise OffloadError("invalid")

        monkeypatch.setattr(offload, "calculate_in_worker", broken)
        with pytest.raises(InputValidationError):
            calculate_with_offload(
                replace(base_scenario, yearly_revenue=0), threshold_months=24
            )

    @pytest.mark.slow
    def test_worker_process_result(self, base_scenario):
        """The worker produces the same result as the inline calculation."""
        assert calculate_in_worker(base_scenario, timeout=60) == calculate_metrics(base_scenario)

    @pytest.mark.slow
    def test_worker_error_raises(self, base_scenario):
        with pytest.raises(OffloadError):
            calculate_in_worker(replace(base_scenario, project_duration=0), timeout=60)

    @pytest.mark.slow
    def test_timeout_terminates_worker(self, base_scenario):
        """A timed-out calculation leaves no worker process behind."""
        with pytest.raises(OffloadError, match="timeout"):
            calculate_in_worker(replace(base_scenario, project_duration=600), timeout=0.0001)
        assert multiprocessing.active_children() == []
