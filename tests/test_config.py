"""Tests for workload configuration validation."""

import pytest

from py_sched.config import DEFAULT_JOB_DURATION, WorkloadConfig


class TestWorkloadConfig:
    """Verify defaults, labels, and rejected values."""

    def test_defaults(self) -> None:
        """The default experiment is 2 CPU + 2 IO jobs of 1000 ticks."""
        config = WorkloadConfig()
        assert config.duration == DEFAULT_JOB_DURATION
        assert config.label == "2 CPU + 2 IO"

    def test_cpu_only_needs_no_rounds(self) -> None:
        """io_repetitions is only checked when there are I/O jobs."""
        config = WorkloadConfig(cpu_bound=3, io_bound=0, io_repetitions=0)
        assert config.label == "3 CPU + 0 IO"

    @pytest.mark.parametrize(
        ("kwargs", "match"),
        [
            ({"cpu_bound": -1}, "must not be negative"),
            ({"cpu_bound": 0, "io_bound": 0}, "at least one process"),
            ({"duration": -5}, "duration"),
            ({"io_repetitions": 0}, "repetitions"),
            ({"max_arrival": -10}, "arrival"),
        ],
    )
    def test_invalid(self, kwargs: dict[str, int], match: str) -> None:
        """Invalid parameters are rejected at construction."""
        with pytest.raises(ValueError, match=match):
            WorkloadConfig(**kwargs)  # type: ignore[arg-type]
