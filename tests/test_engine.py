"""Tests for the OS engine.

The engine runs the same tick algorithm for every policy, so most of
these tests use FCFS and hand-checked schedules; the properties at the
bottom run every registered policy over the same workloads.
"""

import pytest

from py_sched.config import WorkloadConfig
from py_sched.engine import Os, SimulationError
from py_sched.process import Job, Process, Statement
from py_sched.scheduler import (
    FirstComeFirstServeScheduler,
    available_schedulers,
    create_scheduler,
)
from py_sched.workload import generate_workload, workload_from_entries

LONE_DURATION = 1000


def _cpu(pid: int, duration: int, arrival: int = 0) -> Process:
    """Create a CPU-bound process."""
    return Process(pid=pid, job=Job.cpu_bound(duration), arrival_time=arrival)


class TestOsCreation:
    """Verify building the process table."""

    def test_from_iterable(self) -> None:
        """Processes can be given as an iterable; table order is kept."""
        os = Os([_cpu(2, 5), _cpu(1, 5)], FirstComeFirstServeScheduler())
        assert [p.pid for p in os] == [2, 1]
        assert len(os) == 2  # noqa: PLR2004

    def test_from_mapping(self) -> None:
        """Processes can be given as a pid-keyed mapping."""
        os = Os({1: _cpu(1, 5)}, FirstComeFirstServeScheduler())
        assert os.get_process(1).pid == 1

    def test_mismatched_key_rejected(self) -> None:
        """A table key must equal the process pid."""
        with pytest.raises(ValueError, match="does not match"):
            Os({2: _cpu(1, 5)}, FirstComeFirstServeScheduler())

    def test_duplicate_pid_rejected(self) -> None:
        """Two processes with the same pid are rejected."""
        with pytest.raises(ValueError, match="Duplicate pid"):
            Os([_cpu(1, 5), _cpu(1, 6)], FirstComeFirstServeScheduler())

    def test_empty_rejected(self) -> None:
        """An empty process table cannot be simulated."""
        with pytest.raises(ValueError, match="empty"):
            Os([], FirstComeFirstServeScheduler())

    def test_non_positive_max_ticks_rejected(self) -> None:
        """A tick budget must be positive."""
        with pytest.raises(ValueError, match="max_ticks"):
            Os([_cpu(1, 5)], FirstComeFirstServeScheduler(), max_ticks=0)

    def test_arrivals_start_in_waiting_set(self) -> None:
        """Every process should start parked until its arrival."""
        os = Os([_cpu(1, 5), _cpu(2, 5, arrival=30)], FirstComeFirstServeScheduler())
        assert len(os.waiting) == 2  # noqa: PLR2004
        assert os.clock == 0
        assert os.running_pid is None

    def test_unknown_pid_raises_key_error(self) -> None:
        """Looking up a pid outside the table is a KeyError."""
        os = Os([_cpu(1, 5)], FirstComeFirstServeScheduler())
        with pytest.raises(KeyError, match="not in the process table"):
            os.get_process(99)

    def test_desc_is_policy_label(self) -> None:
        """desc should report the scheduler's label."""
        os = Os([_cpu(1, 5)], FirstComeFirstServeScheduler())
        assert os.desc() == "First Come First Serve"


class TestTick:
    """Verify single-tick behaviour."""

    def test_arrival_zero_runs_on_first_tick(self) -> None:
        """A process arriving at 0 is admitted and bursts on tick 1."""
        os = Os([_cpu(1, 5)], FirstComeFirstServeScheduler())
        result = os.tick()
        assert result == {"tick": 1, "admitted": 1, "ran": 1}
        assert os.get_process(1).burst_time == 1
        assert os.context_switches == 1

    def test_idle_tick(self) -> None:
        """Before the first arrival the CPU stays idle."""
        os = Os([_cpu(1, 5, arrival=10)], FirstComeFirstServeScheduler())
        result = os.tick()
        assert result["ran"] is None
        assert result["admitted"] == 0
        assert os.context_switches == 0

    def test_arrival_admitted_tick_after(self) -> None:
        """A process arriving at tick t first runs on tick t + 1."""
        os = Os([_cpu(1, 5, arrival=10)], FirstComeFirstServeScheduler())
        for _ in range(10):
            os.tick()
        assert os.get_process(1).burst_time == 0
        result = os.tick()
        assert result["ran"] == 1

    def test_switch_to_completed_process_fails(self) -> None:
        """Dispatching a completed process is a simulation error."""
        os = Os([_cpu(1, 1)], FirstComeFirstServeScheduler())
        os.run()
        with pytest.raises(SimulationError, match="completed"):
            os.switch_process(1)

    def test_switch_to_unknown_pid_fails(self) -> None:
        """Dispatching an unknown pid is a KeyError."""
        os = Os([_cpu(1, 1)], FirstComeFirstServeScheduler())
        with pytest.raises(KeyError):
            os.switch_process(42)


class TestRun:
    """Verify full runs against hand-checked schedules."""

    def test_lone_cpu_job(self) -> None:
        """A single CPU job runs without interruption."""
        os = Os([_cpu(1, LONE_DURATION)], FirstComeFirstServeScheduler())
        os.run()
        process = os.get_process(1)
        assert os.is_completed
        assert os.clock == LONE_DURATION
        assert process.completion_time == LONE_DURATION
        assert process.burst_time == LONE_DURATION
        assert process.waiting_time == 0
        assert os.context_switches == 1

    def test_lone_io_job(self) -> None:
        """An I/O job alternates CPU rounds with I/O waits."""
        process = Process(pid=1, job=Job.io_bound(LONE_DURATION, 4), arrival_time=0)
        os = Os([process], FirstComeFirstServeScheduler())
        os.run()
        expected_burst = 200
        expected_waiting = 800
        expected_clock = 1001
        expected_switches = 4
        assert process.completion_time == LONE_DURATION
        assert process.turnaround_time == LONE_DURATION
        assert process.burst_time == expected_burst
        assert process.waiting_time == expected_waiting
        assert os.clock == expected_clock
        assert os.context_switches == expected_switches

    def test_io_overlaps_with_cpu(self) -> None:
        """Another process uses the CPU while one waits for I/O."""
        io_process = Process(pid=1, job=Job.io_bound(100, 2), arrival_time=0)
        cpu_process = _cpu(2, 30)
        os = Os([io_process, cpu_process], FirstComeFirstServeScheduler())
        os.run()
        assert io_process.completion_time == 100  # noqa: PLR2004
        assert io_process.burst_time == 20  # noqa: PLR2004
        assert cpu_process.completion_time == 40  # noqa: PLR2004
        assert cpu_process.waiting_time == 10  # noqa: PLR2004
        assert os.clock == 101  # noqa: PLR2004
        assert os.context_switches == 3  # noqa: PLR2004

    def test_custom_statements(self) -> None:
        """Hand-written statement lists run in order."""
        job = Job.from_statements(
            [Statement.cpu_bound(2), Statement.io_bound(5), Statement.cpu_bound(1)],
        )
        process = Process(pid=1, job=job, arrival_time=0)
        os = Os([process], FirstComeFirstServeScheduler())
        os.run()
        # CPU ticks 1-2, I/O waits until 7, the last CPU tick is 8.
        expected_completion = 8
        assert process.completion_time == expected_completion
        assert os.context_switches == 2  # noqa: PLR2004

    def test_max_ticks_exceeded(self) -> None:
        """A run that needs more ticks than budgeted fails."""
        os = Os([_cpu(1, 100)], FirstComeFirstServeScheduler(), max_ticks=50)
        with pytest.raises(SimulationError, match="50 ticks"):
            os.run()
        assert os.clock == 50  # noqa: PLR2004

    def test_exact_max_ticks_is_enough(self) -> None:
        """A budget equal to the needed ticks is sufficient."""
        os = Os([_cpu(1, 100)], FirstComeFirstServeScheduler(), max_ticks=100)
        os.run()
        assert os.is_completed

    def test_repr(self) -> None:
        """The repr should mention clock and completion."""
        os = Os([_cpu(1, 3)], FirstComeFirstServeScheduler())
        os.run()
        assert "clock=3" in repr(os)
        assert "completed=1" in repr(os)


# -- Properties every policy must satisfy ------------------------------------

_MIXED = WorkloadConfig(cpu_bound=3, io_bound=3, duration=200, max_arrival=300, seed=11)


@pytest.mark.parametrize("name", available_schedulers())
class TestPolicyProperties:
    """Invariants that hold whatever the policy."""

    def test_every_process_completes(self, name: str) -> None:
        """Every process should complete, after it arrived."""
        os = Os.from_workload(generate_workload(_MIXED), create_scheduler(name))
        os.run()
        assert os.is_completed
        assert os.completed_count == len(os)
        for process in os:
            assert process.is_completed
            assert process.completion_time >= process.arrival_time
            assert process.waiting_time >= 0

    def test_cpu_jobs_burst_exactly_their_duration(self, name: str) -> None:
        """A CPU-only job holds the CPU for exactly its duration."""
        os = Os.from_workload(generate_workload(_MIXED), create_scheduler(name))
        os.run()
        for process in os:
            if not process.is_io_bound:
                assert process.burst_time == process.job.total_duration

    def test_one_process_per_tick(self, name: str) -> None:
        """Total burst time can never exceed the clock."""
        os = Os.from_workload(generate_workload(_MIXED), create_scheduler(name))
        os.run()
        assert sum(p.burst_time for p in os) <= os.clock

    def test_deterministic(self, name: str) -> None:
        """Two runs of the same workload give identical results."""
        workload = generate_workload(_MIXED)
        first = Os.from_workload(workload, create_scheduler(name))
        second = Os.from_workload(workload, create_scheduler(name))
        first.run()
        second.run()
        assert [p.completion_time for p in first] == [p.completion_time for p in second]
        assert first.context_switches == second.context_switches

    def test_lone_cpu_job_any_policy(self, name: str) -> None:
        """A lone CPU job finishes at its duration under any policy."""
        workload = workload_from_entries({1: (Job.cpu_bound(LONE_DURATION), 0)})
        os = Os.from_workload(workload, create_scheduler(name))
        os.run()
        assert os.get_process(1).completion_time == LONE_DURATION
        assert os.clock == LONE_DURATION
