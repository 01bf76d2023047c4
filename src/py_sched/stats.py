"""Statistics — per-process records and per-run summaries.

After ``Os.run()`` the process table holds everything needed to judge
a policy.  This module reads it (never writes it) and produces:

- ``ProcessRecord`` — one row per process: job type, durations, arrival,
  completion, burst, waiting, turnaround, weighted turnaround.
- ``RunSummary`` — one row per run: averages of the process metrics,
  CPU usage, and the context-switch count.

All divisions truncate to integers, matching the classic tables these
simulations are usually compared against.

Note on CPU usage: ``burst_time`` counts every tick a process held the
CPU, so "CPU usage" is really "share of the clock some process was
running".  See ``Process.burst``.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from py_sched.engine import Os
    from py_sched.process.pcb import Process


@dataclass(frozen=True)
class ProcessRecord:
    """Final statistics for one process."""

    pid: int
    job_type: str
    total_duration: int
    total_io_duration: int
    arrival_time: int
    completion_time: int
    burst_time: int
    waiting_time: int
    turnaround_time: int
    weighted_turnaround_time: int

    @classmethod
    def from_process(cls, process: Process) -> ProcessRecord:
        """Snapshot *process* into a record."""
        job = process.job
        return cls(
            pid=process.pid,
            job_type=job.label,
            total_duration=job.total_duration,
            total_io_duration=job.total_io_duration,
            arrival_time=process.arrival_time,
            completion_time=process.completion_time,
            burst_time=process.burst_time,
            waiting_time=process.waiting_time,
            turnaround_time=process.turnaround_time,
            weighted_turnaround_time=process.weighted_turnaround_time,
        )

    def to_dict(self) -> dict[str, int | str]:
        """Return the record as a JSON-friendly dict."""
        return asdict(self)


@dataclass(frozen=True)
class RunSummary:
    """Aggregate statistics for one simulation run."""

    policy: str
    workload: str
    processes: int
    clock: int
    average_waiting_time: int
    average_turnaround_time: int
    average_weighted_turnaround_time: int
    cpu_usage: int
    context_switches: int

    def to_dict(self) -> dict[str, int | str]:
        """Return the summary as a JSON-friendly dict."""
        return asdict(self)


def collect_records(os: Os) -> list[ProcessRecord]:
    """Return one record per process, in process-table order."""
    return [ProcessRecord.from_process(p) for p in os]


def summarize(os: Os, *, workload: str = "custom") -> RunSummary:
    """Aggregate the process table of a finished run.

    Args:
        os: The engine after ``run()``.
        workload: Label of the workload for the report.

    Returns:
        Averages (integer-truncated), CPU usage in percent of the clock,
        and the context-switch count.

    """
    records = collect_records(os)
    count = len(records)
    total_burst = sum(r.burst_time for r in records)
    return RunSummary(
        policy=os.desc(),
        workload=workload,
        processes=count,
        clock=os.clock,
        average_waiting_time=sum(r.waiting_time for r in records) // count,
        average_turnaround_time=sum(r.turnaround_time for r in records) // count,
        average_weighted_turnaround_time=sum(r.weighted_turnaround_time for r in records) // count,
        cpu_usage=total_burst * 100 // os.clock if os.clock else 0,
        context_switches=os.context_switches,
    )
