"""Workloads — which jobs arrive when.

A workload maps each pid to a job and an arrival tick.  It is the
*recipe* for a process table, not the table itself: ``spawn()`` builds
fresh ``Process`` objects every time, so the same workload can be fed to
one OS per policy without the runs interfering.

Two ways to build one:

- ``generate_workload(config)`` — the classic experiment: N CPU-bound
  and M I/O-bound jobs with random arrivals in steps of ten ticks.  Pids
  are assigned CPU jobs first, then I/O jobs; the table order can be
  shuffled so that same-tick arrivals are not always CPU-first.
- ``workload_from_entries(rows)`` — explicit ``pid → (job, arrival)``
  entries for deterministic tests and hand-made scenarios.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from random import Random
from typing import TYPE_CHECKING

from py_sched.config import ARRIVAL_STEP, WorkloadConfig
from py_sched.process.job import Job
from py_sched.process.pcb import Process

if TYPE_CHECKING:
    from collections.abc import Iterable


@dataclass(frozen=True)
class WorkloadEntry:
    """One row of a workload: the pid's job and arrival tick."""

    pid: int
    job: Job
    arrival: int


@dataclass(frozen=True)
class Workload:
    """An ordered, immutable set of workload entries.

    Attributes:
        entries: Rows in process-table order.
        label: Human label used in reports (e.g. ``2 CPU + 2 IO``).

    """

    entries: tuple[WorkloadEntry, ...]
    label: str = "custom"

    def __post_init__(self) -> None:
        """Reject empty workloads, duplicate pids, and negative arrivals."""
        if not self.entries:
            msg = "A workload needs at least one process"
            raise ValueError(msg)
        seen: set[int] = set()
        for entry in self.entries:
            if entry.pid in seen:
                msg = f"Duplicate pid {entry.pid} in workload"
                raise ValueError(msg)
            if entry.arrival < 0:
                msg = f"Process {entry.pid}: arrival must not be negative, got {entry.arrival}"
                raise ValueError(msg)
            seen.add(entry.pid)

    def __len__(self) -> int:
        """Return the number of processes."""
        return len(self.entries)

    @property
    def pids(self) -> list[int]:
        """Return the pids in table order."""
        return [e.pid for e in self.entries]

    def spawn(self) -> dict[int, Process]:
        """Build a fresh process table for one simulation run."""
        return {
            e.pid: Process(pid=e.pid, job=e.job, arrival_time=e.arrival) for e in self.entries
        }


def workload_from_entries(
    rows: Mapping[int, tuple[Job, int]] | Iterable[tuple[int, Job, int]],
    *,
    label: str = "custom",
) -> Workload:
    """Build a workload from explicit entries.

    Args:
        rows: Either ``{pid: (job, arrival)}`` or ``(pid, job, arrival)`` triples.
        label: Report label.

    """
    if isinstance(rows, Mapping):
        triples = [(pid, job, arrival) for pid, (job, arrival) in rows.items()]
    else:
        triples = list(rows)
    entries = tuple(
        WorkloadEntry(pid=pid, job=job, arrival=arrival) for pid, job, arrival in triples
    )
    return Workload(entries=entries, label=label)


def generate_workload(config: WorkloadConfig) -> Workload:
    """Generate a random workload from *config*.

    All CPU-bound processes share one ``Job`` and all I/O-bound ones
    share another.  Arrivals are drawn from ``0, 10, 20, ...,
    max_arrival`` with a ``Random`` seeded from ``config.seed``.
    """
    rng = Random(config.seed)  # noqa: S311
    cpu_job = Job.cpu_bound(config.duration)
    jobs: list[Job] = [cpu_job] * config.cpu_bound
    if config.io_bound:
        io_job = Job.io_bound(config.duration, config.io_repetitions)
        jobs.extend([io_job] * config.io_bound)

    entries = [
        WorkloadEntry(
            pid=pid, job=job, arrival=rng.randrange(0, config.max_arrival + 1, ARRIVAL_STEP)
        )
        for pid, job in enumerate(jobs)
    ]
    if config.shuffle:
        rng.shuffle(entries)
    return Workload(entries=tuple(entries), label=config.label)
