"""Statements and jobs — the static description of work.

A **statement** is the smallest unit of cost the simulator knows about:
either a stretch of CPU work or an I/O request, each with a duration in
ticks.  A **job** is an ordered sequence of statements plus its totals.

Jobs are immutable and shared: a workload of a hundred identical
CPU-bound processes holds a hundred ``Process`` objects but only one
``Job``.  All mutable run state lives in the process.

Two shapes cover the usual experiments:

- ``Job.cpu_bound(total)`` — a single CPU statement.
- ``Job.io_bound(total, n)`` — 20% CPU and 80% I/O, each split evenly
  across *n* rounds and interleaved ``CPU, IO, CPU, IO, ...``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from py_sched.config import IO_JOB_CPU_TENTHS

if TYPE_CHECKING:
    from collections.abc import Iterable


class StatementKind(StrEnum):
    """What a statement spends its time on."""

    CPU_BOUND = "cpu"
    IO_BOUND = "io"


@dataclass(frozen=True)
class Statement:
    """One unit of work: CPU computation or an I/O wait.

    Attributes:
        kind: CPU-bound or I/O-bound.
        duration: Length in ticks.

    """

    kind: StatementKind
    duration: int

    def __post_init__(self) -> None:
        """Reject negative durations."""
        if self.duration < 0:
            msg = f"Statement duration must not be negative, got {self.duration}"
            raise ValueError(msg)

    @classmethod
    def cpu_bound(cls, duration: int) -> Statement:
        """Create a CPU-bound statement."""
        return cls(kind=StatementKind.CPU_BOUND, duration=duration)

    @classmethod
    def io_bound(cls, duration: int) -> Statement:
        """Create an I/O-bound statement."""
        return cls(kind=StatementKind.IO_BOUND, duration=duration)

    @property
    def is_cpu_bound(self) -> bool:
        """Return True for CPU work."""
        return self.kind is StatementKind.CPU_BOUND

    @property
    def is_io_bound(self) -> bool:
        """Return True for an I/O request."""
        return self.kind is StatementKind.IO_BOUND

    def __str__(self) -> str:
        """Format as ``CpuBound(50)`` / ``IoBound(200)``."""
        name = "CpuBound" if self.is_cpu_bound else "IoBound"
        return f"{name}({self.duration})"


@dataclass(frozen=True)
class Job:
    """An immutable sequence of statements with precomputed totals.

    Build jobs through the ``cpu_bound``, ``io_bound`` or
    ``from_statements`` constructors so the totals always agree with
    the statements.
    """

    statements: tuple[Statement, ...]
    total_duration: int
    total_cpu_duration: int
    total_io_duration: int
    is_io_bound: bool

    @classmethod
    def cpu_bound(cls, total_duration: int) -> Job:
        """Create a job made of a single CPU statement.

        Args:
            total_duration: Length of the CPU statement in ticks.

        Raises:
            ValueError: If the duration is negative.

        """
        if total_duration < 0:
            msg = f"Job duration must not be negative, got {total_duration}"
            raise ValueError(msg)
        return cls(
            statements=(Statement.cpu_bound(total_duration),),
            total_duration=total_duration,
            total_cpu_duration=total_duration,
            total_io_duration=0,
            is_io_bound=False,
        )

    @classmethod
    def io_bound(cls, total_duration: int, ios: int) -> Job:
        """Create an interleaved CPU / I/O job.

        The CPU share is two tenths of the total (integer division) and
        the rest is I/O.  Each share is divided evenly across *ios*
        rounds, so the statement durations may sum to slightly less
        than the totals when the division is not exact.

        Args:
            total_duration: Total job length in ticks.
            ios: Number of CPU/I-O rounds.

        Raises:
            ValueError: If *ios* is not positive or the duration is negative.

        """
        if ios <= 0:
            msg = f"I/O repetitions must be positive, got {ios}"
            raise ValueError(msg)
        if total_duration < 0:
            msg = f"Job duration must not be negative, got {total_duration}"
            raise ValueError(msg)
        total_cpu_duration = total_duration * IO_JOB_CPU_TENTHS // 10
        total_io_duration = total_duration - total_cpu_duration
        cpu = Statement.cpu_bound(total_cpu_duration // ios)
        io = Statement.io_bound(total_io_duration // ios)
        return cls(
            statements=(cpu, io) * ios,
            total_duration=total_duration,
            total_cpu_duration=total_cpu_duration,
            total_io_duration=total_io_duration,
            is_io_bound=True,
        )

    @classmethod
    def from_statements(cls, statements: Iterable[Statement]) -> Job:
        """Create a job from an explicit statement list.

        Totals are summed from the statements; the job counts as
        I/O-bound if any statement is.

        Raises:
            ValueError: If *statements* is empty.

        """
        stmts = tuple(statements)
        if not stmts:
            msg = "A job needs at least one statement"
            raise ValueError(msg)
        cpu_total = sum(s.duration for s in stmts if s.is_cpu_bound)
        io_total = sum(s.duration for s in stmts if s.is_io_bound)
        return cls(
            statements=stmts,
            total_duration=cpu_total + io_total,
            total_cpu_duration=cpu_total,
            total_io_duration=io_total,
            is_io_bound=any(s.is_io_bound for s in stmts),
        )

    @property
    def label(self) -> str:
        """Return the job-type label used in reports."""
        return "IO" if self.is_io_bound else "CPU"

    def __len__(self) -> int:
        """Return the number of statements."""
        return len(self.statements)
