"""Process — a job instance with arrival time and run state.

A process pairs a shared, read-only ``Job`` with the mutable bookkeeping
the simulator needs: which statement is executing and for how long, how
many ticks the process has been bursted, and when it completed.

State machine::

    NOT_STARTED → STARTED → COMPLETED

Ready / waiting are not process states here: they are *where the pid is
held* (a scheduler's ready queue or the OS timer wheel), so the process
itself only distinguishes "never ran", "has a current statement", and
"done".

Only the OS engine mutates a process, and only through ``burst``,
``bump_to_next`` and ``complete``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from py_sched.process.job import Job, Statement


class ProcessState(StrEnum):
    """Lifecycle states of a process."""

    NOT_STARTED = "not started"
    STARTED = "started"
    COMPLETED = "completed"


@dataclass
class RunningStatement:
    """Cursor into a job: statement index and ticks spent on it."""

    index: int
    elapsed_time: int = 0


class Process:
    """A simulated process (the Process Control Block).

    ``completion_time`` equals ``arrival_time`` until the process
    completes, and ``burst_time`` only ever grows.
    """

    def __init__(self, *, pid: int, job: Job, arrival_time: int) -> None:
        """Create a process that has not started yet.

        Args:
            pid: Unique process identifier (caller-assigned).
            job: The shared job this process executes.
            arrival_time: Tick at which the process becomes ready.

        Raises:
            ValueError: If the arrival time is negative.

        """
        if arrival_time < 0:
            msg = f"Process {pid}: arrival time must not be negative, got {arrival_time}"
            raise ValueError(msg)
        self._pid = pid
        self._job = job
        self._arrival_time = arrival_time
        self._completion_time = arrival_time
        self._burst_time = 0
        self._running_statement: RunningStatement | None = None
        self._completed = False

    @property
    def pid(self) -> int:
        """Return the process identifier."""
        return self._pid

    @property
    def job(self) -> Job:
        """Return the job this process executes."""
        return self._job

    @property
    def arrival_time(self) -> int:
        """Time at which the process arrives in the ready queue."""
        return self._arrival_time

    @property
    def completion_time(self) -> int:
        """Time at which the process completed (arrival time until then)."""
        return self._completion_time

    @property
    def burst_time(self) -> int:
        """Ticks this process has been bursted while holding the CPU."""
        return self._burst_time

    @property
    def running_statement(self) -> RunningStatement | None:
        """Return the statement cursor, or None before start / after completion."""
        return self._running_statement

    @property
    def state(self) -> ProcessState:
        """Return the current lifecycle state.

        ``STARTED`` covers running, ready and waiting alike; which of
        those applies depends on whether the OS is running the pid, a
        scheduler has it queued, or the timer wheel holds it.
        """
        if self._completed:
            return ProcessState.COMPLETED
        if self._running_statement is None:
            return ProcessState.NOT_STARTED
        return ProcessState.STARTED

    @property
    def is_completed(self) -> bool:
        """Return True once the process has finished its last statement."""
        return self._completed

    @property
    def is_io_bound(self) -> bool:
        """Return True if the underlying job is I/O-bound."""
        return self._job.is_io_bound

    @property
    def statements(self) -> tuple[Statement, ...]:
        """Return the job's statements."""
        return self._job.statements

    @property
    def current_statement(self) -> Statement | None:
        """Return the statement under the cursor, if any."""
        if self._running_statement is None:
            return None
        return self._job.statements[self._running_statement.index]

    # -- Derived metrics -------------------------------------------------------

    @property
    def remaining_time(self) -> int:
        """Job duration not yet bursted (never negative)."""
        return max(0, self._job.total_duration - self._burst_time)

    @property
    def turnaround_time(self) -> int:
        """Time difference between completion time and arrival time."""
        return self._completion_time - self._arrival_time

    @property
    def waiting_time(self) -> int:
        """Turnaround time not spent bursting, floored at zero."""
        return max(0, self.turnaround_time - self._burst_time)

    @property
    def weighted_turnaround_time(self) -> int:
        """Turnaround divided by burst time (integer), 0 if never bursted."""
        if self._burst_time == 0:
            return 0
        return self.turnaround_time // self._burst_time

    # -- Execution -------------------------------------------------------------

    def complete(self, completion_time: int) -> None:
        """Mark the process completed at *completion_time*."""
        self._completion_time = completion_time
        self._running_statement = None
        self._completed = True

    def burst(self, clock: int) -> Statement | None:
        """Run the process for one tick.

        The tick is added to ``burst_time`` whatever the kind of the
        current statement.  An I/O statement is never ticked through:
        reaching one returns it so the engine can park the process.

        Args:
            clock: The current simulation tick.

        Returns:
            The statement that has just started, or None if the process
            stayed on its current statement or completed.

        """
        if self._completed:
            return None
        self._burst_time += 1
        if self._running_statement is None:
            self._running_statement = RunningStatement(index=0)
        running = self._running_statement
        statement = self._job.statements[running.index]
        if statement.is_io_bound:
            return statement
        running.elapsed_time += 1
        if running.elapsed_time < statement.duration:
            return None
        return self._advance(completion_time=clock)

    def bump_to_next(self, clock: int) -> Statement | None:
        """Skip past the current I/O statement.

        I/O is modelled as a flat delay handled by the OS timer wheel,
        so the cursor moves on immediately.  If the I/O was the last
        statement, the process completes when that delay ends.

        Args:
            clock: The tick at which the I/O starts.

        Returns:
            The next statement, or None if the process completed.

        """
        current = self.current_statement
        if current is None:
            return None
        return self._advance(completion_time=clock + current.duration)

    def _advance(self, *, completion_time: int) -> Statement | None:
        """Move the cursor to the next statement or complete."""
        assert self._running_statement is not None  # noqa: S101
        next_index = self._running_statement.index + 1
        if next_index < len(self._job.statements):
            self._running_statement = RunningStatement(index=next_index)
            return self._job.statements[next_index]
        self.complete(completion_time)
        return None

    def __repr__(self) -> str:
        """Return a debug-friendly representation."""
        return (
            f"Process(pid={self._pid}, job={self._job.label}, "
            f"arrival={self._arrival_time}, state={self.state})"
        )
