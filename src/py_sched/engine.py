"""The OS engine — owns the processes and drives the clock.

The ``Os`` holds the whole simulation state: the process table, the
waiting set (a timer wheel of wake ticks), which pid owns the CPU, and
the counters the statistics are built from.  Policy decisions are
delegated to a ``Scheduler``; the engine itself runs the same tick
algorithm for every policy.

Tick ``c`` simulates the interval ``(c-1, c]``:

1. Advance the clock.
2. Drain the timer wheel up to ``c-1``.  Each woken pid is handed to the
   scheduler as ready, unless its final I/O just finished, in which case
   the process is recorded as completed.
3. Burst the running process by one tick.  If the CPU is idle, ask the
   scheduler for a process first and burst it straight away.  After the
   burst:

   - a new CPU statement keeps the process running, and the tick still
     goes to ``on_process_burst`` so time slices stay exact;
   - a new I/O statement parks the process in the timer wheel and frees
     the CPU;
   - completion frees the CPU;
   - otherwise the scheduler gets ``on_process_burst`` to preempt.

Ownership: processes live only in the table; schedulers hold pids and
look processes up through ``get_process``.  Asking for a pid that is not
in the table is a programming error and raises ``KeyError``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from py_sched.config import TIMER_WHEEL_SLOTS
from py_sched.logging import Logger, LogLevel
from py_sched.process.pcb import Process
from py_sched.timer import TimerWheel

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from py_sched.process.job import Statement
    from py_sched.scheduler import Scheduler
    from py_sched.workload import Workload


class SimulationError(RuntimeError):
    """Raise when a simulation cannot finish within its tick budget."""


class Os:
    """The simulated operating system.

    Build one per run: an ``Os`` mutates its processes, so two runs of
    the same workload need two instances (see ``from_workload``).
    """

    def __init__(
        self,
        processes: Mapping[int, Process] | Iterable[Process],
        scheduler: Scheduler,
        *,
        logger: Logger | None = None,
        max_ticks: int | None = None,
        wheel_slots: int = TIMER_WHEEL_SLOTS,
    ) -> None:
        """Load the process table and schedule every arrival.

        Args:
            processes: The process table (pid → process) or an iterable
                of processes; table order is kept for reporting.
            scheduler: The policy that decides dispatch order.
            logger: Optional trace log for engine and scheduler events.
            max_ticks: Optional tick budget; ``run`` raises
                ``SimulationError`` when it is exceeded.
            wheel_slots: Number of slots in the timer wheel.

        Raises:
            ValueError: If the table is empty or has duplicate / mismatched pids.

        """
        table: dict[int, Process] = {}
        if isinstance(processes, Mapping):
            items = list(processes.items())
        else:
            items = [(p.pid, p) for p in processes]
        for pid, process in items:
            if pid != process.pid:
                msg = f"Process table key {pid} does not match pid {process.pid}"
                raise ValueError(msg)
            if pid in table:
                msg = f"Duplicate pid {pid} in process table"
                raise ValueError(msg)
            table[pid] = process
        if not table:
            msg = "Cannot simulate an empty workload"
            raise ValueError(msg)
        if max_ticks is not None and max_ticks <= 0:
            msg = f"max_ticks must be positive, got {max_ticks}"
            raise ValueError(msg)

        self._clock = 0
        self._processes = table
        self._waiting = TimerWheel(slots=wheel_slots)
        self._running_pid: int | None = None
        self._scheduler = scheduler
        self._logger = logger
        self._max_ticks = max_ticks
        self._completed_count = 0
        self._context_switches = 0

        for process in table.values():
            self._waiting.insert(process.pid, at=process.arrival_time)

    @classmethod
    def from_workload(cls, workload: Workload, scheduler: Scheduler, **kwargs: Any) -> Os:
        """Create an engine over fresh processes spawned from *workload*."""
        return cls(workload.spawn(), scheduler, **kwargs)

    # -- Read accessors ----------------------------------------------------------

    @property
    def clock(self) -> int:
        """Return the current simulation tick."""
        return self._clock

    @property
    def scheduler(self) -> Scheduler:
        """Return the active scheduling policy."""
        return self._scheduler

    @property
    def logger(self) -> Logger | None:
        """Return the trace logger, if any."""
        return self._logger

    @property
    def processes(self) -> list[Process]:
        """Return the process table in its original order."""
        return list(self._processes.values())

    def __iter__(self) -> Iterator[Process]:
        """Iterate over the process table in its original order."""
        return iter(self._processes.values())

    def __len__(self) -> int:
        """Return the number of processes in the table."""
        return len(self._processes)

    @property
    def running_pid(self) -> int | None:
        """Return the pid that owns the CPU, or None when idle."""
        return self._running_pid

    @property
    def running_process(self) -> Process | None:
        """Return the process that owns the CPU, or None when idle."""
        if self._running_pid is None:
            return None
        return self._processes[self._running_pid]

    @property
    def waiting(self) -> TimerWheel:
        """Return the waiting set."""
        return self._waiting

    @property
    def completed_count(self) -> int:
        """Return how many processes have completed."""
        return self._completed_count

    @property
    def context_switches(self) -> int:
        """Return the number of dispatches performed."""
        return self._context_switches

    @property
    def is_completed(self) -> bool:
        """Return True once every process has completed."""
        return self._completed_count == len(self._processes)

    def get_process(self, pid: int) -> Process:
        """Return the process with *pid*.

        Raises:
            KeyError: If *pid* is not in the process table.

        """
        try:
            return self._processes[pid]
        except KeyError:
            msg = f"Process {pid} is not in the process table"
            raise KeyError(msg) from None

    def is_process_running(self, pid: int) -> bool:
        """Return True if *pid* currently owns the CPU."""
        return self._running_pid == pid

    def desc(self) -> str:
        """Return the active policy's label."""
        return self._scheduler.desc()

    # -- Scheduler-facing operations ---------------------------------------------

    def switch_process(self, pid: int | None) -> None:
        """Give the CPU to *pid*, or leave it idle for None.

        Every dispatch of a process counts as one context switch.

        Raises:
            KeyError: If *pid* is not in the process table.

        """
        if pid is not None:
            process = self.get_process(pid)
            if process.is_completed:
                msg = f"Cannot dispatch completed process {pid}"
                raise SimulationError(msg)
            self._context_switches += 1
            if self.is_logging(LogLevel.TRACE):
                self.log(LogLevel.TRACE, f"Switch to Process[{pid}]")
        self._running_pid = pid

    def await_process(self, pid: int, timeout: int) -> None:
        """Park *pid* in the waiting set for *timeout* ticks from now."""
        self._waiting.insert_timeout(pid, timeout, now=self._clock)

    def complete_process(self, pid: int) -> None:
        """Record that *pid* has completed."""
        self._completed_count += 1
        if self.is_logging(LogLevel.TRACE):
            self.log(LogLevel.TRACE, f"Process[{pid}] Completed")

    def is_logging(self, level: LogLevel) -> bool:
        """Return True if an entry at *level* would be recorded."""
        return self._logger is not None and self._logger.is_enabled(level)

    def log(self, level: LogLevel, message: str, *, source: str = "os") -> None:
        """Record an event in the trace log, if one is attached."""
        if self._logger is not None:
            self._logger.log(level, message, source=source, clock=self._clock)

    # -- Main loop ---------------------------------------------------------------

    def run(self) -> None:
        """Tick until every process has completed.

        Raises:
            SimulationError: If a tick budget was set and is exhausted.

        """
        self.log(
            LogLevel.INFO,
            f"Simulation start: {len(self._processes)} processes, {self.desc()}",
        )
        while not self.is_completed:
            if self._max_ticks is not None and self._clock >= self._max_ticks:
                msg = (
                    f"Simulation did not finish within {self._max_ticks} ticks "
                    f"({self._completed_count}/{len(self._processes)} completed)"
                )
                raise SimulationError(msg)
            self.tick()
        self.log(
            LogLevel.INFO,
            f"Simulation complete: {self._context_switches} context switches",
        )

    def tick(self) -> dict[str, int | None]:
        """Advance the simulation by one tick.

        Returns:
            Dict with the new clock, the number of pids admitted to the
            scheduler, and the pid that ran during the tick (or None).

        """
        self._clock += 1
        admitted = 0
        for pid in self._waiting.advance(self._clock - 1):
            if self.get_process(pid).is_completed:
                self.complete_process(pid)
                continue
            if self.is_logging(LogLevel.TRACE):
                self.log(LogLevel.TRACE, f"Process[{pid}] Ready")
            self._scheduler.on_process_ready(self, pid)
            admitted += 1

        if self._running_pid is None:
            self._scheduler.switch_process(self)
        ran = self._running_pid
        if ran is not None:
            self._burst_running(ran)

        return {"tick": self._clock, "admitted": admitted, "ran": ran}

    def _burst_running(self, pid: int) -> None:
        """Burst the running process one tick and react to the outcome."""
        process = self.get_process(pid)
        new_statement = process.burst(self._clock)
        if new_statement is not None:
            if self.is_logging(LogLevel.TRACE):
                self.log(LogLevel.TRACE, f"Process[{pid}] New Statement::{new_statement}")
            if new_statement.is_io_bound:
                self._run_io_statement(process, new_statement)
            else:
                # The tick still counts toward the running time slice.
                self._scheduler.on_process_burst(self, pid)
        elif process.is_completed:
            self.complete_process(pid)
            if self._running_pid == pid:
                self._scheduler.switch_process(self)
        else:
            self._scheduler.on_process_burst(self, pid)

    def _run_io_statement(self, process: Process, statement: Statement) -> None:
        """Park *process* for the I/O duration and free the CPU."""
        next_statement = process.bump_to_next(self._clock)
        if next_statement is not None and self.is_logging(LogLevel.TRACE):
            self.log(
                LogLevel.TRACE,
                f"Process[{process.pid}] Bump to Next Statement::{next_statement}",
            )
        self.await_process(process.pid, statement.duration)
        if self._running_pid == process.pid:
            self._scheduler.switch_process(self)

    def __repr__(self) -> str:
        """Return a debug-friendly representation."""
        return (
            f"Os(clock={self._clock}, processes={len(self._processes)}, "
            f"completed={self._completed_count}, scheduler={self.desc()!r})"
        )
