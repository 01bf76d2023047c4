"""CPU schedulers — decide which ready process gets the CPU next.

The OS engine owns the process table and the clock; a scheduler owns
only its ready structure (pids plus whatever priority data the policy
needs) and resolves everything else through the OS accessors.  Eight
policies ship out of the box:

- **FirstComeFirstServeScheduler** (FCFS): pure FIFO — simple, but one
  long job holds everyone behind it (convoy effect).
- **ShortestJobFirstScheduler** (SJF): shortest job duration first,
  non-preemptive.
- **LongestJobFirstScheduler** (LJF): the mirror image of SJF.
- **ShortestRemainingJobFirstScheduler** (SRJF): preemptive SJF keyed on
  remaining time; a newly ready process with less work left takes the
  CPU at the next tick.
- **LongestRemainingJobFirstScheduler** (LRJF): preemptive LJF.
- **HighestResponseRatioNextScheduler** (HRRN): favours processes that
  have waited long relative to their size, which avoids starvation.
- **RoundRobinScheduler** (RR): FIFO with a fixed time quantum.
- **MultilevelFeedbackQueueScheduler** (MLFQ): three FIFO levels; using
  up a level's quantum demotes a process one level.

Design: Strategy pattern
    The ``Os`` is the *context*; a ``Scheduler`` is the *strategy*.
    The engine runs the same tick algorithm for every policy and calls
    back into the scheduler at three points: a process became ready,
    the CPU needs a (new) owner, and the running process finished a
    tick.  Adding a policy means writing a new class — the engine is
    never touched.
"""

from __future__ import annotations

import heapq
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass, field
from itertools import count
from typing import TYPE_CHECKING, Any, Protocol

from py_sched.config import DEFAULT_MLFQ_SLICES, DEFAULT_QUANTUM, MLFQ_LEVELS
from py_sched.logging import LogLevel

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from py_sched.engine import Os


class Scheduler(Protocol):
    """Interface every scheduling policy must satisfy.

    - on_process_ready: a wait expired; record the pid as ready.
    - switch_process: pick the next pid (or None) and hand it to the OS.
    - on_process_burst: the running pid finished a tick on the same
      statement; preemptive policies may take the CPU away here.
    - desc: a stable human-readable label.
    """

    name: str

    def on_process_ready(self, os: Os, pid: int) -> None:
        """Record *pid* as ready to run."""
        ...  # pragma: no cover

    def switch_process(self, os: Os) -> None:
        """Choose the next process and call ``os.switch_process``."""
        ...  # pragma: no cover

    def on_process_burst(self, os: Os, pid: int) -> None:
        """React to *pid* having run one more tick."""
        ...  # pragma: no cover

    def desc(self) -> str:
        """Return the policy label."""
        ...  # pragma: no cover


class BaseScheduler:
    """Shared defaults: non-preemptive, label taken from ``DESC``."""

    name = "base"
    DESC = "Scheduler"

    def on_process_burst(self, os: Os, pid: int) -> None:
        """Do nothing — non-preemptive policies keep the running process."""

    def desc(self) -> str:
        """Return the policy label."""
        return self.DESC

    def __repr__(self) -> str:
        """Return a debug-friendly representation."""
        return f"{type(self).__name__}()"


# -- Keyed priority queue -----------------------------------------------------


@dataclass(order=True)
class _HeapItem:
    priority: float
    seq: int
    pid: int = field(compare=False)
    key: float = field(compare=False)
    removed: bool = field(default=False, compare=False)


class KeyedQueue:
    """Priority queue of pids with re-keying and FIFO tiebreak.

    Pushing a pid that is already queued replaces its key (the old heap
    item is marked removed and skipped lazily).  Equal keys pop in the
    order they were pushed.
    """

    def __init__(self, *, largest_first: bool = False) -> None:
        """Create an empty queue.

        Args:
            largest_first: Pop the largest key first instead of the smallest.

        """
        self._largest_first = largest_first
        self._heap: list[_HeapItem] = []
        self._items: dict[int, _HeapItem] = {}
        self._seq = count()

    def __len__(self) -> int:
        """Return the number of queued pids."""
        return len(self._items)

    def __contains__(self, pid: object) -> bool:
        """Return True if *pid* is queued."""
        return pid in self._items

    def push(self, pid: int, key: float) -> None:
        """Queue *pid* with *key*, replacing any previous key."""
        old = self._items.get(pid)
        if old is not None:
            old.removed = True
        priority = -key if self._largest_first else key
        item = _HeapItem(priority=priority, seq=next(self._seq), pid=pid, key=key)
        self._items[pid] = item
        heapq.heappush(self._heap, item)

    def peek(self) -> tuple[int, float] | None:
        """Return ``(pid, key)`` of the best entry without removing it."""
        self._discard_removed()
        if not self._heap:
            return None
        top = self._heap[0]
        return top.pid, top.key

    def pop(self) -> tuple[int, float] | None:
        """Remove and return ``(pid, key)`` of the best entry, or None."""
        self._discard_removed()
        if not self._heap:
            return None
        top = heapq.heappop(self._heap)
        del self._items[top.pid]
        return top.pid, top.key

    def remove(self, pid: int) -> bool:
        """Drop *pid* from the queue; return False if it was not queued."""
        item = self._items.pop(pid, None)
        if item is None:
            return False
        item.removed = True
        return True

    def key(self, pid: int) -> float | None:
        """Return the key *pid* is queued with, or None."""
        item = self._items.get(pid)
        return None if item is None else item.key

    def pids(self) -> list[int]:
        """Return queued pids in pop order."""
        live = sorted(item for item in self._heap if not item.removed)
        return [item.pid for item in live]

    def beats(self, key: float, other: float) -> bool:
        """Return True if *key* would pop strictly before *other*."""
        return key > other if self._largest_first else key < other

    def _discard_removed(self) -> None:
        """Pop stale items left behind by re-keying or removal."""
        while self._heap and self._heap[0].removed:
            heapq.heappop(self._heap)


# -- FIFO policies ------------------------------------------------------------


class FirstComeFirstServeScheduler(BaseScheduler):
    """First Come, First Served — processes run in ready order.

    A plain FIFO queue: whatever became ready first is dispatched
    first and keeps the CPU until it completes or starts an I/O wait.
    """

    name = "fcfs"
    DESC = "First Come First Serve"

    def __init__(self) -> None:
        """Create an FCFS scheduler with an empty ready queue."""
        self._ready_queue: deque[int] = deque()

    @property
    def ready_pids(self) -> list[int]:
        """Return a snapshot of the ready queue."""
        return list(self._ready_queue)

    def on_process_ready(self, os: Os, pid: int) -> None:
        """Append *pid* to the back of the queue."""
        self._ready_queue.append(pid)

    def switch_process(self, os: Os) -> None:
        """Dispatch the front of the queue (or leave the CPU idle)."""
        pid = self._ready_queue.popleft() if self._ready_queue else None
        os.switch_process(pid)


class RoundRobinScheduler(BaseScheduler):
    """Round Robin — FIFO with a fixed time quantum.

    Each dispatch starts a fresh slice.  After ``quantum`` ticks on the
    CPU the running process goes to the tail of the ready queue and the
    head takes over.  A process that finishes its CPU burst early gives
    up the CPU on its own (completion or I/O).

    A quantum of zero is allowed and requeues the process after every
    tick.
    """

    name = "rr"
    DESC = "Round Robin; Preemptive; for Job or Process"

    def __init__(self, *, quantum: int = DEFAULT_QUANTUM) -> None:
        """Create a Round Robin scheduler.

        Args:
            quantum: Ticks a process may run before being requeued.

        Raises:
            ValueError: If the quantum is negative.

        """
        if quantum < 0:
            msg = f"Quantum must not be negative, got {quantum}"
            raise ValueError(msg)
        self._quantum = quantum
        self._ready_queue: deque[int] = deque()
        self._used_time_slice: dict[int, int] = {}
        self._requeues: dict[int, int] = {}

    @property
    def quantum(self) -> int:
        """Return the time quantum (ticks per slice)."""
        return self._quantum

    @property
    def ready_pids(self) -> list[int]:
        """Return a snapshot of the ready queue."""
        return list(self._ready_queue)

    def requeue_count(self, pid: int) -> int:
        """Return how many times *pid* was sent back for exhausting its slice."""
        return self._requeues.get(pid, 0)

    def used_time_slice(self, pid: int) -> int:
        """Return the ticks *pid* has used of its current slice."""
        return self._used_time_slice.get(pid, 0)

    def on_process_ready(self, os: Os, pid: int) -> None:
        """Append *pid* to the tail of the queue."""
        self._ready_queue.append(pid)

    def switch_process(self, os: Os) -> None:
        """Dispatch the head of the queue with a fresh slice."""
        pid = self._ready_queue.popleft() if self._ready_queue else None
        if pid is not None:
            self._used_time_slice[pid] = 0
        os.switch_process(pid)

    def on_process_burst(self, os: Os, pid: int) -> None:
        """Requeue *pid* at the tail once its slice is used up."""
        used = self._used_time_slice.get(pid, 0) + 1
        if used >= self._quantum and os.is_process_running(pid):
            self._ready_queue.append(pid)
            self._used_time_slice[pid] = 0
            self._requeues[pid] = self._requeues.get(pid, 0) + 1
            self.switch_process(os)
        else:
            self._used_time_slice[pid] = used

    def __repr__(self) -> str:
        """Return a debug-friendly representation."""
        return f"RoundRobinScheduler(quantum={self._quantum})"


class MultilevelFeedbackQueueScheduler(BaseScheduler):
    """Multilevel Feedback Queue — three FIFO levels with demotion.

    Every ready process enters level 0.  Dispatch scans the levels from
    0 down and takes the head of the first non-empty one.  A process
    that uses up its level's time slice is demoted one level (level 2 is
    the floor and has no slice).  A process running below level 0 is
    sent back to the tail of its level as soon as a higher level has
    work waiting.
    """

    name = "mlfq"
    DESC = "Multilevel Feedback Queue; Preemptive; for Job or Process"

    def __init__(self, *, time_slices: Iterable[int] = DEFAULT_MLFQ_SLICES) -> None:
        """Create an MLFQ scheduler.

        Args:
            time_slices: Quanta for levels 0 and 1 (the last level has none).

        Raises:
            ValueError: If there are not exactly two slices or one is negative.

        """
        slices = tuple(time_slices)
        if len(slices) != MLFQ_LEVELS - 1:
            msg = f"MLFQ needs {MLFQ_LEVELS - 1} time slices, got {len(slices)}"
            raise ValueError(msg)
        if any(s < 0 for s in slices):
            msg = f"Time slices must not be negative, got {slices}"
            raise ValueError(msg)
        self._time_slices = slices
        self._ready_queues: tuple[deque[int], ...] = tuple(deque() for _ in range(MLFQ_LEVELS))
        self._used_time_slice: dict[int, int] = {}
        self._running: tuple[int, int] | None = None
        self._deepest_level: dict[int, int] = {}

    @property
    def time_slices(self) -> tuple[int, ...]:
        """Return the quanta for the upper levels."""
        return self._time_slices

    @property
    def last_level(self) -> int:
        """Return the index of the lowest-priority level."""
        return len(self._ready_queues) - 1

    def queued(self, level: int) -> list[int]:
        """Return a snapshot of the ready queue at *level*."""
        return list(self._ready_queues[level])

    def level(self, pid: int) -> int:
        """Return the level *pid* runs or waits at (0 if unknown)."""
        if self._running is not None and self._running[0] == pid:
            return self._running[1]
        for level, queue in enumerate(self._ready_queues):
            if pid in queue:
                return level
        return 0

    def deepest_level(self, pid: int) -> int:
        """Return the lowest level *pid* has ever been placed in."""
        return self._deepest_level.get(pid, 0)

    def on_process_ready(self, os: Os, pid: int) -> None:
        """Enter *pid* at the top level."""
        self._ready_queues[0].append(pid)
        self._deepest_level.setdefault(pid, 0)

    def switch_process(self, os: Os) -> None:
        """Dispatch the head of the highest non-empty level."""
        for level, queue in enumerate(self._ready_queues):
            if queue:
                pid = queue.popleft()
                self._running = (pid, level)
                self._used_time_slice[pid] = 0
                os.switch_process(pid)
                return
        self._running = None
        os.switch_process(None)

    def on_process_burst(self, os: Os, pid: int) -> None:
        """Demote on slice exhaustion; yield to higher levels when below 0."""
        level = self.level(pid)
        if level < self.last_level:
            used = self._used_time_slice.get(pid, 0) + 1
            if used >= self._time_slices[level] and os.is_process_running(pid):
                self._demote(os, pid, level)
                return
            self._used_time_slice[pid] = used
        if level > 0 and any(self._ready_queues[:level]) and os.is_process_running(pid):
            self._ready_queues[level].append(pid)
            self.switch_process(os)

    def _demote(self, os: Os, pid: int, level: int) -> None:
        target = level + 1
        if os.is_logging(LogLevel.TRACE):
            os.log(LogLevel.TRACE, f"Process[{pid}] Downgrade to Queue[{target}]", source=self.name)
        self._ready_queues[target].append(pid)
        self._deepest_level[pid] = max(self._deepest_level.get(pid, 0), target)
        self._used_time_slice[pid] = 0
        self.switch_process(os)

    def __repr__(self) -> str:
        """Return a debug-friendly representation."""
        return f"MultilevelFeedbackQueueScheduler(time_slices={self._time_slices})"


# -- Keyed policies -----------------------------------------------------------


class _KeyedScheduler(BaseScheduler, ABC):
    """Ready pids in a ``KeyedQueue``; subclasses supply the key.

    With ``PREEMPTIVE`` set, every tick of the running process compares
    its current key with the best ready key and, if the ready process
    strictly wins, requeues the running one and switches.
    """

    LARGEST_FIRST = False
    PREEMPTIVE = False

    def __init__(self) -> None:
        """Create the scheduler with an empty ready queue."""
        self._ready_queue = KeyedQueue(largest_first=self.LARGEST_FIRST)
        self._preemptions = 0

    @property
    def ready_pids(self) -> list[int]:
        """Return queued pids in dispatch order."""
        return self._ready_queue.pids()

    @property
    def preemptions(self) -> int:
        """Return how many times a running process was displaced."""
        return self._preemptions

    @abstractmethod
    def priority(self, os: Os, pid: int) -> float:
        """Return the ordering key for *pid*."""

    def on_process_ready(self, os: Os, pid: int) -> None:
        """Queue *pid* under its current key."""
        self._ready_queue.push(pid, self.priority(os, pid))

    def switch_process(self, os: Os) -> None:
        """Dispatch the best-keyed ready process."""
        top = self._ready_queue.pop()
        os.switch_process(None if top is None else top[0])

    def on_process_burst(self, os: Os, pid: int) -> None:
        """Preempt *pid* if a ready process now strictly outranks it."""
        if not self.PREEMPTIVE:
            return
        best = self._ready_queue.peek()
        if best is None:
            return
        current = self.priority(os, pid)
        if self._ready_queue.beats(best[1], current):
            self._preemptions += 1
            self._ready_queue.push(pid, current)
            self.switch_process(os)


class ShortestJobFirstScheduler(_KeyedScheduler):
    """Shortest Job First — smallest job duration runs first.

    Non-preemptive; equal durations fall back to ready order.
    """

    name = "sjf"
    DESC = "Shortest Job First; Non-Preemptive; for Job"

    def priority(self, os: Os, pid: int) -> float:
        """Key on the job's total duration."""
        return os.get_process(pid).job.total_duration


class LongestJobFirstScheduler(_KeyedScheduler):
    """Longest Job First — largest job duration runs first.

    Non-preemptive; the key is computed again every time the process
    re-enters the ready queue.
    """

    name = "ljf"
    DESC = "Longest Job First; Non-Preemptive; for Job"
    LARGEST_FIRST = True

    def priority(self, os: Os, pid: int) -> float:
        """Key on the job's total duration."""
        return os.get_process(pid).job.total_duration


class ShortestRemainingJobFirstScheduler(_KeyedScheduler):
    """Shortest Remaining Job First — preemptive SJF on remaining time."""

    name = "srjf"
    DESC = "Shortest Remaining Job First; Preemptive; for Job"
    PREEMPTIVE = True

    def priority(self, os: Os, pid: int) -> float:
        """Key on the time the process still has to burst."""
        return os.get_process(pid).remaining_time


class LongestRemainingJobFirstScheduler(_KeyedScheduler):
    """Longest Remaining Job First — preemptive LJF on remaining time."""

    name = "lrjf"
    DESC = "Longest Remaining Job First; Preemptive; for Job"
    LARGEST_FIRST = True
    PREEMPTIVE = True

    def priority(self, os: Os, pid: int) -> float:
        """Key on the time the process still has to burst."""
        return os.get_process(pid).remaining_time


class HighestResponseRatioNextScheduler(_KeyedScheduler):
    """Highest Response Ratio Next — non-preemptive, starvation-free.

    ``Response Ratio = (Waiting Time + Burst Time) / Burst Time``, where
    waiting is the time since arrival not spent bursting and burst is
    the job duration.  The ratio is fixed when the process becomes
    ready.
    """

    name = "hrrn"
    DESC = "Highest Response Ratio Next"
    LARGEST_FIRST = True

    def priority(self, os: Os, pid: int) -> float:
        """Key on the response ratio at the current clock."""
        process = os.get_process(pid)
        service = process.job.total_duration or 1
        waiting = max(0, os.clock - process.arrival_time - process.burst_time)
        return (waiting + service) / service


# -- Registry -----------------------------------------------------------------

_REGISTRY: dict[str, Callable[..., Scheduler]] = {
    "fcfs": FirstComeFirstServeScheduler,
    "sjf": ShortestJobFirstScheduler,
    "ljf": LongestJobFirstScheduler,
    "srjf": ShortestRemainingJobFirstScheduler,
    "lrjf": LongestRemainingJobFirstScheduler,
    "hrrn": HighestResponseRatioNextScheduler,
    "rr": RoundRobinScheduler,
    "mlfq": MultilevelFeedbackQueueScheduler,
}

# Constructor keywords each policy understands; others are ignored so one
# parameter set can be shared across a comparison run.
_PARAMETERS: dict[str, tuple[str, ...]] = {
    "rr": ("quantum",),
    "mlfq": ("time_slices",),
}


def available_schedulers() -> list[str]:
    """Return the short names of every registered policy."""
    return list(_REGISTRY)


def create_scheduler(name: str, **params: Any) -> Scheduler:
    """Build a fresh scheduler from its short name.

    Args:
        name: One of ``available_schedulers()`` (case-insensitive).
        **params: Policy parameters (``quantum``, ``time_slices``);
            parameters the policy does not take are ignored.

    Raises:
        ValueError: If the name is unknown or a parameter is invalid.

    """
    key = name.lower()
    factory = _REGISTRY.get(key)
    if factory is None:
        msg = f"Unknown scheduler {name!r}; choose from {', '.join(_REGISTRY)}"
        raise ValueError(msg)
    accepted = _PARAMETERS.get(key, ())
    kwargs = {k: v for k, v in params.items() if k in accepted and v is not None}
    return factory(**kwargs)
