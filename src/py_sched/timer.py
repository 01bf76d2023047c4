"""Hashed timer wheel — the OS waiting set.

Every process that is not ready sits here with a **wake tick**: its
arrival time before it first runs, or the end of its current I/O wait
afterwards.  Once per engine tick the OS drains everything that is due.

A timer wheel is a ring of slots, like the face of a clock.  A timeout
due at tick ``t`` goes into slot ``t % slots``.  Advancing the wheel only
visits the slots the hand sweeps over, so the cost per tick does not
depend on how many timeouts are pending.  A timeout more than one
revolution away simply stays in its slot until the hand comes round on
the right lap (its ``at`` tick is compared on every visit).

Ordering: timeouts due by the same drain come out sorted by wake tick,
then by insertion order, so repeated runs deliver them identically.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import count

from py_sched.config import TIMER_WHEEL_SLOTS


@dataclass(order=True, frozen=True)
class Timeout:
    """A pending wake-up: *pid* is due at tick *at*."""

    at: int
    seq: int
    pid: int = field(compare=False)


class TimerWheel:
    """A ring of timeout slots swept by a moving hand."""

    def __init__(self, *, slots: int = TIMER_WHEEL_SLOTS) -> None:
        """Create an empty wheel whose hand rests before tick 0.

        Args:
            slots: Number of slots in the ring (must be positive).

        Raises:
            ValueError: If *slots* is not positive.

        """
        if slots <= 0:
            msg = f"Timer wheel needs at least one slot, got {slots}"
            raise ValueError(msg)
        self._slots: list[list[Timeout]] = [[] for _ in range(slots)]
        self._hand = -1
        self._size = 0
        self._seq = count()

    @property
    def slot_count(self) -> int:
        """Return the number of slots in the ring."""
        return len(self._slots)

    @property
    def hand(self) -> int:
        """Return the last tick the wheel has been advanced to."""
        return self._hand

    def __len__(self) -> int:
        """Return the number of pending timeouts."""
        return self._size

    def insert(self, pid: int, *, at: int) -> Timeout:
        """Schedule *pid* to wake at tick *at*.

        A tick the hand has already passed is due on the next advance.
        The same pid may be inserted any number of times.

        Returns:
            The stored timeout.

        """
        at = max(at, self._hand + 1)
        timeout = Timeout(at=at, seq=next(self._seq), pid=pid)
        self._slots[at % len(self._slots)].append(timeout)
        self._size += 1
        return timeout

    def insert_timeout(self, pid: int, delay: int, *, now: int) -> Timeout:
        """Schedule *pid* to wake *delay* ticks after *now*.

        Raises:
            ValueError: If *delay* is negative.

        """
        if delay < 0:
            msg = f"Timeout delay must not be negative, got {delay}"
            raise ValueError(msg)
        return self.insert(pid, at=now + delay)

    def advance(self, to: int) -> list[int]:
        """Move the hand forward to tick *to* and drain what is due.

        Args:
            to: The tick to advance to; earlier or equal ticks are a no-op.

        Returns:
            Pids whose wake tick is at or before *to*, in wake order.

        """
        if to <= self._hand:
            return []
        span = min(to - self._hand, len(self._slots))
        due: list[Timeout] = []
        for offset in range(1, span + 1):
            index = (self._hand + offset) % len(self._slots)
            slot = self._slots[index]
            if not slot:
                continue
            keep = [t for t in slot if t.at > to]
            due.extend(t for t in slot if t.at <= to)
            self._slots[index] = keep
        self._hand = to
        self._size -= len(due)
        due.sort()
        return [t.pid for t in due]

    def tick(self) -> list[int]:
        """Advance the hand by one tick and drain what is due."""
        return self.advance(self._hand + 1)

    def pending(self) -> list[Timeout]:
        """Return a sorted snapshot of all pending timeouts."""
        return sorted(t for slot in self._slots for t in slot)
