"""Simulation trace log.

The engine and the schedulers record structured entries for every
interesting event: a process becoming ready, starting a new statement,
being bumped into an I/O wait, being dispatched, or completing.  Reading
the trace back is the easiest way to see *why* a policy produced the
numbers it did.

- **LogLevel** — severity levels ordered for filtering (TRACE < ERROR).
- **LogEntry** — a single structured record (level, message, source, clock).
- **Logger** — an append-only log with filtering and clearing.

Design choices:
    - **IntEnum for levels** so they compare naturally with ``<``.
    - **Frozen dataclass for entries** — log records should be immutable.
    - **A minimum level on the logger** — a long run produces several
      TRACE entries per tick, so callers can drop them at the source.
"""

from dataclasses import dataclass
from enum import IntEnum


class LogLevel(IntEnum):
    """Severity levels for log entries."""

    TRACE = 0
    DEBUG = 1
    INFO = 2
    WARNING = 3
    ERROR = 4


@dataclass(frozen=True)
class LogEntry:
    """A single structured log record.

    Attributes:
        level: The severity of this event.
        message: A human-readable description of what happened.
        source: The component that generated the event (e.g. "os", "mlfq").
        clock: The simulation tick at which the event happened.

    """

    level: LogLevel
    message: str
    source: str
    clock: int = 0

    def __str__(self) -> str:
        """Format as ``Clock[N] [LEVEL] source: message``."""
        return f"Clock[{self.clock}] [{self.level.name}] {self.source}: {self.message}"


class Logger:
    """Append-only log buffer with filtering.

    Entries below ``min_level`` are discarded when logged, so a logger
    created with ``min_level=LogLevel.INFO`` keeps only the run summary
    lines and skips the per-tick trace.
    """

    def __init__(self, *, min_level: LogLevel = LogLevel.TRACE) -> None:
        """Create an empty logger.

        Args:
            min_level: Entries below this level are dropped.

        """
        self._min_level = min_level
        self._entries: list[LogEntry] = []

    @property
    def min_level(self) -> LogLevel:
        """Return the lowest level that is recorded."""
        return self._min_level

    @property
    def entries(self) -> list[LogEntry]:
        """Return all log entries in chronological order."""
        return list(self._entries)

    def is_enabled(self, level: LogLevel) -> bool:
        """Return True if entries at *level* would be recorded."""
        return level >= self._min_level

    def log(
        self,
        level: LogLevel,
        message: str,
        *,
        source: str,
        clock: int = 0,
    ) -> None:
        """Append a new entry to the log.

        Args:
            level: Severity of the event.
            message: Human-readable event description.
            source: Component that generated the event.
            clock: Simulation tick of the event.

        """
        if not self.is_enabled(level):
            return
        self._entries.append(LogEntry(level=level, message=message, source=source, clock=clock))

    def filter(
        self,
        *,
        min_level: LogLevel | None = None,
        source: str | None = None,
    ) -> list[LogEntry]:
        """Return entries matching the given criteria.

        Args:
            min_level: If set, only return entries at or above this level.
            source: If set, only return entries from this source.

        Returns:
            A filtered list of log entries.

        """
        result = self._entries
        if min_level is not None:
            result = [e for e in result if e.level >= min_level]
        if source is not None:
            result = [e for e in result if e.source == source]
        return result if result is not self._entries else list(result)

    def clear(self) -> None:
        """Remove all log entries."""
        self._entries.clear()
