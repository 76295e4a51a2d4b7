"""Event log for the visualizer session.

Every interesting thing the session does — a process added or removed,
a translation that faulted, a process the allocator could not place —
is recorded as a structured entry.  The web UI shows the log so a
student can see *why* something happened, not only the final picture.

- **LogLevel** — severity levels ordered for filtering (DEBUG < ERROR).
- **LogEntry** — a single structured record (level, message, source).
- **Logger** — an append-only log with filtering and clearing.

Design choices:
    - **IntEnum for levels** so they compare naturally with ``<``.
    - **Frozen dataclass for entries** — log records should be immutable.
    - **Bounded buffer** — a long heat-map run would otherwise grow the
      log without limit, so the oldest entries are dropped first.
"""

from collections import deque
from dataclasses import dataclass
from enum import IntEnum

DEFAULT_LOG_CAPACITY = 500


class LogLevel(IntEnum):
    """Severity levels for log entries."""

    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3


@dataclass(frozen=True)
class LogEntry:
    """A single structured log record.

    Attributes:
        level: The severity of this event.
        message: A human-readable description of what happened.
        source: The subsystem that generated the event (e.g. "allocation").
        process_id: The process the event concerns, if any.

    """

    level: LogLevel
    message: str
    source: str
    process_id: int | None = None

    def __str__(self) -> str:
        """Format as ``[LEVEL] source: message``."""
        return f"[{self.level.name}] {self.source}: {self.message}"

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-friendly representation."""
        return {
            "level": self.level.name,
            "message": self.message,
            "source": self.source,
            "process_id": self.process_id,
        }


class Logger:
    """Append-only, bounded log buffer with filtering."""

    def __init__(self, *, capacity: int = DEFAULT_LOG_CAPACITY) -> None:
        """Create an empty logger.

        Args:
            capacity: Maximum number of entries kept; older ones are dropped.

        Raises:
            ValueError: If the capacity is not positive.

        """
        if capacity <= 0:
            msg = f"Log capacity must be positive, got {capacity}"
            raise ValueError(msg)
        self._entries: deque[LogEntry] = deque(maxlen=capacity)

    @property
    def entries(self) -> list[LogEntry]:
        """Return all log entries in chronological order."""
        return list(self._entries)

    def log(
        self,
        level: LogLevel,
        message: str,
        *,
        source: str,
        process_id: int | None = None,
    ) -> None:
        """Append a new entry to the log.

        Args:
            level: Severity of the event.
            message: Human-readable event description.
            source: Subsystem that generated the event.
            process_id: Process associated with the event.

        """
        self._entries.append(
            LogEntry(level=level, message=message, source=source, process_id=process_id)
        )

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
        result = list(self._entries)
        if min_level is not None:
            result = [e for e in result if e.level >= min_level]
        if source is not None:
            result = [e for e in result if e.source == source]
        return result

    def clear(self) -> None:
        """Remove all log entries."""
        self._entries.clear()

    def __len__(self) -> int:
        """Return the number of entries currently held."""
        return len(self._entries)
