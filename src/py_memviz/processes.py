"""Processes — the records that drive every visualization.

A process here is nothing more than an id and a size in bytes.  There
is no code, no state machine, no scheduling: the memory algorithms
only need to know *how much* memory each process wants and in what
order the processes arrived.

The ``ProcessTable`` holds the current list.  Ids are handed out as
``count + 1`` at insertion time, so removing process 2 out of three and
then adding a new one produces a second process with id 3.  Ids are
therefore unique in practice but not guaranteed; every algorithm
tolerates duplicates by matching the first record.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator


class InvalidInputError(ValueError):
    """Raise when a user-supplied field is not a valid number."""


@dataclass(frozen=True)
class Process:
    """A process requesting memory.

    Attributes:
        id: Identifier, starting at 1.
        size: Requested memory in bytes (always > 0).

    """

    id: int
    size: int

    def __post_init__(self) -> None:
        """Reject ids below 1 and non-positive sizes."""
        if self.id < 1:
            msg = f"Process id must be >= 1, got {self.id}"
            raise ValueError(msg)
        if self.size <= 0:
            msg = f"Process size must be positive, got {self.size}"
            raise ValueError(msg)

    def to_dict(self) -> dict[str, int]:
        """Return a JSON-friendly representation."""
        return {"id": self.id, "size": self.size}


def parse_number(value: str | int) -> int:
    """Parse a form field into an integer.

    Args:
        value: Raw text from the UI (or an int passed straight through).

    Returns:
        The parsed integer.

    Raises:
        InvalidInputError: If the value is not an integer.

    """
    if isinstance(value, bool):
        msg = "Please enter valid numbers"
        raise InvalidInputError(msg)
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        msg = "Please enter valid numbers"
        raise InvalidInputError(msg) from None


class ProcessTable:
    """Ordered list of processes with sequential id assignment."""

    def __init__(self, processes: list[Process] | None = None) -> None:
        """Create a table, optionally pre-populated (the list is copied)."""
        self._processes: list[Process] = list(processes) if processes else []

    @property
    def next_id(self) -> int:
        """Return the id the next added process will receive."""
        return len(self._processes) + 1

    def add(self, size: int) -> Process:
        """Append a new process of *size* bytes.

        No upper bound is enforced here; page tables grow with size, so
        callers taking user input should cap it (``Session`` does).

        Args:
            size: Requested memory in bytes.

        Returns:
            The newly created process.

        Raises:
            InvalidInputError: If the size is not positive.

        """
        if size <= 0:
            msg = f"Process size must be positive, got {size}"
            raise InvalidInputError(msg)
        process = Process(id=self.next_id, size=size)
        self._processes.append(process)
        return process

    def remove(self, process_id: int) -> Process | None:
        """Remove every process with *process_id*.

        Returns:
            The first removed process, or None if the id was unknown.

        """
        removed = [p for p in self._processes if p.id == process_id]
        if not removed:
            return None
        self._processes = [p for p in self._processes if p.id != process_id]
        return removed[0]

    def find(self, process_id: int) -> Process | None:
        """Return the first process with *process_id*, or None."""
        return next((p for p in self._processes if p.id == process_id), None)

    def clear(self) -> None:
        """Remove all processes."""
        self._processes.clear()

    @property
    def processes(self) -> list[Process]:
        """Return a copy of the current process list."""
        return list(self._processes)

    @property
    def total_size(self) -> int:
        """Return the summed size of every process."""
        return sum(p.size for p in self._processes)

    def __len__(self) -> int:
        """Return the number of processes."""
        return len(self._processes)

    def __iter__(self) -> Iterator[Process]:
        """Iterate over processes in arrival order."""
        return iter(list(self._processes))
