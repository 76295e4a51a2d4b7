"""Segmentation — one variable-size segment per process.

Each segment is described by a **base** (where it starts) and a
**limit** (how long it is).  A virtual address inside a segment is just
an offset; the hardware checks it against the limit and adds the base.

The segment table here lays processes out back to back with no gaps:
``base[i + 1] == base[i] + size[i]``.  It is rebuilt from scratch on
every change, so removing a process shifts every later segment down.
Gaps only appear in the fragmentation simulation (see
``py_memviz.memory.fragmentation``).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from py_memviz.processes import Process


@dataclass(frozen=True)
class SegmentTableEntry:
    """The segment holding one process.

    Attributes:
        process_id: Owner of the segment.
        segment_number: Position of the process in the list.
        base: Start address of the segment.
        limit: Length of the segment (addresses >= limit fault).
        size: Bytes requested by the process (equal to limit).

    """

    process_id: int
    segment_number: int
    base: int
    limit: int
    size: int

    @property
    def end(self) -> int:
        """Return the first address past the segment."""
        return self.base + self.limit

    def to_dict(self) -> dict[str, int]:
        """Return a JSON-friendly representation."""
        return {
            "process_id": self.process_id,
            "segment_number": self.segment_number,
            "base": self.base,
            "limit": self.limit,
            "size": self.size,
        }


def build_segment_table(processes: Sequence[Process]) -> list[SegmentTableEntry]:
    """Lay *processes* out contiguously and return their segment table."""
    table: list[SegmentTableEntry] = []
    base = 0
    for index, process in enumerate(processes):
        table.append(
            SegmentTableEntry(
                process_id=process.id,
                segment_number=index,
                base=base,
                limit=process.size,
                size=process.size,
            )
        )
        base += process.size
    return table
