"""Fragmentation — wasted space under paging and segmentation.

Two kinds of waste:

- **Internal** — space handed to a process but not used by it.  With
  paging, the last page of each process is usually partly empty.
- **External** — free space stranded between allocations, too small or
  too scattered to satisfy a request.  Paging has none by construction.

The segmentation figures come from an *illustrative* layout, not from
a real allocation history: after every process at an even position
(other than the first) a gap of 15% of that process's size is left
behind.  This mimics how holes appear as segments come and go, and is
kept exactly so the numbers stay reproducible.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from py_memviz.memory.paging import PAGE_SIZE, page_waste

if TYPE_CHECKING:
    from collections.abc import Sequence

    from py_memviz.processes import Process

GAP_PERCENT = 15


@dataclass(frozen=True)
class FragmentationFigures:
    """Internal and external waste, in bytes (segmentation gaps may be fractional)."""

    internal: float
    external: float

    @property
    def total(self) -> float:
        """Return internal plus external waste."""
        return self.internal + self.external

    def to_dict(self) -> dict[str, float]:
        """Return a JSON-friendly representation."""
        return {"internal": self.internal, "external": self.external}


@dataclass(frozen=True)
class FragmentationReport:
    """Fragmentation under both memory models."""

    paging: FragmentationFigures
    segmentation: FragmentationFigures

    def to_dict(self) -> dict[str, dict[str, float]]:
        """Return a JSON-friendly representation."""
        return {"paging": self.paging.to_dict(), "segmentation": self.segmentation.to_dict()}


@dataclass(frozen=True)
class SegmentPlacement:
    """Where a process lands in the gapped segmentation layout.

    Attributes:
        process_id: The process placed.
        start: First address of the segment.
        size: Length of the segment.
        gap_after: Bytes left free after the segment (0 for most).

    """

    process_id: int
    start: float
    size: int
    gap_after: float = 0


def gap_after(index: int, size: int) -> float:
    """Return the synthetic gap left after the process at *index*."""
    if index > 0 and index % 2 == 0:
        return size * GAP_PERCENT / 100
    return 0


def segment_layout(processes: Sequence[Process]) -> list[SegmentPlacement]:
    """Return the gapped segmentation layout of *processes*."""
    placements: list[SegmentPlacement] = []
    address: float = 0
    for index, process in enumerate(processes):
        gap = gap_after(index, process.size)
        placements.append(
            SegmentPlacement(process_id=process.id, start=address, size=process.size, gap_after=gap)
        )
        address += process.size + gap
    return placements


def calculate_fragmentation(
    processes: Sequence[Process],
    *,
    page_size: int = PAGE_SIZE,
) -> FragmentationReport:
    """Compute paging and segmentation fragmentation for *processes*."""
    paging_internal = sum(page_waste(p.size, page_size=page_size) for p in processes)
    segmentation_external = sum(p.gap_after for p in segment_layout(processes))
    return FragmentationReport(
        paging=FragmentationFigures(internal=paging_internal, external=0),
        segmentation=FragmentationFigures(internal=0, external=segmentation_external),
    )
