"""Paging — carve each process into fixed-size pages.

Physical memory is divided into **frames** and a process's address
space into **pages** of the same size.  The page table records which
frame holds each page.  Because every page is the same size, any free
frame can hold any page, so paging never suffers from external
fragmentation.  The price is **internal fragmentation**: the last page
of a process is usually only partly used.

Our frame pool is deliberately simple:

- Frames are handed out from a single counter in process order.
- Frames are never reclaimed — the table is rebuilt from scratch each
  time the process list changes.
- There is no physical limit, so no out-of-memory condition exists.

Address translation::

    virtual address  →  (page number, offset within page)
    page table[page] →  frame number
    physical address →  frame_number * page_size + offset
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from py_memviz.processes import Process

PAGE_SIZE = 4096


@dataclass(frozen=True)
class PageTableEntry:
    """One page of one process and the frame it occupies.

    Attributes:
        process_id: Owner of the page.
        page_number: Index of the page within the process (0-based).
        frame_number: Global frame number, unique across the table.
        size: Bytes actually used in this page (the last may be partial).

    """

    process_id: int
    page_number: int
    frame_number: int
    size: int

    def to_dict(self) -> dict[str, int]:
        """Return a JSON-friendly representation."""
        return {
            "process_id": self.process_id,
            "page_number": self.page_number,
            "frame_number": self.frame_number,
            "size": self.size,
        }


def pages_needed(size: int, *, page_size: int = PAGE_SIZE) -> int:
    """Return the number of pages required to hold *size* bytes."""
    return math.ceil(size / page_size)


def page_waste(size: int, *, page_size: int = PAGE_SIZE) -> int:
    """Return the unused bytes in the last page of a *size*-byte request."""
    return pages_needed(size, page_size=page_size) * page_size - size


def build_page_table(
    processes: Sequence[Process],
    *,
    page_size: int = PAGE_SIZE,
) -> list[PageTableEntry]:
    """Build a flat page table for *processes*.

    Args:
        processes: Processes in arrival order.
        page_size: Bytes per page and per frame.

    Returns:
        One entry per page, in process order then page order.

    """
    table: list[PageTableEntry] = []
    frame = 0
    for process in processes:
        for page in range(pages_needed(process.size, page_size=page_size)):
            remaining = process.size - page * page_size
            table.append(
                PageTableEntry(
                    process_id=process.id,
                    page_number=page,
                    frame_number=frame,
                    size=min(page_size, remaining),
                )
            )
            frame += 1
    return table
