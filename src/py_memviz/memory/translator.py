"""Address translation — virtual to physical, both ways.

Given a process id and a virtual address, find the physical address
the hardware would touch.

Paging::

    page   = vaddr // page_size
    offset = vaddr %  page_size
    paddr  = frame_of(pid, page) * page_size + offset

Segmentation::

    if vaddr >= limit: segmentation fault
    paddr = base + vaddr

Failures raise a ``TranslationError`` subclass whose message is meant
to be shown to the user as-is.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from py_memviz.memory.paging import PAGE_SIZE, build_page_table
from py_memviz.memory.segmentation import build_segment_table
from py_memviz.processes import parse_number

if TYPE_CHECKING:
    from collections.abc import Sequence

    from py_memviz.processes import Process


class TranslationError(Exception):
    """Base class for failed address translations."""


class ProcessNotFoundError(TranslationError):
    """Raised when the process id is not in the current list."""


class InvalidVirtualAddressError(TranslationError):
    """Raised when no page of the process covers the address."""


class SegmentationFaultError(TranslationError):
    """Raised when the address is at or beyond the segment limit."""


class TranslationMode(StrEnum):
    """Which memory model to translate through."""

    PAGING = "paging"
    SEGMENTATION = "segmentation"


@dataclass(frozen=True)
class Translation:
    """A successful translation and the figures that produced it.

    Paging fills ``page_number``, ``offset`` and ``frame_number``;
    segmentation fills ``segment_base`` and ``segment_limit``.
    """

    mode: TranslationMode
    process_id: int
    virtual_address: int
    physical_address: int
    page_number: int | None = None
    offset: int | None = None
    frame_number: int | None = None
    segment_base: int | None = None
    segment_limit: int | None = None

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-friendly representation."""
        data = asdict(self)
        data["mode"] = str(self.mode)
        return data


def translate(
    processes: Sequence[Process],
    virtual_address: int,
    process_id: int,
    mode: str | TranslationMode,
    *,
    page_size: int = PAGE_SIZE,
) -> Translation:
    """Translate *virtual_address* of *process_id* to a physical address.

    Args:
        processes: Current process list (tables are derived from it).
        virtual_address: Address within the process's address space.
        process_id: Process owning the address.
        mode: ``paging`` or ``segmentation``.
        page_size: Bytes per page (paging only).

    Returns:
        The translation result.

    Raises:
        ProcessNotFoundError: If *process_id* is unknown.
        InvalidVirtualAddressError: If no page maps the address.
        SegmentationFaultError: If the address exceeds the segment limit.

    """
    mode = TranslationMode(mode)
    if not any(p.id == process_id for p in processes):
        msg = f"Process {process_id} not found"
        raise ProcessNotFoundError(msg)
    if virtual_address < 0:
        msg = "Invalid virtual address for this process"
        raise InvalidVirtualAddressError(msg)

    if mode is TranslationMode.PAGING:
        return _translate_paging(processes, virtual_address, process_id, page_size)
    return _translate_segmentation(processes, virtual_address, process_id)


def _translate_paging(
    processes: Sequence[Process],
    virtual_address: int,
    process_id: int,
    page_size: int,
) -> Translation:
    page_number, offset = divmod(virtual_address, page_size)
    entry = next(
        (
            e
            for e in build_page_table(processes, page_size=page_size)
            if e.process_id == process_id and e.page_number == page_number
        ),
        None,
    )
    if entry is None:
        msg = "Invalid virtual address for this process"
        raise InvalidVirtualAddressError(msg)
    return Translation(
        mode=TranslationMode.PAGING,
        process_id=process_id,
        virtual_address=virtual_address,
        physical_address=entry.frame_number * page_size + offset,
        page_number=page_number,
        offset=offset,
        frame_number=entry.frame_number,
    )


def _translate_segmentation(
    processes: Sequence[Process],
    virtual_address: int,
    process_id: int,
) -> Translation:
    segment = next(
        (e for e in build_segment_table(processes) if e.process_id == process_id),
        None,
    )
    if segment is None:
        msg = f"Segment not found for process {process_id}"
        raise ProcessNotFoundError(msg)
    if virtual_address >= segment.limit:
        msg = "Segmentation fault: Address exceeds segment limit"
        raise SegmentationFaultError(msg)
    return Translation(
        mode=TranslationMode.SEGMENTATION,
        process_id=process_id,
        virtual_address=virtual_address,
        physical_address=segment.base + virtual_address,
        segment_base=segment.base,
        segment_limit=segment.limit,
    )


def translate_text(
    processes: Sequence[Process],
    virtual_address: str | int,
    process_id: str | int,
    mode: str | TranslationMode,
) -> Translation:
    """Parse raw form input, then translate.

    Raises:
        InvalidInputError: If either field is not a number.
        TranslationError: As for ``translate``.

    """
    return translate(processes, parse_number(virtual_address), parse_number(process_id), mode)
