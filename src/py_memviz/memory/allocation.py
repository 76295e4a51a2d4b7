"""Contiguous allocation — first-fit, best-fit and worst-fit.

Without paging, every process needs one unbroken run of memory.  The
allocator keeps a **free list** of holes and, for each request, picks
one hole according to a placement policy:

- **First fit** — the first hole big enough.  Fast; tends to leave
  small splinters at the low end of memory.
- **Best fit** — the smallest hole big enough.  Leaves the smallest
  leftover, which often becomes an unusable sliver.
- **Worst fit** — the largest hole.  Keeps leftovers large, but eats
  into the big holes that large requests need.

The chosen hole shrinks from the front (or disappears when the request
fills it exactly).  What is left scattered across the free list is
**external fragmentation**.

Design: Strategy pattern
    ``PlacementPolicy`` is the interface, one class per strategy, and
    ``FitStrategy`` names them for the UI.  ``allocate_memory`` is the
    context that runs a policy over the whole process list.

Known simplifications (kept so the numbers match the classroom
visualizer this package reproduces):
    - The free list is seeded with a synthetic fragmented layout whose
      hole sizes depend on the average process size.  It is rebuilt on
      every call so each strategy starts from an equivalent layout.
    - Internal fragmentation is counted as if each block were rounded
      up to whole 4 KiB pages, even though this allocator is contiguous.
    - A process that fits nowhere is skipped rather than rejected.  Its
      id lands in ``AllocationResult.skipped``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol

from py_memviz.logging import LogLevel
from py_memviz.memory.paging import PAGE_SIZE, page_waste

if TYPE_CHECKING:
    from collections.abc import Sequence

    from py_memviz.logging import Logger
    from py_memviz.processes import Process

MAX_MEMORY = 1_048_576

# Free-hole sizes of the seeded layout, as multiples of the average
# process size.  Each hole is preceded by one average-sized reserved run.
SEED_HOLE_FACTORS = (1.5, 0.5, 2.0, 1.0, 3.0)


class FitStrategy(StrEnum):
    """Name of a placement strategy as shown in the UI."""

    FIRST_FIT = "first-fit"
    BEST_FIT = "best-fit"
    WORST_FIT = "worst-fit"


class BlockType(StrEnum):
    """Whether a memory block is a hole or holds a process."""

    FREE = "free"
    ALLOCATED = "allocated"


@dataclass(frozen=True)
class MemoryBlock:
    """A contiguous run of memory.

    Attributes:
        id: Identifier, unique within one free list or one result.
        start: First address of the block.
        size: Length in bytes.
        type: ``FREE`` for a hole, ``ALLOCATED`` for a placed process.
        process_id: Owner when allocated, None for a hole.

    """

    id: int
    start: int
    size: int
    type: BlockType = BlockType.FREE
    process_id: int | None = None

    @property
    def end(self) -> int:
        """Return the first address past the block."""
        return self.start + self.size

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-friendly representation."""
        return {
            "id": self.id,
            "start": self.start,
            "size": self.size,
            "type": str(self.type),
            "process_id": self.process_id,
        }


@dataclass(frozen=True)
class AllocationResult:
    """Snapshot of one allocation run.

    Attributes:
        blocks: Allocated blocks, in placement order.
        internal_fragmentation: Page-rounded waste inside allocated blocks.
        external_fragmentation: Free bytes outside the largest hole.
        total_allocated: Sum of allocated block sizes.
        total_free: Sum of remaining hole sizes.
        free_blocks: The free list after the run.
        skipped: Ids of processes that found no hole.

    """

    blocks: tuple[MemoryBlock, ...]
    internal_fragmentation: int
    external_fragmentation: int
    total_allocated: int
    total_free: int
    free_blocks: tuple[MemoryBlock, ...] = field(default=())
    skipped: tuple[int, ...] = field(default=())

    @property
    def all_placed(self) -> bool:
        """Return True if no process was skipped."""
        return not self.skipped

    @property
    def efficiency(self) -> float:
        """Return the useful share of allocated memory, as a percentage.

        Returns 0.0 when nothing was allocated.
        """
        if self.total_allocated == 0:
            return 0.0
        useful = self.total_allocated - self.internal_fragmentation
        return useful / self.total_allocated * 100

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-friendly representation."""
        return {
            "blocks": [b.to_dict() for b in self.blocks],
            "free_blocks": [b.to_dict() for b in self.free_blocks],
            "internal_fragmentation": self.internal_fragmentation,
            "external_fragmentation": self.external_fragmentation,
            "total_allocated": self.total_allocated,
            "total_free": self.total_free,
            "skipped": list(self.skipped),
            "efficiency": self.efficiency,
        }


# ---------------------------------------------------------------------------
# Placement policies (Strategy pattern)
# ---------------------------------------------------------------------------


class PlacementPolicy(Protocol):
    """Interface for choosing a hole from the free list."""

    def select(self, free_blocks: Sequence[MemoryBlock], size: int) -> int | None:
        """Return the index of the chosen hole, or None if none fits."""
        ...  # pragma: no cover


class FirstFitPolicy:
    """Take the first hole, in list order, that is large enough."""

    def select(self, free_blocks: Sequence[MemoryBlock], size: int) -> int | None:
        """Scan from the front and stop at the first fit."""
        for index, block in enumerate(free_blocks):
            if block.size >= size:
                return index
        return None


class BestFitPolicy:
    """Take the smallest hole that is large enough.

    Ties keep the earliest hole because the comparison is strict.
    """

    def select(self, free_blocks: Sequence[MemoryBlock], size: int) -> int | None:
        """Return the index of the tightest fit."""
        best: int | None = None
        for index, block in enumerate(free_blocks):
            if block.size >= size and (best is None or block.size < free_blocks[best].size):
                best = index
        return best


class WorstFitPolicy:
    """Take the largest hole that is large enough.

    Ties keep the earliest hole because the comparison is strict.
    """

    def select(self, free_blocks: Sequence[MemoryBlock], size: int) -> int | None:
        """Return the index of the loosest fit."""
        worst: int | None = None
        for index, block in enumerate(free_blocks):
            if block.size >= size and (worst is None or block.size > free_blocks[worst].size):
                worst = index
        return worst


POLICIES: dict[FitStrategy, PlacementPolicy] = {
    FitStrategy.FIRST_FIT: FirstFitPolicy(),
    FitStrategy.BEST_FIT: BestFitPolicy(),
    FitStrategy.WORST_FIT: WorstFitPolicy(),
}


def parse_strategy(value: str | FitStrategy) -> FitStrategy:
    """Convert UI text into a ``FitStrategy``.

    Raises:
        ValueError: If the name is not a known strategy.

    """
    try:
        return FitStrategy(value)
    except ValueError:
        known = ", ".join(s.value for s in FitStrategy)
        msg = f"Unknown strategy {value!r} (expected one of: {known})"
        raise ValueError(msg) from None


def select_block(
    free_blocks: Sequence[MemoryBlock],
    size: int,
    strategy: str | FitStrategy,
) -> int | None:
    """Return the index of the hole *strategy* would pick for *size* bytes."""
    return POLICIES[parse_strategy(strategy)].select(free_blocks, size)


# ---------------------------------------------------------------------------
# Free-list construction
# ---------------------------------------------------------------------------


def blocks_from_sizes(sizes: Sequence[int], *, start: int = 0, gap: int = 0) -> list[MemoryBlock]:
    """Build a free list from hole sizes laid out in order.

    Args:
        sizes: Hole sizes, lowest address first.
        start: Address of the first hole.
        gap: Reserved bytes between consecutive holes.

    """
    blocks: list[MemoryBlock] = []
    address = start
    for index, size in enumerate(sizes):
        blocks.append(MemoryBlock(id=index, start=address, size=size))
        address += size + gap
    return blocks


def seed_free_blocks(
    processes: Sequence[Process],
    *,
    total_memory: int = MAX_MEMORY,
) -> list[MemoryBlock]:
    """Build the synthetic fragmented free list used by ``allocate_memory``.

    The layout alternates an average-sized reserved run with a hole
    whose size is ``SEED_HOLE_FACTORS[i]`` times the average process
    size, then one more reserved run and a final hole reaching the end
    of memory.  Nothing extends past *total_memory*.  With no processes
    the whole memory is one hole.
    """
    if not processes:
        return [MemoryBlock(id=0, start=0, size=total_memory)]

    average = sum(p.size for p in processes) // len(processes)
    blocks: list[MemoryBlock] = []
    address = 0
    for factor in SEED_HOLE_FACTORS:
        address += average
        if address >= total_memory:
            break
        size = min(int(average * factor), total_memory - address)
        if size > 0:
            blocks.append(MemoryBlock(id=len(blocks), start=address, size=size))
        address += size
    address += average
    if address < total_memory:
        blocks.append(MemoryBlock(id=len(blocks), start=address, size=total_memory - address))
    return blocks


# ---------------------------------------------------------------------------
# Allocation
# ---------------------------------------------------------------------------


def allocate_memory(
    processes: Sequence[Process],
    strategy: str | FitStrategy,
    *,
    free_blocks: Sequence[MemoryBlock] | None = None,
    logger: Logger | None = None,
) -> AllocationResult:
    """Place *processes* one by one into the free list using *strategy*.

    Args:
        processes: Processes in arrival order.
        strategy: Placement strategy (enum member or its UI name).
        free_blocks: Starting free list; seeded from *processes* when omitted.
            The caller's list is never mutated.
        logger: Optional log receiving one entry per placement or skip.

    Returns:
        The allocation snapshot.

    Raises:
        ValueError: If *strategy* is unknown.

    """
    fit = parse_strategy(strategy)
    policy = POLICIES[fit]
    holes = list(free_blocks) if free_blocks is not None else seed_free_blocks(processes)

    allocated: list[MemoryBlock] = []
    skipped: list[int] = []
    internal = 0

    for process in processes:
        index = policy.select(holes, process.size)
        if index is None:
            skipped.append(process.id)
            if logger is not None:
                logger.log(
                    LogLevel.WARNING,
                    f"Cannot allocate process {process.id} ({process.size} B): "
                    f"no suitable block ({fit})",
                    source="allocation",
                    process_id=process.id,
                )
            continue

        hole = holes[index]
        allocated.append(
            MemoryBlock(
                id=len(allocated),
                start=hole.start,
                size=process.size,
                type=BlockType.ALLOCATED,
                process_id=process.id,
            )
        )
        internal += page_waste(process.size, page_size=PAGE_SIZE)

        leftover = hole.size - process.size
        if leftover > 0:
            holes[index] = MemoryBlock(id=hole.id, start=hole.start + process.size, size=leftover)
        else:
            del holes[index]

        if logger is not None:
            logger.log(
                LogLevel.DEBUG,
                f"Allocated process {process.id} at address {hole.start} using {fit}",
                source="allocation",
                process_id=process.id,
            )

    total_free = sum(h.size for h in holes)
    largest = max((h.size for h in holes), default=0)
    return AllocationResult(
        blocks=tuple(allocated),
        internal_fragmentation=internal,
        external_fragmentation=total_free - largest,
        total_allocated=sum(b.size for b in allocated),
        total_free=total_free,
        free_blocks=tuple(holes),
        skipped=tuple(skipped),
    )
