"""Tests for contiguous allocation with first-, best- and worst-fit.

The allocator walks the process list once, picking a hole from the
free list for each process according to the strategy.  A process that
fits nowhere is skipped — not raised — and these tests pin that
asymmetry down explicitly via ``AllocationResult.skipped``.
"""

import pytest

from py_memviz.logging import Logger, LogLevel
from py_memviz.memory.allocation import (
    MAX_MEMORY,
    BlockType,
    FitStrategy,
    MemoryBlock,
    allocate_memory,
    blocks_from_sizes,
    parse_strategy,
    seed_free_blocks,
    select_block,
)
from py_memviz.memory.paging import PAGE_SIZE
from py_memviz.processes import Process

HOLES = (1000, 500, 2000)
REQUEST = 500
TOO_BIG = 5000


def _processes(*sizes: int) -> list[Process]:
    return [Process(id=i + 1, size=s) for i, s in enumerate(sizes)]


# -- Strategy selection -------------------------------------------------------


class TestSelectBlock:
    """Verify which hole each strategy picks."""

    def test_first_fit_picks_first_sufficient(self) -> None:
        """First fit takes the 1000-byte hole at index 0."""
        assert select_block(blocks_from_sizes(HOLES), REQUEST, FitStrategy.FIRST_FIT) == 0

    def test_best_fit_picks_exact_match(self) -> None:
        """Best fit takes the 500-byte hole at index 1."""
        assert select_block(blocks_from_sizes(HOLES), REQUEST, FitStrategy.BEST_FIT) == 1

    def test_worst_fit_picks_largest(self) -> None:
        """Worst fit takes the 2000-byte hole at index 2."""
        assert select_block(blocks_from_sizes(HOLES), REQUEST, FitStrategy.WORST_FIT) == 2

    def test_strategy_names_are_accepted(self) -> None:
        """UI strings select the same policies as the enum."""
        assert select_block(blocks_from_sizes(HOLES), REQUEST, "best-fit") == 1

    def test_best_fit_tie_keeps_earliest(self) -> None:
        """Equal-sized best candidates resolve to the first one."""
        assert select_block(blocks_from_sizes((800, 600, 600)), REQUEST, "best-fit") == 1

    def test_worst_fit_tie_keeps_earliest(self) -> None:
        """Equal-sized worst candidates resolve to the first one."""
        assert select_block(blocks_from_sizes((2000, 600, 2000)), REQUEST, "worst-fit") == 0

    @pytest.mark.parametrize("strategy", list(FitStrategy))
    def test_no_fit_returns_none(self, strategy: FitStrategy) -> None:
        """No hole large enough means no selection."""
        assert select_block(blocks_from_sizes(HOLES), TOO_BIG, strategy) is None

    def test_unknown_strategy_rejected(self) -> None:
        """An unknown name raises ValueError listing the known ones."""
        with pytest.raises(ValueError, match="first-fit"):
            parse_strategy("next-fit")


# -- Free list seeding --------------------------------------------------------


class TestSeedFreeBlocks:
    """Verify the synthetic fragmented free list."""

    def test_empty_list_is_one_hole(self) -> None:
        """With no processes all memory is one free hole."""
        assert seed_free_blocks([]) == [MemoryBlock(id=0, start=0, size=MAX_MEMORY)]

    def test_hole_sizes_follow_average(self) -> None:
        """Holes are multiples of the average size, separated by reserved runs."""
        blocks = seed_free_blocks(_processes(1000, 3000))
        assert [(b.start, b.size) for b in blocks] == [
            (2000, 3000),
            (7000, 1000),
            (10000, 4000),
            (16000, 2000),
            (20000, 6000),
            (28000, MAX_MEMORY - 28000),
        ]

    def test_layout_stays_inside_memory(self) -> None:
        """Very large processes never push holes past the end of memory."""
        blocks = seed_free_blocks(_processes(900_000))
        assert blocks
        assert all(b.end <= MAX_MEMORY for b in blocks)

    def test_seed_depends_only_on_processes(self) -> None:
        """The same list always seeds the same free list."""
        processes = _processes(1234, 5678)
        assert seed_free_blocks(processes) == seed_free_blocks(processes)


# -- Allocation runs ----------------------------------------------------------


class TestAllocateMemory:
    """Verify whole allocation runs."""

    def test_first_fit_shrinks_chosen_hole(self) -> None:
        """The hole is shrunk from the front by the process size."""
        result = allocate_memory(
            _processes(REQUEST), "first-fit", free_blocks=blocks_from_sizes(HOLES)
        )
        assert result.blocks == (
            MemoryBlock(
                id=0, start=0, size=REQUEST, type=BlockType.ALLOCATED, process_id=1
            ),
        )
        assert [(b.start, b.size) for b in result.free_blocks] == [
            (500, 500),
            (1000, 500),
            (1500, 2000),
        ]

    def test_exact_fit_removes_hole(self) -> None:
        """A hole filled exactly disappears from the free list."""
        result = allocate_memory(
            _processes(REQUEST), "best-fit", free_blocks=blocks_from_sizes(HOLES)
        )
        assert result.blocks[0].start == 1000
        assert [b.size for b in result.free_blocks] == [1000, 2000]

    def test_metrics(self) -> None:
        """Free total, external and internal fragmentation after one placement."""
        result = allocate_memory(
            _processes(REQUEST), "first-fit", free_blocks=blocks_from_sizes(HOLES)
        )
        assert result.total_allocated == REQUEST
        assert result.total_free == 3000
        assert result.external_fragmentation == 3000 - 2000
        assert result.internal_fragmentation == PAGE_SIZE - REQUEST

    def test_unplaceable_process_is_skipped_silently(self) -> None:
        """No exception, no block — only the skipped list tells."""
        result = allocate_memory(
            _processes(TOO_BIG, REQUEST), "first-fit", free_blocks=blocks_from_sizes(HOLES)
        )
        assert [b.process_id for b in result.blocks] == [2]
        assert result.skipped == (1,)
        assert not result.all_placed

    def test_skip_is_logged(self) -> None:
        """A supplied logger receives a WARNING for each skipped process."""
        logger = Logger()
        allocate_memory(
            _processes(TOO_BIG), "worst-fit", free_blocks=blocks_from_sizes(HOLES), logger=logger
        )
        warnings = logger.filter(min_level=LogLevel.WARNING)
        assert len(warnings) == 1
        assert warnings[0].process_id == 1

    def test_caller_free_list_not_mutated(self) -> None:
        """The free list passed in is copied, not consumed."""
        holes = blocks_from_sizes(HOLES)
        snapshot = list(holes)
        allocate_memory(_processes(REQUEST, REQUEST), "first-fit", free_blocks=holes)
        assert holes == snapshot

    def test_empty_process_list(self) -> None:
        """Nothing to place: all memory free, no fragmentation."""
        result = allocate_memory([], FitStrategy.WORST_FIT)
        assert result.blocks == ()
        assert result.total_free == MAX_MEMORY
        assert result.external_fragmentation == 0
        assert result.efficiency == 0.0

    def test_no_free_blocks_left(self) -> None:
        """Consuming every hole leaves zero external fragmentation."""
        result = allocate_memory(
            _processes(1000), "first-fit", free_blocks=blocks_from_sizes((1000,))
        )
        assert result.free_blocks == ()
        assert result.total_free == 0
        assert result.external_fragmentation == 0


class TestStrategiesOnSeededMemory:
    """Compare strategies on the seeded layout for sizes 1000 and 3000."""

    def test_first_fit_layout(self) -> None:
        """First fit reuses the first hole, then the first one big enough."""
        result = allocate_memory(_processes(1000, 3000), "first-fit")
        assert [(b.start, b.size) for b in result.blocks] == [(2000, 1000), (10000, 3000)]
        assert result.external_fragmentation == 12000

    def test_best_fit_layout(self) -> None:
        """Best fit finds an exact hole for each process."""
        result = allocate_memory(_processes(1000, 3000), "best-fit")
        assert [(b.start, b.size) for b in result.blocks] == [(7000, 1000), (2000, 3000)]
        assert result.external_fragmentation == 12000

    def test_worst_fit_layout(self) -> None:
        """Worst fit carves both processes from the tail hole."""
        result = allocate_memory(_processes(1000, 3000), "worst-fit")
        assert [(b.start, b.size) for b in result.blocks] == [(28000, 1000), (29000, 3000)]
        assert result.external_fragmentation == 16000

    def test_internal_fragmentation_is_page_rounded(self) -> None:
        """Internal waste counts each block as whole 4 KiB pages."""
        result = allocate_memory(_processes(1000, 3000), "first-fit")
        assert result.internal_fragmentation == (PAGE_SIZE - 1000) + (PAGE_SIZE - 3000)

    def test_totals_are_conserved(self) -> None:
        """Allocated plus free equals the seeded free space."""
        processes = _processes(1000, 3000)
        seeded = sum(b.size for b in seed_free_blocks(processes))
        for strategy in FitStrategy:
            result = allocate_memory(processes, strategy)
            assert result.total_allocated + result.total_free == seeded
