"""Tests for the fragmentation calculator.

Paging wastes the tail of each process's last page and has no external
fragmentation.  Segmentation uses an illustrative layout that leaves a
15% gap after every even-positioned process except the first.
"""

from py_memviz.memory.fragmentation import (
    FragmentationFigures,
    SegmentPlacement,
    calculate_fragmentation,
    gap_after,
    segment_layout,
)
from py_memviz.memory.paging import PAGE_SIZE
from py_memviz.processes import Process

SIZES = (1000, 2000, 3000, 4000, 5000)


def _processes(*sizes: int) -> list[Process]:
    return [Process(id=i + 1, size=s) for i, s in enumerate(sizes)]


class TestPagingFragmentation:
    """Verify internal fragmentation under paging."""

    def test_partial_page_waste(self) -> None:
        """The [8192, 100] example wastes 3996 bytes in process 2's page."""
        report = calculate_fragmentation(_processes(2 * PAGE_SIZE, 100))
        assert report.paging == FragmentationFigures(internal=3996, external=0)

    def test_waste_sums_over_processes(self) -> None:
        """Each process contributes its own last-page waste."""
        report = calculate_fragmentation(_processes(*SIZES))
        assert report.paging.internal == 3096 + 2096 + 1096 + 96 + 3192

    def test_paging_has_no_external_fragmentation(self) -> None:
        """Fixed-size pages never strand free space."""
        report = calculate_fragmentation(_processes(*SIZES))
        assert report.paging.external == 0


class TestSegmentationFragmentation:
    """Verify the synthetic segmentation gaps."""

    def test_gap_positions(self) -> None:
        """Only even indices beyond the first leave a gap."""
        assert gap_after(0, 1000) == 0
        assert gap_after(1, 1000) == 0
        assert gap_after(2, 1000) == 150
        assert gap_after(3, 1000) == 0
        assert gap_after(4, 1000) == 150

    def test_gap_keeps_fractional_bytes(self) -> None:
        """Fifteen percent of 333 bytes is 49.95, not rounded."""
        assert gap_after(2, 333) == 49.95

    def test_external_keeps_fractional_bytes(self) -> None:
        """A 101-byte third process leaves a 15.15-byte gap."""
        report = calculate_fragmentation(_processes(100, 100, 101))
        assert report.segmentation.external == 15.15

    def test_external_is_sum_of_gaps(self) -> None:
        """Gaps after processes 3 and 5 add up to the external figure."""
        report = calculate_fragmentation(_processes(*SIZES))
        assert report.segmentation == FragmentationFigures(internal=0, external=450 + 750)

    def test_short_lists_have_no_gaps(self) -> None:
        """One or two processes never reach an even index beyond 0."""
        report = calculate_fragmentation(_processes(1000, 2000))
        assert report.segmentation.external == 0

    def test_layout_includes_gaps(self) -> None:
        """A gap shifts every later segment."""
        layout = segment_layout(_processes(*SIZES))
        assert layout[2] == SegmentPlacement(process_id=3, start=3000, size=3000, gap_after=450)
        assert layout[3].start == 6450
        assert layout[4].start == 10450

    def test_empty_list(self) -> None:
        """No processes, no fragmentation."""
        report = calculate_fragmentation([])
        assert report.paging.total == 0
        assert report.segmentation.total == 0
