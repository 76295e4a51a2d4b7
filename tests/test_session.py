"""Tests for the session that ties the views together."""

import pytest

from py_memviz.heatmap import NullSampler
from py_memviz.logging import LogLevel
from py_memviz.memory.allocation import MAX_MEMORY, FitStrategy
from py_memviz.memory.translator import SegmentationFaultError
from py_memviz.processes import InvalidInputError, Process
from py_memviz.session import Session

TICKS_PER_STEP = 10


def _session(*sizes: int) -> Session:
    session = Session(sampler=NullSampler())
    for size in sizes:
        session.add_process(size)
    return session


class TestProcessList:
    """Verify adding and removing processes through the session."""

    def test_add_parses_text(self) -> None:
        """Form text is parsed into a process size."""
        session = _session()
        process = session.add_process(" 8192 ")
        assert process == Process(id=1, size=8192)
        assert session.processes == [process]

    def test_add_logs_info(self) -> None:
        """Each addition is logged with a human-readable size."""
        session = _session(8192)
        entry = session.logger.entries[-1]
        assert entry.level is LogLevel.INFO
        assert entry.message == "Added process 1 (8.00 KB)"
        assert entry.process_id == 1

    @pytest.mark.parametrize("size", ["abc", "", "0", "-5"])
    def test_add_rejects_bad_input(self, size: str) -> None:
        """Invalid sizes raise and leave a warning."""
        session = _session()
        with pytest.raises(InvalidInputError):
            session.add_process(size)
        assert session.processes == []
        assert session.logger.entries[-1].level is LogLevel.WARNING

    def test_remove_unknown_is_noop(self) -> None:
        """Removing an unknown id returns None and logs a warning."""
        session = _session(100)
        assert session.remove_process(9) is None
        assert len(session.processes) == 1
        assert session.logger.entries[-1].level is LogLevel.WARNING

    def test_remove_last_process_stops_views(self) -> None:
        """Emptying the list stops the heat map and rewinds playback."""
        session = _session(100)
        session.heatmap.toggle(session.processes)
        session.playback.play()
        session.remove_process(1)
        assert not session.heatmap.simulating
        assert not session.playback.playing

    def test_add_rejects_oversized_process(self) -> None:
        """Sizes beyond addressable memory are refused and logged."""
        session = _session()
        with pytest.raises(InvalidInputError, match="must not exceed"):
            session.add_process(MAX_MEMORY + 1)
        assert session.processes == []
        assert session.logger.entries[-1].level is LogLevel.WARNING
        assert session.add_process(MAX_MEMORY).size == MAX_MEMORY

    def test_size_cap_is_configurable(self) -> None:
        """A smaller cap applies to add_process."""
        session = Session(sampler=NullSampler(), max_process_size=1000)
        with pytest.raises(InvalidInputError):
            session.add_process("1001")

    def test_remove_last_process_resets_animation(self) -> None:
        """Emptying the list clears the animation's placements."""
        session = _session(25000)
        session.animation.step_forward()
        assert session.animation.state.placements
        session.remove_process(1)
        assert session.animation.state.step == 0
        assert session.animation.state.placements == []
        assert session.animation.state.message == "Ready to allocate processes"


class TestDerivedViews:
    """Verify the session's views follow the process list."""

    def test_tables_follow_list(self) -> None:
        """Page and segment tables reflect the current processes."""
        session = _session(8192, 100)
        assert [e.frame_number for e in session.page_table()] == [0, 1, 2]
        assert [e.base for e in session.segment_table()] == [0, 8192]

    def test_fragmentation(self) -> None:
        """Fragmentation is computed from the current list."""
        session = _session(100)
        assert session.fragmentation().paging.internal == 3996

    def test_allocate_logs_skips(self) -> None:
        """Unplaceable processes are logged as warnings."""
        session = Session(processes=[Process(id=1, size=2_000_000)], sampler=NullSampler())
        result = session.allocate(FitStrategy.FIRST_FIT)
        assert result.skipped == (1,)
        warnings = session.logger.filter(min_level=LogLevel.WARNING, source="allocation")
        assert len(warnings) == 1

    def test_comparison_and_statistics(self) -> None:
        """Every strategy is compared and counted in the statistics."""
        session = _session(1000, 3000)
        assert [s.strategy for s in session.comparison()] == list(FitStrategy)
        assert session.statistics().process_count == 2


class TestTranslation:
    """Verify translation through the session."""

    def test_success_is_logged_at_debug(self) -> None:
        """A successful translation leaves a DEBUG entry."""
        session = _session(8192)
        result = session.translate("4097", "1", "paging")
        assert result.physical_address == 4097
        entry = session.logger.entries[-1]
        assert entry.level is LogLevel.DEBUG
        assert entry.source == "translator"

    def test_failure_is_logged_and_raised(self) -> None:
        """A translation failure is logged before being re-raised."""
        session = _session(100)
        with pytest.raises(SegmentationFaultError):
            session.translate(100, 1, "segmentation")
        entry = session.logger.entries[-1]
        assert entry.level is LogLevel.WARNING
        assert entry.message == "Segmentation fault: Address exceeds segment limit"


class TestClock:
    """Verify the session tick drives every timed view."""

    def test_tick_advances_playback(self) -> None:
        """Playback steps after one interval of ticks."""
        session = _session(100, 200, 300)
        session.playback.play()
        for _ in range(TICKS_PER_STEP):
            session.tick()
        assert session.playback.step == 1

    def test_playback_finish_is_logged(self) -> None:
        """Reaching the last step logs that playback finished."""
        session = _session(100, 200)
        session.playback.play()
        for _ in range(TICKS_PER_STEP):
            session.tick()
        assert not session.playback.playing
        assert session.logger.entries[-1].message == "Playback finished"

    def test_tick_returns_heatmap_access(self) -> None:
        """With a null sampler the tick never reports an access."""
        session = _session(100)
        session.heatmap.start()
        assert session.tick() is None
