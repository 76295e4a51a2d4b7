"""Session — the single stateful object behind the visualizer.

Everything in ``py_memviz.memory`` is a pure function of the process
list.  The session owns that list and the little bits of UI state that
outlive one request: the event log, the heat map, the two allocation
playbacks and the viewport.  Each piece is created here and handed to
whoever needs it, so tests can build a session with a deterministic
sampler and drive it tick by tick.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from py_memviz.formatting import format_bytes
from py_memviz.heatmap import HeatMap
from py_memviz.logging import Logger, LogLevel
from py_memviz.memory.allocation import (
    MAX_MEMORY,
    AllocationResult,
    FitStrategy,
    allocate_memory,
)
from py_memviz.memory.fragmentation import FragmentationReport, calculate_fragmentation
from py_memviz.memory.paging import PageTableEntry, build_page_table
from py_memviz.memory.segmentation import SegmentTableEntry, build_segment_table
from py_memviz.memory.translator import Translation, TranslationError, translate_text
from py_memviz.playback import AllocationAnimation, AllocationPlayback, Viewport
from py_memviz.processes import InvalidInputError, Process, ProcessTable, parse_number
from py_memviz.stats import Statistics, StrategySummary, compare_strategies, compute_statistics

if TYPE_CHECKING:
    from py_memviz.heatmap import AccessSampler, MemoryAccess
    from py_memviz.memory.translator import TranslationMode


class Session:
    """Process list plus the UI state built around it."""

    def __init__(
        self,
        *,
        processes: list[Process] | None = None,
        sampler: AccessSampler | None = None,
        logger: Logger | None = None,
        max_process_size: int = MAX_MEMORY,
    ) -> None:
        """Create a session.

        Args:
            processes: Initial process list.
            sampler: Heat-map access sampler (random by default).
            logger: Event log (a new one is created if omitted).
            max_process_size: Largest size ``add_process`` accepts.

        """
        self._logger = logger if logger is not None else Logger()
        self._table = ProcessTable(processes)
        self._max_process_size = max_process_size
        self._heatmap = HeatMap(sampler=sampler)
        self._playback = AllocationPlayback(self._table)
        self._animation = AllocationAnimation(self._table)
        self._viewport = Viewport()

    @property
    def logger(self) -> Logger:
        """Return the session's event log."""
        return self._logger

    @property
    def table(self) -> ProcessTable:
        """Return the process table."""
        return self._table

    @property
    def processes(self) -> list[Process]:
        """Return the current process list."""
        return self._table.processes

    @property
    def heatmap(self) -> HeatMap:
        """Return the access heat map."""
        return self._heatmap

    @property
    def playback(self) -> AllocationPlayback:
        """Return the prefix-replay allocation simulator."""
        return self._playback

    @property
    def animation(self) -> AllocationAnimation:
        """Return the step-by-step allocation animation."""
        return self._animation

    @property
    def viewport(self) -> Viewport:
        """Return the viewport of the animation drawing."""
        return self._viewport

    # -- Process list -------------------------------------------------------

    def add_process(self, size: str | int) -> Process:
        """Parse *size* and append a new process.

        Raises:
            InvalidInputError: If the size is not a positive integer or
                exceeds ``max_process_size``.

        """
        try:
            parsed = parse_number(size)
            if parsed > self._max_process_size:
                msg = f"Process size must not exceed {self._max_process_size} bytes"
                raise InvalidInputError(msg)
            process = self._table.add(parsed)
        except InvalidInputError as exc:
            self._logger.log(LogLevel.WARNING, str(exc), source="processes")
            raise
        self._logger.log(
            LogLevel.INFO,
            f"Added process {process.id} ({format_bytes(process.size)})",
            source="processes",
            process_id=process.id,
        )
        return process

    def remove_process(self, process_id: int) -> Process | None:
        """Remove a process; unknown ids are a logged no-op."""
        removed = self._table.remove(process_id)
        if removed is None:
            self._logger.log(
                LogLevel.WARNING,
                f"Process {process_id} not found",
                source="processes",
                process_id=process_id,
            )
            return None
        self._logger.log(
            LogLevel.INFO,
            f"Removed process {process_id}",
            source="processes",
            process_id=process_id,
        )
        if len(self._table) == 0:
            self._playback.reset()
            self._animation.reset()
            self._heatmap.stop()
        return removed

    # -- Derived views ------------------------------------------------------

    def page_table(self) -> list[PageTableEntry]:
        """Return the page table of the current list."""
        return build_page_table(self.processes)

    def segment_table(self) -> list[SegmentTableEntry]:
        """Return the segment table of the current list."""
        return build_segment_table(self.processes)

    def fragmentation(self) -> FragmentationReport:
        """Return fragmentation figures for the current list."""
        return calculate_fragmentation(self.processes)

    def allocate(self, strategy: str | FitStrategy) -> AllocationResult:
        """Run one allocation strategy over the current list.

        Processes that find no block are logged as warnings.
        """
        return allocate_memory(self.processes, strategy, logger=self._logger)

    def comparison(self) -> list[StrategySummary]:
        """Return every strategy's result side by side."""
        return compare_strategies(self.processes)

    def statistics(self) -> Statistics:
        """Return the dashboard figures."""
        return compute_statistics(self.processes)

    def translate(
        self,
        virtual_address: str | int,
        process_id: str | int,
        mode: str | TranslationMode,
    ) -> Translation:
        """Translate raw form input; failures are logged and re-raised.

        Raises:
            InvalidInputError: If a field is not a number.
            TranslationError: If the address cannot be translated.

        """
        try:
            result = translate_text(self.processes, virtual_address, process_id, mode)
        except (InvalidInputError, TranslationError) as exc:
            self._logger.log(LogLevel.WARNING, str(exc), source="translator")
            raise
        self._logger.log(
            LogLevel.DEBUG,
            f"{result.mode}: {result.virtual_address} -> {result.physical_address}",
            source="translator",
            process_id=result.process_id,
        )
        return result

    # -- Clock --------------------------------------------------------------

    def tick(self) -> MemoryAccess | None:
        """Advance every timed view by one tick.

        Returns:
            The heat-map access sampled this tick, if any.

        """
        if self._playback.tick() and not self._playback.playing:
            self._logger.log(LogLevel.INFO, "Playback finished", source="playback")
        self._animation.tick()
        return self._heatmap.tick(self.processes)
