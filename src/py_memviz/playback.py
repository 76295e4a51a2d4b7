"""Playback — step-by-step replay of allocation, driven by ticks.

Watching an allocator work one process at a time is the point of the
visualizer, so every animated view is a small state machine advanced by
``tick()``.  Nothing here sleeps or spawns threads: the owner of the
clock (the web page, a test, a REPL) decides when a tick happens.  One
tick stands for ``TICK_MS`` milliseconds of wall-clock time.

- **PlaybackTimer** — counts ticks and fires every ``interval`` ticks
  while started.  Has an explicit start / stop / reset lifecycle.
- **AllocationPlayback** — replays ``allocate_memory`` over a growing
  prefix of the process list (step *k* shows the first *k + 1*).
- **AllocationAnimation** — places one process per step into a fixed
  pre-fragmented memory and reports what happened in a message.
- **Viewport** — zoom and scroll position of the memory drawing.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from py_memviz.memory.allocation import (
    MAX_MEMORY,
    AllocationResult,
    FitStrategy,
    MemoryBlock,
    allocate_memory,
    parse_strategy,
    select_block,
)

if TYPE_CHECKING:
    from py_memviz.processes import Process, ProcessTable

TICK_MS = 100

MIN_SPEED_MS = 200
MAX_SPEED_MS = 2000
SPEED_STEP_MS = 200
DEFAULT_SPEED_MS = 1000

PREALLOCATED_SIZES = (40000, 30000, 25000, 35000)
FIRST_GAP_SIZE = 20000
GAP_GROWTH = 10000

MIN_ZOOM = 1.0
MAX_ZOOM = 5.0
ZOOM_STEP = 0.5


class PlaybackError(Exception):
    """Raised when playback is requested with nothing to play."""


class PlaybackTimer:
    """An interval timer advanced by explicit ticks.

    While started, every ``interval`` ticks the timer *fires* and its
    counter resets.  A stopped timer ignores ticks.
    """

    def __init__(
        self,
        *,
        interval: int = DEFAULT_SPEED_MS // TICK_MS,
        running: bool = False,
    ) -> None:
        """Create a timer.

        Args:
            interval: Number of ticks between fires.
            running: Whether the timer starts already running.

        Raises:
            ValueError: If the interval is not positive.

        """
        self._interval = 1
        self.interval = interval
        self._running = running
        self._counter = 0
        self._total_ticks = 0
        self._fires = 0

    @property
    def interval(self) -> int:
        """Return the current tick interval between fires."""
        return self._interval

    @interval.setter
    def interval(self, value: int) -> None:
        """Set the tick interval between fires.

        Raises:
            ValueError: If the interval is not positive.

        """
        if value <= 0:
            msg = f"Interval must be positive, got {value}"
            raise ValueError(msg)
        self._interval = value

    @property
    def running(self) -> bool:
        """Return True while the timer is started."""
        return self._running

    @property
    def current_tick(self) -> int:
        """Return ticks since last fire (resets each interval)."""
        return self._counter

    @property
    def total_ticks(self) -> int:
        """Return ticks counted while running since the last reset."""
        return self._total_ticks

    @property
    def fires(self) -> int:
        """Return the number of fires since the last reset."""
        return self._fires

    def start(self) -> None:
        """Start counting ticks."""
        self._running = True

    def stop(self) -> None:
        """Stop counting ticks; the partial count is kept."""
        self._running = False

    def reset(self) -> None:
        """Stop the timer and clear every counter."""
        self._running = False
        self._counter = 0
        self._total_ticks = 0
        self._fires = 0

    def tick(self) -> bool:
        """Advance the timer by one tick.

        Returns:
            True if the timer fired this tick, False otherwise
            (including when stopped).

        """
        if not self._running:
            return False
        self._counter += 1
        self._total_ticks += 1
        if self._counter >= self._interval:
            self._counter = 0
            self._fires += 1
            return True
        return False


def validate_speed(speed_ms: int) -> int:
    """Return *speed_ms* if it is a valid step delay.

    Raises:
        ValueError: If outside ``MIN_SPEED_MS..MAX_SPEED_MS`` or not a
            multiple of ``SPEED_STEP_MS``.

    """
    if not MIN_SPEED_MS <= speed_ms <= MAX_SPEED_MS or speed_ms % SPEED_STEP_MS:
        msg = (
            f"Speed must be between {MIN_SPEED_MS} and {MAX_SPEED_MS} ms "
            f"in steps of {SPEED_STEP_MS}, got {speed_ms}"
        )
        raise ValueError(msg)
    return speed_ms


def speed_multiplier(speed_ms: int) -> float:
    """Return the speed shown to the user (``(2000 - ms) / 200``)."""
    return (MAX_SPEED_MS - speed_ms) / SPEED_STEP_MS


class AllocationPlayback:
    """Replay an allocation strategy one process at a time.

    Step *k* shows ``allocate_memory(processes[:k + 1], strategy)``.
    The process list is read from the injected table on every call, so
    removing processes mid-playback simply clamps the step.
    """

    def __init__(
        self,
        table: ProcessTable,
        *,
        strategy: str | FitStrategy = FitStrategy.FIRST_FIT,
        speed_ms: int = DEFAULT_SPEED_MS,
        timer: PlaybackTimer | None = None,
    ) -> None:
        """Create a playback bound to *table*.

        Args:
            table: The process table to replay.
            strategy: Initial fit strategy.
            speed_ms: Delay between steps while playing.
            timer: Timer to drive steps (a new one is created if omitted).

        """
        self._table = table
        self._strategy = parse_strategy(strategy)
        self._speed_ms = validate_speed(speed_ms)
        self._timer = timer if timer is not None else PlaybackTimer()
        self._timer.interval = self._speed_ms // TICK_MS
        self._step = 0

    @property
    def strategy(self) -> FitStrategy:
        """Return the strategy being replayed."""
        return self._strategy

    @property
    def speed_ms(self) -> int:
        """Return the delay between steps in milliseconds."""
        return self._speed_ms

    @property
    def timer(self) -> PlaybackTimer:
        """Return the timer driving this playback."""
        return self._timer

    @property
    def playing(self) -> bool:
        """Return True while playback is running."""
        return self._timer.running

    @property
    def step(self) -> int:
        """Return the current step, clamped to the current list length."""
        self._step = min(self._step, self._last_step())
        return self._step

    @property
    def progress(self) -> float:
        """Return the fraction of processes shown so far (0.0 if none)."""
        count = len(self._table)
        if count == 0:
            return 0.0
        return (self.step + 1) / count

    def _last_step(self) -> int:
        return max(len(self._table) - 1, 0)

    def set_strategy(self, strategy: str | FitStrategy) -> None:
        """Switch strategy; playback stops."""
        self._strategy = parse_strategy(strategy)
        self._timer.stop()

    def set_speed(self, speed_ms: int) -> None:
        """Change the delay between steps."""
        self._speed_ms = validate_speed(speed_ms)
        self._timer.interval = self._speed_ms // TICK_MS

    def play(self) -> None:
        """Start playback, rewinding first if already at the end.

        Raises:
            PlaybackError: If there are no processes.

        """
        if len(self._table) == 0:
            msg = "Add processes to start simulation"
            raise PlaybackError(msg)
        if self.step >= self._last_step():
            self._step = 0
        self._timer.start()

    def pause(self) -> None:
        """Pause playback at the current step."""
        self._timer.stop()

    def toggle(self) -> bool:
        """Play if paused, pause if playing; return the new playing state."""
        if self.playing:
            self.pause()
        else:
            self.play()
        return self.playing

    def reset(self) -> None:
        """Rewind to the first step and stop."""
        self._step = 0
        self._timer.reset()

    def step_forward(self) -> None:
        """Show one more process (no-op at the end)."""
        if self.step < self._last_step():
            self._step += 1

    def step_back(self) -> None:
        """Show one process fewer (no-op at the start)."""
        if self.step > 0:
            self._step -= 1

    def tick(self) -> bool:
        """Advance the timer; step forward when it fires.

        Playback stops by itself once the last process is shown.

        Returns:
            True if the step changed.

        """
        if not self._timer.tick():
            return False
        before = self.step
        self.step_forward()
        if self.step >= self._last_step():
            self._timer.stop()
        return self.step != before

    def result(self) -> AllocationResult:
        """Return the allocation snapshot for the current step."""
        processes = self._table.processes
        return allocate_memory(processes[: self.step + 1], self._strategy)

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-friendly representation."""
        return {
            "strategy": str(self._strategy),
            "step": self.step,
            "playing": self.playing,
            "speed_ms": self._speed_ms,
            "speed_multiplier": speed_multiplier(self._speed_ms),
            "progress": self.progress,
            "result": self.result().to_dict(),
        }


def create_prefragmented_memory(*, total_memory: int = MAX_MEMORY) -> list[MemoryBlock]:
    """Return the fixed fragmented free list the animation starts from.

    Four reserved regions, each followed by a hole that grows by
    ``GAP_GROWTH`` bytes, then one hole reaching the end of memory.
    """
    blocks: list[MemoryBlock] = []
    address = 0
    for index, reserved in enumerate(PREALLOCATED_SIZES):
        address += reserved
        gap = FIRST_GAP_SIZE + index * GAP_GROWTH
        blocks.append(MemoryBlock(id=len(blocks), start=address, size=gap))
        address += gap
    if total_memory > address:
        blocks.append(MemoryBlock(id=len(blocks), start=address, size=total_memory - address))
    return blocks


@dataclass(frozen=True)
class Placement:
    """A process placed by the animation."""

    process: Process
    start: int

    def to_dict(self) -> dict[str, int]:
        """Return a JSON-friendly representation."""
        return {"process_id": self.process.id, "size": self.process.size, "start": self.start}


@dataclass
class AnimationState:
    """Mutable state of one animation run."""

    step: int = 0
    placements: list[Placement] = field(default_factory=lambda: [])  # noqa: PIE807
    free_blocks: list[MemoryBlock] = field(default_factory=create_prefragmented_memory)
    current_process: Process | None = None
    message: str = "Click Play to start allocation simulation"


class AllocationAnimation:
    """Place processes one per step into pre-fragmented memory.

    Unlike ``AllocationPlayback`` the free list carries over from step
    to step, and a process that does not fit is reported in the
    message instead of being silently dropped.
    """

    def __init__(
        self,
        table: ProcessTable,
        *,
        strategy: str | FitStrategy = FitStrategy.FIRST_FIT,
        timer: PlaybackTimer | None = None,
    ) -> None:
        """Create an animation bound to *table*."""
        self._table = table
        self._strategy = parse_strategy(strategy)
        self._timer = timer if timer is not None else PlaybackTimer()
        self._state = AnimationState()

    @property
    def state(self) -> AnimationState:
        """Return the current animation state."""
        return self._state

    @property
    def strategy(self) -> FitStrategy:
        """Return the strategy being animated."""
        return self._strategy

    @property
    def playing(self) -> bool:
        """Return True while the animation runs."""
        return self._timer.running

    @property
    def finished(self) -> bool:
        """Return True once every process has been attempted."""
        return self._state.step >= len(self._table)

    def set_strategy(self, strategy: str | FitStrategy) -> None:
        """Switch strategy; the animation resets."""
        self._strategy = parse_strategy(strategy)
        self.reset()

    def set_speed(self, speed_ms: int) -> None:
        """Change the delay between steps."""
        self._timer.interval = validate_speed(speed_ms) // TICK_MS

    def play(self) -> None:
        """Start the animation (no-op without processes)."""
        if len(self._table) > 0:
            self._timer.start()

    def pause(self) -> None:
        """Pause the animation."""
        self._timer.stop()

    def reset(self) -> None:
        """Stop and restore the pre-fragmented memory."""
        self._timer.reset()
        self._state = AnimationState(message="Ready to allocate processes")

    def step_forward(self) -> None:
        """Pause, then place the next process."""
        self.pause()
        self._advance()

    def tick(self) -> bool:
        """Advance the timer; place the next process when it fires.

        Returns:
            True if a step was taken.

        """
        if not self._timer.tick():
            return False
        if self.finished:
            self._timer.stop()
            self._state.message = "Allocation complete!"
            return False
        self._advance()
        return True

    def _advance(self) -> None:
        processes = self._table.processes
        state = self._state
        if state.step >= len(processes):
            return
        process = processes[state.step]
        state.current_process = process
        state.step += 1

        index = select_block(state.free_blocks, process.size, self._strategy)
        if index is None:
            state.message = f"Cannot allocate Process {process.id} - No suitable block found"
            return

        block = state.free_blocks[index]
        state.placements.append(Placement(process=process, start=block.start))
        leftover = block.size - process.size
        if leftover > 0:
            state.free_blocks[index] = MemoryBlock(
                id=block.id, start=block.start + process.size, size=leftover
            )
        else:
            del state.free_blocks[index]
        state.message = (
            f"Allocated Process {process.id} at address {block.start} using {self._strategy}"
        )

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-friendly representation."""
        state = self._state
        return {
            "strategy": str(self._strategy),
            "playing": self.playing,
            "step": state.step,
            "total": len(self._table),
            "placements": [p.to_dict() for p in state.placements],
            "free_blocks": [b.to_dict() for b in state.free_blocks],
            "current_process_id": state.current_process.id if state.current_process else None,
            "message": state.message,
        }


class Viewport:
    """Zoom level and scroll offset of the memory drawing."""

    def __init__(self) -> None:
        """Start at 1x zoom, scrolled to the top."""
        self._zoom = MIN_ZOOM
        self._scroll = 0

    @property
    def zoom(self) -> float:
        """Return the current zoom factor."""
        return self._zoom

    @property
    def scroll_position(self) -> int:
        """Return the scroll offset in pixels."""
        return self._scroll

    def zoom_in(self) -> None:
        """Zoom in one step, up to ``MAX_ZOOM``."""
        self._zoom = min(self._zoom + ZOOM_STEP, MAX_ZOOM)

    def zoom_out(self) -> None:
        """Zoom out one step, down to ``MIN_ZOOM``."""
        self._zoom = max(self._zoom - ZOOM_STEP, MIN_ZOOM)

    def scroll_to(self, position: int) -> None:
        """Scroll to *position* (negative values clamp to 0)."""
        self._scroll = max(position, 0)

    def reset(self) -> None:
        """Return to 1x zoom at the top."""
        self._zoom = MIN_ZOOM
        self._scroll = 0
