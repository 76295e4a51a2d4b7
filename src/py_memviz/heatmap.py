"""Memory access heat map — where in memory are processes touching?

The address space is split into ``grid_size`` equal cells.  Each sample
picks a process and an address and warms the cell holding that
address; every few ticks all cells cool down by one.  Busy regions
glow, idle ones fade.

The samples are *illustrative noise*, not a model of real access
patterns.  Where they come from is a pluggable strategy:

- **RandomAccessSampler** — uniform random process and address (the
  default).  Accepts a seeded ``random.Random`` for reproducible runs.
- **NullSampler** — never samples; disables the feature or keeps tests
  deterministic.
"""

from __future__ import annotations

import random
from collections import deque
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from py_memviz.formatting import format_address
from py_memviz.memory.allocation import MAX_MEMORY
from py_memviz.playback import PlaybackTimer

if TYPE_CHECKING:
    from collections.abc import Sequence

    from py_memviz.processes import Process

GRID_SIZE = 64
GRID_COLUMNS = 8
HEAT_CAP = 100
HOT_THRESHOLD = 30
HISTORY_LENGTH = 100
DECAY_INTERVAL = 5


@dataclass(frozen=True)
class MemoryAccess:
    """One simulated memory access.

    Attributes:
        process_id: The process that touched memory.
        address: Physical address touched.
        tick: Heat-map tick at which the access happened.

    """

    process_id: int
    address: int
    tick: int

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-friendly representation."""
        return {
            "process_id": self.process_id,
            "address": self.address,
            "address_hex": format_address(self.address),
            "tick": self.tick,
        }


class AccessSampler(Protocol):
    """Interface for generating simulated accesses."""

    def sample(self, processes: Sequence[Process], memory_size: int) -> tuple[int, int] | None:
        """Return ``(process_id, address)`` or None to skip this tick."""
        ...  # pragma: no cover


class RandomAccessSampler:
    """Uniformly random process and address."""

    def __init__(self, rng: random.Random | None = None) -> None:
        """Create a sampler.

        Args:
            rng: Random source; pass a seeded ``random.Random`` for
                reproducible sequences.

        """
        self._rng = rng if rng is not None else random.Random()  # noqa: S311

    def sample(self, processes: Sequence[Process], memory_size: int) -> tuple[int, int] | None:
        """Pick a random process and a random address below *memory_size*."""
        if not processes:
            return None
        process = self._rng.choice(list(processes))
        return process.id, self._rng.randrange(memory_size)


class NullSampler:
    """A sampler that never produces an access."""

    def sample(self, processes: Sequence[Process], memory_size: int) -> tuple[int, int] | None:  # noqa: ARG002
        """Return None."""
        return None


class HeatMap:
    """Access-count grid with decay and a bounded access history."""

    def __init__(
        self,
        *,
        sampler: AccessSampler | None = None,
        grid_size: int = GRID_SIZE,
        memory_size: int = MAX_MEMORY,
        decay_interval: int = DECAY_INTERVAL,
    ) -> None:
        """Create a cold heat map.

        Args:
            sampler: Source of simulated accesses (random by default).
            grid_size: Number of cells covering the address space.
            memory_size: Size of the address space in bytes.
            decay_interval: Ticks between cool-down passes.

        Raises:
            ValueError: If grid_size or memory_size is not positive.

        """
        if grid_size <= 0 or memory_size <= 0:
            msg = f"Grid and memory size must be positive, got {grid_size} and {memory_size}"
            raise ValueError(msg)
        self._sampler: AccessSampler = sampler if sampler is not None else RandomAccessSampler()
        self._grid_size = grid_size
        self._memory_size = memory_size
        self._cells = [0] * grid_size
        self._history: deque[MemoryAccess] = deque(maxlen=HISTORY_LENGTH)
        self._simulation = PlaybackTimer(interval=1)
        self._decay = PlaybackTimer(interval=decay_interval, running=True)
        self._ticks = 0

    @property
    def cells(self) -> list[int]:
        """Return a copy of the cell values."""
        return list(self._cells)

    @property
    def accesses(self) -> list[MemoryAccess]:
        """Return the recent accesses, oldest first."""
        return list(self._history)

    @property
    def simulating(self) -> bool:
        """Return True while accesses are being sampled."""
        return self._simulation.running

    @property
    def hot_cells(self) -> int:
        """Return the number of cells above ``HOT_THRESHOLD``."""
        return sum(1 for value in self._cells if value > HOT_THRESHOLD)

    @property
    def peak(self) -> int:
        """Return the hottest cell value."""
        return max(self._cells, default=0)

    def cell_for(self, address: int) -> int:
        """Return the index of the cell that holds *address*."""
        return address * self._grid_size // self._memory_size

    def start(self) -> None:
        """Begin sampling on each tick."""
        self._simulation.start()

    def stop(self) -> None:
        """Stop sampling; decay continues."""
        self._simulation.stop()

    def toggle(self, processes: Sequence[Process]) -> bool:
        """Start or stop sampling; return the new state.

        Sampling never starts with an empty process list.
        """
        if self.simulating:
            self.stop()
        elif processes:
            self.start()
        return self.simulating

    def reset(self) -> None:
        """Stop sampling and cool every cell."""
        self._simulation.reset()
        self._cells = [0] * self._grid_size
        self._history.clear()

    def record(self, process_id: int, address: int) -> MemoryAccess:
        """Record one access and warm its cell (capped at ``HEAT_CAP``).

        Raises:
            ValueError: If the address is outside the address space.

        """
        if not 0 <= address < self._memory_size:
            msg = f"Address {address} outside memory of {self._memory_size} bytes"
            raise ValueError(msg)
        access = MemoryAccess(process_id=process_id, address=address, tick=self._ticks)
        self._history.append(access)
        cell = self.cell_for(address)
        self._cells[cell] = min(self._cells[cell] + 1, HEAT_CAP)
        return access

    def decay(self) -> None:
        """Cool every cell by one (never below zero)."""
        self._cells = [max(0, value - 1) for value in self._cells]

    def tick(self, processes: Sequence[Process]) -> MemoryAccess | None:
        """Advance one tick: maybe sample, maybe decay.

        Returns:
            The access recorded this tick, if any.

        """
        self._ticks += 1
        access = None
        if self._simulation.tick() and processes:
            sampled = self._sampler.sample(processes, self._memory_size)
            if sampled is not None:
                access = self.record(*sampled)
        if self._decay.tick():
            self.decay()
        return access

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-friendly representation."""
        return {
            "cells": self.cells,
            "columns": GRID_COLUMNS,
            "simulating": self.simulating,
            "hot_cells": self.hot_cells,
            "peak": self.peak,
            "recent": [a.to_dict() for a in list(self._history)[-10:][::-1]],
            "access_count": len(self._history),
        }
