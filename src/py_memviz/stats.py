"""Statistics dashboard — headline numbers for the current process list.

Everything here is derived from the core algorithms; nothing is stored.

- **Utilisation** — share of the requested memory that is not lost to
  fragmentation, per memory model.
- **Efficiency** — share of each fit strategy's allocated bytes that is
  not page-rounding waste.
- **Average access time** — a simulated figure that grows with the
  number of processes (table lookups get longer).  It is a teaching
  aid, not a measurement.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from py_memviz.memory.allocation import AllocationResult, FitStrategy, allocate_memory
from py_memviz.memory.fragmentation import FragmentationReport, calculate_fragmentation

if TYPE_CHECKING:
    from collections.abc import Sequence

    from py_memviz.processes import Process

PAGING_BASE_ACCESS_NS = 100
PAGING_ACCESS_NS_PER_PROCESS = 2
SEGMENTATION_BASE_ACCESS_NS = 80
SEGMENTATION_ACCESS_NS_PER_PROCESS = 3

STRATEGY_LABELS = {
    FitStrategy.FIRST_FIT: ("First Fit", "Allocates to the first available block"),
    FitStrategy.BEST_FIT: ("Best Fit", "Allocates to the smallest sufficient block"),
    FitStrategy.WORST_FIT: ("Worst Fit", "Allocates to the largest available block"),
}


@dataclass(frozen=True)
class StrategySummary:
    """One strategy's allocation run, labelled for display."""

    strategy: FitStrategy
    name: str
    description: str
    result: AllocationResult

    @property
    def efficiency(self) -> float:
        """Return the allocation efficiency as a percentage."""
        return self.result.efficiency

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-friendly representation."""
        return {
            "strategy": str(self.strategy),
            "name": self.name,
            "description": self.description,
            "efficiency": self.efficiency,
            "result": self.result.to_dict(),
        }


@dataclass(frozen=True)
class Statistics:
    """Dashboard figures for one process list."""

    process_count: int
    total_memory: int
    utilization_paging: float
    utilization_segmentation: float
    efficiency: dict[FitStrategy, float]
    access_time_paging: int
    access_time_segmentation: int
    fragmentation: FragmentationReport

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-friendly representation."""
        return {
            "process_count": self.process_count,
            "total_memory": self.total_memory,
            "utilization": {
                "paging": self.utilization_paging,
                "segmentation": self.utilization_segmentation,
            },
            "efficiency": {str(k): v for k, v in self.efficiency.items()},
            "access_time_ns": {
                "paging": self.access_time_paging,
                "segmentation": self.access_time_segmentation,
            },
            "fragmentation": self.fragmentation.to_dict(),
        }


def compare_strategies(processes: Sequence[Process]) -> list[StrategySummary]:
    """Run every fit strategy on *processes* and label the results."""
    summaries = []
    for strategy in FitStrategy:
        name, description = STRATEGY_LABELS[strategy]
        summaries.append(
            StrategySummary(
                strategy=strategy,
                name=name,
                description=description,
                result=allocate_memory(processes, strategy),
            )
        )
    return summaries


def _percent_of(part: float, whole: int) -> float:
    if whole == 0:
        return 0.0
    return part / whole * 100


def compute_statistics(processes: Sequence[Process]) -> Statistics:
    """Compute the dashboard figures for *processes*.

    Percentages are 0.0 for an empty list.  Paging utilisation can go
    negative when page-rounding waste exceeds the requested total (many
    tiny processes); the figure is reported as computed.
    """
    total = sum(p.size for p in processes)
    fragmentation = calculate_fragmentation(processes)
    count = len(processes)
    return Statistics(
        process_count=count,
        total_memory=total,
        utilization_paging=_percent_of(total - fragmentation.paging.internal, total),
        utilization_segmentation=_percent_of(
            total - fragmentation.segmentation.internal - fragmentation.segmentation.external,
            total,
        ),
        efficiency={s.strategy: s.efficiency for s in compare_strategies(processes)},
        access_time_paging=PAGING_BASE_ACCESS_NS + count * PAGING_ACCESS_NS_PER_PROCESS,
        access_time_segmentation=(
            SEGMENTATION_BASE_ACCESS_NS + count * SEGMENTATION_ACCESS_NS_PER_PROCESS
        ),
        fragmentation=fragmentation,
    )
