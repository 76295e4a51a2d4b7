"""Memory algorithms — paging, segmentation, allocation, translation.

Re-exports public symbols so callers can write::

    from py_memviz.memory import allocate_memory, build_page_table
"""

from py_memviz.memory.allocation import (
    MAX_MEMORY,
    AllocationResult,
    BestFitPolicy,
    BlockType,
    FirstFitPolicy,
    FitStrategy,
    MemoryBlock,
    PlacementPolicy,
    WorstFitPolicy,
    allocate_memory,
    blocks_from_sizes,
    parse_strategy,
    seed_free_blocks,
    select_block,
)
from py_memviz.memory.fragmentation import (
    FragmentationFigures,
    FragmentationReport,
    SegmentPlacement,
    calculate_fragmentation,
    segment_layout,
)
from py_memviz.memory.paging import PAGE_SIZE, PageTableEntry, build_page_table
from py_memviz.memory.segmentation import SegmentTableEntry, build_segment_table
from py_memviz.memory.translator import (
    InvalidVirtualAddressError,
    ProcessNotFoundError,
    SegmentationFaultError,
    Translation,
    TranslationError,
    TranslationMode,
    translate,
    translate_text,
)

__all__ = [
    "MAX_MEMORY",
    "PAGE_SIZE",
    "AllocationResult",
    "BestFitPolicy",
    "BlockType",
    "FirstFitPolicy",
    "FitStrategy",
    "FragmentationFigures",
    "FragmentationReport",
    "InvalidVirtualAddressError",
    "MemoryBlock",
    "PageTableEntry",
    "PlacementPolicy",
    "ProcessNotFoundError",
    "SegmentPlacement",
    "SegmentTableEntry",
    "SegmentationFaultError",
    "Translation",
    "TranslationError",
    "TranslationMode",
    "WorstFitPolicy",
    "allocate_memory",
    "blocks_from_sizes",
    "build_page_table",
    "build_segment_table",
    "calculate_fragmentation",
    "parse_strategy",
    "seed_free_blocks",
    "segment_layout",
    "select_block",
    "translate",
    "translate_text",
]
