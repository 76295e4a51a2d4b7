"""py-memviz — an educational visualizer for memory management.

The package models the three classic ways an operating system hands
out memory:

- **Paging** — fixed-size pages mapped onto physical frames.
- **Segmentation** — variable-size segments described by base + limit.
- **Contiguous allocation** — first-fit, best-fit and worst-fit
  placement into a fragmented free list.

The algorithms live in ``py_memviz.memory``; everything they need is a
list of ``Process`` records.  The web UI in ``py_memviz.web`` draws the
results.
"""
