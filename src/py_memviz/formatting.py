"""Display helpers shared by the web UI and the session log."""

KIB = 1024
MIB = 1024 * 1024

# One colour per process id, cycling.
PROCESS_COLORS = (
    "hsl(187 100% 50%)",
    "hsl(145 65% 50%)",
    "hsl(40 90% 55%)",
    "hsl(280 70% 60%)",
    "hsl(15 85% 60%)",
    "hsl(200 100% 45%)",
)


def format_bytes(size: float, *, digits: int = 2) -> str:
    """Render a byte count as ``B``, ``KB`` or ``MB``.

    >>> format_bytes(512)
    '512 B'
    >>> format_bytes(8192)
    '8.00 KB'
    """
    if size >= MIB:
        return f"{size / MIB:.{digits}f} MB"
    if size >= KIB:
        return f"{size / KIB:.{digits}f} KB"
    return f"{size} B"


def format_address(address: int) -> str:
    """Render an address as ``0x`` plus six upper-case hex digits."""
    return f"0x{address:06X}"


def process_color(process_id: int) -> str:
    """Return the display colour for *process_id*."""
    return PROCESS_COLORS[process_id % len(PROCESS_COLORS)]
