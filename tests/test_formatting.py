"""Tests for display helpers."""

from py_memviz.formatting import PROCESS_COLORS, format_address, format_bytes, process_color


class TestFormatBytes:
    """Verify byte-count rendering."""

    def test_bytes(self) -> None:
        """Below 1 KiB the count is shown as-is."""
        assert format_bytes(1023) == "1023 B"

    def test_kilobytes(self) -> None:
        """KiB values get two decimals."""
        assert format_bytes(1536) == "1.50 KB"

    def test_megabytes(self) -> None:
        """MiB values get two decimals."""
        assert format_bytes(1_048_576) == "1.00 MB"

    def test_custom_digits(self) -> None:
        """Comparison views use one decimal."""
        assert format_bytes(8192, digits=1) == "8.0 KB"


class TestFormatAddress:
    """Verify address rendering."""

    def test_zero_padded_upper_hex(self) -> None:
        """Six upper-case hex digits after 0x."""
        assert format_address(0xABC) == "0x000ABC"


class TestProcessColor:
    """Verify the colour palette."""

    def test_palette_cycles(self) -> None:
        """Ids wrap around the palette."""
        assert process_color(len(PROCESS_COLORS)) == process_color(0)
        assert process_color(1) != process_color(2)
