"""
Writes an address range as one contiguous byte stream, filling gaps.
"""
import logging

from tracestate.config import DEFAULT_FILL_BYTE, MAX_GAP_SIZE
from tracestate.core.errors import GapTooLarge

l = logging.getLogger(name=__name__)

def write_gap(output, gap_size, fill_byte=DEFAULT_FILL_BYTE, max_gap_size=MAX_GAP_SIZE):
    """Write gap_size fill bytes; returns the number written"""
    if gap_size > max_gap_size:
        raise GapTooLarge(gap_size)
    if gap_size <= 0:
        return 0
    output.write(bytes([fill_byte]) * gap_size)
    return gap_size

def write_range(reader, output, first, last, fill_byte=DEFAULT_FILL_BYTE, max_gap_size=MAX_GAP_SIZE):
    """
    Write the contents of [first, last] to output.

    Args:
        reader: RangeReader over the state file
        output: Binary stream to write to
        first, last: Inclusive address range
        fill_byte: Value written for addresses missing from the state file
        max_gap_size: Largest run of fill bytes allowed in one gap

    Returns:
        Number of bytes written, last - first + 1 unless blocks overlap
    """
    written = 0
    prev_end = None
    for start, data in reader.read_segments(first, last):
        gap_from = first if prev_end is None else prev_end + 1
        written += write_gap(output, start - gap_from, fill_byte, max_gap_size)
        output.write(data)
        written += len(data)
        prev_end = start + len(data) - 1

    written += write_gap(output, (last - first + 1) - written, fill_byte, max_gap_size)
    l.debug(f"Wrote {written} bytes for {hex(first)}-{hex(last)}")
    return written
