"""
Memory initialization facts for seeding an analysis engine from a snapshot.
"""
from collections import namedtuple

# target[address] = value, one byte
MemoryInit = namedtuple('MemoryInit', ['target', 'address', 'value'])

def range_inits(reader, ranges, target):
    """
    One MemoryInit per byte present in each range.

    Args:
        reader: RangeReader over the state file
        ranges: Iterable of inclusive (first, last) pairs
        target: Memory the facts assign to, passed through untouched

    Returns:
        List of MemoryInit, ranges in the given order and addresses ascending
        within each range; missing bytes produce no fact
    """
    inits = []
    for first, last in ranges:
        inits.extend(MemoryInit(target, addr, value) for addr, value in reader.read_range(first, last))
    return inits
