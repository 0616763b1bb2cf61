"""
Reads address ranges out of a state file.

Every read seeks the shared file cursor to the payload of each overlapping
block and reads only the clipped part. Nothing is cached, and addresses that
no block covers are left out of the result rather than filled in.
"""
import logging

from tracestate.core.errors import StateClosed, TruncatedStateFile

l = logging.getLogger(name=__name__)

# Largest address iter() walks up to
MAX_ADDRESS = 2**63 - 1

class RangeReader:
    """
    Range queries over an AddressSpaceIndex backed by an open binary stream.

    The stream's cursor is repositioned by every call, so a reader must not be
    shared between threads without external locking.
    """

    def __init__(self, index, stream):
        self.index = index
        self.stream = stream

    def read_clipped(self, block, start, end):
        """
        Read the bytes of block for addresses start..end (inclusive).

        The caller guarantees block.first <= start <= end <= block.last.
        """
        if self.stream.closed:
            raise StateClosed()
        size = end - start + 1
        self.stream.seek(block.payload_offset + (start - block.first))
        data = self.stream.read(size)
        if len(data) != size:
            raise TruncatedStateFile(f"payload of {block!r} ends after {len(data)} of {size} bytes "
                                     f"read from {hex(start)}")
        return data

    def read_segments(self, first, last):
        """
        Yield (start_address, data) for every block overlapping [first, last],
        clipped to the range, in ascending address order.
        """
        for block in self.index.overlapping(first, last):
            start = max(first, block.first)
            end = min(last, block.last)
            l.debug(f"Reading {hex(start)}-{hex(end)} from {block!r}")
            yield start, self.read_clipped(block, start, end)

    def read_range(self, first, last):
        """
        Read the bytes present in [first, last].

        Returns:
            List of (address, byte) pairs in ascending address order; gaps
            are simply missing
        """
        pairs = []
        for start, data in self.read_segments(first, last):
            pairs.extend(zip(range(start, start + len(data)), data))
        return pairs

    def read_range_map(self, first, last):
        """Bytes present in [first, last] as an {address: byte} dict"""
        table = {}
        for start, data in self.read_segments(first, last):
            for offset, value in enumerate(data):
                table[start + offset] = value
        return table

    def iter_range(self, f, first, last):
        """Call f(address, byte) for every byte present in [first, last]"""
        for start, data in self.read_segments(first, last):
            for offset, value in enumerate(data):
                f(start + offset, value)

    def iter(self, f):
        """Call f(address, byte) for every byte in the state file"""
        self.iter_range(f, 0, MAX_ADDRESS)
