"""
Typed values and strings read from the snapshot's address space.
"""
import struct
import logging

from tracestate.core.errors import IncompleteValue

l = logging.getLogger(name=__name__)

NUL = 0
# A wide string ends with a character whose high byte is zero followed by a
# zero character
WIDE_TERMINATOR = b"\x00\x00\x00"

def assemble(values, big_endian=False):
    """
    Combine bytes into an unsigned integer.

    The bytes are taken least significant first; big-endian values are
    reversed before being combined.
    """
    if big_endian:
        values = list(reversed(values))
    result = 0
    for i, value in enumerate(values):
        result |= value << (8 * i)
    return result

class ValueDecoder:
    """Scalar, array and string accessors built on a RangeReader"""

    def __init__(self, reader):
        self.reader = reader

    @property
    def index(self):
        return self.reader.index

    def _read_exact(self, addr, size):
        """Read size contiguous bytes at addr or raise IncompleteValue"""
        if size <= 0:
            return b""
        pairs = self.reader.read_range(addr, addr + size - 1)
        if len(pairs) != size:
            raise IncompleteValue(addr, size, len(pairs))
        return bytes(value for _, value in pairs)

    #--------------------------------------------------------------------------
    # SCALARS
    #--------------------------------------------------------------------------

    def get_byte(self, addr):
        return self._read_exact(addr, 1)[0]

    def get_char(self, addr):
        return self._read_exact(addr, 1)

    def get_short(self, addr, big_endian=False):
        """16-bit unsigned value at addr"""
        return assemble(self._read_exact(addr, 2), big_endian)

    def get_word(self, addr, big_endian=False):
        """32-bit unsigned value at addr"""
        return assemble(self._read_exact(addr, 4), big_endian)

    def get_long(self, addr, big_endian=False):
        """64-bit unsigned value at addr"""
        return assemble(self._read_exact(addr, 8), big_endian)

    def get_float(self, addr, big_endian=False):
        return struct.unpack('<f', struct.pack('<I', self.get_word(addr, big_endian)))[0]

    def get_double(self, addr, big_endian=False):
        return struct.unpack('<d', struct.pack('<Q', self.get_long(addr, big_endian)))[0]

    #--------------------------------------------------------------------------
    # ARRAYS AND STRINGS
    #--------------------------------------------------------------------------

    def get_array(self, addr, size):
        """List of size byte values starting at addr"""
        return list(self._read_exact(addr, size))

    def get_string(self, addr, size):
        """The size bytes starting at addr"""
        return self._read_exact(addr, size)

    def _scan_blocks(self, addr):
        """
        Yield the data of the block at the page of addr, starting from addr,
        then the full data of every later block.
        """
        for i, block in enumerate(self.index.blocks_from_page(addr)):
            start = block.first if i else max(addr, block.first)
            if start > block.last:
                l.debug(f"{hex(addr)} lies past the end of {block!r}")
                return
            yield self.reader.read_clipped(block, start, block.last)

    def get_ascii_string(self, addr):
        """
        Bytes from addr up to the first zero byte.

        Scanning begins in the first block starting in the page of addr and
        then runs through every later block, whether or not they are
        contiguous. An unterminated string returns everything scanned.
        """
        buf = bytearray()
        for data in self._scan_blocks(addr):
            idx = data.find(NUL)
            if idx >= 0:
                buf += data[:idx]
                break
            buf += data
        return bytes(buf)

    def get_wide_string(self, addr):
        """
        UTF-16LE bytes from addr up to the null character.

        The result keeps the zero high byte of the last character but drops
        the terminator. Zero bytes at the end of one block are carried into
        the next so a terminator split across blocks is still found.
        """
        buf = bytearray()
        carried = 0
        for data in self._scan_blocks(addr):
            # NOTE: terminators split across blocks have not been seen in real state files
            if carried == 2 and len(data) > 0 and data[0] == NUL:
                break
            if carried == 1 and len(data) > 1 and data[0] == NUL and data[1] == NUL:
                break
            idx = data.find(WIDE_TERMINATOR)
            if idx >= 0:
                buf += data[:idx + 1]
                break
            buf += data
            carried = 0
            if data[-1] == NUL:
                carried = 2 if len(data) > 1 and data[-2] == NUL else 1
        return bytes(buf)
