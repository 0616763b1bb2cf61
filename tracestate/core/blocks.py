"""
Memory block descriptors and the per-version block record formats.

A block record is two 32-bit addresses followed by the raw page data. Decoding
a record only notes where its data starts in the file and skips over it; the
bytes are read later, on demand, by the range reader.
"""
import os
import struct
import logging
from collections import namedtuple

from tracestate.config import TAINT_BLOCK_SIZE, NUM_TAINT_BLOCKS
from tracestate.core.errors import (StateFileError, UnknownVersion, UnimplementedTaint,
                                    PayloadSizeMismatch)

l = logging.getLogger(name=__name__)

#------------------------------------------------------------------------------
# TAINT
#------------------------------------------------------------------------------

TaintRegion = namedtuple('TaintRegion', ['start_addr', 'mask', 'position'])

def hamming_weight64(mask):
    """Count the bits set in a 64-bit mask"""
    return bin(mask & 0xFFFFFFFFFFFFFFFF).count('1')

def tainted_byte_count(region):
    """Number of tainted bytes in a 64-byte taint region"""
    return hamming_weight64(region.mask)

#------------------------------------------------------------------------------
# BLOCKS
#------------------------------------------------------------------------------

class MemoryBlock(namedtuple('MemoryBlock', ['first', 'last', 'payload_offset', 'version', 'taint'])):
    """
    A contiguous run of captured memory.

    first and last are inclusive addresses; the block's bytes sit at
    payload_offset in the state file. taint is a tuple of TaintRegion.
    """
    __slots__ = ()

    def __new__(cls, first, last, payload_offset=0, version=40, taint=()):
        if last < first:
            raise StateFileError(f"block ends at {hex(last)} before it starts at {hex(first)}")
        return super().__new__(cls, first, last, payload_offset, version, tuple(taint))

    @property
    def size(self):
        return self.last - self.first + 1

    @property
    def taint_block_size(self):
        return BLOCK_FORMATS[self.version].taint_block_size

    @property
    def num_taint_blocks(self):
        return BLOCK_FORMATS[self.version].num_taint_blocks

    @property
    def num_tainted_bytes(self):
        return sum(tainted_byte_count(region) for region in self.taint)

    def contains(self, addr):
        return self.first <= addr <= self.last

    def overlaps(self, first, last):
        return self.last >= first and self.first <= last

    def __repr__(self):
        return f"MemoryBlock({hex(self.first)}-{hex(self.last)} @ {self.payload_offset}, v{self.version})"

#------------------------------------------------------------------------------
# RECORD FORMATS
#------------------------------------------------------------------------------

BlockFormat = namedtuple('BlockFormat', [
    'version',
    'signed',           # addresses are signed 32-bit values widened to 64 bits
    'exclusive_end',    # stored end address is one past the last byte
    'taint_block_size',
    'num_taint_blocks',
])

BLOCK_FORMATS = {
    10: BlockFormat(10, signed=True, exclusive_end=True, taint_block_size=0, num_taint_blocks=0),
    20: BlockFormat(20, signed=False, exclusive_end=False, taint_block_size=0, num_taint_blocks=0),
    30: BlockFormat(30, signed=False, exclusive_end=False,
                    taint_block_size=TAINT_BLOCK_SIZE, num_taint_blocks=NUM_TAINT_BLOCKS),
    40: BlockFormat(40, signed=False, exclusive_end=False,
                    taint_block_size=TAINT_BLOCK_SIZE, num_taint_blocks=NUM_TAINT_BLOCKS),
}

RECORD_HEADER_SIZE = 8

def block_format(version):
    """Select the record format for a header version"""
    try:
        return BLOCK_FORMATS[version]
    except KeyError:
        raise UnknownVersion(version) from None

def decode_block(fmt, flags, stream):
    """
    Decode one block record, leaving the stream at the next record.

    Args:
        fmt: BlockFormat of the file
        flags: StateFlags from the header
        stream: Binary file object positioned at a record

    Returns:
        MemoryBlock, or None once the input is exhausted
    """
    raw = stream.read(RECORD_HEADER_SIZE)
    if len(raw) < RECORD_HEADER_SIZE:
        if raw:
            l.warning(f"Ignoring {len(raw)} trailing bytes at offset {stream.tell() - len(raw)}")
        return None

    if fmt.signed:
        first, last = struct.unpack('<ii', raw)
    else:
        first, last = struct.unpack('<II', raw)
    if fmt.exclusive_end:
        last -= 1

    if fmt.num_taint_blocks and flags.includes_taint:
        raise UnimplementedTaint(fmt.version)

    pos = stream.tell()
    block = MemoryBlock(first, last, payload_offset=pos, version=fmt.version)
    stream.seek(block.size, os.SEEK_CUR)
    l.debug(f"Decoded {block}")
    return block

def read_blocks(header, stream):
    """Decode block records until the end of the input"""
    fmt = block_format(header.version)
    blocks = []
    while True:
        block = decode_block(fmt, header.flags, stream)
        if block is None:
            break
        blocks.append(block)
    l.info(f"Read {len(blocks)} memory blocks")
    return blocks

def encode_block(fmt, block, payload, output):
    """
    Write one block record.

    Addresses are stored as their low 32 bits. Taint is never written.
    """
    payload = bytes(payload)
    if len(payload) != block.size:
        raise PayloadSizeMismatch(block.size, len(payload))
    end = block.last + 1 if fmt.exclusive_end else block.last
    output.write(struct.pack('<II', block.first & 0xFFFFFFFF, end & 0xFFFFFFFF))
    output.write(payload)
