"""
Session interface to a state file: opens it, decodes the header, registers
and block list, and answers memory queries against it.
"""
import logging

from tracestate.config import DEFAULT_FILL_BYTE, DEFAULT_PAGE_SIZE
from tracestate.core.errors import RegistersUnavailable
from tracestate.core.header import decode_header, encode_header
from tracestate.core.registers import decode_registers, encode_registers
from tracestate.core.blocks import MemoryBlock, block_format, read_blocks, encode_block
from tracestate.core.address_space import AddressSpaceIndex
from tracestate.core.range_reader import RangeReader
from tracestate.core.values import ValueDecoder
from tracestate.core.stream_writer import write_range
from tracestate.core.inits import range_inits

l = logging.getLogger(name=__name__)

class StateInterface:
    """
    An open state file.

    The interface owns the file handle. Block data is read on demand by
    seeking the handle, so one interface must only be used from one thread
    at a time.
    """

    def __init__(self, header, stream, registers, blocks, page_size=DEFAULT_PAGE_SIZE):
        self._header = header
        self._stream = stream
        self._registers = registers
        self._index = AddressSpaceIndex(blocks, page_size=page_size)
        self._reader = RangeReader(self._index, stream)
        self._values = ValueDecoder(self._reader)
        self.name = getattr(stream, 'name', None)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def __repr__(self):
        return f"<StateInterface {self.name!r} v{self.version}, {self.num_blocks} blocks>"

    #--------------------------------------------------------------------------
    # HEADER AND REGISTERS
    #--------------------------------------------------------------------------

    @property
    def header(self):
        return self._header

    @property
    def version(self):
        return self._header.version

    @property
    def word_size(self):
        return self._header.word_size

    @property
    def flags(self):
        return self._header.flags

    @property
    def registers(self):
        """The register snapshot; raises RegistersUnavailable if not captured"""
        if self._registers is None:
            raise RegistersUnavailable()
        return self._registers

    @property
    def has_registers(self):
        return self._registers is not None

    #--------------------------------------------------------------------------
    # BLOCKS
    #--------------------------------------------------------------------------

    @property
    def index(self):
        return self._index

    def blocks(self):
        """Blocks in ascending address order"""
        return self._index.blocks()

    @property
    def num_blocks(self):
        return len(self._index)

    def exists(self, addr):
        """True if a block starts at the page-aligned start of addr"""
        return self._index.exists(addr)

    #--------------------------------------------------------------------------
    # MEMORY QUERIES
    #--------------------------------------------------------------------------

    def read_range(self, first, last):
        return self._reader.read_range(first, last)

    def read_range_map(self, first, last):
        return self._reader.read_range_map(first, last)

    def iter_range(self, f, first, last):
        self._reader.iter_range(f, first, last)

    def iter(self, f):
        self._reader.iter(f)

    def get_byte(self, addr):
        return self._values.get_byte(addr)

    def get_char(self, addr):
        return self._values.get_char(addr)

    def get_short(self, addr, big_endian=False):
        return self._values.get_short(addr, big_endian)

    def get_word(self, addr, big_endian=False):
        return self._values.get_word(addr, big_endian)

    def get_long(self, addr, big_endian=False):
        return self._values.get_long(addr, big_endian)

    def get_float(self, addr, big_endian=False):
        return self._values.get_float(addr, big_endian)

    def get_double(self, addr, big_endian=False):
        return self._values.get_double(addr, big_endian)

    def get_array(self, addr, size):
        return self._values.get_array(addr, size)

    def get_string(self, addr, size):
        return self._values.get_string(addr, size)

    def get_ascii_string(self, addr):
        return self._values.get_ascii_string(addr)

    def get_wide_string(self, addr):
        return self._values.get_wide_string(addr)

    def write_range(self, output, first, last, fill_byte=DEFAULT_FILL_BYTE):
        return write_range(self._reader, output, first, last, fill_byte=fill_byte)

    def range_inits(self, ranges, target):
        return range_inits(self._reader, ranges, target)

    #--------------------------------------------------------------------------
    # LIFECYCLE
    #--------------------------------------------------------------------------

    @property
    def closed(self):
        return self._stream.closed

    def close(self):
        """Release the file handle; closing twice is harmless"""
        if not self._stream.closed:
            l.debug(f"Closing {self.name}")
            self._stream.close()

    cleanup = close

#------------------------------------------------------------------------------
# OPEN / CLOSE
#------------------------------------------------------------------------------

def load_state(stream, page_size=DEFAULT_PAGE_SIZE):
    """
    Decode a state file from an already open, seekable binary stream.

    The returned interface takes ownership of the stream.
    """
    header = decode_header(stream)
    registers = decode_registers(stream) if header.flags.includes_registers else None
    blocks = read_blocks(header, stream)
    return StateInterface(header, stream, registers, blocks, page_size=page_size)

def open_state(path, page_size=DEFAULT_PAGE_SIZE):
    """
    Open a state file.

    Raises:
        UnknownVersion: the header names an unsupported version
        UnimplementedTaint: the blocks carry taint information
    """
    l.info(f"Opening state file {path}")
    stream = open(path, 'rb')
    try:
        return load_state(stream, page_size=page_size)
    except Exception:
        stream.close()
        raise

def close_state(state_iface):
    state_iface.close()

def generate_range_inits(path, ranges, target):
    """Open a state file, produce the inits for ranges and close it again"""
    with open_state(path) as state_iface:
        return state_iface.range_inits(ranges, target)

#------------------------------------------------------------------------------
# WRITING
#------------------------------------------------------------------------------

def write_state(output, header, registers, blocks):
    """
    Write a complete state file.

    Args:
        output: Binary stream to write to
        header: StateHeader; its version selects the block format
        registers: UserRegisters, written only if the header flags say so
        blocks: Iterable of (first, last, payload) tuples
    """
    fmt = block_format(header.version)
    encode_header(header, output)
    if header.flags.includes_registers:
        if registers is None:
            raise RegistersUnavailable()
        encode_registers(registers, output)
    count = 0
    for first, last, payload in blocks:
        encode_block(fmt, MemoryBlock(first, last, version=header.version), payload, output)
        count += 1
    l.info(f"Wrote version {header.version} state file with {count} blocks")
