"""
State file header: format version, word size and feature flags.

Version 10 files carry no header at all. Every later version opens with the
magic number followed by the version; versions 30 and 40 add the word size and
a 16-bit flag word.
"""
import struct
import logging
from collections import namedtuple

from tracestate.config import MAGIC_NUMBER
from tracestate.core.errors import UnknownVersion, TruncatedStateFile

l = logging.getLogger(name=__name__)

# Flag word bits
REGISTERS_MASK = 0x1
KERNEL_MEM_MASK = 0x2
TAINT_MASK = 0x4
VIRTUAL_ADDR_MASK = 0x8
PROCESS_SNAPSHOT_MASK = 0x10

StateFlags = namedtuple('StateFlags', [
    'includes_registers',
    'includes_kernel_mem',
    'includes_taint',
    'virtual_addresses',
    'process_snapshot',
])

StateHeader = namedtuple('StateHeader', ['version', 'word_size', 'flags'])

# Versions 10 and 20 have no flag word; kernel memory is assumed absent
LEGACY_FLAGS = StateFlags(
    includes_registers=True,
    includes_kernel_mem=False,
    includes_taint=False,
    virtual_addresses=True,
    process_snapshot=True,
)

def read_exact(stream, size, what):
    """Read exactly size bytes or raise TruncatedStateFile"""
    data = stream.read(size)
    if len(data) != size:
        raise TruncatedStateFile(f"file ends inside {what} (wanted {size} bytes, got {len(data)})")
    return data

def decode_flags(version, raw):
    """
    Decode a raw flag word.

    Version 30 only knows the first three bits; its snapshots are always
    process snapshots with virtual addresses.
    """
    if version == 30:
        return StateFlags(
            includes_registers=bool(raw & REGISTERS_MASK),
            includes_kernel_mem=bool(raw & KERNEL_MEM_MASK),
            includes_taint=bool(raw & TAINT_MASK),
            virtual_addresses=True,
            process_snapshot=True,
        )
    if version == 40:
        return StateFlags(
            includes_registers=bool(raw & REGISTERS_MASK),
            includes_kernel_mem=bool(raw & KERNEL_MEM_MASK),
            includes_taint=bool(raw & TAINT_MASK),
            virtual_addresses=bool(raw & VIRTUAL_ADDR_MASK),
            process_snapshot=bool(raw & PROCESS_SNAPSHOT_MASK),
        )
    raise UnknownVersion(version)

def encode_flags(flags):
    """Pack flags into the 16-bit flag word"""
    raw = 0
    if flags.includes_registers:
        raw |= REGISTERS_MASK
    if flags.includes_kernel_mem:
        raw |= KERNEL_MEM_MASK
    if flags.includes_taint:
        raw |= TAINT_MASK
    if flags.virtual_addresses:
        raw |= VIRTUAL_ADDR_MASK
    if flags.process_snapshot:
        raw |= PROCESS_SNAPSHOT_MASK
    return raw

def decode_header(stream):
    """
    Read the header from the start of a binary stream.

    Args:
        stream: Binary file object positioned at offset 0

    Returns:
        StateHeader; the stream is left at the first byte after the header
        (offset 0 for legacy version 10 files)
    """
    prologue = stream.read(4)
    if len(prologue) == 4 and struct.unpack('<I', prologue)[0] == MAGIC_NUMBER:
        (version,) = struct.unpack('<I', read_exact(stream, 4, "header version"))
    else:
        stream.seek(0)
        version = 10

    if version in (10, 20):
        header = StateHeader(version=version, word_size=32, flags=LEGACY_FLAGS)
    elif version in (30, 40):
        word_size, raw_flags = struct.unpack('<HH', read_exact(stream, 4, "header body"))
        header = StateHeader(version=version, word_size=word_size, flags=decode_flags(version, raw_flags))
    else:
        raise UnknownVersion(version)

    l.info(f"State file version {header.version}, word size {header.word_size}")
    l.debug(f"Header flags: {header.flags}")
    return header

def encode_header(header, output):
    """
    Write a header to a binary output stream.

    Version 20 stores only the magic number and version, so its word size and
    flags are not persisted.
    """
    if header.version == 10:
        return
    if header.version == 20:
        output.write(struct.pack('<II', MAGIC_NUMBER, header.version))
    elif header.version in (30, 40):
        output.write(struct.pack('<IIHH', MAGIC_NUMBER, header.version,
                                 header.word_size, encode_flags(header.flags)))
    else:
        raise UnknownVersion(header.version)

def make_header(version, word_size=32, **flags):
    """
    Build a header for writing, starting from the legacy flag set.

    Args:
        version: One of 10, 20, 30, 40
        word_size: Word size in bits (only persisted by versions 30 and 40)
        **flags: StateFlags fields to override
    """
    if version in (10, 20):
        return StateHeader(version=version, word_size=32, flags=LEGACY_FLAGS)
    if version not in (30, 40):
        raise UnknownVersion(version)
    merged = LEGACY_FLAGS._replace(**flags)
    if version == 30:
        merged = merged._replace(virtual_addresses=True, process_snapshot=True)
    return StateHeader(version=version, word_size=word_size, flags=merged)
