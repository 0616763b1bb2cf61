"""
The x86 user register snapshot stored after the header.
"""
import struct
from collections import namedtuple

from tracestate.core.header import read_exact

UserRegisters = namedtuple('UserRegisters', [
    'eax', 'ebx', 'ecx', 'edx', 'esi', 'edi', 'ebp', 'esp',
    'eip', 'eflags', 'xcs', 'xds', 'xes', 'xfs', 'xgs', 'xss',
])

# On-disk order. None marks the orig_eax slot, which is not a user register.
WIRE_ORDER = (
    'ebx', 'ecx', 'edx', 'esi', 'edi', 'ebp', 'eax',
    'xds', 'xes', 'xfs', 'xgs', None,
    'eip', 'xcs', 'eflags', 'esp', 'xss',
)

_REGS_STRUCT = struct.Struct('<' + 'I' * len(WIRE_ORDER))

REGISTERS_SIZE = _REGS_STRUCT.size

def decode_registers(stream):
    """Read the 17-word register section, dropping the reserved slot"""
    words = _REGS_STRUCT.unpack(read_exact(stream, REGISTERS_SIZE, "register section"))
    return UserRegisters(**{name: word for name, word in zip(WIRE_ORDER, words) if name is not None})

def encode_registers(registers, output):
    """Write the register section; the reserved slot is written as zero"""
    words = [0 if name is None else getattr(registers, name) & 0xFFFFFFFF for name in WIRE_ORDER]
    output.write(_REGS_STRUCT.pack(*words))
