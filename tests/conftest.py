"""
Fixtures that build state files on disk with the package's own writer.
"""
import pytest

from tracestate.core.header import make_header
from tracestate.core.registers import UserRegisters
from tracestate.state import write_state, open_state


@pytest.fixture
def sample_registers():
    """Registers with a distinct value in every field."""
    return UserRegisters(
        eax=0x11111111, ebx=0x22222222, ecx=0x33333333, edx=0x44444444,
        esi=0x55555555, edi=0x66666666, ebp=0xbfff0000, esp=0xbffefff0,
        eip=0x08048000, eflags=0x00000246,
        xcs=0x73, xds=0x7b, xes=0x7b, xfs=0x0, xgs=0x33, xss=0x7b,
    )


@pytest.fixture
def make_state_file(tmp_path, sample_registers):
    """
    Return a function writing a state file and returning its path.

    blocks is a list of (first, payload) pairs.
    """
    counter = [0]

    def _make(blocks, version=40, registers=True, **flags):
        header = make_header(version, includes_registers=registers, **flags) if version in (30, 40) \
            else make_header(version)
        counter[0] += 1
        path = tmp_path / f"state{counter[0]}.bin"
        with open(path, 'wb') as output:
            write_state(output, header, sample_registers,
                        [(first, first + len(payload) - 1, payload) for (first, payload) in blocks])
        return str(path)

    return _make


@pytest.fixture
def open_sample(make_state_file):
    """Return a function opening a freshly written state file; closes them all afterwards."""
    opened = []

    def _open(blocks, **kwargs):
        state_iface = open_state(make_state_file(blocks, **kwargs))
        opened.append(state_iface)
        return state_iface

    yield _open
    for state_iface in opened:
        state_iface.close()
