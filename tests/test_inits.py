"""
Tests for memory initialization facts.
"""
from tracestate.core.inits import MemoryInit
from tracestate.state import generate_range_inits


def test_range_inits_order_and_gaps(open_sample):
    state = open_sample([(0x1000, b"\x01\x02"), (0x1004, b"\x03"), (0x2000, b"\x04\x05")])
    inits = state.range_inits([(0x2001, 0x2001), (0x1000, 0x1004)], "mem")
    assert inits == [
        MemoryInit("mem", 0x2001, 0x05),
        MemoryInit("mem", 0x1000, 0x01),
        MemoryInit("mem", 0x1001, 0x02),
        MemoryInit("mem", 0x1004, 0x03),
    ]


def test_range_inits_missing_range(open_sample):
    state = open_sample([(0x1000, b"\x01")])
    assert state.range_inits([(0x3000, 0x3fff)], "mem") == []
    assert state.range_inits([], "mem") == []


def test_target_passed_through(open_sample):
    target = object()
    state = open_sample([(0x1000, b"\x01")])
    (init,) = state.range_inits([(0x1000, 0x1000)], target)
    assert init.target is target


def test_generate_range_inits(make_state_file):
    path = make_state_file([(0x1000, b"xyz")])
    inits = generate_range_inits(path, [(0x1001, 0x1005)], "m")
    assert [(i.address, i.value) for i in inits] == [(0x1001, ord("y")), (0x1002, ord("z"))]
