"""
Tests for header decoding and encoding.
"""
import io
import struct

import pytest

from tracestate.config import MAGIC_NUMBER
from tracestate.core.errors import UnknownVersion, TruncatedStateFile
from tracestate.core.header import (
    StateFlags,
    StateHeader,
    LEGACY_FLAGS,
    decode_header,
    encode_header,
    encode_flags,
    decode_flags,
    make_header,
)


ALL_FLAGS = StateFlags(True, True, True, True, True)
NO_FLAGS = StateFlags(False, False, False, False, False)


def roundtrip(header):
    buf = io.BytesIO()
    encode_header(header, buf)
    buf.seek(0)
    return decode_header(buf), buf


class TestDecode:
    """Tests for decode_header."""

    def test_legacy_file_without_magic(self):
        """Without the magic number the file is version 10 and nothing is consumed."""
        buf = io.BytesIO(struct.pack('<II', 0x1000, 0x2000) + b"data")
        header = decode_header(buf)
        assert header == StateHeader(10, 32, LEGACY_FLAGS)
        assert buf.tell() == 0

    def test_short_file_is_legacy(self):
        buf = io.BytesIO(b"\x01\x02")
        assert decode_header(buf).version == 10
        assert buf.tell() == 0

    def test_version_20_consumes_only_prologue(self):
        buf = io.BytesIO(struct.pack('<II', MAGIC_NUMBER, 20) + b"rest")
        header = decode_header(buf)
        assert header == StateHeader(20, 32, LEGACY_FLAGS)
        assert buf.tell() == 8

    def test_version_30_forces_virtual_and_snapshot(self):
        buf = io.BytesIO(struct.pack('<IIHH', MAGIC_NUMBER, 30, 32, 0x0))
        header = decode_header(buf)
        assert header.word_size == 32
        assert header.flags == StateFlags(False, False, False, True, True)
        assert buf.tell() == 12

    def test_version_30_decodes_low_bits(self):
        buf = io.BytesIO(struct.pack('<IIHH', MAGIC_NUMBER, 30, 16, 0x3))
        header = decode_header(buf)
        assert header.word_size == 16
        assert header.flags.includes_registers
        assert header.flags.includes_kernel_mem
        assert not header.flags.includes_taint

    def test_version_40_decodes_all_bits(self):
        buf = io.BytesIO(struct.pack('<IIHH', MAGIC_NUMBER, 40, 32, 0x1 | 0x10))
        header = decode_header(buf)
        assert header.flags == StateFlags(True, False, False, False, True)

    def test_unknown_version(self):
        buf = io.BytesIO(struct.pack('<IIHH', MAGIC_NUMBER, 25, 32, 0))
        with pytest.raises(UnknownVersion) as excinfo:
            decode_header(buf)
        assert excinfo.value.version == 25

    def test_truncated_header_body(self):
        buf = io.BytesIO(struct.pack('<IIH', MAGIC_NUMBER, 40, 32))
        with pytest.raises(TruncatedStateFile):
            decode_header(buf)


class TestEncode:
    """Tests for encode_header and flag packing."""

    def test_version_10_writes_nothing(self):
        buf = io.BytesIO()
        encode_header(make_header(10), buf)
        assert buf.getvalue() == b""

    def test_version_20_writes_magic_and_version(self):
        buf = io.BytesIO()
        encode_header(make_header(20), buf)
        assert buf.getvalue() == struct.pack('<II', MAGIC_NUMBER, 20)

    def test_version_40_layout(self):
        buf = io.BytesIO()
        encode_header(StateHeader(40, 32, StateFlags(True, False, True, False, True)), buf)
        assert buf.getvalue() == struct.pack('<IIHH', MAGIC_NUMBER, 40, 32, 0x1 | 0x4 | 0x10)

    def test_encode_flags(self):
        assert encode_flags(ALL_FLAGS) == 0x1F
        assert encode_flags(NO_FLAGS) == 0

    def test_decode_flags_unknown_version(self):
        with pytest.raises(UnknownVersion):
            decode_flags(20, 0)

    def test_encode_unknown_version(self):
        with pytest.raises(UnknownVersion):
            encode_header(StateHeader(50, 32, LEGACY_FLAGS), io.BytesIO())


class TestRoundTrip:
    """decode(encode(h)) == h for every versioned header."""

    @pytest.mark.parametrize("version", [20, 30, 40])
    def test_roundtrip(self, version):
        header = make_header(version, word_size=32, includes_kernel_mem=True)
        decoded, buf = roundtrip(header)
        assert decoded == header
        assert buf.tell() == len(buf.getvalue())

    def test_roundtrip_v40_every_flag_combination(self):
        for raw in range(32):
            header = StateHeader(40, 16, decode_flags(40, raw))
            assert roundtrip(header)[0] == header

    def test_make_header_v30_keeps_forced_flags(self):
        header = make_header(30, virtual_addresses=False, process_snapshot=False)
        assert header.flags.virtual_addresses
        assert header.flags.process_snapshot
        assert roundtrip(header)[0] == header
