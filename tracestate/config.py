"""
Shared constants and logging setup for reading state files.
"""
import logging

# Magic number opening every versioned state file
MAGIC_NUMBER = 0xFFFEFFFE

DEFAULT_PAGE_SIZE = 4096

# x86 NOP, used for addresses missing from the snapshot when writing a range
DEFAULT_FILL_BYTE = 0x90

# Upper bound on a single run of fill bytes emitted by write_range
MAX_GAP_SIZE = 2**31 - 1

# Taint is tracked per 64-byte sub-block, 64 sub-blocks per page
TAINT_BLOCK_SIZE = 64
NUM_TAINT_BLOCKS = 64


def configure_logging(verbose=False):
    """Configure logging levels based on verbosity"""
    logging.getLogger('tracestate').setLevel(logging.INFO if verbose else logging.WARNING)
    logging.getLogger('tracestate.core').setLevel(logging.DEBUG if verbose else logging.WARNING)
