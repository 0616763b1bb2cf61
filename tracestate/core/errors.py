"""
Exceptions raised while decoding or querying state files.
"""

class StateFileError(RuntimeError):
    """Base class for every state file error"""
    pass

class UnknownVersion(StateFileError):
    """The header names a format version outside 10/20/30/40"""
    def __init__(self, version):
        super().__init__(f"unknown state file version {version}")
        self.version = version

class IncompleteValue(StateFileError):
    """
    A fixed-width value could not be read in full because some of its bytes
    are missing from the snapshot.
    """
    def __init__(self, addr, wanted, found):
        super().__init__(f"only {found} of {wanted} bytes present at {hex(addr)}")
        self.addr = addr
        self.wanted = wanted
        self.found = found

class RegistersUnavailable(StateFileError):
    """The state file was written without a register snapshot"""
    def __init__(self):
        super().__init__("state file does not include registers")

class UnimplementedTaint(StateFileError):
    """Taint information is present but decoding it is not supported"""
    def __init__(self, version):
        super().__init__(f"decoding taint information of version {version} blocks is not implemented")
        self.version = version

class GapTooLarge(StateFileError):
    def __init__(self, gap_size):
        super().__init__(f"could not fill gap of size: {gap_size}")
        self.gap_size = gap_size

class PayloadSizeMismatch(StateFileError):
    def __init__(self, expected, actual):
        super().__init__(f"block holds {expected} bytes but payload has {actual}")
        self.expected = expected
        self.actual = actual

class TruncatedStateFile(StateFileError):
    """The file ended in the middle of a section that must be complete"""
    pass

class StateClosed(StateFileError):
    def __init__(self):
        super().__init__("state file is closed")
