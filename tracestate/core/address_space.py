"""
Sparse model of the captured address space, indexed by block start address.
"""
import bisect
import logging

from tracestate.config import DEFAULT_PAGE_SIZE

l = logging.getLogger(name=__name__)

def page_start(addr, page_size=DEFAULT_PAGE_SIZE):
    """Start address of the memory page containing addr"""
    return (addr // page_size) * page_size

def page_end(addr, page_size=DEFAULT_PAGE_SIZE):
    """Last address of the memory page containing addr"""
    return page_start(addr, page_size) + page_size - 1

def page_list(first, last, page_size=DEFAULT_PAGE_SIZE):
    """Start addresses of the pages making up the range [first, last]"""
    pages = [page_start(first, page_size)]
    while pages[-1] + page_size <= last:
        pages.append(pages[-1] + page_size)
    return pages

class AddressSpaceIndex:
    """
    Ordered map from block start address to MemoryBlock.

    Blocks sharing a start address replace one another, the last one read
    wins. The index is read-only once built.
    """

    def __init__(self, blocks, page_size=DEFAULT_PAGE_SIZE):
        self._blocks = {}
        for block in blocks:
            if block.first in self._blocks:
                l.debug(f"Block at {hex(block.first)} replaces an earlier block")
            self._blocks[block.first] = block
        self._starts = sorted(self._blocks)
        self.page_size = page_size

    def __len__(self):
        return len(self._starts)

    def __iter__(self):
        return (self._blocks[start] for start in self._starts)

    def __contains__(self, addr):
        return self.exists(addr)

    def blocks(self):
        """All blocks in ascending address order"""
        return list(self)

    def exists(self, addr):
        """
        True if a block starts at the page holding addr.

        Only the page-aligned start is looked up: an address covered by a
        block that starts mid-page is reported missing.
        """
        return page_start(addr, self.page_size) in self._blocks

    def get(self, first):
        """Block starting exactly at first, or None"""
        return self._blocks.get(first)

    def overlapping(self, first, last):
        """Blocks intersecting [first, last], in ascending address order"""
        hi = bisect.bisect_right(self._starts, last)
        for start in self._starts[:hi]:
            block = self._blocks[start]
            if block.last >= first:
                yield block

    def blocks_from_page(self, addr):
        """
        Blocks from the first one whose page-aligned start matches the page
        of addr, through the end of the address space.
        """
        target = page_start(addr, self.page_size)
        idx = bisect.bisect_left(self._starts, target)
        if idx == len(self._starts) or self._starts[idx] >= target + self.page_size:
            return []
        return [self._blocks[start] for start in self._starts[idx:]]
