"""
Region Enumerator - walks a process's virtual address space

Each iteration restarts at address 0 and repeatedly asks the backend for the
region that starts at or after the current address.
"""

from typing import Callable, Iterator, Optional

from .models import RegionDescriptor
from .winapi import PAGE_SIZE, SIZE_T_MASK

RegionQuery = Callable[[int], Optional[RegionDescriptor]]


class RegionEnumerator:
    """
    Lazy, restartable sequence of RegionDescriptor

    Args:
        query: callable(address) returning the region at or after address,
               or None once the end of the address space is reached
        start_address: address the walk begins at
    """

    def __init__(self, query: RegionQuery, start_address: int = 0):
        self.query = query
        self.start_address = start_address

    def __iter__(self) -> Iterator[RegionDescriptor]:
        address = self.start_address

        while True:
            region = self.query(address)
            if region is None:
                return

            yield region

            next_address = region.end_address & SIZE_T_MASK
            if region.region_size == 0:
                next_address = (region.base_address + PAGE_SIZE) & SIZE_T_MASK

            # Address space overflow
            if next_address <= region.base_address:
                return

            address = next_address


def iter_regions(query: RegionQuery) -> Iterator[RegionDescriptor]:
    """Convenience wrapper: walk the whole address space once."""
    return iter(RegionEnumerator(query))
