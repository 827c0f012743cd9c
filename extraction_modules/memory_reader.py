"""
Memory Reader - bounded, fault-tolerant copies out of the target process
"""

from typing import Optional

from .errors import MemoryReadError
from .models import CandidateRegion

MAX_READ_SIZE = 64 * 1024  # Max 64KB per region
MAX_READ_REGION_SIZE = 1024 * 1024  # Regions of 1MB or more are never read


class MemoryReader:
    """
    Reads the leading bytes of candidate regions

    The backend must provide read(address, size) -> bytes and raise
    MemoryReadError when the OS reports a failure. A failed or empty read
    is logged and reported as None; it never stops the scan.
    """

    def __init__(
        self,
        memory,
        max_read_size: int = MAX_READ_SIZE,
        max_region_size: int = MAX_READ_REGION_SIZE,
        verbose: bool = False
    ):
        self.memory = memory
        self.max_read_size = max_read_size
        self.max_region_size = max_region_size
        self.verbose = verbose
        self.failed_reads = 0

    def should_read(self, region: CandidateRegion) -> bool:
        """Only regions smaller than the region size guard are read."""
        return region.region_size < self.max_region_size

    def read(self, region: CandidateRegion) -> Optional[bytes]:
        """
        Copy up to max_read_size bytes from the start of a region

        Returns:
            The bytes actually copied (possibly fewer than requested),
            or None when the read failed or copied nothing
        """
        size_to_read = min(region.region_size, self.max_read_size)
        if size_to_read == 0:
            return None

        try:
            data = self.memory.read(region.base_address, size_to_read)
        except MemoryReadError as e:
            self.failed_reads += 1
            if self.verbose:
                print(f"[MemoryReader] {e}")
            return None

        if not data:
            self.failed_reads += 1
            if self.verbose:
                print(f"[MemoryReader] No bytes copied at {hex(region.base_address)}")
            return None

        if self.verbose and len(data) < size_to_read:
            print(f"[MemoryReader] Short read at {hex(region.base_address)}: "
                  f"{len(data)}/{size_to_read} bytes")

        return data
