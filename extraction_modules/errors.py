"""
Exceptions raised by the heap extractor

Process-level failures (not found, handle denied, wrong platform) abort an
extraction. MemoryReadError is region-level and is always recovered by the
memory reader.
"""

from typing import Optional


class HeapExtractorError(Exception):
    """Base class for heap extractor failures."""


class ProcessNotFoundError(HeapExtractorError):
    """Raised when no running process matches the requested name."""

    def __init__(self, process_name: str):
        self.process_name = process_name
        super().__init__(f"Process '{process_name}' not found!")


class HandleOpenError(HeapExtractorError):
    """Raised when the OS refuses to open the target process."""

    def __init__(self, process_id: int, error_code: Optional[int] = None):
        self.process_id = process_id
        self.error_code = error_code
        super().__init__(f"Failed to open process. Error: {error_code}")


class PlatformNotSupportedError(HeapExtractorError):
    """Raised when live process access is attempted outside Windows."""


class MemoryReadError(HeapExtractorError):
    """Raised by a memory backend when a region cannot be read."""

    def __init__(self, address: int, size: int, error_code: Optional[int] = None):
        self.address = address
        self.size = size
        self.error_code = error_code
        super().__init__(
            f"ReadProcessMemory failed at {hex(address)} ({size} bytes), error: {error_code}"
        )
