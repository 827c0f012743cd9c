"""
Extraction Modules Package
Region walking, classification, memory reading, text recovery and reporting
for the heap extractor
"""

from .errors import (
    HeapExtractorError, ProcessNotFoundError, HandleOpenError,
    MemoryReadError, PlatformNotSupportedError,
)
from .heap_session import HeapExtractionSession
from .models import RegionDescriptor, HeapSnapshot, ProcessSnapshot
from .text_recovery import TextRecoveryEngine

__all__ = [
    'HeapExtractionSession', 'TextRecoveryEngine',
    'RegionDescriptor', 'HeapSnapshot', 'ProcessSnapshot',
    'HeapExtractorError', 'ProcessNotFoundError', 'HandleOpenError',
    'MemoryReadError', 'PlatformNotSupportedError',
]
__version__ = '1.0.0'
