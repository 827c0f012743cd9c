"""
Data model for heap extraction results

RegionDescriptor is produced by the region walk and never changes.
RegionResult, HeapSnapshot and ProcessSnapshot accumulate the scan output
and are handed to the report renderers once the scan finishes. None of them
hold a live process handle.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from .winapi import (
    MEM_COMMIT, MEM_RESERVE, MEM_FREE,
    MEM_PRIVATE, MEM_MAPPED, MEM_IMAGE,
    SIZE_T_MASK,
)

RATIONALE_PRIVATE = 'private-committed-readable'
RATIONALE_MAPPED = 'small-mapped'


@dataclass(frozen=True)
class RegionDescriptor:
    """One contiguous range of the target's address space."""

    base_address: int
    region_size: int
    state: int
    region_type: int
    protect: int

    @property
    def end_address(self) -> int:
        return self.base_address + self.region_size

    @property
    def is_committed(self) -> bool:
        return self.state == MEM_COMMIT

    @property
    def state_label(self) -> str:
        if self.state == MEM_COMMIT:
            return 'Committed'
        if self.state == MEM_FREE:
            return 'Free'
        return 'Reserved'

    @property
    def backing_label(self) -> str:
        if self.region_type == MEM_PRIVATE:
            return 'Private'
        if self.region_type == MEM_MAPPED:
            return 'Mapped'
        if self.region_type == MEM_IMAGE:
            return 'Image'
        return 'Unknown'


class CandidateRegion:
    """A region the classifier accepted, with the rule that accepted it"""

    def __init__(self, descriptor: RegionDescriptor, rationale: str):
        self.descriptor = descriptor
        self.rationale = rationale

    @property
    def base_address(self) -> int:
        return self.descriptor.base_address

    @property
    def region_size(self) -> int:
        return self.descriptor.region_size

    def __repr__(self):
        return (f"CandidateRegion(base={hex(self.base_address)}, "
                f"size={self.region_size}, rationale='{self.rationale}')")


class DecodeResult:
    """
    Outcome of decoding one detected text run

    A failed decode carries no text. A successful decode may still produce
    a string too short to keep; the caller decides that.
    """

    __slots__ = ('ok', 'text')

    def __init__(self, ok: bool, text: Optional[str] = None):
        self.ok = ok
        self.text = text

    @classmethod
    def success(cls, text: str) -> 'DecodeResult':
        return cls(True, text)

    @classmethod
    def failed(cls) -> 'DecodeResult':
        return cls(False, None)

    def __bool__(self):
        return self.ok

    def __eq__(self, other):
        if not isinstance(other, DecodeResult):
            return NotImplemented
        return self.ok == other.ok and self.text == other.text

    def __repr__(self):
        if self.ok:
            return f"DecodeResult.success({self.text!r})"
        return "DecodeResult.failed()"


class RegionResult:
    """A scanned candidate region and the text recovered from it"""

    def __init__(self, candidate: CandidateRegion):
        self.candidate = candidate
        self.bytes_read = 0
        # dict keys keep insertion order and reject duplicates
        self._texts: Dict[str, None] = {}

    @property
    def descriptor(self) -> RegionDescriptor:
        return self.candidate.descriptor

    @property
    def texts(self) -> List[str]:
        return list(self._texts)

    def add_text(self, text: str) -> bool:
        """Add text unless already present. Returns True if it was new."""
        if text in self._texts:
            return False
        self._texts[text] = None
        return True

    def add_texts(self, texts: Iterable[str]) -> int:
        return sum(1 for text in texts if self.add_text(text))

    def __contains__(self, text):
        return text in self._texts

    def __len__(self):
        return len(self._texts)


def _wrapping_subtract(left: int, right: int) -> int:
    """Subtract the way a native size_t does: wrap instead of going negative."""
    return (left - right) & SIZE_T_MASK


class HeapSnapshot:
    """
    Coarse per-process memory accounting plus the scanned regions

    Sizes come from the process memory counters:
        heap_size      - working set
        committed_size - pagefile usage (commit charge)
        allocated_size - private usage

    uncommitted_size and free_size are derived with size_t arithmetic. When
    the right-hand counter is larger the stored value wraps to a large
    unsigned number; the *_wrapped properties report that condition.
    """

    def __init__(self, working_set: int = 0, pagefile_usage: int = 0, private_usage: int = 0):
        self.heap_size = working_set
        self.committed_size = pagefile_usage
        self.allocated_size = private_usage
        self.uncommitted_size = _wrapping_subtract(working_set, pagefile_usage)
        self.free_size = _wrapping_subtract(pagefile_usage, private_usage)
        # Allocator block walking is not performed
        self.block_count = 0
        self.regions: List[RegionResult] = []

    @property
    def free_size_wrapped(self) -> bool:
        return self.allocated_size > self.committed_size

    @property
    def uncommitted_size_wrapped(self) -> bool:
        return self.committed_size > self.heap_size

    @property
    def extracted_texts(self) -> List[str]:
        """Union of all region texts, in first-seen order."""
        seen: Dict[str, None] = {}
        for region in self.regions:
            for text in region.texts:
                seen.setdefault(text, None)
        return list(seen)

    @property
    def bytes_scanned(self) -> int:
        return sum(region.bytes_read for region in self.regions)

    def add_region(self, region: RegionResult):
        self.regions.append(region)


class ProcessSnapshot:
    """Extraction result for one process. Totals are filled by the aggregator."""

    def __init__(self, process_id: int, process_name: str):
        self.process_id = process_id
        self.process_name = process_name
        self.heaps: List[HeapSnapshot] = []
        self.total_heap_size = 0
        self.total_committed_size = 0
        self.total_allocated_size = 0
        self.total_free_size = 0
        self.total_block_count = 0

    def __repr__(self):
        return f"ProcessSnapshot(name='{self.process_name}', pid={self.process_id}, heaps={len(self.heaps)})"
