"""
Aggregator - rolls per-heap sizes up into process totals
"""

from .models import ProcessSnapshot


def aggregate(snapshot: ProcessSnapshot) -> ProcessSnapshot:
    """Sum each heap's sizing fields and block count into the process totals."""
    snapshot.total_heap_size = sum(heap.heap_size for heap in snapshot.heaps)
    snapshot.total_committed_size = sum(heap.committed_size for heap in snapshot.heaps)
    snapshot.total_allocated_size = sum(heap.allocated_size for heap in snapshot.heaps)
    snapshot.total_free_size = sum(heap.free_size for heap in snapshot.heaps)
    snapshot.total_block_count = sum(heap.block_count for heap in snapshot.heaps)
    return snapshot
