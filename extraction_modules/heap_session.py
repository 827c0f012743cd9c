"""
Heap Extraction Session - runs one extraction against one process

Pipeline: Region Enumerator -> Region Classifier -> Memory Reader ->
Text Recovery Engine -> Aggregator. Everything runs on the calling thread.
The process handle lives only inside extract(); the returned
ProcessSnapshot holds addresses, sizes and text, nothing live.
"""

from typing import Any, Callable, Optional

from .aggregator import aggregate
from .errors import ProcessNotFoundError
from .memory_reader import MemoryReader, MAX_READ_SIZE, MAX_READ_REGION_SIZE
from .models import HeapSnapshot, ProcessSnapshot, RegionResult
from .process_access import find_process_id_by_name, open_process_memory
from .region_classifier import classify_region, MAPPED_REGION_LIMIT
from .region_enumerator import RegionEnumerator
from .report import format_size
from .text_recovery import (
    TextRecoveryEngine,
    MIN_BUFFER_SIZE, LOOKAHEAD_MARGIN, WINDOW_SIZE, MAX_RUN_BYTES, MIN_TEXT_LENGTH,
)


class HeapExtractionSession:
    """
    Extracts heap data and embedded text from a running process

    Args:
        settings: Object with get("section.key", default), usually a
                  SettingsManager. None uses built-in defaults.
        verbose: Print component diagnostics
        process_finder: callable(name) -> pid or None
        memory_opener: callable(pid) -> context manager yielding an object
                       with query(address), read(address, size) and
                       memory_counters()
    """

    def __init__(
        self,
        settings: Any = None,
        verbose: bool = False,
        process_finder: Optional[Callable[[str], Optional[int]]] = None,
        memory_opener: Optional[Callable] = None
    ):
        self.settings = settings
        self.verbose = verbose or bool(self._setting('advanced.verbose', False))
        self.process_finder = process_finder or find_process_id_by_name
        self.memory_opener = memory_opener or open_process_memory

        self.mapped_region_limit = self._setting('scan.mapped_region_limit', MAPPED_REGION_LIMIT)
        self.progress_interval = self._setting('scan.progress_interval', 100)

        self.text_engine = TextRecoveryEngine(
            min_buffer_size=self._setting('text.min_buffer_size', MIN_BUFFER_SIZE),
            lookahead_margin=self._setting('text.lookahead_margin', LOOKAHEAD_MARGIN),
            window_size=self._setting('text.window_size', WINDOW_SIZE),
            max_run_bytes=self._setting('text.max_run_bytes', MAX_RUN_BYTES),
            min_text_length=self._setting('text.min_text_length', MIN_TEXT_LENGTH),
            verbose=self.verbose,
        )

    def _setting(self, key_path: str, default: Any) -> Any:
        if self.settings is None:
            return default
        return self.settings.get(key_path, default)

    def extract(self, process_name: str) -> ProcessSnapshot:
        """
        Resolve, open and scan a process

        Raises:
            ProcessNotFoundError: no process with that name is running
            HandleOpenError: the process could not be opened
            PlatformNotSupportedError: live access is unavailable here
        """
        process_id = self.process_finder(process_name)
        if process_id is None:
            raise ProcessNotFoundError(process_name)

        snapshot = ProcessSnapshot(process_id, process_name)

        with self.memory_opener(process_id) as memory:
            print("Getting process memory information...")
            heap = self._build_heap_snapshot(memory)

            print("Extracting memory regions and text...")
            self.scan_regions(memory, heap)
            print("Memory extraction completed.")

        snapshot.heaps.append(heap)
        return aggregate(snapshot)

    def _build_heap_snapshot(self, memory) -> HeapSnapshot:
        counters = memory.memory_counters()
        if counters is None:
            print("  Warning: process memory counters unavailable, sizes will read 0")
            return HeapSnapshot()

        heap = HeapSnapshot(
            working_set=counters['working_set'],
            pagefile_usage=counters['pagefile_usage'],
            private_usage=counters['private_usage'],
        )
        if heap.free_size_wrapped and self.verbose:
            print(f"[HeapSession] Private usage ({heap.allocated_size}) exceeds commit "
                  f"({heap.committed_size}); free size wrapped to {heap.free_size}")
        return heap

    def scan_regions(self, memory, heap: HeapSnapshot) -> HeapSnapshot:
        """Walk every region, keep the candidates and pull text out of them."""
        reader = MemoryReader(
            memory,
            max_read_size=self._setting('scan.max_read_size', MAX_READ_SIZE),
            max_region_size=self._setting('scan.max_read_region_size', MAX_READ_REGION_SIZE),
            verbose=self.verbose,
        )
        region_count = 0
        user_data_regions = 0

        print("  Scanning memory regions for user data...")

        for region in RegionEnumerator(memory.query):
            region_count += 1
            if self.progress_interval and region_count % self.progress_interval == 0:
                print(f"    Scanned {region_count} regions...")

            candidate = classify_region(region, self.mapped_region_limit)
            if candidate is None:
                continue

            user_data_regions += 1
            result = RegionResult(candidate)
            heap.add_region(result)

            if not reader.should_read(candidate):
                continue

            print(f"    Extracting text from user data region {user_data_regions} "
                  f"(size: {format_size(region.region_size)}, "
                  f"type: {region.backing_label}, "
                  f"protection: {hex(region.protect)})")

            data = reader.read(candidate)
            if data is None:
                continue

            result.bytes_read = len(data)
            added = result.add_texts(self.text_engine.extract(data, known=result))
            if added > 0:
                print(f"      Found {added} text strings")

        print(f"  Total regions scanned: {region_count}")
        print(f"  User data regions found: {user_data_regions}")

        if self.verbose:
            print(f"[HeapSession] Read {heap.bytes_scanned:,} bytes, "
                  f"{reader.failed_reads} failed reads, "
                  f"{self.text_engine.decode_failures} undecodable runs, "
                  f"{len(heap.extracted_texts)} unique strings")

        return heap
