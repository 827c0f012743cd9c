"""
Tests for the region walk, classification and memory reads

Tests cover:
- Region Classifier accept/skip rules
- Region Enumerator termination (end of space, overflow, zero-sized regions)
- Memory Reader size caps and failure handling
"""

import os
import sys
import unittest

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from memory_fakes import FakeProcessMemory, make_region
from extraction_modules.models import (
    CandidateRegion, RATIONALE_PRIVATE, RATIONALE_MAPPED,
)
from extraction_modules.memory_reader import MemoryReader
from extraction_modules.region_classifier import classify_region, should_scan
from extraction_modules.region_enumerator import RegionEnumerator, iter_regions
from extraction_modules.winapi import (
    MEM_RESERVE, MEM_FREE,
    MEM_PRIVATE, MEM_MAPPED, MEM_IMAGE,
    PAGE_NOACCESS, PAGE_READONLY, PAGE_READWRITE, PAGE_WRITECOPY,
    PAGE_EXECUTE, PAGE_EXECUTE_READ, PAGE_EXECUTE_READWRITE, PAGE_GUARD,
    POINTER_BITS,
)

MB = 1024 * 1024


class TestRegionClassifier(unittest.TestCase):

    def test_uncommitted_regions_skipped(self):
        for state in (MEM_RESERVE, MEM_FREE):
            for region_type in (MEM_PRIVATE, MEM_MAPPED, MEM_IMAGE):
                region = make_region(0x10000, 0x1000, state=state, region_type=region_type)
                self.assertFalse(should_scan(region))

    def test_private_readable_regions_scanned(self):
        for protect in (PAGE_READONLY, PAGE_READWRITE, PAGE_EXECUTE_READ,
                        PAGE_EXECUTE_READWRITE, PAGE_READWRITE | PAGE_GUARD):
            candidate = classify_region(make_region(0x10000, 0x1000, protect=protect))
            self.assertIsNotNone(candidate)
            self.assertEqual(candidate.rationale, RATIONALE_PRIVATE)

    def test_private_without_read_access_skipped(self):
        for protect in (PAGE_NOACCESS, PAGE_EXECUTE, PAGE_WRITECOPY):
            self.assertFalse(should_scan(make_region(0x10000, 0x1000, protect=protect)))

    def test_mapped_size_limit(self):
        small = make_region(0x10000, 10 * MB - 1, region_type=MEM_MAPPED, protect=PAGE_READONLY)
        large = make_region(0x10000, 10 * MB, region_type=MEM_MAPPED, protect=PAGE_READONLY)

        candidate = classify_region(small)
        self.assertEqual(candidate.rationale, RATIONALE_MAPPED)
        self.assertFalse(should_scan(large))

    def test_mapped_protection_not_checked(self):
        region = make_region(0x10000, 0x1000, region_type=MEM_MAPPED, protect=PAGE_NOACCESS)
        self.assertTrue(should_scan(region))

    def test_image_regions_skipped(self):
        region = make_region(0x400000, 0x1000, region_type=MEM_IMAGE, protect=PAGE_EXECUTE_READ)
        self.assertFalse(should_scan(region))

    def test_descriptor_helpers(self):
        region = make_region(0x10000, 0x3000)
        self.assertEqual(region.end_address, 0x13000)
        self.assertTrue(region.is_committed)
        self.assertFalse(make_region(0x10000, 0x3000, state=MEM_RESERVE).is_committed)

    def test_custom_mapped_limit(self):
        region = make_region(0x10000, 2 * MB, region_type=MEM_MAPPED)
        self.assertFalse(should_scan(region, mapped_size_limit=MB))


class TestRegionEnumerator(unittest.TestCase):

    def test_walks_contiguous_regions(self):
        regions = [
            make_region(0x0, 0x10000, state=MEM_FREE),
            make_region(0x10000, 0x2000),
            make_region(0x12000, 0x3000, state=MEM_RESERVE),
        ]
        memory = FakeProcessMemory(regions)
        self.assertEqual(list(iter_regions(memory.query)), regions)

    def test_empty_address_space(self):
        self.assertEqual(list(RegionEnumerator(lambda address: None)), [])

    def test_restartable(self):
        memory = FakeProcessMemory([make_region(0x0, 0x1000), make_region(0x1000, 0x1000)])
        enumerator = RegionEnumerator(memory.query)
        self.assertEqual(list(enumerator), list(enumerator))

    def test_stops_on_address_wrap(self):
        quarter = 1 << (POINTER_BITS - 2)
        queried = []

        def query(address):
            queried.append(address)
            return make_region(address, quarter)

        bases = [region.base_address for region in RegionEnumerator(query)]
        self.assertEqual(bases, [0, quarter, 2 * quarter, 3 * quarter])
        self.assertEqual(len(queried), 4)

    def test_zero_sized_region_advances_one_page(self):
        def query(address):
            if address == 0:
                return make_region(0, 0)
            if address == 0x1000:
                return make_region(0x1000, 0x1000)
            return None

        bases = [region.base_address for region in RegionEnumerator(query)]
        self.assertEqual(bases, [0, 0x1000])


class TestMemoryReader(unittest.TestCase):

    def _candidate(self, base, size):
        return CandidateRegion(make_region(base, size), RATIONALE_PRIVATE)

    def test_read_capped_at_64kb(self):
        memory = FakeProcessMemory([])
        reader = MemoryReader(memory)
        data = reader.read(self._candidate(0x10000, 200 * 1024))
        self.assertEqual(len(data), 64 * 1024)
        self.assertEqual(memory.reads, [(0x10000, 64 * 1024)])

    def test_small_region_read_whole(self):
        memory = FakeProcessMemory([], contents={0x20000: b'\x41\x00' * 100})
        data = MemoryReader(memory).read(self._candidate(0x20000, 200))
        self.assertEqual(data, b'\x41\x00' * 100)

    def test_region_size_guard(self):
        reader = MemoryReader(FakeProcessMemory([]))
        self.assertTrue(reader.should_read(self._candidate(0x10000, MB - 1)))
        self.assertFalse(reader.should_read(self._candidate(0x10000, MB)))

    def test_failed_read_returns_none(self):
        memory = FakeProcessMemory([], failing=[0x30000])
        reader = MemoryReader(memory)
        self.assertIsNone(reader.read(self._candidate(0x30000, 0x1000)))
        self.assertEqual(reader.failed_reads, 1)

    def test_empty_read_returns_none(self):
        memory = FakeProcessMemory([], contents={0x40000: b''})
        reader = MemoryReader(memory)
        self.assertIsNone(reader.read(self._candidate(0x40000, 0x1000)))
        self.assertEqual(reader.failed_reads, 1)

    def test_short_read_returns_copied_bytes(self):
        memory = FakeProcessMemory([], contents={0x50000: b'abc' * 10})
        data = MemoryReader(memory).read(self._candidate(0x50000, 0x1000))
        self.assertEqual(data, b'abc' * 10)

    def test_zero_sized_region_not_read(self):
        memory = FakeProcessMemory([])
        self.assertIsNone(MemoryReader(memory).read(self._candidate(0x60000, 0)))
        self.assertEqual(memory.reads, [])


if __name__ == '__main__':
    unittest.main()
