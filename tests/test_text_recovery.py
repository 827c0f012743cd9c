"""
Tests for the Text Recovery Engine

Tests cover:
- UTF-16LE run detection and decoding
- Buffers that never meet the detection threshold
- Length filtering, cleaning and deduplication
- Idempotence against an existing region collection
"""

import os
import sys
import unittest

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from memory_fakes import make_region, noise, wide
from extraction_modules.models import CandidateRegion, DecodeResult, RegionResult
from extraction_modules.text_recovery import (
    TextRecoveryEngine, clean_text, extract_texts,
)


def terminated(text: str) -> bytes:
    return wide(text) + b'\x00\x00'


class TestRunDetection(unittest.TestCase):
    """Detection and decoding of single strings"""

    def setUp(self):
        self.engine = TextRecoveryEngine()

    def test_round_trip_single_string(self):
        buffer = noise(16) + terminated("HelloWorld") + b'\x00' * 40
        self.assertEqual(self.engine.extract(buffer), ["HelloWorld"])

    def test_string_at_buffer_start(self):
        buffer = terminated("https://example.com/login") + b'\x00' * 48
        self.assertEqual(self.engine.extract(buffer), ["https://example.com/login"])

    def test_two_strings_in_buffer_order(self):
        buffer = (terminated("first_value") + noise(12) +
                  terminated("second_value") + b'\x00' * 40)
        self.assertEqual(self.engine.extract(buffer), ["first_value", "second_value"])

    def test_run_stops_at_broken_pair(self):
        # "abc" is consumed and discarded, "defghi" is found after the break
        buffer = wide("abc") + b'\x01\x01' + terminated("defghi") + b'\x00' * 40
        self.assertEqual(self.engine.extract(buffer), ["defghi"])

    def test_long_string_split_at_run_limit(self):
        buffer = terminated("x" * 150) + b'\x00' * 40
        self.assertEqual(self.engine.extract(buffer), ["x" * 100, "x" * 50])

    def test_string_inside_lookahead_margin_ignored(self):
        # The run would start within the last 32 bytes
        buffer = b'\x00' * 20 + terminated("tail_text")
        self.assertEqual(len(buffer) - 20, 20)
        self.assertEqual(self.engine.extract(buffer), [])


class TestNoText(unittest.TestCase):
    """Buffers that must produce nothing"""

    def setUp(self):
        self.engine = TextRecoveryEngine()

    def test_buffer_shorter_than_16_bytes(self):
        buffer = wide("abcdefg") + b'\x00'
        self.assertEqual(len(buffer), 15)
        self.assertEqual(self.engine.extract(buffer), [])

    def test_empty_buffer(self):
        self.assertEqual(self.engine.extract(b''), [])

    def test_all_zero_bytes(self):
        self.assertEqual(self.engine.extract(b'\x00' * 4096), [])

    def test_printable_without_nulls(self):
        self.assertEqual(self.engine.extract(b'A' * 4096), [])

    def test_ascii_text_is_ignored(self):
        buffer = b'This is a plain ANSI string\x00' + b'\x00' * 64
        self.assertEqual(self.engine.extract(buffer), [])

    def test_short_strings_not_kept(self):
        buffer = (terminated("ab") + noise(8)) * 4 + b'\x00' * 40
        self.assertEqual(self.engine.extract(buffer), [])


class TestDeduplication(unittest.TestCase):
    """Duplicates within a buffer and against a region's collection"""

    def setUp(self):
        self.engine = TextRecoveryEngine()
        self.buffer = (terminated("Password123") + b'\x00' * 10 +
                       terminated("Password123") + b'\x00' * 10 +
                       terminated("user@example.org") + b'\x00' * 40)

    def test_duplicates_in_one_buffer_kept_once(self):
        self.assertEqual(self.engine.extract(self.buffer), ["Password123", "user@example.org"])

    def test_repeated_extraction_same_result(self):
        first = self.engine.extract(self.buffer)
        second = self.engine.extract(self.buffer)
        self.assertEqual(set(first), set(second))

    def test_known_strings_not_returned_again(self):
        region = RegionResult(CandidateRegion(make_region(0x10000, 0x1000), 'private-committed-readable'))
        added = region.add_texts(self.engine.extract(self.buffer, known=region))
        self.assertEqual(added, 2)

        self.assertEqual(self.engine.extract(self.buffer, known=region), [])
        self.assertEqual(len(region), 2)

    def test_known_set_is_accepted(self):
        result = self.engine.extract(self.buffer, known={"Password123"})
        self.assertEqual(result, ["user@example.org"])


class TestCleaningAndDecoding(unittest.TestCase):

    def test_clean_text_strips_control_characters(self):
        self.assertEqual(clean_text("a\r\nb\tc"), "abc")

    def test_every_result_is_clean_and_long_enough(self):
        buffer = (terminated("line one") + wide("\r\n") + noise(6) +
                  terminated("col\tumn") + noise(10) +
                  terminated("C:\\Users\\admin\\notes.txt") + b'\x00' * 40)
        results = extract_texts(buffer)
        self.assertIn("line one", results)
        self.assertIn("C:\\Users\\admin\\notes.txt", results)
        for text in results:
            self.assertGreater(len(text), 3)
            for ch in "\r\n\t":
                self.assertNotIn(ch, text)

    def test_decode_run_success(self):
        engine = TextRecoveryEngine()
        self.assertEqual(engine.decode_run(b"Hello"), DecodeResult.success("Hello"))

    def test_decode_empty_run_is_success_not_failure(self):
        decoded = TextRecoveryEngine().decode_run(b"")
        self.assertTrue(decoded.ok)
        self.assertEqual(decoded.text, "")

    def test_decode_run_never_fails_on_single_bytes(self):
        engine = TextRecoveryEngine()
        decoded = engine.decode_run(bytes(range(256)))
        self.assertTrue(decoded.ok)
        self.assertEqual(len(decoded.text), 256)

    def test_decode_failures_counted(self):
        class RejectingEngine(TextRecoveryEngine):
            def decode_run(self, raw):
                return DecodeResult.failed()

        engine = RejectingEngine()
        buffer = terminated("HelloWorld") + b'\x00' * 40
        self.assertEqual(engine.extract(buffer), [])
        self.assertEqual(engine.decode_failures, 1)
        self.assertEqual(TextRecoveryEngine().decode_failures, 0)

    def test_failed_result_is_falsy(self):
        decoded = DecodeResult.failed()
        self.assertFalse(decoded)
        self.assertIsNone(decoded.text)

    def test_custom_minimum_length(self):
        engine = TextRecoveryEngine(min_text_length=10)
        buffer = terminated("short1") + noise(10) + terminated("much_longer_value") + b'\x00' * 40
        self.assertEqual(engine.extract(buffer), ["much_longer_value"])


if __name__ == '__main__':
    unittest.main()
