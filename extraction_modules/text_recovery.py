"""
Text Recovery Engine - finds UTF-16LE text embedded in raw memory

Heuristic, tuned for Windows wide strings holding ASCII-range characters:
one printable byte followed by one zero byte per character. ANSI/UTF-8
runs and non-ASCII UTF-16 text are intentionally ignored.

Scanning works in 2-byte steps:
  1. Look at a 20-byte window. If more than 5 of its even bytes are
     printable and more than 2 of its odd bytes are zero, a run starts here.
  2. Consume character/zero pairs (at most 200 bytes). A zero/zero pair
     terminates the string; any other pair ends the run.
  3. Decode, strip CR/LF/TAB, keep strings longer than 3 characters that
     have not been seen before.
  4. Jump past the consumed run, or advance one code unit if nothing was
     consumed.
"""

from typing import Container, List, Optional

from .models import DecodeResult

MIN_BUFFER_SIZE = 16
LOOKAHEAD_MARGIN = 32
WINDOW_SIZE = 20
MAX_RUN_BYTES = 200
MIN_TEXT_LENGTH = 3

PRINTABLE_MIN = 32
PRINTABLE_MAX = 126

_STRIP_TABLE = str.maketrans('', '', '\r\n\t')


def is_printable(byte: int) -> bool:
    return PRINTABLE_MIN <= byte <= PRINTABLE_MAX


def clean_text(text: str) -> str:
    """Remove carriage returns, line feeds and tabs."""
    return text.translate(_STRIP_TABLE)


class TextRecoveryEngine:
    """
    Extracts UTF-16LE-like strings from a byte buffer

    Args:
        min_buffer_size: Buffers shorter than this yield nothing
        lookahead_margin: Bytes at the end of the buffer never used as a start
        window_size: Bytes inspected to detect the start of a run
        max_run_bytes: Maximum bytes consumed for one string
        min_text_length: Strings must be longer than this after cleaning
        verbose: Print diagnostics
    """

    def __init__(
        self,
        min_buffer_size: int = MIN_BUFFER_SIZE,
        lookahead_margin: int = LOOKAHEAD_MARGIN,
        window_size: int = WINDOW_SIZE,
        max_run_bytes: int = MAX_RUN_BYTES,
        min_text_length: int = MIN_TEXT_LENGTH,
        verbose: bool = False
    ):
        self.min_buffer_size = min_buffer_size
        self.lookahead_margin = lookahead_margin
        self.window_size = window_size
        self.max_run_bytes = max_run_bytes
        self.min_text_length = min_text_length
        self.verbose = verbose
        self.decode_failures = 0

    def extract(self, data: bytes, known: Optional[Container[str]] = None) -> List[str]:
        """
        Extract strings from a memory buffer

        Args:
            data: Raw bytes read from the target
            known: Strings already collected for this region; matches are not
                   returned again

        Returns:
            New strings, in buffer order, without duplicates
        """
        found: List[str] = []
        if not data or len(data) < self.min_buffer_size:
            return found

        seen = set()
        length = len(data)
        i = 0

        while i < length - self.lookahead_margin:
            if not self._is_run_start(data, i):
                i += 2
                continue

            raw, end = self._consume_run(data, i)
            decoded = self.decode_run(raw)

            if decoded.ok:
                text = clean_text(decoded.text)
                if (len(text) > self.min_text_length
                        and text not in seen
                        and (known is None or text not in known)):
                    seen.add(text)
                    found.append(text)
            else:
                # Widened printable bytes always decode; only an overridden decode_run gets here
                self.decode_failures += 1
                if self.verbose:
                    print(f"[TextRecovery] Dropped undecodable run at offset {i}")

            i = end if end > i else i + 2

        return found

    def _is_run_start(self, data: bytes, i: int) -> bool:
        length = len(data)
        printable_count = 0
        null_count = 0

        for j in range(0, self.window_size, 2):
            if i + j + 1 >= length:
                break
            if is_printable(data[i + j]):
                printable_count += 1
            if data[i + j + 1] == 0:
                null_count += 1

        return printable_count > 5 and null_count > 2

    def _consume_run(self, data: bytes, i: int):
        """Returns (character bytes, offset just past the last consumed pair)."""
        length = len(data)
        chars = bytearray()
        end = i

        for j in range(0, self.max_run_bytes, 2):
            if i + j + 1 >= length:
                break
            char_byte = data[i + j]
            high_byte = data[i + j + 1]
            if high_byte == 0 and is_printable(char_byte):
                chars.append(char_byte)
                end = i + j + 2
            else:
                # zero/zero terminator or a pair outside the pattern
                break

        return bytes(chars), end

    def decode_run(self, raw: bytes) -> DecodeResult:
        """
        Decode the character bytes of a run

        The bytes are widened back to UTF-16LE code units and decoded
        strictly, so anything that is not a valid code unit sequence is
        reported as a failure instead of an empty string.
        """
        wide = bytearray()
        for byte in raw:
            wide.append(byte)
            wide.append(0)

        try:
            return DecodeResult.success(bytes(wide).decode('utf-16-le'))
        except UnicodeDecodeError:
            return DecodeResult.failed()


def extract_texts(data: bytes, known: Optional[Container[str]] = None) -> List[str]:
    """Extract strings with the default heuristic parameters."""
    return TextRecoveryEngine().extract(data, known)
