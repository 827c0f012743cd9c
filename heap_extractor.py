"""
Windows Heap Extractor

Scans the memory of a running process for UTF-16 text (credentials, URLs,
log fragments, UI strings) and writes a heap report.

Usage:
  # Prompt for the process name
  python heap_extractor.py

  # Scan a named process and keep the report in ./reports
  python heap_extractor.py notepad.exe -o reports
"""

import argparse
import sys
from typing import List, Optional

from extraction_modules import (
    HeapExtractionSession,
    HeapExtractorError,
    __version__,
)
from extraction_modules.report import print_report, save_report
from settings_manager import SettingsManager


def prompt_process_name() -> str:
    try:
        return input("Enter process name (e.g., notepad.exe): ").strip()
    except EOFError:
        return ""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Extract heap information and embedded text from a running Windows process"
    )
    parser.add_argument(
        "process_name",
        nargs="?",
        help="Executable name of the target process (prompted for when omitted)",
    )
    parser.add_argument(
        "-o",
        "--output-dir",
        help="Directory for <process>_heap_report.txt (default: report.output_directory or cwd)",
    )
    parser.add_argument(
        "--no-save",
        action="store_true",
        help="Print the report without writing the report file",
    )
    parser.add_argument(
        "--settings",
        help="Path to the JSON settings file",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose diagnostics",
    )
    parser.add_argument(
        "--pause",
        action="store_true",
        help="Wait for Enter before exiting",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"Windows Heap Extractor v{__version__}",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    print("Windows Heap Extractor")
    print("======================")

    process_name = args.process_name
    if process_name is None:
        process_name = prompt_process_name()

    if not process_name or not process_name.strip():
        print("Process name cannot be empty!")
        return 1
    process_name = process_name.strip()

    settings = SettingsManager(args.settings)
    problems = settings.validate()
    if problems:
        for problem in problems:
            print(f"Settings error: {problem}")
        print(f"Fix or remove {settings.settings_file} and try again.")
        return 1

    print(f"\nSearching for process: {process_name}")
    print("Extracting heap data...")

    session = HeapExtractionSession(settings=settings, verbose=args.verbose)
    try:
        snapshot = session.extract(process_name)
    except HeapExtractorError as e:
        print(e)
        print("Failed to extract heap data!")
        return 1

    print_report(snapshot)

    if not args.no_save and settings.get("report.save_to_file", True):
        output_dir = args.output_dir or settings.get("report.output_directory") or None
        save_report(snapshot, output_dir)

    if args.pause:
        print("\nPress Enter to exit...", end="")
        try:
            input()
        except EOFError:
            pass

    return 0


if __name__ == "__main__":
    sys.exit(main())
