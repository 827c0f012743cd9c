"""
Heap extraction reports - console and text file renderers

The file report is intentionally shorter than the console report: it has
no "Uncommitted" line, no region count and no region listing.
"""

import os
from pathlib import Path
from typing import List, Optional

from .models import ProcessSnapshot

SIZE_UNITS = ["B", "KB", "MB", "GB"]
REPORT_SUFFIX = "_heap_report.txt"


def format_size(size_bytes: int) -> str:
    """
    Format byte size to human-readable string

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted string (e.g., "1.50 MB"); GB is the largest unit
    """
    size_float = float(size_bytes)
    unit_index = 0

    while size_float >= 1024.0 and unit_index < len(SIZE_UNITS) - 1:
        size_float /= 1024.0
        unit_index += 1

    return f"{size_float:.2f} {SIZE_UNITS[unit_index]}"


def report_filename(process_name: str) -> str:
    return f"{process_name}{REPORT_SUFFIX}"


def render_console_report(snapshot: ProcessSnapshot) -> str:
    """Full report: summary, per-heap detail, region listing and texts."""
    output: List[str] = []
    output.append("")
    output.append("=" * 80)
    output.append("HEAP EXTRACTION REPORT")
    output.append("=" * 80)
    output.append(f"Process Name: {snapshot.process_name}")
    output.append(f"Process ID: {snapshot.process_id}")
    output.append(f"Number of Heaps: {len(snapshot.heaps)}")
    output.append("")

    output.append("SUMMARY:")
    output.append(f"  Total Heap Size: {format_size(snapshot.total_heap_size)}")
    output.append(f"  Total Committed: {format_size(snapshot.total_committed_size)}")
    output.append(f"  Total Allocated: {format_size(snapshot.total_allocated_size)}")
    output.append(f"  Total Free: {format_size(snapshot.total_free_size)}")
    output.append(f"  Total Blocks: {snapshot.total_block_count}")
    output.append("")

    for i, heap in enumerate(snapshot.heaps, 1):
        texts = heap.extracted_texts

        output.append(f"HEAP {i}:")
        output.append(f"  Size: {format_size(heap.heap_size)}")
        output.append(f"  Committed: {format_size(heap.committed_size)}")
        output.append(f"  Uncommitted: {format_size(heap.uncommitted_size)}")
        output.append(f"  Allocated: {format_size(heap.allocated_size)}")
        output.append(f"  Free: {format_size(heap.free_size)}")
        output.append(f"  Blocks: {heap.block_count}")
        output.append(f"  Memory Regions: {len(heap.regions)}")
        output.append(f"  Extracted Texts: {len(texts)}")
        output.append("")

        if heap.regions:
            output.append("  MEMORY REGIONS:")
            for j, region_result in enumerate(heap.regions, 1):
                region = region_result.descriptor
                output.append(f"    Region {j}: ")
                output.append(f"      Base Address: {hex(region.base_address)}")
                output.append(f"      Size: {format_size(region.region_size)}")
                output.append(f"      State: {region.state_label}")
                output.append(f"      Type: {region.backing_label}")
                output.append(f"      Protection: {hex(region.protect)}")
            output.append("")

        if texts:
            output.append("  EXTRACTED TEXTS:")
            for j, text in enumerate(texts, 1):
                output.append(f"    Text {j}: {text}")
            output.append("")

    return "\n".join(output)


def render_file_report(snapshot: ProcessSnapshot) -> str:
    """Summary, per-heap sizes and texts. No region listing."""
    output: List[str] = []
    output.append("HEAP EXTRACTION REPORT")
    output.append(f"Process Name: {snapshot.process_name}")
    output.append(f"Process ID: {snapshot.process_id}")
    output.append(f"Number of Heaps: {len(snapshot.heaps)}")
    output.append("")

    output.append("SUMMARY:")
    output.append(f"Total Heap Size: {format_size(snapshot.total_heap_size)}")
    output.append(f"Total Committed: {format_size(snapshot.total_committed_size)}")
    output.append(f"Total Allocated: {format_size(snapshot.total_allocated_size)}")
    output.append(f"Total Free: {format_size(snapshot.total_free_size)}")
    output.append(f"Total Blocks: {snapshot.total_block_count}")
    output.append("")

    for i, heap in enumerate(snapshot.heaps, 1):
        texts = heap.extracted_texts

        output.append(f"HEAP {i}:")
        output.append(f"Size: {format_size(heap.heap_size)}")
        output.append(f"Committed: {format_size(heap.committed_size)}")
        output.append(f"Allocated: {format_size(heap.allocated_size)}")
        output.append(f"Free: {format_size(heap.free_size)}")
        output.append(f"Blocks: {heap.block_count}")
        output.append(f"Extracted Texts: {len(texts)}")

        if texts:
            output.append("TEXTS:")
            for j, text in enumerate(texts, 1):
                output.append(f"  Text {j}: {text}")
        output.append("")

    return "\n".join(output) + "\n"


def print_report(snapshot: ProcessSnapshot):
    print(render_console_report(snapshot))


def save_report(snapshot: ProcessSnapshot, output_directory: Optional[str] = None) -> Optional[Path]:
    """
    Write <processName>_heap_report.txt

    Args:
        snapshot: Extraction result
        output_directory: Target directory (default: current directory)

    Returns:
        Path of the written file, or None if it could not be created
    """
    filename = report_filename(snapshot.process_name)
    output_path = Path(output_directory or os.getcwd()) / filename

    try:
        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(render_file_report(snapshot))
    except OSError:
        print(f"Failed to create report file: {output_path}")
        return None

    print(f"Report saved to: {output_path}")
    return output_path
