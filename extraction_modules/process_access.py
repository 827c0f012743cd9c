"""
Process access - locating the target process and opening it for reading

Process discovery uses psutil. Memory queries and reads go through the
Windows API bindings in winapi.py, wrapped in a context manager so the
process handle is closed on every exit path.
"""

import ctypes
from contextlib import contextmanager
from typing import Dict, Iterator, Optional

import psutil

from . import winapi
from .errors import HandleOpenError, MemoryReadError, PlatformNotSupportedError
from .models import RegionDescriptor


def find_process_id_by_name(process_name: str) -> Optional[int]:
    """
    Resolve an executable name to a process ID

    The comparison is case-insensitive and exact; the first match wins.

    Returns:
        Process ID, or None when no running process has that name
    """
    wanted = process_name.lower()

    for proc in psutil.process_iter(['pid', 'name']):
        try:
            name = proc.info['name']
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            continue

        if name and name.lower() == wanted:
            pid = proc.info['pid']
            print(f"Process found: {pid}")
            return pid

    return None


class WindowsProcessMemory:
    """
    Read-only view of another process's address space

    Wraps an open process handle. Instances are created by
    open_process_memory() and must not outlive it.
    """

    def __init__(self, handle, process_id: int):
        self.handle = handle
        self.process_id = process_id

    def query(self, address: int) -> Optional[RegionDescriptor]:
        """VirtualQueryEx: the region starting at or after address, or None."""
        mbi = winapi.MEMORY_BASIC_INFORMATION()
        if winapi.VirtualQueryEx(
            self.handle,
            ctypes.c_void_p(address),
            ctypes.byref(mbi),
            ctypes.sizeof(mbi)
        ) == 0:
            return None

        # ctypes reports a NULL base address as None
        base_addr = mbi.BaseAddress if mbi.BaseAddress is not None else 0
        return RegionDescriptor(
            base_address=base_addr,
            region_size=mbi.RegionSize,
            state=mbi.State,
            region_type=mbi.Type,
            protect=mbi.Protect,
        )

    def read(self, address: int, size: int) -> bytes:
        """ReadProcessMemory: returns the bytes actually copied."""
        buffer = ctypes.create_string_buffer(size)
        bytes_read = ctypes.c_size_t()

        success = winapi.ReadProcessMemory(
            self.handle,
            ctypes.c_void_p(address),
            buffer,
            size,
            ctypes.byref(bytes_read)
        )

        if not success:
            raise MemoryReadError(address, size, winapi.get_last_error())

        return buffer.raw[:bytes_read.value]

    def memory_counters(self) -> Optional[Dict[str, int]]:
        """GetProcessMemoryInfo counters, or None if the call fails."""
        pmc = winapi.PROCESS_MEMORY_COUNTERS_EX()
        pmc.cb = ctypes.sizeof(pmc)

        if not winapi.GetProcessMemoryInfo(self.handle, ctypes.byref(pmc), pmc.cb):
            return None

        return {
            'working_set': pmc.WorkingSetSize,
            'pagefile_usage': pmc.PagefileUsage,
            'private_usage': pmc.PrivateUsage,
        }


@contextmanager
def open_process_memory(process_id: int) -> Iterator[WindowsProcessMemory]:
    """
    Open a process for query + read access

    Raises:
        PlatformNotSupportedError: not running on Windows
        HandleOpenError: the OS refused the handle (carries GetLastError)
    """
    if not winapi.IS_WINDOWS:
        raise PlatformNotSupportedError("Live process access requires Windows platform")

    handle = winapi.OpenProcess(
        winapi.PROCESS_QUERY_INFORMATION | winapi.PROCESS_VM_READ,
        False,
        process_id
    )
    if not handle:
        raise HandleOpenError(process_id, winapi.get_last_error())

    try:
        yield WindowsProcessMemory(handle, process_id)
    finally:
        winapi.CloseHandle(handle)
