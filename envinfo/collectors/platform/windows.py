"""
Informations système spécifiques Windows

Ce module utilise les API Win32 de kernel32 via ctypes :
- GlobalMemoryStatusEx (mémoire physique)
- GetCurrentProcessId / GetCurrentThreadId
- GetModuleHandleW / GetModuleFileNameW (exécutable courant)
- IsWow64Process (processus 32 bits sur système 64 bits)
"""

import ctypes
from typing import Optional, Tuple

from .base import SystemInfoPort
from .probe import native_capability_exists


MODULE_FILENAME_CAPACITY = 1024


class MEMORYSTATUSEX(ctypes.Structure):
    """Structure MEMORYSTATUSEX de l'API Win32"""

    _fields_ = [
        ('dwLength', ctypes.c_uint32),
        ('dwMemoryLoad', ctypes.c_uint32),
        ('ullTotalPhys', ctypes.c_uint64),
        ('ullAvailPhys', ctypes.c_uint64),
        ('ullTotalPageFile', ctypes.c_uint64),
        ('ullAvailPageFile', ctypes.c_uint64),
        ('ullTotalVirtual', ctypes.c_uint64),
        ('ullAvailVirtual', ctypes.c_uint64),
        ('ullAvailExtendedVirtual', ctypes.c_uint64),
    ]

    def __init__(self):
        super().__init__()
        self.dwLength = ctypes.sizeof(self)


class WindowsSystemInfo(SystemInfoPort):
    """
    Implémentation Windows de l'accès aux informations système

    kernel32 est chargé à la première utilisation : construire l'objet
    ne fait aucun appel natif.
    """

    family = "windows"

    def __init__(self, module_name: str = "kernel32"):
        self.module_name = module_name
        self._kernel32 = None

    @property
    def kernel32(self):
        if self._kernel32 is None:
            kernel32 = ctypes.WinDLL(self.module_name, use_last_error=True)

            kernel32.GlobalMemoryStatusEx.argtypes = [ctypes.POINTER(MEMORYSTATUSEX)]
            kernel32.GlobalMemoryStatusEx.restype = ctypes.c_int
            kernel32.GetCurrentProcessId.restype = ctypes.c_uint32
            kernel32.GetCurrentThreadId.restype = ctypes.c_uint32
            kernel32.GetCurrentProcess.restype = ctypes.c_void_p
            kernel32.GetModuleHandleW.argtypes = [ctypes.c_wchar_p]
            kernel32.GetModuleHandleW.restype = ctypes.c_void_p
            kernel32.GetModuleFileNameW.argtypes = [ctypes.c_void_p, ctypes.c_wchar_p, ctypes.c_uint32]
            kernel32.GetModuleFileNameW.restype = ctypes.c_uint32

            self._kernel32 = kernel32
        return self._kernel32

    def memory_status(self) -> Optional[Tuple[int, int]]:
        status = MEMORYSTATUSEX()
        if not self.kernel32.GlobalMemoryStatusEx(ctypes.byref(status)):
            return None
        return int(status.ullTotalPhys), int(status.ullAvailPhys)

    def process_id(self) -> str:
        return str(int(self.kernel32.GetCurrentProcessId()))

    def process_name(self) -> str:
        # Handle nul : module de l'exécutable courant
        handle = self.kernel32.GetModuleHandleW(None)
        buffer = ctypes.create_unicode_buffer(MODULE_FILENAME_CAPACITY)
        length = self.kernel32.GetModuleFileNameW(handle, buffer, MODULE_FILENAME_CAPACITY)
        if length == 0:
            raise ctypes.WinError(ctypes.get_last_error())
        return buffer.value

    def thread_id(self) -> str:
        return str(int(self.kernel32.GetCurrentThreadId()))

    def is_wow64_process(self) -> bool:
        # Absent sur les anciennes versions de Windows
        if not native_capability_exists(self.module_name, "IsWow64Process"):
            return False

        is_wow64 = ctypes.c_int(0)
        is_wow64_process = self.kernel32.IsWow64Process
        is_wow64_process.argtypes = [ctypes.c_void_p, ctypes.POINTER(ctypes.c_int)]
        is_wow64_process.restype = ctypes.c_int

        if not is_wow64_process(self.kernel32.GetCurrentProcess(), ctypes.byref(is_wow64)):
            return False
        return bool(is_wow64.value)
