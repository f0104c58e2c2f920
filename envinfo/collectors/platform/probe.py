"""
Sondes de capacités de la plateforme

Prédicats sans effet de bord consultés par le collecteur pour choisir
la stratégie de collecte de chaque information :
- Famille de système (Unix ou non)
- Présence d'un point d'entrée natif
- Largeur des pointeurs du processus
"""

import os
import sys
import ctypes
import struct
from typing import Optional


# Préfixes sys.platform considérés comme Unix (cygwin/msys : Unix sur Windows)
UNIX_PLATFORM_PREFIXES = (
    'linux', 'darwin', 'freebsd', 'openbsd', 'netbsd', 'dragonfly',
    'sunos', 'aix', 'cygwin', 'msys',
)


def is_unix_like(platform_id: Optional[str] = None) -> bool:
    """
    Indique si la plateforme appartient à la famille Unix

    Args:
        platform_id: Identifiant de plateforme (sys.platform par défaut)

    Returns:
        bool: True pour Unix et assimilés
    """
    platform_id = (platform_id if platform_id is not None else sys.platform).lower()
    return platform_id.startswith(UNIX_PLATFORM_PREFIXES)


_kernel32 = None


def _probe_kernel32():
    global _kernel32
    if _kernel32 is None:
        kernel32 = ctypes.WinDLL("kernel32", use_last_error=True)
        kernel32.GetModuleHandleW.argtypes = [ctypes.c_wchar_p]
        kernel32.GetModuleHandleW.restype = ctypes.c_void_p
        kernel32.GetProcAddress.argtypes = [ctypes.c_void_p, ctypes.c_char_p]
        kernel32.GetProcAddress.restype = ctypes.c_void_p
        _kernel32 = kernel32
    return _kernel32


def _windows_capability_exists(module_name: str, entry_point: str) -> bool:
    kernel32 = _probe_kernel32()
    # Seuls les modules déjà chargés sont consultés
    handle = kernel32.GetModuleHandleW(module_name)
    if not handle:
        return False
    return bool(kernel32.GetProcAddress(handle, entry_point.encode('ascii')))


def _unix_capability_exists(module_name: str, entry_point: str) -> bool:
    # RTLD_NOLOAD : échec si la bibliothèque n'est pas déjà chargée
    no_load = getattr(os, 'RTLD_NOLOAD', None)
    if no_load is None:
        return False
    try:
        library = ctypes.CDLL(module_name, mode=no_load | os.RTLD_NOW)
    except OSError:
        return False
    return hasattr(library, entry_point)


def native_capability_exists(module_name: str, entry_point: str) -> bool:
    """
    Indique si un point d'entrée natif est résoluble, sans l'appeler

    La bibliothèque n'est jamais chargée : un module absent de l'espace
    d'adressage du processus est considéré comme indisponible.

    Args:
        module_name: Nom de la bibliothèque native (ex: "kernel32")
        entry_point: Nom de la fonction exportée (ex: "IsWow64Process")

    Returns:
        bool: True si la fonction existe dans la bibliothèque
    """
    try:
        if sys.platform == "win32":
            return _windows_capability_exists(module_name, entry_point)
        return _unix_capability_exists(module_name, entry_point)
    except (OSError, AttributeError):
        return False


def is_64bit_process() -> bool:
    """Indique si le processus courant est un processus 64 bits"""
    return struct.calcsize("P") == 8
