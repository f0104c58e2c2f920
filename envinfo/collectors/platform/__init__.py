"""
Package des accès système spécifiques par plateforme

Ce package contient les sondes de capacités et les implémentations
de l'interface SystemInfoPort :
- Windows (API kernel32 via ctypes)
- Unix (psutil, os, threading)
"""

from typing import Optional

from .base import SystemInfoPort
from .probe import is_unix_like


def select_system_info_port(platform_id: Optional[str] = None) -> SystemInfoPort:
    """
    Sélectionne l'implémentation adaptée à la famille de système

    Args:
        platform_id: Identifiant de plateforme (sys.platform par défaut)

    Returns:
        SystemInfoPort: Une seule implémentation, jamais les deux
    """
    if is_unix_like(platform_id):
        from .unix import UnixSystemInfo
        return UnixSystemInfo()

    from .windows import WindowsSystemInfo
    return WindowsSystemInfo()
