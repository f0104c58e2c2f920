"""
Informations système spécifiques Unix (Linux, macOS, BSD)

Ce module s'appuie sur psutil et sur les API Python du runtime :
- Mémoire physique via psutil.virtual_memory
- Identité du processus via os / psutil
- Identité du thread via threading
"""

import os
import threading
from typing import Optional, Tuple

import psutil

from .base import SystemInfoPort


class UnixSystemInfo(SystemInfoPort):
    """Implémentation Unix de l'accès aux informations système"""

    family = "unix"

    def memory_status(self) -> Optional[Tuple[int, int]]:
        try:
            virtual_mem = psutil.virtual_memory()
        except NotImplementedError:
            # Compteurs mémoire non exposés sur cette variante Unix
            return None
        return int(virtual_mem.total), int(virtual_mem.available)

    def process_id(self) -> str:
        return str(os.getpid())

    def process_name(self) -> str:
        return psutil.Process().name()

    def thread_id(self) -> str:
        return str(threading.get_ident())

    def is_wow64_process(self) -> bool:
        return False
