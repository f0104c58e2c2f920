"""
Interface des informations système spécifiques à la plateforme

Le collecteur ne dépend que de cette interface ; chaque famille de
système fournit son implémentation (appels natifs ou psutil).
"""

from abc import ABC, abstractmethod
from typing import Optional, Tuple


class SystemInfoPort(ABC):
    """Accès étroit aux informations système natives"""

    family = "unknown"

    @abstractmethod
    def memory_status(self) -> Optional[Tuple[int, int]]:
        """
        Interroge l'état de la mémoire physique

        Returns:
            tuple: (total, disponible) en octets, ou None si indisponible
        """

    @abstractmethod
    def process_id(self) -> str:
        """Identifiant du processus courant"""

    @abstractmethod
    def process_name(self) -> str:
        """Nom du processus courant"""

    @abstractmethod
    def thread_id(self) -> str:
        """Identifiant du thread appelant"""

    @abstractmethod
    def is_wow64_process(self) -> bool:
        """
        Indique si un processus 32 bits tourne sur un système 64 bits

        Doit retourner False si la capacité n'existe pas sur la plateforme.
        """
