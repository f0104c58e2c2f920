"""
Module collecteur principal de l'instantané d'environnement

Ce module orchestre la collecte et possède le cache :
- Cellule écrite une seule fois, lue de nombreuses fois
- Publication unique même en cas d'appels concurrents
- Aucune exception ne sort de get_snapshot()
"""

import threading
from typing import Callable, Optional

from .logger import CollectorLogger
from .snapshot import EnvironmentSnapshot


class SnapshotCell:
    """
    Cellule d'initialisation unique

    Le premier appelant calcule et publie la valeur ; les appelants
    concurrents attendent sur le verrou puis lisent la valeur publiée.
    Un appel réentrant depuis la fabrique (ex: handler de log qui
    demande l'instantané) reçoit un instantané vide non publié.
    """

    def __init__(self):
        self._value = None
        self._lock = threading.Lock()
        self._local = threading.local()

    def get(self) -> Optional[EnvironmentSnapshot]:
        return self._value

    def get_or_create(self, factory: Callable[[], EnvironmentSnapshot]) -> EnvironmentSnapshot:
        value = self._value
        if value is not None:
            return value

        # Le verrou n'est pas réentrant : ce thread le détient déjà
        if getattr(self._local, 'computing', False):
            return EnvironmentSnapshot()

        with self._lock:
            if self._value is None:
                self._local.computing = True
                try:
                    self._value = factory()
                finally:
                    self._local.computing = False
            return self._value

    def reset(self):
        """Vide la cellule (réservé aux tests)"""
        with self._lock:
            self._value = None


class EnvironmentInfoCollector:
    """
    Point d'entrée de la collecte de l'instantané d'environnement

    La cellule partagée de la classe porte l'instantané unique du
    processus ; une cellule privée peut être fournie (tests).
    """

    _shared_cell = SnapshotCell()

    def __init__(self, logger=None, config=None, collector_factory=None, cell: Optional[SnapshotCell] = None):
        """
        Initialise le collecteur principal

        Args:
            logger: Instance de CollectorLogger (logger sans handler si None)
            config: Instance de CollectorConfig (ordre des fournisseurs d'identité OS)
            collector_factory: Fabrique du collecteur d'étapes (tests)
            cell: Cellule de cache (cellule partagée du processus si None)
        """
        self.logger = logger or CollectorLogger(configure=False)
        self.config = config
        self._collector_factory = collector_factory or self._build_step_collector
        self._cell = cell if cell is not None else self._shared_cell
        self.last_collection_stats = None

    def _build_step_collector(self):
        from ..collectors.environment import EnvironmentCollector
        from ..collectors.os_identity import build_os_identity_providers

        provider_names = self.config.get_os_identity_providers() if self.config else None
        return EnvironmentCollector(
            self.logger,
            os_identity_providers=build_os_identity_providers(provider_names)
        )

    def get_snapshot(self) -> EnvironmentSnapshot:
        """
        Retourne l'instantané d'environnement du processus

        Calculé au premier appel puis servi depuis le cache.

        Returns:
            EnvironmentSnapshot: Instantané, éventuellement incomplet
        """
        return self._cell.get_or_create(self._compute)

    def _compute(self) -> EnvironmentSnapshot:
        try:
            collector = self._collector_factory()
            snapshot = collector.collect()
            self.last_collection_stats = collector.get_collection_stats()
            return snapshot
        except Exception as e:
            self.logger.formatted_info(
                self.__class__,
                "Collecte de l'environnement impossible. Message d'erreur : %s",
                e
            )
            return EnvironmentSnapshot()


_default_collector = None
_default_collector_lock = threading.Lock()


def get_default_collector() -> EnvironmentInfoCollector:
    """Retourne le collecteur par défaut du processus"""
    global _default_collector
    if _default_collector is None:
        with _default_collector_lock:
            if _default_collector is None:
                _default_collector = EnvironmentInfoCollector()
    return _default_collector


def get_snapshot() -> EnvironmentSnapshot:
    """
    Retourne l'instantané d'environnement du processus

    Ne lève jamais d'exception.
    """
    return get_default_collector().get_snapshot()
