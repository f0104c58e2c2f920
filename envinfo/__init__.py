"""
EnvInfo - Collecteur d'instantané d'environnement multi-plateforme

Ce module fournit un collecteur qui rassemble, une seule fois par processus,
les informations machine et processus (OS, mémoire, processeurs, hôte, IP,
processus, thread, architecture, runtime) destinées aux rapports de diagnostic.

Author: Watchman EnvInfo Team
Version: 1.0.0
"""

__version__ = "1.0.0"
__author__ = "Watchman EnvInfo Team"

# Imports principaux pour faciliter l'utilisation
from .core.collector import EnvironmentInfoCollector, get_snapshot
from .core.config import CollectorConfig
from .core.logger import CollectorLogger
from .core.snapshot import Architecture, EnvironmentSnapshot

__all__ = [
    'EnvironmentInfoCollector', 'get_snapshot', 'CollectorConfig',
    'CollectorLogger', 'Architecture', 'EnvironmentSnapshot'
]
