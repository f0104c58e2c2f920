"""
Classe de base pour les collecteurs d'environnement

Ce module définit l'interface commune des collecteurs, le type de
résultat d'une étape de collecte et des utilitaires partagés.
"""

import re
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, List, Optional


@dataclass(frozen=True)
class StepResult:
    """
    Résultat d'une étape de collecte

    Soit un succès portant une valeur (éventuellement None : champ absent),
    soit un échec portant la raison.
    """

    facet: str
    value: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, facet: str, value: Any) -> 'StepResult':
        return cls(facet=facet, value=value)

    @classmethod
    def failure(cls, facet: str, error: BaseException) -> 'StepResult':
        return cls(facet=facet, error=str(error) or error.__class__.__name__)


def clean_string(value) -> str:
    """
    Nettoie une chaîne de caractères

    Args:
        value: Chaîne à nettoyer

    Returns:
        str: Chaîne nettoyée (vide si value est vide)
    """
    if not value:
        return ""

    value = str(value).strip()

    # Supprimer les caractères de contrôle
    value = ''.join(char for char in value if char.isprintable())

    # Supprimer les espaces multiples
    return re.sub(r'\s+', ' ', value)


class BaseCollector(ABC):
    """
    Classe de base abstraite pour les collecteurs

    Chaque étape est exécutée isolément via _run_step : un échec est
    converti en StepResult, journalisé, et n'interrompt pas la collecte.
    """

    def __init__(self, logger):
        """
        Initialise le collecteur de base

        Args:
            logger: Instance de CollectorLogger (interface formatted_info)
        """
        self.logger = logger

        # Métadonnées du collecteur
        self.collector_name = self.__class__.__name__
        self.collection_start_time = None
        self.collection_errors = []
        self.last_collection_duration = 0.0

    @abstractmethod
    def collect(self):
        """
        Méthode principale de collecte - doit être implémentée par chaque collecteur
        """

    def _start_collection(self):
        """Démarre une session de collecte"""
        self.collection_start_time = time.time()
        self.collection_errors = []
        self.logger.debug(f"Début collecte {self.collector_name}")

    def _end_collection(self) -> float:
        """
        Termine une session de collecte

        Returns:
            float: Durée de collecte en secondes
        """
        if not self.collection_start_time:
            return 0.0

        duration = time.time() - self.collection_start_time
        self.logger.debug(f"Collecte {self.collector_name} terminée en {duration:.2f}s")
        if self.collection_errors:
            self.logger.debug(
                f"Collecte {self.collector_name} avec {len(self.collection_errors)} information(s) manquante(s)"
            )
        return duration

    def _run_step(self, facet: str, func: Callable[[], Any]) -> StepResult:
        """
        Exécute une étape de collecte de manière isolée

        Args:
            facet: Nom de l'information collectée (pour le diagnostic)
            func: Fonction de collecte

        Returns:
            StepResult: Succès avec valeur ou échec avec raison
        """
        try:
            return StepResult.success(facet, func())
        except Exception as e:
            return StepResult.failure(facet, e)

    def _record_failure(self, result: StepResult):
        """
        Journalise un échec d'étape au niveau diagnostic

        Args:
            result: Résultat en échec
        """
        self.collection_errors.append(f"{result.facet}: {result.error}")
        self.logger.formatted_info(
            self.__class__,
            "Impossible de récupérer %s. Message d'erreur : %s",
            result.facet,
            result.error
        )

    def _unwrap(self, result: StepResult):
        """
        Retourne la valeur d'un résultat, ou None après journalisation de l'échec
        """
        if result.ok:
            return result.value
        self._record_failure(result)
        return None

    def get_collection_stats(self) -> dict:
        """
        Retourne les statistiques de la dernière collecte

        Returns:
            dict: Statistiques du collecteur
        """
        errors: List[str] = list(self.collection_errors)
        return {
            'collector_name': self.collector_name,
            'collection_duration': self.last_collection_duration,
            'errors_count': len(errors),
            'errors': errors
        }
