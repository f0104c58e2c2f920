"""
Module de configuration du collecteur d'environnement

Ce module gère la configuration, incluant :
- Lecture des fichiers de configuration
- Validation des paramètres
- Valeurs par défaut
- Chemins spécifiques par plateforme
"""

import os
import sys
import configparser
from typing import Dict, Any, List, Optional


# Fournisseurs d'identité OS reconnus, dans l'ordre de préférence par défaut
KNOWN_OS_IDENTITY_PROVIDERS = ('wmi', 'os_release', 'platform')

VALID_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


class CollectorConfig:
    """
    Gestionnaire de configuration du collecteur d'environnement

    Cette classe centralise la configuration du logging et de la
    chaîne de fournisseurs d'identité OS.
    """

    def __init__(self, config_file: Optional[str] = None):
        """
        Initialise la configuration

        Args:
            config_file: Chemin vers le fichier de configuration (optionnel)
        """
        self.config = configparser.ConfigParser()
        self.config_file = config_file or self._get_default_config_path()
        self.load_errors = []

        self._set_defaults()
        self._load_config()

    def _get_default_config_path(self) -> str:
        """
        Détermine le chemin par défaut du fichier de configuration selon la plateforme

        Returns:
            str: Chemin vers le fichier de configuration
        """
        if sys.platform == "win32":
            return os.path.join(
                os.environ.get("PROGRAMDATA", "C:\\ProgramData"),
                "EnvironmentInfo",
                "config.ini"
            )
        else:
            # Linux, macOS et autres Unix
            return "/etc/envinfo/config.ini"

    def _set_defaults(self):
        """
        Définit les valeurs de configuration par défaut

        Ces valeurs sont utilisées si aucun fichier n'est trouvé
        ou si certaines sections/clés sont manquantes.
        """
        self.config.add_section('logging')
        self.config.set('logging', 'log_level', 'INFO')
        self.config.set('logging', 'log_file', self._get_default_log_path())
        self.config.set('logging', 'max_log_size', '10485760')  # 10MB
        self.config.set('logging', 'backup_count', '5')
        self.config.set('logging', 'console', 'true')

        self.config.add_section('collector')
        self.config.set('collector', 'os_identity_providers', ', '.join(KNOWN_OS_IDENTITY_PROVIDERS))

    def _get_default_log_path(self) -> str:
        """
        Détermine le chemin par défaut des logs selon la plateforme

        Returns:
            str: Chemin vers le fichier de log
        """
        if sys.platform == "win32":
            return os.path.join(
                os.environ.get("TEMP", "C:\\temp"),
                "envinfo.log"
            )
        else:
            return "/tmp/envinfo.log"

    def _load_config(self):
        """
        Charge la configuration depuis le fichier

        Si le fichier n'existe pas, utilise les valeurs par défaut.
        En cas d'erreur de lecture, conserve l'erreur et continue avec les défauts.
        """
        if not os.path.exists(self.config_file):
            return

        try:
            self.config.read(self.config_file, encoding='utf-8')
        except (configparser.Error, OSError, UnicodeDecodeError) as e:
            self.load_errors.append(f"Erreur lors du chargement de {self.config_file}: {e}")

    def get(self, section: str, option: str, fallback: Any = None) -> str:
        """Récupère une valeur de configuration"""
        return self.config.get(section, option, fallback=fallback)

    def getboolean(self, section: str, option: str, fallback: bool = False) -> bool:
        """Récupère une valeur booléenne de configuration"""
        return self.config.getboolean(section, option, fallback=fallback)

    def getint(self, section: str, option: str, fallback: int = 0) -> int:
        """Récupère une valeur entière de configuration"""
        return self.config.getint(section, option, fallback=fallback)

    def set(self, section: str, option: str, value: str):
        """
        Définit une valeur de configuration

        Args:
            section: Nom de la section
            option: Nom de l'option
            value: Nouvelle valeur
        """
        if not self.config.has_section(section):
            self.config.add_section(section)
        self.config.set(section, option, str(value))

    def save(self):
        """
        Sauvegarde la configuration dans le fichier

        Crée les dossiers parents si nécessaire.
        """
        config_dir = os.path.dirname(self.config_file)
        if config_dir and not os.path.exists(config_dir):
            os.makedirs(config_dir, exist_ok=True)

        with open(self.config_file, 'w', encoding='utf-8') as f:
            self.config.write(f)

    def get_logging_config(self) -> Dict[str, Any]:
        """
        Récupère la configuration complète du logging

        Returns:
            dict: Configuration logging
        """
        return {
            'log_level': self.get('logging', 'log_level', 'INFO').upper(),
            'log_file': self.get('logging', 'log_file'),
            'max_log_size': self.getint('logging', 'max_log_size', 10485760),
            'backup_count': self.getint('logging', 'backup_count', 5),
            'console': self.getboolean('logging', 'console', True)
        }

    def get_os_identity_providers(self) -> List[str]:
        """
        Récupère l'ordre de préférence des fournisseurs d'identité OS

        Returns:
            list: Noms des fournisseurs, dans l'ordre
        """
        raw = self.get('collector', 'os_identity_providers', '')
        return [name.strip().lower() for name in raw.split(',') if name.strip()]

    def validate(self) -> List[str]:
        """
        Valide la configuration courante

        Returns:
            list: Erreurs de configuration (vide si valide)
        """
        errors = []

        log_level = self.get('logging', 'log_level', '').upper()
        if log_level not in VALID_LOG_LEVELS:
            errors.append(f"Niveau de log invalide: {log_level}")

        try:
            if self.getint('logging', 'max_log_size') <= 0:
                errors.append("max_log_size doit être positif")
            if self.getint('logging', 'backup_count') < 0:
                errors.append("backup_count ne peut pas être négatif")
        except ValueError as e:
            errors.append(f"Valeur numérique invalide: {e}")

        providers = self.get_os_identity_providers()
        if not providers:
            errors.append("Aucun fournisseur d'identité OS configuré")
        for name in providers:
            if name not in KNOWN_OS_IDENTITY_PROVIDERS:
                errors.append(f"Fournisseur d'identité OS inconnu: {name}")

        return errors


def create_default_config(config_path: str) -> CollectorConfig:
    """
    Crée un fichier de configuration par défaut

    Args:
        config_path: Chemin où créer le fichier de configuration

    Returns:
        CollectorConfig: Instance de configuration créée
    """
    config = CollectorConfig(config_path)
    config.save()
    return config
