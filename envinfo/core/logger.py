"""
Module de logging du collecteur d'environnement

Ce module fournit un système de logging centralisé avec :
- Rotation automatique des logs
- Différents niveaux de log
- Formatage cohérent
- Interface de diagnostic (composant, message formaté)
"""

import os
import sys
import logging
import logging.handlers


LOGGER_NAME = 'EnvironmentInfo'


class CollectorLogger:
    """
    Gestionnaire de logging du collecteur d'environnement

    Cette classe configure le logger nommé de l'application, avec rotation
    automatique et formatage approprié. Avec configure=False, aucun handler
    n'est ajouté : l'application hôte garde le contrôle du logging.
    """

    def __init__(self, config=None, configure: bool = True, name: str = LOGGER_NAME):
        """
        Initialise le système de logging

        Args:
            config: Instance de CollectorConfig pour récupérer les paramètres de log
            configure: Ajoute les handlers fichier/console si True
            name: Nom du logger
        """
        self.config = config
        self.logger = logging.getLogger(name)

        # Éviter la duplication si déjà configuré
        if configure and not self.logger.handlers:
            self._setup_logging()

    @classmethod
    def null(cls) -> 'CollectorLogger':
        """
        Retourne un logger qui ignore tous les messages

        Returns:
            CollectorLogger: Logger silencieux
        """
        instance = cls(configure=False, name=f"{LOGGER_NAME}.null")
        if not instance.logger.handlers:
            instance.logger.addHandler(logging.NullHandler())
        instance.logger.propagate = False
        return instance

    def _setup_logging(self):
        """
        Configure le système de logging avec les handlers appropriés

        Configure :
        - Le niveau de log basé sur la configuration
        - La rotation des fichiers de log
        - La sortie console
        """
        if self.config:
            settings = self.config.get_logging_config()
        else:
            settings = {
                'log_level': 'INFO',
                'log_file': self._get_default_log_file(),
                'max_log_size': 10485760,  # 10MB
                'backup_count': 5,
                'console': True
            }

        log_level = getattr(logging, settings['log_level'].upper(), logging.INFO)
        self.logger.setLevel(log_level)

        formatter = logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        log_file = settings['log_file']
        if log_file:
            try:
                log_dir = os.path.dirname(log_file)
                if log_dir and not os.path.exists(log_dir):
                    os.makedirs(log_dir, exist_ok=True)

                file_handler = logging.handlers.RotatingFileHandler(
                    filename=log_file,
                    maxBytes=settings['max_log_size'],
                    backupCount=settings['backup_count'],
                    encoding='utf-8'
                )
                file_handler.setLevel(log_level)
                file_handler.setFormatter(formatter)
                self.logger.addHandler(file_handler)

            except OSError as e:
                print(f"Erreur lors de la configuration du logging fichier: {e}", file=sys.stderr)

        if settings['console']:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(log_level)
            console_handler.setFormatter(logging.Formatter(fmt='%(levelname)s - %(message)s'))
            self.logger.addHandler(console_handler)

        self.logger.debug("Système de logging initialisé")

    def _get_default_log_file(self) -> str:
        """
        Détermine le fichier de log par défaut selon la plateforme

        Returns:
            str: Chemin vers le fichier de log par défaut
        """
        if sys.platform == "win32":
            return os.path.join(os.environ.get("TEMP", "C:\\temp"), "envinfo.log")
        else:
            return "/tmp/envinfo.log"

    def get_logger(self) -> logging.Logger:
        """
        Retourne l'instance du logger

        Returns:
            logging.Logger: Instance du logger configuré
        """
        return self.logger

    def set_level(self, level_name: str):
        """Change le niveau du logger et de ses handlers"""
        level = getattr(logging, level_name.upper(), logging.INFO)
        self.logger.setLevel(level)
        for handler in self.logger.handlers:
            handler.setLevel(level)

    def formatted_info(self, component, message: str, *args):
        """
        Log un message de diagnostic de niveau INFO pour un composant

        Le formatage est différé au module logging, qui ne lève pas
        d'exception si les arguments ne correspondent pas au message.

        Args:
            component: Classe ou nom du composant émetteur
            message: Message au format %
            *args: Arguments du message
        """
        name = getattr(component, '__name__', None) or str(component)
        self.logger.info("[%s] " + message, name, *args)

    def debug(self, message: str):
        """Log un message de niveau DEBUG"""
        self.logger.debug(message)

    def info(self, message: str):
        """Log un message de niveau INFO"""
        self.logger.info(message)

    def warning(self, message: str):
        """Log un message de niveau WARNING"""
        self.logger.warning(message)

    def error(self, message: str):
        """Log un message de niveau ERROR"""
        self.logger.error(message)

    def exception(self, message: str):
        """
        Log une exception avec sa stack trace

        Args:
            message: Message descriptif de l'erreur
        """
        self.logger.exception(message)


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    """
    Fonction utilitaire pour récupérer un logger nommé

    Args:
        name: Nom du logger

    Returns:
        logging.Logger: Instance du logger
    """
    return logging.getLogger(name)
