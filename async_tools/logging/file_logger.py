"""Implémentation concrète du logger avec fichier."""

import logging
import os
from typing import Optional

from async_tools.config.settings import LoggingSettings
from async_tools.logging.base import Logger


class FileLogger(Logger):
    """
    Logger qui écrit dans un fichier avec option console.

    Caractéristiques:
    - Logger unique par fichier (évite les conflits)
    - Encodage UTF-8 explicite
    - Flush immédiat après chaque log
    - Pas de propagation (évite les logs en double)
    - Niveau et format issus de LoggingSettings
    """

    def __init__(
        self,
        log_file: str,
        settings: Optional[LoggingSettings] = None,
        console_output: Optional[bool] = None
    ) -> None:
        """
        Initialise le logger.

        Args:
            log_file: Chemin du fichier de log
            settings: Section [logging] de la configuration (niveau,
                      format, sortie console). Valeurs par défaut si None.
            console_output: Force l'activation ou la désactivation de la
                            sortie console (prioritaire sur settings)
        """
        self.log_file = log_file
        settings = settings or LoggingSettings()
        if console_output is None:
            console_output = settings.console_output

        # Créer le répertoire de logs si nécessaire
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir, exist_ok=True)

        log_level = getattr(logging, settings.level, logging.INFO)

        self.logger = logging.getLogger(f"async_tools.{log_file}")
        self.logger.setLevel(log_level)

        # Éviter les handlers dupliqués
        if not self.logger.handlers:
            formatter = logging.Formatter(settings.format)
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(log_level)
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)
            self.handler = file_handler

            if console_output:
                console_handler = logging.StreamHandler()
                console_handler.setLevel(log_level)
                console_handler.setFormatter(formatter)
                self.logger.addHandler(console_handler)
        else:
            self.handler = self.logger.handlers[0]

        self.logger.propagate = False

    @classmethod
    def from_settings(cls, settings: LoggingSettings) -> "FileLogger":
        """
        Construit le logger à partir de la section [logging].

        Args:
            settings: Paramètres de logging, file doit être renseigné

        Returns:
            Instance de FileLogger

        Raises:
            ValueError: Si aucun fichier de log n'est configuré
        """
        if not settings.file:
            raise ValueError("Aucun fichier de log configuré (logging.file)")
        return cls(settings.file, settings=settings)

    def _flush(self) -> None:
        """Force l'écriture immédiate sur le disque."""
        if self.handler:
            self.handler.flush()

    def log_debug(self, message: str) -> None:
        """Log un message de débogage."""
        self.logger.debug(message)
        self._flush()

    def log_info(self, message: str) -> None:
        """Log un message d'information."""
        self.logger.info(message)
        self._flush()

    def log_warning(self, message: str) -> None:
        """Log un avertissement."""
        self.logger.warning(message)
        self._flush()

    def log_error(self, message: str) -> None:
        """Log une erreur."""
        self.logger.error(message)
        self._flush()
