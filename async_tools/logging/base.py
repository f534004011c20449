"""Interface abstraite pour le logging."""

from abc import ABC, abstractmethod


class Logger(ABC):
    """Interface pour le système de logging.

    Tous les composants reçoivent un Logger par injection ; c'est
    aussi le canal latéral par lequel passent les diagnostics
    d'exécution.
    """

    @abstractmethod
    def log_debug(self, message: str) -> None:
        """Log un message de débogage."""
        pass

    @abstractmethod
    def log_info(self, message: str) -> None:
        """Log un message d'information."""
        pass

    @abstractmethod
    def log_warning(self, message: str) -> None:
        """Log un avertissement."""
        pass

    @abstractmethod
    def log_error(self, message: str) -> None:
        """Log une erreur."""
        pass
