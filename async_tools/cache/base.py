"""Interface abstraite des caches de résultats."""

from abc import ABC, abstractmethod
from typing import Any, Optional


class CacheBin(ABC):
    """
    Interface abstraite d'un cache de résultats de commandes.

    Le cache est indexé par la ligne de commande complète. Une valeur
    None signifie l'absence de résultat en cache.
    """

    @abstractmethod
    def lookup(self, key: str) -> Optional[Any]:
        """
        Recherche un résultat déjà calculé.

        Args:
            key: Clé du résultat (ligne de commande)

        Returns:
            La valeur mémorisée ou None
        """
        pass

    @abstractmethod
    def store(self, key: str, value: Any) -> None:
        """
        Mémorise un résultat.

        Args:
            key: Clé du résultat (ligne de commande)
            value: Valeur à mémoriser
        """
        pass
