"""Cache de résultats persistant sur disque."""

import hashlib
import os
import tempfile
from pathlib import Path
from typing import Any, Optional, Union

from async_tools.cache.base import CacheBin
from async_tools.commands.codec import decode, encode
from async_tools.config.settings import CacheSettings
from async_tools.errors.exceptions import CodecError
from async_tools.logging.base import Logger


class FileCacheBin(CacheBin):
    """
    Cache de résultats stocké dans un répertoire.

    Chaque entrée est un fichier nommé d'après le SHA256 de la clé,
    contenant la valeur encodée par encode(). Une entrée illisible
    est traitée comme absente.
    """

    SUFFIX = ".cache"

    def __init__(
        self,
        directory: Union[str, Path],
        logger: Optional[Logger] = None
    ) -> None:
        """
        Initialise le cache et crée le répertoire si nécessaire.

        Args:
            directory: Répertoire des entrées
            logger: Instance de Logger optionnelle
        """
        self.directory = Path(directory).expanduser()
        self.directory.mkdir(parents=True, exist_ok=True)
        self.logger = logger

    @classmethod
    def from_settings(
        cls,
        settings: CacheSettings,
        logger: Optional[Logger] = None
    ) -> "FileCacheBin":
        """
        Construit le cache depuis la section [cache].

        Raises:
            ValueError: Si cache.directory n'est pas configuré
        """
        if settings.path is None:
            raise ValueError("Aucun répertoire de cache configuré")
        return cls(settings.path, logger)

    def path_for(self, key: str) -> Path:
        """Chemin du fichier associé à une clé."""
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return self.directory / f"{digest}{self.SUFFIX}"

    def lookup(self, key: str) -> Optional[Any]:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            return decode(path.read_text(encoding="ascii").strip())
        except (OSError, UnicodeDecodeError, CodecError) as e:
            if self.logger:
                self.logger.log_warning(
                    f"Entrée de cache illisible ignorée {path}: {e}"
                )
            return None

    def store(self, key: str, value: Any) -> None:
        """
        Mémorise une valeur (écriture atomique).

        Raises:
            CodecError: Si la valeur n'est pas encodable
        """
        content = encode(value)
        path = self.path_for(key)
        fd, tmp_path = tempfile.mkstemp(
            dir=self.directory, suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="ascii") as f:
                f.write(content)
            os.replace(tmp_path, path)
        except OSError:
            Path(tmp_path).unlink(missing_ok=True)
            raise
        if self.logger:
            self.logger.log_debug(f"Résultat mis en cache: {path}")

    def clear(self) -> int:
        """
        Supprime toutes les entrées.

        Returns:
            Nombre d'entrées supprimées
        """
        removed = 0
        for path in self.directory.glob(f"*{self.SUFFIX}"):
            path.unlink()
            removed += 1
        return removed
