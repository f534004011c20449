"""Modèles de configuration d'async_tools.

Exemple de fichier TOML accepté par load_settings() :

    [execution]
    interpreter = "bash"
    encoding = "utf-8"
    read_chunk_size = 65536

    [logging]
    level = "INFO"
    file = "/var/log/async_tools.log"

    [cache]
    directory = "~/.cache/async_tools"
"""

from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from async_tools.config.loader import ConfigLoader, FileConfigLoader
from async_tools.errors.exceptions import FileConfigurationError

DEFAULT_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


class ExecutionSettings(BaseModel):
    """Section [execution] : lancement des processus enfants."""

    interpreter: str = "bash"
    encoding: str = "utf-8"
    read_chunk_size: int = 65536

    model_config = {"extra": "forbid", "frozen": True}

    @field_validator("interpreter")
    @classmethod
    def interpreter_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("L'interpréteur est requis")
        return v

    @field_validator("read_chunk_size")
    @classmethod
    def chunk_size_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("read_chunk_size doit être strictement positif")
        return v


class LoggingSettings(BaseModel):
    """Section [logging] : niveau, format et destination des logs."""

    level: str = "INFO"
    format: str = DEFAULT_LOG_FORMAT
    file: Optional[str] = None
    console_output: bool = False

    model_config = {"extra": "forbid", "frozen": True}

    @field_validator("level")
    @classmethod
    def known_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Niveau de log inconnu: {v}")
        return level


class CacheSettings(BaseModel):
    """Section [cache] : répertoire du FileCacheBin."""

    directory: Optional[str] = None

    model_config = {"extra": "forbid", "frozen": True}

    @property
    def path(self) -> Optional[Path]:
        """Répertoire du cache avec ~ expandé, ou None."""
        if self.directory is None:
            return None
        return Path(self.directory).expanduser()


class AsyncToolsSettings(BaseModel):
    """Configuration complète."""

    execution: ExecutionSettings = Field(default_factory=ExecutionSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)

    model_config = {"extra": "forbid", "frozen": True}


def load_settings(
    config_path: Optional[Union[str, Path]] = None,
    config_loader: Optional[ConfigLoader] = None,
) -> AsyncToolsSettings:
    """
    Charge la configuration depuis un fichier TOML ou JSON.

    Args:
        config_path: Chemin du fichier. Si None, retourne les valeurs
            par défaut.
        config_loader: ConfigLoader injectable (DIP). Si None, utilise
            FileConfigLoader.

    Returns:
        Instance validée d'AsyncToolsSettings

    Raises:
        FileConfigurationError: Si le fichier est absent, illisible
            ou invalide
    """
    if config_path is None:
        return AsyncToolsSettings()

    sections = (config_loader or FileConfigLoader()).load(config_path)
    try:
        return AsyncToolsSettings.model_validate(sections)
    except ValidationError as e:
        raise FileConfigurationError(
            f"Configuration invalide ({config_path}): {e}"
        ) from e
