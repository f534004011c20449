"""Lecture des fichiers de configuration d'async_tools.

Un fichier de configuration contient au plus trois sections :
[execution], [logging] et [cache]. Le chargeur se limite à lire le
fichier et à vérifier sa forme ; la validation des valeurs est
faite par les modèles de async_tools.config.settings.
"""

import json
import tomllib
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Union

from async_tools.errors.exceptions import FileConfigurationError

SECTIONS = ("execution", "logging", "cache")


class ConfigLoader(ABC):
    """Source des sections de configuration, injectable dans load_settings."""

    @abstractmethod
    def load(self, config_path: Union[str, Path]) -> Dict[str, Dict[str, Any]]:
        """
        Retourne les sections présentes dans la configuration.

        Raises:
            FileConfigurationError: Si la configuration est illisible
                ou mal formée
        """
        pass


class FileConfigLoader(ConfigLoader):
    """Lit les sections depuis un fichier .toml ou .json."""

    def load(self, config_path: Union[str, Path]) -> Dict[str, Dict[str, Any]]:
        path = Path(config_path)
        raw = self._read(path)

        if not isinstance(raw, dict):
            raise FileConfigurationError(
                f"{path}: la racine doit être une table de sections"
            )
        unknown = sorted(set(raw) - set(SECTIONS))
        if unknown:
            raise FileConfigurationError(
                f"{path}: section(s) inconnue(s) {', '.join(unknown)} "
                f"(attendues : {', '.join(SECTIONS)})"
            )
        for name, section in raw.items():
            if not isinstance(section, dict):
                raise FileConfigurationError(
                    f"{path}: [{name}] doit être une table"
                )
        return raw

    @staticmethod
    def _read(path: Path) -> Any:
        """Décode le fichier selon son extension."""
        suffix = path.suffix.lower()
        if suffix not in (".toml", ".json"):
            raise FileConfigurationError(
                f"{path}: extension {suffix or '(aucune)'} non supportée, "
                "utilisez .toml ou .json"
            )
        try:
            if suffix == ".toml":
                with open(path, "rb") as f:
                    return tomllib.load(f)
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError as e:
            raise FileConfigurationError(
                f"Fichier de configuration non trouvé: {path}"
            ) from e
        except (OSError, tomllib.TOMLDecodeError, json.JSONDecodeError) as e:
            raise FileConfigurationError(f"{path} illisible: {e}") from e
