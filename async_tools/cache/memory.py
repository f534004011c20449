"""Cache de résultats en mémoire."""

from typing import Any, Dict, Optional

from async_tools.cache.base import CacheBin


class MemoryCacheBin(CacheBin):
    """Cache limité à la durée de vie du processus courant."""

    def __init__(self) -> None:
        self._entries: Dict[str, Any] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def lookup(self, key: str) -> Optional[Any]:
        return self._entries.get(key)

    def store(self, key: str, value: Any) -> None:
        self._entries[key] = value

    def clear(self) -> None:
        """Vide le cache."""
        self._entries.clear()
