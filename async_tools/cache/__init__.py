"""Module de cache des résultats de commandes."""

from async_tools.cache.base import CacheBin
from async_tools.cache.memory import MemoryCacheBin
from async_tools.cache.file import FileCacheBin
from async_tools.cache.cached import CachingResult, cached_command

__all__ = [
    "CacheBin",
    "MemoryCacheBin",
    "FileCacheBin",
    "CachingResult",
    "cached_command",
]
