"""Substitution transparente d'un résultat en cache.

Example:
    Le second appel ne lance aucun processus :

        cache = MemoryCacheBin()
        first = cached_command(cache, "uname", [Argument("-r")])
        first.result()           # AsyncResult, mis en cache
        second = cached_command(cache, "uname", [Argument("-r")])
        second.result()          # ImmediateResult, même valeur
"""

from typing import Any, Iterable, Optional

from async_tools.cache.base import CacheBin
from async_tools.commands.base import ArgumentLike, ResultWrapper
from async_tools.commands.builder import build_command_line
from async_tools.commands.results import AsyncResult, ImmediateResult
from async_tools.logging.base import Logger


class CachingResult(ResultWrapper):
    """Décorateur de ResultWrapper qui mémorise le résultat final."""

    def __init__(
        self,
        inner: ResultWrapper,
        cache: CacheBin,
        key: str
    ) -> None:
        """
        Args:
            inner: Wrapper dont le résultat est mis en cache.
            cache: Cache de destination.
            key: Clé du résultat.
        """
        self._inner = inner
        self._cache = cache
        self._key = key
        self._stored = False

    @property
    def inner(self) -> ResultWrapper:
        """Wrapper décoré."""
        return self._inner

    def result(self) -> Any:
        value = self._inner.result()
        if not self._stored and value is not None:
            self._cache.store(self._key, value)
            self._stored = True
        return value

    def is_running(self) -> bool:
        return self._inner.is_running()


def cached_command(
    cache: CacheBin,
    cmd: str,
    args: Iterable[ArgumentLike] = (),
    logger: Optional[Logger] = None,
    **kwargs: Any,
) -> ResultWrapper:
    """Retourne le résultat en cache ou lance la commande.

    La clé est la ligne de commande complète. Les autres paramètres
    sont ceux d'AsyncResult.

    Args:
        cache: Cache consulté puis alimenté.
        cmd: Programme à exécuter.
        args: Arguments de la commande.
        logger: Destination des logs et diagnostics.
        **kwargs: Paramètres supplémentaires d'AsyncResult.

    Returns:
        ImmediateResult si la clé est en cache, sinon CachingResult
        autour d'un AsyncResult.
    """
    args = tuple(args)
    key = build_command_line(cmd, args)
    cached = cache.lookup(key)
    if cached is not None:
        if logger:
            logger.log_debug(f"Résultat trouvé en cache : {key}")
        return ImmediateResult(cached)
    return CachingResult(
        AsyncResult(cmd, args, logger=logger, **kwargs), cache, key
    )
