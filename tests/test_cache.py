"""Tests pour le module cache."""

from unittest.mock import MagicMock

import pytest

from async_tools.cache import (
    CacheBin,
    CachingResult,
    FileCacheBin,
    MemoryCacheBin,
    cached_command,
)
from async_tools.commands import (
    Argument,
    AsyncResult,
    ExecutionResult,
    ImmediateResult,
    build_command_line,
)
from async_tools.config import CacheSettings
from async_tools.errors import CodecError
from async_tools.logging.base import Logger


# --- Tests MemoryCacheBin ---


class TestMemoryCacheBin:
    """Tests pour le cache en mémoire."""

    def test_lookup_absent(self):
        """Une clé inconnue retourne None."""
        assert MemoryCacheBin().lookup("ls") is None

    def test_store_puis_lookup(self):
        """Une valeur stockée est retrouvée."""
        cache = MemoryCacheBin()
        cache.store("ls", {"exit": 0})

        assert cache.lookup("ls") == {"exit": 0}
        assert "ls" in cache
        assert len(cache) == 1

    def test_clear(self):
        """clear() vide le cache."""
        cache = MemoryCacheBin()
        cache.store("a", 1)
        cache.clear()
        assert len(cache) == 0

    def test_implemente_interface(self):
        """MemoryCacheBin est un CacheBin."""
        assert isinstance(MemoryCacheBin(), CacheBin)


# --- Tests FileCacheBin ---


class TestFileCacheBin:
    """Tests pour le cache sur disque."""

    def setup_method(self):
        """Initialise le logger mocké."""
        self.mock_logger = MagicMock(spec=Logger)

    def test_cree_le_repertoire(self, tmp_path):
        """Le répertoire est créé s'il n'existe pas."""
        directory = tmp_path / "a" / "b"
        FileCacheBin(directory)
        assert directory.is_dir()

    def test_store_puis_lookup(self, tmp_path):
        """Une valeur structurée survit à l'écriture sur disque."""
        cache = FileCacheBin(tmp_path, self.mock_logger)
        cache.store("uname -r", {"release": "6.1", "ids": [1, 2]})

        assert cache.lookup("uname -r") == {"release": "6.1", "ids": [1, 2]}
        self.mock_logger.log_debug.assert_called_once()

    def test_persistance_entre_instances(self, tmp_path):
        """Une seconde instance relit les entrées existantes."""
        FileCacheBin(tmp_path).store("k", 42)
        assert FileCacheBin(tmp_path).lookup("k") == 42

    def test_path_for_sha256(self, tmp_path):
        """Le nom de fichier est le SHA256 de la clé."""
        cache = FileCacheBin(tmp_path)
        path = cache.path_for("ls -l")

        assert path.parent == tmp_path
        assert path.suffix == ".cache"
        assert len(path.stem) == 64
        assert cache.path_for("ls -l") == path
        assert cache.path_for("ls -a") != path

    def test_lookup_absent(self, tmp_path):
        """Une clé inconnue retourne None."""
        assert FileCacheBin(tmp_path).lookup("absent") is None

    def test_entree_corrompue(self, tmp_path):
        """Une entrée illisible est ignorée avec un warning."""
        cache = FileCacheBin(tmp_path, self.mock_logger)
        cache.path_for("k").write_text("%%% corrompu %%%")

        assert cache.lookup("k") is None
        self.mock_logger.log_warning.assert_called_once()

    def test_valeur_non_encodable(self, tmp_path):
        """Une valeur non encodable lève CodecError, sans fichier."""
        cache = FileCacheBin(tmp_path)
        with pytest.raises(CodecError):
            cache.store("k", lambda: None)
        assert list(tmp_path.iterdir()) == []

    def test_clear(self, tmp_path):
        """clear() retourne le nombre d'entrées supprimées."""
        cache = FileCacheBin(tmp_path)
        cache.store("a", 1)
        cache.store("b", 2)

        assert cache.clear() == 2
        assert cache.lookup("a") is None

    def test_from_settings(self, tmp_path):
        """Construction depuis la section [cache]."""
        settings = CacheSettings(directory=str(tmp_path / "cache"))
        cache = FileCacheBin.from_settings(settings)
        assert cache.directory == tmp_path / "cache"

    def test_from_settings_sans_repertoire(self):
        """Sans répertoire configuré, ValueError est levée."""
        with pytest.raises(ValueError):
            FileCacheBin.from_settings(CacheSettings())


# --- Tests CachingResult / cached_command ---


class TestCachingResult:
    """Tests pour le décorateur de mise en cache."""

    def test_stocke_une_seule_fois(self):
        """Le résultat est stocké au premier appel seulement."""
        cache = MagicMock(spec=CacheBin)
        wrapper = CachingResult(ImmediateResult("v"), cache, "k")

        assert wrapper.result() == "v"
        assert wrapper.result() == "v"
        cache.store.assert_called_once_with("k", "v")

    def test_none_non_stocke(self):
        """Un résultat None n'est pas mis en cache."""
        cache = MagicMock(spec=CacheBin)
        wrapper = CachingResult(ImmediateResult(None), cache, "k")

        assert wrapper.result() is None
        cache.store.assert_not_called()

    def test_is_running_delegue(self):
        """is_running() interroge le wrapper décoré."""
        inner = MagicMock(spec=AsyncResult)
        inner.is_running.return_value = True
        wrapper = CachingResult(inner, MemoryCacheBin(), "k")

        assert wrapper.is_running() is True
        assert wrapper.inner is inner


class TestCachedCommand:
    """Tests pour cached_command."""

    def setup_method(self):
        """Initialise le logger mocké."""
        self.mock_logger = MagicMock(spec=Logger)

    def test_miss_puis_hit(self):
        """Le second appel est servi depuis le cache."""
        cache = MemoryCacheBin()
        args = [Argument(value="cache")]

        first = cached_command(cache, "echo", args)
        assert isinstance(first, CachingResult)
        info = first.result()
        assert isinstance(info, ExecutionResult)
        assert info.stdout == b"cache\n"

        second = cached_command(cache, "echo", args, logger=self.mock_logger)
        assert isinstance(second, ImmediateResult)
        assert second.is_running() is False
        assert second.result() == info
        self.mock_logger.log_debug.assert_called_once()

    def test_cle_ligne_de_commande(self):
        """La clé est la ligne de commande complète."""
        cache = MemoryCacheBin()
        args = [Argument("-n", " ", "x y")]
        cached_command(cache, "echo", args).result()

        assert build_command_line("echo", args) in cache

    def test_callback_transmis(self):
        """Les paramètres d'AsyncResult sont transmis."""
        cache = MemoryCacheBin()
        wrapper = cached_command(
            cache, "exit", [Argument(value=4)],
            process_callback=lambda info: info.exit_code,
        )
        assert wrapper.result() == 4
        assert cache.lookup("exit 4") == 4

    def test_cache_disque(self, tmp_path):
        """Un ExecutionResult survit au cache sur disque."""
        cache = FileCacheBin(tmp_path)
        info = cached_command(cache, "echo", [Argument(value="disque")]).result()

        hit = cached_command(cache, "echo", [Argument(value="disque")])
        assert isinstance(hit, ImmediateResult)
        assert hit.result() == info
