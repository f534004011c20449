"""Gestion du processus enfant et de ses pipes.

ProcessHandle lance un interpréteur complet (bash par défaut, et non
/bin/sh en mode de compatibilité POSIX) et lui écrit la ligne de
commande sur l'entrée standard avant de la fermer. Les descripteurs
0, 1 et 2 sont des pipes ; des descripteurs supplémentaires (>= 3)
peuvent être demandés par l'appelant.

Cycle de vie : UNOPENED -> RUNNING -> FINISHED, sans retour possible.
Un échec de lancement laisse le handle dans l'état UNOPENED.

Example:
    Lecture d'un descripteur supplémentaire :

        handle = ProcessHandle()
        handle.open("echo data >&3", {3: DescriptorSpec.pipe()})
        outputs = handle.drain_all()   # {1: b"", 2: b"", 3: b"data\\n"}
        exit_code = handle.close()
"""

import fcntl
import os
import selectors
import subprocess  # nosec B404
from dataclasses import dataclass
from enum import StrEnum
from typing import BinaryIO, Dict, List, Mapping, Optional, Tuple

from async_tools.commands.base import ProcessStatus
from async_tools.config.settings import ExecutionSettings
from async_tools.errors.exceptions import DescriptorError
from async_tools.logging.diagnostics import (
    DiagnosticReporter,
    DiagnosticType,
)

STDIN, STDOUT, STDERR = 0, 1, 2
RESERVED_DESCRIPTORS = (STDIN, STDOUT, STDERR)

_FILE_FLAGS = {
    "r": os.O_RDONLY,
    "w": os.O_WRONLY | os.O_CREAT | os.O_TRUNC,
    "a": os.O_WRONLY | os.O_CREAT | os.O_APPEND,
}


class ProcessState(StrEnum):
    """États successifs d'un ProcessHandle."""

    UNOPENED = "unopened"
    RUNNING = "running"
    FINISHED = "finished"


@dataclass(frozen=True)
class DescriptorSpec:
    """Spécification d'un descripteur supplémentaire.

    Le mode est vu depuis l'enfant, comme pour un fichier : un pipe
    'w' est écrit par l'enfant et drainé par le parent, un pipe 'r'
    est alimenté par le parent avec data puis fermé.

    Attributes:
        kind: 'pipe' ou 'file'.
        path: Chemin du fichier pour kind='file'.
        mode: 'r' ou 'w' pour un pipe, 'r', 'w' ou 'a' pour un fichier.
        data: Contenu écrit par le parent dans un pipe 'r'.
    """

    kind: str = "pipe"
    path: Optional[str] = None
    mode: str = "w"
    data: bytes = b""

    def __post_init__(self) -> None:
        """Valide la spécification.

        Raises:
            DescriptorError: Si kind, mode, path ou data est incohérent.
        """
        if self.kind not in ("pipe", "file"):
            raise DescriptorError(f"Type de descripteur inconnu: {self.kind}")
        if self.kind == "file":
            if not self.path:
                raise DescriptorError("Un descripteur 'file' requiert path.")
            if self.mode not in _FILE_FLAGS:
                raise DescriptorError(f"Mode de fichier inconnu: {self.mode}")
            if self.data:
                raise DescriptorError("data est réservé aux pipes 'r'.")
        elif self.mode not in ("r", "w"):
            raise DescriptorError(f"Mode de pipe inconnu: {self.mode}")
        elif self.data and self.mode != "r":
            raise DescriptorError("data est réservé aux pipes 'r'.")

    @classmethod
    def pipe(cls, mode: str = "w", data: bytes = b"") -> "DescriptorSpec":
        """Pipe vers le parent ('w') ou depuis le parent ('r')."""
        return cls(kind="pipe", mode=mode, data=bytes(data))

    @classmethod
    def file(cls, path: str, mode: str = "w") -> "DescriptorSpec":
        """Fichier ouvert pour l'enfant (rien à drainer)."""
        return cls(kind="file", path=str(path), mode=mode)

    @property
    def child_reads(self) -> bool:
        """True si l'enfant lit sur ce descripteur."""
        return self.mode == "r"


def _lift(fd: int, floor: int) -> int:
    """Duplique fd au premier numéro >= floor et ferme l'original."""
    try:
        return fcntl.fcntl(fd, fcntl.F_DUPFD, floor)
    finally:
        os.close(fd)


class ProcessHandle:
    """Processus enfant, ses pipes et son cycle de vie.

    Le handle est l'unique propriétaire du processus et des pipes ;
    close() les libère exactement une fois.

    Attributes:
        _settings: Paramètres d'exécution (interpréteur, encodage).
        _reporter: Émetteur de diagnostics.
        _process: Processus enfant, None tant qu'il n'est pas lancé.
        _pipes: Pipes côté parent, par numéro de descripteur.
        _feeds: Pipes 'r' alimentés par le parent, par numéro.
        _pending: Données restant à écrire dans chaque pipe 'r'.
        _drained: Contenu lu par drain_all(), None avant lecture.
        _exit_code: Code retourné par close().
        _state: État courant (ProcessState).
    """

    def __init__(
        self,
        settings: Optional[ExecutionSettings] = None,
        reporter: Optional[DiagnosticReporter] = None,
    ) -> None:
        """Initialise le handle sans lancer de processus.

        Args:
            settings: Paramètres d'exécution (défaut: ExecutionSettings()).
            reporter: Émetteur des diagnostics (échec de lancement).
        """
        self._settings = settings or ExecutionSettings()
        self._reporter = reporter or DiagnosticReporter()
        self._process: Optional[subprocess.Popen] = None
        self._pipes: Dict[int, BinaryIO] = {}
        self._feeds: Dict[int, BinaryIO] = {}
        self._pending: Dict[int, memoryview] = {}
        self._drained: Optional[Dict[int, bytes]] = None
        self._exit_code: Optional[int] = None
        self._state = ProcessState.UNOPENED

    def __enter__(self) -> "ProcessHandle":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def state(self) -> ProcessState:
        """État courant du handle."""
        return self._state

    @property
    def is_open(self) -> bool:
        """True si le processus est lancé et pas encore fermé."""
        return self._state is ProcessState.RUNNING

    @property
    def pid(self) -> Optional[int]:
        """Identifiant du processus enfant, ou None."""
        if self._process is None:
            return None
        return self._process.pid

    @property
    def descriptors(self) -> Tuple[int, ...]:
        """Numéros des pipes détenus côté parent."""
        return tuple(sorted({**self._pipes, **self._feeds}))

    @staticmethod
    def _validate_descriptors(
        extra_descriptors: Optional[Mapping[int, DescriptorSpec]],
    ) -> Dict[int, DescriptorSpec]:
        """Vérifie que les descripteurs supplémentaires sont >= 3.

        Raises:
            DescriptorError: Si un numéro est réservé ou invalide.
        """
        specs: Dict[int, DescriptorSpec] = {}
        for number, spec in (extra_descriptors or {}).items():
            if not isinstance(number, int) or number < 0:
                raise DescriptorError(f"Descripteur invalide: {number!r}")
            if number in RESERVED_DESCRIPTORS:
                raise DescriptorError(
                    f"Le descripteur {number} est réservé "
                    "(0=stdin, 1=stdout, 2=stderr)."
                )
            if not isinstance(spec, DescriptorSpec):
                raise DescriptorError(
                    f"Spécification invalide pour le descripteur {number}"
                )
            specs[number] = spec
        return specs

    @staticmethod
    def _prelude(child_fds: Mapping[int, int],
                 specs: Mapping[int, DescriptorSpec]) -> str:
        """Redirections shell plaçant chaque fd au numéro demandé."""
        lines: List[str] = []
        for number, child_fd in sorted(child_fds.items()):
            arrow = "<" if specs[number].child_reads else ">"
            lines.append(
                f"exec {number}{arrow}&{child_fd} {child_fd}{arrow}&-\n"
            )
        return "".join(lines)

    def open(
        self,
        command_line: str,
        extra_descriptors: Optional[Mapping[int, DescriptorSpec]] = None,
    ) -> bool:
        """Lance l'interpréteur et lui transmet la ligne de commande.

        Args:
            command_line: Ligne de commande déjà protégée.
            extra_descriptors: Descripteurs supplémentaires par numéro
                (>= 3).

        Returns:
            True si le processus est lancé, False sinon (un diagnostic
            process.spawn_failed est alors émis).

        Raises:
            DescriptorError: Si un descripteur demandé est invalide.
            RuntimeError: Si le handle a déjà été ouvert.
        """
        if self._state is not ProcessState.UNOPENED:
            raise RuntimeError("Le processus a déjà été lancé.")
        specs = self._validate_descriptors(extra_descriptors)

        # Les fds passés à l'enfant sont placés au-dessus des numéros
        # demandés pour que les redirections ne s'écrasent pas.
        floor = max(specs, default=STDERR) + 1
        child_fds: Dict[int, int] = {}
        extra_pipes: Dict[int, BinaryIO] = {}
        extra_feeds: Dict[int, BinaryIO] = {}
        try:
            for number, spec in sorted(specs.items()):
                if spec.kind == "pipe" and spec.child_reads:
                    read_fd, write_fd = os.pipe()
                    os.set_blocking(write_fd, False)
                    extra_feeds[number] = os.fdopen(write_fd, "wb", buffering=0)
                    child_fds[number] = _lift(read_fd, floor)
                elif spec.kind == "pipe":
                    read_fd, write_fd = os.pipe()
                    extra_pipes[number] = os.fdopen(read_fd, "rb", buffering=0)
                    child_fds[number] = _lift(write_fd, floor)
                else:
                    fd = os.open(spec.path, _FILE_FLAGS[spec.mode], 0o644)
                    child_fds[number] = _lift(fd, floor)

            process = subprocess.Popen(  # nosec B603
                [self._settings.interpreter],
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                bufsize=0,
                pass_fds=tuple(child_fds.values()),
            )
        except OSError as e:
            for pipe in (*extra_pipes.values(), *extra_feeds.values()):
                pipe.close()
            self._reporter.emit(
                DiagnosticType.SPAWN_FAILED,
                command_line,
                "Impossible d'initialiser l'appel asynchrone",
                severity="error",
                interpreter=self._settings.interpreter,
                error=str(e),
            )
            return False
        finally:
            for fd in child_fds.values():
                os.close(fd)

        self._process = process
        self._pipes = {
            STDIN: process.stdin,
            STDOUT: process.stdout,
            STDERR: process.stderr,
            **extra_pipes,
        }
        self._feeds = extra_feeds
        self._pending = {
            number: memoryview(specs[number].data) for number in extra_feeds
        }
        self._state = ProcessState.RUNNING
        self._write_script(self._prelude(child_fds, specs) + command_line)
        for number in list(self._pending):
            if self._feed(number):
                self._end_feed(number)
        return True

    def _feed(self, number: int) -> bool:
        """Écrit sans bloquer la suite des données d'un pipe 'r'.

        Returns:
            True quand il ne reste plus rien à écrire.
        """
        data = self._pending[number]
        try:
            while data:
                written = self._feeds[number].write(data)
                if written is None:
                    break
                data = data[written:]
        except BrokenPipeError:
            if self._reporter.logger:
                self._reporter.logger.log_warning(
                    f"Descripteur {number} fermé par l'enfant (pid "
                    f"{self.pid}) avant la fin de l'écriture"
                )
            data = data[:0]
        self._pending[number] = data
        return not data

    def _end_feed(self, number: int) -> None:
        """Ferme un pipe 'r' entièrement écrit : l'enfant lit EOF."""
        del self._pending[number]
        self._feeds[number].close()

    def _write_script(self, script: str) -> None:
        """Écrit le script sur stdin de l'interpréteur puis le ferme."""
        stdin = self._pipes[STDIN]
        data = memoryview(f"{script}\n".encode(self._settings.encoding))
        try:
            while data:
                written = stdin.write(data)
                data = data[written:]
        except BrokenPipeError:
            # L'interpréteur s'est terminé avant de lire le script
            if self._reporter.logger:
                self._reporter.logger.log_warning(
                    f"Entrée standard fermée par l'interpréteur (pid "
                    f"{self.pid}) avant la fin de l'écriture"
                )
        finally:
            stdin.close()

    def poll_status(self) -> ProcessStatus:
        """Interroge le système sur l'état du processus.

        Returns:
            Instantané courant ; running=False si aucun processus.
        """
        if self._process is None:
            return ProcessStatus(running=False)
        code = self._process.poll()
        return ProcessStatus(
            running=code is None,
            pid=self._process.pid,
            exit_code=code,
        )

    def drain_all(self) -> Dict[int, bytes]:
        """Lit chaque pipe hors stdin jusqu'à la fin de flux.

        Bloque jusqu'à ce que l'enfant ferme tous ses descripteurs
        (normalement à sa sortie). Les pipes sont lus ensemble, si
        bien qu'un enfant qui remplit stderr ne bloque pas la lecture
        de stdout. Les données restantes des pipes 'r' sont écrites dans
        la même boucle. Un second appel retourne le même contenu.

        Returns:
            Contenu de chaque descripteur, par numéro.
        """
        if self._drained is not None:
            return dict(self._drained)

        readable = {
            number: pipe for number, pipe in self._pipes.items()
            if number != STDIN and not pipe.closed
        }
        chunks: Dict[int, List[bytes]] = {number: [] for number in readable}
        chunk_size = self._settings.read_chunk_size

        with selectors.DefaultSelector() as selector:
            for number, pipe in readable.items():
                selector.register(pipe, selectors.EVENT_READ, number)
            for number in self._pending:
                selector.register(
                    self._feeds[number], selectors.EVENT_WRITE, number
                )
            while selector.get_map():
                for key, events in selector.select():
                    if events & selectors.EVENT_WRITE:
                        if self._feed(key.data):
                            selector.unregister(key.fileobj)
                            self._end_feed(key.data)
                        continue
                    data = os.read(key.fd, chunk_size)
                    if data:
                        chunks[key.data].append(data)
                    else:
                        selector.unregister(key.fileobj)
                        key.fileobj.close()

        self._drained = {
            number: b"".join(parts) for number, parts in chunks.items()
        }
        return dict(self._drained)

    def _close_pipes(self) -> None:
        """Ferme les pipes encore ouverts."""
        for pipe in (*self._pipes.values(), *self._feeds.values()):
            if not pipe.closed:
                pipe.close()
        self._pending.clear()

    def close(self) -> Optional[int]:
        """Ferme les pipes et libère le processus.

        Attend la fin de l'enfant pour ne pas laisser de zombie.
        Un second appel ne fait rien et retourne le même code.

        Returns:
            Code de sortie du processus, None s'il n'a jamais été lancé.
        """
        if self._state is ProcessState.RUNNING:
            self._close_pipes()
            self._exit_code = self._process.wait()
            self._state = ProcessState.FINISHED
        return self._exit_code

    def release(self) -> None:
        """Ferme les pipes sans attendre la fin de l'enfant.

        Utilisé à la destruction d'un wrapper non récolté : l'enfant
        n'est pas attendu et subprocess le récupère plus tard. Le code
        de sortie n'est retenu que si l'enfant a déjà terminé.
        """
        if self._state is ProcessState.RUNNING:
            self._close_pipes()
            self._exit_code = self._process.poll()
            self._state = ProcessState.FINISHED
