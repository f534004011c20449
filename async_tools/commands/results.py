"""Wrappers de résultat synchrones et asynchrones.

Ce module fournit les deux implémentations de ResultWrapper :
    ImmediateResult : Résultat déjà connu, retourné tel quel.
    AsyncResult : Commande exécutée en arrière-plan, récoltée à la
        demande.

L'appelant peut substituer l'une à l'autre sans modifier son code.

Example:
    Lancement puis récolte :

        from async_tools.commands import AsyncResult, Argument

        wrapper = AsyncResult(
            "grep",
            [Argument("-c", " ", "needle"), Argument(value="/var/log/x")],
            process_callback=lambda info: int(info.stdout),
        )
        ...  # travail en parallèle de l'enfant
        count = wrapper.result()

    Avec un logger pour les diagnostics et une libération garantie :

        with AsyncResult("make", logger=logger) as wrapper:
            while wrapper.is_running():
                time.sleep(0.1)
            info = wrapper.result()
"""

from typing import Any, Callable, Iterable, Mapping, Optional, Sequence

from async_tools.commands.base import (
    ArgumentLike,
    ExecutionResult,
    ResultWrapper,
    to_argument,
)
from async_tools.commands.builder import CommandLineBuilder
from async_tools.commands.codec import decode, encode
from async_tools.commands.process import (
    STDERR,
    STDOUT,
    DescriptorSpec,
    ProcessHandle,
)
from async_tools.commands.status import StatusCache
from async_tools.config.settings import ExecutionSettings
from async_tools.logging.base import Logger
from async_tools.logging.diagnostics import (
    DiagnosticReporter,
    DiagnosticType,
)

_STDERR_PREVIEW = 2000


class ImmediateResult(ResultWrapper):
    """Résultat synchrone : la valeur est connue dès la construction."""

    def __init__(self, result: Any) -> None:
        """
        Args:
            result: Valeur retournée, instantanément, par result().
        """
        self._result = result

    def result(self) -> Any:
        return self._result

    def is_running(self) -> bool:
        return False


class AsyncResult(ResultWrapper):
    """Commande exécutée de manière asynchrone.

    La commande est lancée dès la construction. result() attend la fin
    de l'enfant, lit toutes ses sorties, ferme le processus et
    mémorise le résultat : les appels suivants ne touchent plus au
    système.

    Si process_callback est fourni, il reçoit l'ExecutionResult puis
    process_callback_arguments, et sa valeur de retour devient le
    résultat. Sinon le résultat est l'ExecutionResult.

    Si le callback lève une exception, elle remonte à l'appelant mais
    les sorties restent conservées : un nouvel appel à result()
    réinvoque le callback sur le même ExecutionResult.

    La destruction d'un wrapper non récolté ferme les pipes sans
    attendre l'enfant ; close() ou le bloc with attendent sa fin.

    Attributes:
        _cmd: Commande telle que fournie.
        _args: Arguments tels que fournis par l'appelant.
        _process_callback: Callback de traitement, ou None.
        _process_callback_arguments: Arguments supplémentaires du
            callback.
        _handle: Processus enfant et pipes.
        _status: Cache de l'état du processus.
        _info: ExecutionResult conservé dès la récolte des sorties.
        _harvested: True une fois le résultat calculé.
        _result: Résultat mémorisé.
    """

    encode = staticmethod(encode)
    decode = staticmethod(decode)

    def __init__(
        self,
        cmd: str,
        args: Iterable[ArgumentLike] = (),
        process_callback: Optional[Callable[..., Any]] = None,
        process_callback_arguments: Sequence[Any] = (),
        extra_descriptors: Optional[Mapping[int, DescriptorSpec]] = None,
        logger: Optional[Logger] = None,
        settings: Optional[ExecutionSettings] = None,
    ) -> None:
        """Construit la ligne de commande et lance l'enfant.

        Args:
            cmd: Programme à exécuter (ex: 'echo hello').
            args: Arguments (Argument ou dict {key, glue, value}).
            process_callback: Callback appliqué au résultat.
            process_callback_arguments: Arguments ajoutés après
                l'ExecutionResult lors de l'appel du callback.
            extra_descriptors: Descripteurs supplémentaires (>= 3).
            logger: Destination des diagnostics.
            settings: Paramètres d'exécution.

        Raises:
            ValueError: Si cmd est vide.
            DescriptorError: Si un descripteur supplémentaire est
                invalide.
        """
        self._cmd = cmd
        self._args = tuple(args)
        self._process_callback = process_callback
        self._process_callback_arguments = tuple(process_callback_arguments)
        self._reporter = DiagnosticReporter(logger)
        self._info: Optional[ExecutionResult] = None
        self._harvested = False
        self._result: Any = None

        self._handle = ProcessHandle(settings, self._reporter)
        self._status = StatusCache(self._handle)
        self._command_line = CommandLineBuilder(
            cmd, [to_argument(arg) for arg in self._args], self._reporter
        ).build()
        self._handle.open(self._command_line, extra_descriptors)
        if logger and self._handle.is_open:
            logger.log_debug(
                f"Lancement asynchrone (pid {self._handle.pid}) : "
                f"{self._command_line}"
            )

    def __enter__(self) -> "AsyncResult":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __del__(self) -> None:
        handle = getattr(self, "_handle", None)
        if handle is not None:
            handle.release()

    @property
    def command_line(self) -> str:
        """Ligne de commande transmise à l'interpréteur."""
        return self._command_line

    @property
    def harvested(self) -> bool:
        """True une fois le résultat calculé et mémorisé."""
        return self._harvested

    def is_running(self) -> bool:
        status = self._status.current()
        return status is not None and status.running

    def get_pid(self) -> Optional[int]:
        """Identifiant du processus enfant, None s'il n'a pas démarré."""
        status = self._status.current()
        if status is None:
            return None
        return status.pid

    def close(self) -> None:
        """Libère le processus sans récolter le résultat.

        Sans effet si le résultat a déjà été récolté.
        """
        if self._handle.is_open:
            exit_code = self._handle.close()
            self._status.mark_finished(
                self._reconcile_exit_code(exit_code)
            )

    def _reconcile_exit_code(
        self, handle_exit_code: Optional[int]
    ) -> Optional[int]:
        """Préfère le code observé avant la fermeture du handle."""
        cached = self._status.finished_exit_code()
        if cached is not None:
            return cached
        return handle_exit_code

    def _report_outcome(self, info: ExecutionResult) -> None:
        """Émet les diagnostics d'un résultat anormal."""
        if info.exit_code != 0:
            self._reporter.emit(
                DiagnosticType.NON_ZERO_EXIT,
                self._cmd,
                "L'appel asynchrone s'est terminé avec un code non nul",
                exit=info.exit_code,
                command_line=self._command_line,
                stderr=info.stderr[:_STDERR_PREVIEW].decode(
                    "utf-8", errors="replace"
                ),
            )
        if info.stderr:
            self._reporter.emit(
                DiagnosticType.STDERR_OUTPUT,
                self._cmd,
                "L'appel asynchrone a écrit sur STDERR",
                exit=info.exit_code,
                command_line=self._command_line,
                stderr=info.stderr[:_STDERR_PREVIEW].decode(
                    "utf-8", errors="replace"
                ),
            )

    def result(self) -> Any:
        if self._harvested:
            return self._result
        if self._info is None:
            if not self._handle.is_open:
                return None
            self._info = self._harvest()

        if self._process_callback is not None:
            self._result = self._process_callback(
                self._info, *self._process_callback_arguments
            )
        else:
            self._result = self._info
        self._harvested = True
        return self._result

    def _harvest(self) -> ExecutionResult:
        """Draine les sorties, ferme le handle et signale l'issue."""
        outputs = self._handle.drain_all()
        exit_code = self._reconcile_exit_code(self._handle.close())
        self._status.mark_finished(exit_code)

        info = ExecutionResult(
            command=self._cmd,
            arguments=self._args,
            process_callback=self._process_callback,
            exit_code=exit_code,
            stdout=outputs.pop(STDOUT, b""),
            stderr=outputs.pop(STDERR, b""),
            streams=outputs,
        )
        self._report_outcome(info)
        return info
