"""Interfaces abstraites et structures de données pour l'exécution
asynchrone de commandes.

Ce module définit :
    - Argument : Argument (clé, liaison, valeur) d'une commande.
    - Command : Programme et arguments, immuable.
    - ProcessStatus : Dernier état connu du processus enfant.
    - ExecutionResult : Résultat immuable d'une exécution.
    - ResultWrapper : Interface commune aux résultats immédiats et
      asynchrones.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Union

from async_tools.commands.codec import decode

SCALAR_TYPES = (str, int, float, bool, type(None))


@dataclass(frozen=True)
class Argument:
    """Argument d'une commande.

    Une clé et une liaison vides désignent un argument positionnel.
    Une valeur vide ou fausse n'est pas émise : seul key + glue
    apparaît, ce qui permet les flags booléens.

    Attributes:
        key: Nom de l'argument (ex: '--output').
        glue: Liaison entre la clé et la valeur (ex: '=' ou ' ').
        value: Valeur, normalement scalaire.
    """

    key: str = ""
    glue: str = ""
    value: Any = ""

    @property
    def is_scalar(self) -> bool:
        """True si la valeur est scalaire."""
        return isinstance(self.value, SCALAR_TYPES)

    @classmethod
    def positional(cls, value: Any) -> "Argument":
        """Crée un argument positionnel."""
        return cls(value=value)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Argument":
        """Crée un argument depuis un dict {key, glue, value}.

        Args:
            data: Dictionnaire avec les clés key, glue et value
                (toutes optionnelles).

        Returns:
            Instance d'Argument.
        """
        return cls(
            key=data.get("key", ""),
            glue=data.get("glue", ""),
            value=data.get("value", ""),
        )


ArgumentLike = Union[Argument, Mapping[str, Any]]


def to_argument(argument: ArgumentLike) -> Argument:
    """Normalise un Argument ou un dict en Argument."""
    if isinstance(argument, Argument):
        return argument
    return Argument.from_mapping(argument)


@dataclass(frozen=True)
class Command:
    """Commande à exécuter : programme et arguments ordonnés.

    Attributes:
        program: Programme, éventuellement suivi d'arguments littéraux
            (ex: 'echo hello').
        arguments: Arguments ordonnés.
    """

    program: str
    arguments: Tuple[Argument, ...] = ()

    def __post_init__(self) -> None:
        """Valide le programme et normalise les arguments.

        Raises:
            ValueError: Si program est vide.
        """
        if not self.program or not self.program.strip():
            raise ValueError("Le programme est requis.")
        object.__setattr__(
            self,
            "arguments",
            tuple(to_argument(arg) for arg in self.arguments),
        )


@dataclass(frozen=True)
class ProcessStatus:
    """Instantané de l'état du processus enfant.

    Attributes:
        running: True tant que l'enfant s'exécute.
        pid: Identifiant du processus, None s'il n'a pas été lancé.
        exit_code: Code de sortie, None tant qu'il est inconnu.
    """

    running: bool
    pid: Optional[int] = None
    exit_code: Optional[int] = None


@dataclass(frozen=True)
class ExecutionResult:
    """Résultat d'une exécution asynchrone.

    Attributes:
        command: Commande telle que fournie au wrapper.
        arguments: Arguments tels que fournis au wrapper (Argument ou
            dict), sans normalisation.
        process_callback: Callback de traitement invoqué, ou None.
        exit_code: Code de sortie réconcilié.
        stdout: Contenu complet de la sortie standard.
        stderr: Contenu complet de la sortie d'erreur.
        streams: Contenu des descripteurs supplémentaires, par numéro.
    """

    command: str
    arguments: Tuple[ArgumentLike, ...]
    process_callback: Optional[Callable[..., Any]]
    exit_code: Optional[int]
    stdout: bytes
    stderr: bytes
    streams: Dict[int, bytes] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        """True si la commande a réussi (code 0)."""
        return self.exit_code == 0

    def as_map(self) -> Dict[str, Any]:
        """Retourne la forme externe du résultat.

        Returns:
            Dictionnaire {cmd, args, process_callback, exit, stdout,
            stderr, streams}.
        """
        return {
            "cmd": self.command,
            "args": list(self.arguments),
            "process_callback": self.process_callback,
            "exit": self.exit_code,
            "stdout": self.stdout,
            "stderr": self.stderr,
            "streams": dict(self.streams),
        }

    def decode_stdout(self) -> Any:
        """Décode stdout produit par encode() côté enfant.

        Raises:
            CodecError: Si stdout n'est pas une donnée encodée valide.
        """
        return decode(self.stdout.decode("ascii", errors="replace").strip())


class ResultWrapper(ABC):
    """Interface des wrappers de résultat synchrones/asynchrones.

    Un appelant manipule indifféremment un résultat déjà connu
    (ImmediateResult) ou en cours de calcul (AsyncResult).
    """

    @abstractmethod
    def result(self) -> Any:
        """Retourne le résultat, en attendant sa fin si nécessaire."""
        pass

    @abstractmethod
    def is_running(self) -> bool:
        """Indique si le résultat est encore en cours de calcul."""
        pass
