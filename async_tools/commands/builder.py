"""Constructeur de lignes de commande shell.

Ce module fournit la classe CommandLineBuilder qui assemble un
programme et ses arguments (clé, liaison, valeur) en une seule
chaîne exécutable par un shell, chaque valeur étant protégée pour
être reçue comme donnée littérale.

Example:
    Construction d'une commande rsync :

        from async_tools.commands import CommandLineBuilder

        line = (
            CommandLineBuilder("rsync")
            .with_flag("-av")
            .with_option("--compress-level", 3)
            .with_args(["/src/", "/dest/"])
            .build()
        )
        # Résultat : "rsync -av --compress-level=3 /src/ /dest/"
"""

import shlex
from typing import Any, Iterable, List, Optional, Sequence

from async_tools.commands.base import (
    Argument,
    ArgumentLike,
    Command,
    to_argument,
)
from async_tools.logging.diagnostics import (
    DiagnosticReporter,
    DiagnosticType,
)

# Caractères neutralisés dans le programme (cf. escapeshellcmd)
_COMMAND_METACHARACTERS = frozenset("#&;`|*?~<>^()[]{}$\\,\n\xff")
_QUOTES = frozenset("'\"")


def escape_command(program: str) -> str:
    """Protège les métacaractères shell du programme.

    Les espaces sont conservés : 'echo hello' reste un programme
    suivi d'un argument, mais 'echo a; rm x' ne peut pas enchaîner
    une seconde commande.

    Une apostrophe ou un guillemet n'est protégé que s'il n'a pas de
    partenaire plus loin dans la chaîne : "echo 'a b'" est conservé,
    "echo it's" devient "echo it\\'s". Les autres métacaractères sont
    protégés même entre guillemets.

    Args:
        program: Programme éventuellement suivi d'arguments littéraux.

    Returns:
        Programme avec chaque métacaractère précédé d'un backslash.
    """
    escaped: List[str] = []
    closing: Optional[int] = None
    for index, char in enumerate(program):
        if char in _QUOTES:
            if closing is None:
                partner = program.find(char, index + 1)
                if partner != -1:
                    closing = partner
                    escaped.append(char)
                    continue
            elif program[closing] == char:
                closing = None
                escaped.append(char)
                continue
            escaped.append(f"\\{char}")
        elif char in _COMMAND_METACHARACTERS:
            escaped.append(f"\\{char}")
        else:
            escaped.append(char)
    return "".join(escaped)


def _value_to_str(value: Any) -> str:
    """Convertit une valeur d'argument en texte."""
    if value is True:
        return "1"
    return str(value)


class CommandLineBuilder:
    """Constructeur fluent de lignes de commande shell."""

    def __init__(
        self,
        program: str,
        arguments: Iterable[ArgumentLike] = (),
        reporter: Optional[DiagnosticReporter] = None,
    ) -> None:
        """Initialise le constructeur avec le programme.

        Args:
            program: Nom ou chemin du programme à exécuter.
            arguments: Arguments initiaux.
            reporter: Émetteur des diagnostics (valeur non scalaire).

        Raises:
            ValueError: Si program est vide.
        """
        if not program or not program.strip():
            raise ValueError("Le programme est requis.")
        self._program: str = program
        self._arguments: List[Argument] = [
            to_argument(arg) for arg in arguments
        ]
        self._reporter = reporter or DiagnosticReporter()

    @classmethod
    def from_command(
        cls,
        command: Command,
        reporter: Optional[DiagnosticReporter] = None,
    ) -> "CommandLineBuilder":
        """Crée un constructeur à partir d'une Command."""
        return cls(command.program, command.arguments, reporter)

    def with_argument(
        self, argument: ArgumentLike
    ) -> "CommandLineBuilder":
        """Ajoute un argument (clé, liaison, valeur).

        Returns:
            L'instance courante pour le chaînage.
        """
        self._arguments.append(to_argument(argument))
        return self

    def with_flag(self, flag: str) -> "CommandLineBuilder":
        """Ajoute un flag simple, sans valeur.

        Args:
            flag: Flag à ajouter (ex: '--stats').

        Returns:
            L'instance courante pour le chaînage.
        """
        self._arguments.append(Argument(key=flag))
        return self

    def with_option(
        self, key: str, value: Any, glue: str = "="
    ) -> "CommandLineBuilder":
        """Ajoute une option clé/valeur.

        Args:
            key: Clé de l'option (ex: '--compression').
            value: Valeur de l'option (ex: 'lz4').
            glue: Liaison entre clé et valeur (défaut: '=').

        Returns:
            L'instance courante pour le chaînage.
        """
        self._arguments.append(Argument(key=key, glue=glue, value=value))
        return self

    def with_args(self, args: Sequence[Any]) -> "CommandLineBuilder":
        """Ajoute des arguments positionnels.

        Returns:
            L'instance courante pour le chaînage.
        """
        self._arguments.extend(Argument.positional(arg) for arg in args)
        return self

    def arguments(self) -> tuple:
        """Retourne les arguments accumulés."""
        return tuple(self._arguments)

    def command(self) -> Command:
        """Retourne la Command immuable correspondante."""
        return Command(self._program, tuple(self._arguments))

    def build(self) -> str:
        """Construit la ligne de commande.

        Une valeur non scalaire est signalée puis convertie en texte ;
        la construction n'échoue jamais pour cette raison.

        Returns:
            Ligne de commande prête à être écrite sur l'entrée d'un
            shell.
        """
        line = escape_command(self._program)
        for argument in self._arguments:
            if not argument.is_scalar:
                self._reporter.emit(
                    DiagnosticType.NON_SCALAR_ARGUMENT,
                    self._program,
                    f"L'argument {argument.key!r} a une valeur non scalaire",
                    key=argument.key,
                    value_type=type(argument.value).__name__,
                )
            line += f" {argument.key}{argument.glue}"
            if argument.value:
                line += shlex.quote(_value_to_str(argument.value))
        return line


def build_command_line(
    program: str,
    arguments: Iterable[ArgumentLike] = (),
    reporter: Optional[DiagnosticReporter] = None,
) -> str:
    """Raccourci : construit directement la ligne de commande."""
    return CommandLineBuilder(program, arguments, reporter).build()
