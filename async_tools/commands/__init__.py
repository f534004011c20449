"""Module d'exécution asynchrone de commandes.

Ce module fournit des classes pour lancer une commande sans bloquer
l'appelant, puis récolter à la demande son code de sortie et ses
sorties, ou substituer un résultat déjà connu.

Classes disponibles :
    Argument, Command : Description de la commande.
    ExecutionResult : Résultat immuable d'une exécution.
    ProcessStatus : Dernier état connu du processus enfant.
    ResultWrapper : Interface commune des résultats.
    ImmediateResult : Résultat déjà connu.
    AsyncResult : Résultat d'une commande en arrière-plan.
    CommandLineBuilder : Constructeur de lignes de commande shell.
    ProcessHandle, DescriptorSpec : Processus enfant et descripteurs.
    StatusCache : Mémoire de l'état du processus.

Fonctions : encode, decode (transport de données structurées).
"""

from async_tools.commands.base import (
    Argument,
    Command,
    ExecutionResult,
    ProcessStatus,
    ResultWrapper,
)
from async_tools.commands.builder import (
    CommandLineBuilder,
    build_command_line,
    escape_command,
)
from async_tools.commands.codec import decode, encode
from async_tools.commands.process import (
    DescriptorSpec,
    ProcessHandle,
    ProcessState,
)
from async_tools.commands.status import StatusCache
from async_tools.commands.results import AsyncResult, ImmediateResult

__all__ = [
    # Structures de données
    "Argument",
    "Command",
    "ExecutionResult",
    "ProcessStatus",
    # Interface abstraite
    "ResultWrapper",
    # Implémentations
    "ImmediateResult",
    "AsyncResult",
    # Constructeur
    "CommandLineBuilder",
    "build_command_line",
    "escape_command",
    # Processus
    "DescriptorSpec",
    "ProcessHandle",
    "ProcessState",
    "StatusCache",
    # Transport
    "encode",
    "decode",
]
