"""Diagnostics structurés de l'exécution asynchrone.

Les conditions observées pendant une exécution (argument non
scalaire, échec du lancement, code de sortie non nul, sortie
d'erreur non vide) ne sont jamais levées comme exceptions : un
code de sortie non nul est une information que l'appelant lit
dans le résultat. Elles sont émises ici, en JSON, vers le Logger
injecté.

DiagnosticReporter dépend de l'abstraction Logger, non d'une
implémentation concrète.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any, Optional

from async_tools.logging.base import Logger


class DiagnosticType(StrEnum):
    """Types de diagnostics émis par les wrappers de résultat."""

    NON_SCALAR_ARGUMENT = "argument.non_scalar"
    SPAWN_FAILED = "process.spawn_failed"
    NON_ZERO_EXIT = "process.non_zero_exit"
    STDERR_OUTPUT = "process.stderr_output"


@dataclass(frozen=True)
class Diagnostic:
    """Diagnostic structuré d'une exécution.

    Attributes:
        diagnostic_type: Type de diagnostic (DiagnosticType).
        command: Commande concernée.
        message: Message lisible.
        details: Contexte additionnel (code de sortie, stderr, ...).
        severity: Niveau de sévérité (info, warning, error).
        timestamp: Horodatage ISO 8601 UTC (auto-généré).
    """

    diagnostic_type: DiagnosticType
    command: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)
    severity: str = "warning"
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )


class DiagnosticReporter:
    """Émetteur de diagnostics vers un Logger.

    Sans logger, les diagnostics sont ignorés silencieusement : le
    flux d'exécution n'est jamais interrompu.

    Utilisation :
        reporter = DiagnosticReporter(file_logger)
        reporter.report(Diagnostic(
            diagnostic_type=DiagnosticType.NON_ZERO_EXIT,
            command="false",
            message="Code de sortie non nul",
            details={"exit": 1},
        ))
    """

    def __init__(self, logger: Optional[Logger] = None) -> None:
        """Initialise l'émetteur.

        Args:
            logger: Instance de Logger optionnelle.
        """
        self._logger = logger

    @property
    def logger(self) -> Optional[Logger]:
        """Logger cible, ou None."""
        return self._logger

    def report(self, diagnostic: Diagnostic) -> None:
        """Émet un diagnostic en JSON structuré.

        Args:
            diagnostic: Diagnostic à journaliser.
        """
        if self._logger is None:
            return

        payload: dict[str, Any] = {
            "diagnostic": str(diagnostic.diagnostic_type),
            "timestamp": diagnostic.timestamp,
            "command": diagnostic.command,
            "message": diagnostic.message,
            "severity": diagnostic.severity,
            "details": diagnostic.details,
        }
        message = json.dumps(payload, ensure_ascii=False, default=str)

        if diagnostic.severity == "error":
            self._logger.log_error(message)
        elif diagnostic.severity == "warning":
            self._logger.log_warning(message)
        else:
            self._logger.log_info(message)

    def emit(
        self,
        diagnostic_type: DiagnosticType,
        command: str,
        message: str,
        severity: str = "warning",
        **details: Any,
    ) -> None:
        """Raccourci : construit puis émet un Diagnostic.

        Args:
            diagnostic_type: Type de diagnostic.
            command: Commande concernée.
            message: Message lisible.
            severity: Niveau de sévérité.
            **details: Contexte additionnel.
        """
        self.report(Diagnostic(
            diagnostic_type=diagnostic_type,
            command=command,
            message=message,
            details=details,
            severity=severity,
        ))
