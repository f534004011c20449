"""Module de logging et de diagnostics."""

from async_tools.logging.base import Logger
from async_tools.logging.file_logger import FileLogger
from async_tools.logging.diagnostics import (
    Diagnostic,
    DiagnosticReporter,
    DiagnosticType,
)

__all__ = [
    "Logger",
    "FileLogger",
    "Diagnostic",
    "DiagnosticReporter",
    "DiagnosticType",
]
