"""
Async Tools - Exécution asynchrone de commandes système.

Modules disponibles:
- commands: Lancement asynchrone et récolte des résultats (AsyncResult,
  ImmediateResult, CommandLineBuilder, ProcessHandle, encode/decode)
- cache: Substitution transparente de résultats en cache (CacheBin,
  MemoryCacheBin, FileCacheBin, cached_command)
- logging: Gestion des logs et diagnostics (Logger, FileLogger,
  DiagnosticReporter)
- config: Chargement de configuration (TOML, JSON) validée par Pydantic
- errors: Exceptions de la bibliothèque
"""

__version__ = "1.0.0"

from async_tools.logging import (
    Logger,
    FileLogger,
    Diagnostic,
    DiagnosticReporter,
    DiagnosticType,
)
from async_tools.config import (
    ConfigLoader,
    FileConfigLoader,
    AsyncToolsSettings,
    ExecutionSettings,
    LoggingSettings,
    CacheSettings,
    load_settings,
)
from async_tools.errors import (
    ApplicationError,
    ConfigurationError,
    FileConfigurationError,
    CodecError,
    DescriptorError,
)
from async_tools.commands import (
    Argument,
    Command,
    ExecutionResult,
    ProcessStatus,
    ResultWrapper,
    ImmediateResult,
    AsyncResult,
    CommandLineBuilder,
    build_command_line,
    DescriptorSpec,
    ProcessHandle,
    ProcessState,
    StatusCache,
    encode,
    decode,
)
from async_tools.cache import (
    CacheBin,
    MemoryCacheBin,
    FileCacheBin,
    CachingResult,
    cached_command,
)

__all__ = [
    # Logging
    "Logger",
    "FileLogger",
    "Diagnostic",
    "DiagnosticReporter",
    "DiagnosticType",
    # Config
    "ConfigLoader",
    "FileConfigLoader",
    "AsyncToolsSettings",
    "ExecutionSettings",
    "LoggingSettings",
    "CacheSettings",
    "load_settings",
    # Erreurs
    "ApplicationError",
    "ConfigurationError",
    "FileConfigurationError",
    "CodecError",
    "DescriptorError",
    # Commandes
    "Argument",
    "Command",
    "ExecutionResult",
    "ProcessStatus",
    "ResultWrapper",
    "ImmediateResult",
    "AsyncResult",
    "CommandLineBuilder",
    "build_command_line",
    "DescriptorSpec",
    "ProcessHandle",
    "ProcessState",
    "StatusCache",
    "encode",
    "decode",
    # Cache
    "CacheBin",
    "MemoryCacheBin",
    "FileCacheBin",
    "CachingResult",
    "cached_command",
]
