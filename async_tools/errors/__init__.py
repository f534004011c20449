"""Module de gestion des erreurs."""

from async_tools.errors.exceptions import (ApplicationError,
                                           ConfigurationError,
                                           FileConfigurationError,
                                           CodecError,
                                           DescriptorError)


__all__ = [
    "ApplicationError",
    "ConfigurationError",
    "FileConfigurationError",
    "CodecError",
    "DescriptorError",
]
