"""
Module contenant les exceptions personnalisées pour async_tools.

Les conditions d'exécution (code de sortie non nul, sortie d'erreur,
échec du lancement) ne sont pas des exceptions : elles sont signalées
via les diagnostics. Seules les erreurs de programmation et de
décodage remontent à l'appelant.
"""


class ApplicationError(Exception):
    """Exception de base pour toute la bibliothèque."""
    pass

class ConfigurationError(ApplicationError):
    """Exception de base pour toutes les Configurations."""
    pass

class FileConfigurationError(ConfigurationError):
    """Fichier de configuration illisible ou invalide."""
    pass

class CodecError(ApplicationError):
    """Donnée impossible à encoder ou à décoder pour le transport."""
    pass

class DescriptorError(ApplicationError, ValueError):
    """Descripteur supplémentaire invalide (0, 1 et 2 sont réservés)."""
    pass
