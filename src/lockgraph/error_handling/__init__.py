"""
Error taxonomy for lock file resolution.
"""

from .exceptions import (
    LockGraphError, ModulesNotInstalledError, LockFileError,
    MalformedLockFileError, ManifestError, ResolutionCancelled,
    ConfigurationError
)

__all__ = [
    "LockGraphError",
    "ModulesNotInstalledError",
    "LockFileError",
    "MalformedLockFileError",
    "ManifestError",
    "ResolutionCancelled",
    "ConfigurationError"
]
