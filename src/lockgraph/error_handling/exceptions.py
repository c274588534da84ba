"""
Exception taxonomy for lock file resolution.

Every error carries a stable ``error_code`` and a ``context`` mapping
(ecosystem, file path, ...) so drivers can report failures per ecosystem
without parsing messages.
"""

from typing import Any, Dict, Optional


def _with_context(kwargs: Dict[str, Any], error_code: str, **fields: Any) -> Dict[str, Any]:
    """Fold the non-empty ``fields`` into ``kwargs['context']`` and default the code."""
    context = dict(kwargs.pop('context', None) or {})
    context.update({key: value for key, value in fields.items() if value not in (None, "")})
    kwargs['context'] = context
    kwargs.setdefault('error_code', error_code)
    return kwargs


class LockGraphError(Exception):
    """
    Root of every error raised by lockgraph.

    Args:
        message: Human readable description
        error_code: Stable identifier for the failure kind
        context: Structured details (ecosystem, paths, counters)
        cause: Lower level exception this one wraps
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}
        self.cause = cause

    def to_dict(self) -> Dict[str, Any]:
        """Serializable form used by structured logging and the CLI."""
        return {
            "error_type": type(self).__name__,
            "message": self.message,
            "error_code": self.error_code,
            "context": self.context,
            "cause": None if self.cause is None else str(self.cause),
        }

    def __str__(self) -> str:
        parts = [self.message]
        if self.error_code:
            parts.append(f"Code: {self.error_code}")
        if self.context:
            parts.append("Context: " + ", ".join(f"{key}={value}" for key, value in self.context.items()))
        if self.cause is not None:
            parts.append(f"Caused by: {self.cause}")
        return " | ".join(parts)


class ModulesNotInstalledError(LockGraphError):
    """
    The manifest exists but the install directory is missing or empty.

    Callers should ask the user to run ``composer install`` or
    ``npm install`` rather than emit an empty SBOM.
    """

    def __init__(self, message: str, ecosystem: Optional[str] = None, install_dir: Optional[str] = None, **kwargs):
        super().__init__(message, **_with_context(kwargs, 'NOT_INSTALLED', ecosystem=ecosystem, install_dir=install_dir))
        self.ecosystem = ecosystem
        self.install_dir = install_dir


class LockFileError(LockGraphError):
    """
    A lock artifact could not be read.

    Resolution of that ecosystem aborts; no partial module list is returned.
    """

    def __init__(self, message: str, file_path: Optional[str] = None, ecosystem: Optional[str] = None, **kwargs):
        super().__init__(message, **_with_context(kwargs, 'LOCK_UNREADABLE', file_path=file_path, ecosystem=ecosystem))
        self.file_path = file_path
        self.ecosystem = ecosystem


class MalformedLockFileError(LockFileError):
    """A lock artifact was read but is not valid JSON or has an unexpected shape."""

    def __init__(self, message: str, line_number: Optional[int] = None, **kwargs):
        super().__init__(message, **_with_context(kwargs, 'LOCK_MALFORMED', line_number=line_number))
        self.line_number = line_number


class ManifestError(LockGraphError):
    """``composer.json`` or ``package.json`` is missing or cannot be decoded."""

    def __init__(self, message: str, file_path: Optional[str] = None, ecosystem: Optional[str] = None, **kwargs):
        super().__init__(message, **_with_context(kwargs, 'MANIFEST_INVALID', file_path=file_path, ecosystem=ecosystem))
        self.file_path = file_path
        self.ecosystem = ecosystem


class ResolutionCancelled(LockGraphError):
    """The caller's cancellation signal was set while modules were being built."""

    def __init__(self, message: str = "Resolution cancelled", converted: Optional[int] = None, **kwargs):
        super().__init__(message, **_with_context(kwargs, 'CANCELLED', converted=converted))
        self.converted = converted


class ConfigurationError(LockGraphError):
    """Configuration could not be loaded or holds an invalid value."""

    def __init__(
        self,
        message: str,
        config_section: Optional[str] = None,
        config_key: Optional[str] = None,
        **kwargs
    ):
        super().__init__(message, **_with_context(
            kwargs, 'CONFIG_INVALID', config_section=config_section, config_key=config_key
        ))
        self.config_section = config_section
        self.config_key = config_key
