"""
Configuration management for lock file resolution.

Settings come from three layers, each overriding the previous one:

1. dataclass defaults
2. a YAML file (``--config`` or ``ConfigManager(path)``)
3. environment variables (``LOCKGRAPH_*`` and ``LOG_*``)

String values of the form ``${NAME}`` are replaced by the environment
variable ``NAME`` when it is set.
"""

import logging
import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import yaml

from ..error_handling import ConfigurationError

logger = logging.getLogger(__name__)

SUPPORTED_ECOSYSTEMS = ("composer", "npm")
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass
class ResolutionConfig:
    """Which ecosystems are resolved and how modules are enriched."""
    ecosystems: List[str] = field(default_factory=lambda: list(SUPPORTED_ECOSYSTEMS))
    include_dev_dependencies: bool = True
    license_detection: bool = True
    composer_url_host: str = "github.com"
    npm_registry_url: str = "https://registry.npmjs.org"


@dataclass
class LoggingConfig:
    level: str = "INFO"
    file: Optional[str] = None
    format: str = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
    max_file_size: int = 10  # MB
    backup_count: int = 5
    structured: bool = False


@dataclass
class AppConfig:
    resolution: ResolutionConfig = field(default_factory=ResolutionConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


SECTIONS = {"resolution": ResolutionConfig, "logging": LoggingConfig}


def _as_bool(raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"expected a boolean, got {raw!r}")


def _as_list(raw: str) -> List[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


# Environment variable -> (section, key, parser)
ENV_OVERRIDES: Dict[str, Tuple[str, str, Callable[[str], Any]]] = {
    "LOCKGRAPH_ECOSYSTEMS": ("resolution", "ecosystems", _as_list),
    "LOCKGRAPH_INCLUDE_DEV": ("resolution", "include_dev_dependencies", _as_bool),
    "LOCKGRAPH_LICENSE_DETECTION": ("resolution", "license_detection", _as_bool),
    "LOCKGRAPH_COMPOSER_HOST": ("resolution", "composer_url_host", str),
    "LOCKGRAPH_NPM_REGISTRY": ("resolution", "npm_registry_url", str),
    "LOG_LEVEL": ("logging", "level", str),
    "LOG_FILE": ("logging", "file", str),
    "LOG_FORMAT": ("logging", "format", str),
    "LOG_MAX_SIZE": ("logging", "max_file_size", int),
    "LOG_BACKUP_COUNT": ("logging", "backup_count", int),
    "LOG_STRUCTURED": ("logging", "structured", _as_bool),
}


class ConfigManager:
    """
    Loads, validates and caches the application configuration.

    The first ``get_config()`` builds an ``AppConfig`` from all layers; later
    calls return the cached object until ``reload_config()``.
    """

    def __init__(self, config_file: Optional[Union[str, Path]] = None):
        self.config_file = Path(config_file) if config_file else None
        self._config: Optional[AppConfig] = None

    def load_config(self) -> AppConfig:
        """
        Build the configuration from defaults, file and environment.

        Raises:
            ConfigurationError: If the file cannot be parsed or a value is invalid
        """
        if self._config is not None:
            return self._config

        merged = AppConfig().to_dict()
        if self.config_file and self.config_file.exists():
            merged = self._deep_merge(merged, self._read_file(self.config_file))
        merged = self._deep_merge(merged, self._read_environment())
        merged = self._expand_variables(merged)

        self._config = self._build(merged)
        return self._config

    def get_config(self) -> AppConfig:
        return self._config if self._config is not None else self.load_config()

    def reload_config(self) -> AppConfig:
        """Drop the cached configuration and load it again."""
        self._config = None
        return self.load_config()

    def save_config(self, config_path: Optional[Union[str, Path]] = None) -> Path:
        """
        Write the effective configuration as YAML.

        Args:
            config_path: Destination; defaults to the loaded file or
                ``lockgraph.yaml`` in the working directory

        Returns:
            Path written
        """
        target = Path(config_path or self.config_file or "lockgraph.yaml")
        target.write_text(
            yaml.safe_dump(self.get_config().to_dict(), default_flow_style=False, sort_keys=False),
            encoding='utf-8'
        )
        logger.info(f"Configuration written to {target}")
        return target

    def _read_file(self, path: Path) -> Dict[str, Any]:
        try:
            data = yaml.safe_load(path.read_text(encoding='utf-8'))
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(
                f"Cannot load configuration file {path}",
                context={"config_file": str(path)},
                cause=e
            ) from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Configuration file {path} must contain a mapping",
                context={"config_file": str(path)}
            )

        logger.debug(f"Read configuration file {path}")
        return data

    def _read_environment(self) -> Dict[str, Any]:
        overrides: Dict[str, Any] = {}
        for variable, (section, key, parse) in ENV_OVERRIDES.items():
            raw = os.environ.get(variable)
            if raw is None:
                continue
            try:
                value = parse(raw)
            except ValueError as e:
                raise ConfigurationError(
                    f"Invalid value for {variable}: {raw!r}",
                    config_section=section,
                    config_key=key,
                    cause=e
                ) from e
            overrides.setdefault(section, {})[key] = value
        return overrides

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        merged = dict(base)
        for key, value in override.items():
            if isinstance(merged.get(key), dict) and isinstance(value, dict):
                merged[key] = self._deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged

    def _expand_variables(self, value: Any) -> Any:
        if isinstance(value, dict):
            return {key: self._expand_variables(item) for key, item in value.items()}
        if isinstance(value, list):
            return [self._expand_variables(item) for item in value]
        if isinstance(value, str) and value.startswith("${") and value.endswith("}"):
            return os.environ.get(value[2:-1], value)
        return value

    def _build(self, merged: Dict[str, Any]) -> AppConfig:
        """Validate the merged mapping and turn it into dataclasses."""
        sections = {}
        for name, values in merged.items():
            section_cls = SECTIONS.get(name)
            if section_cls is None:
                raise ConfigurationError(f"Unknown configuration section: {name}", config_section=name)
            if not isinstance(values, dict):
                raise ConfigurationError(f"Section '{name}' must be a mapping", config_section=name)

            known = {f.name for f in fields(section_cls)}
            for key in values:
                if key not in known:
                    raise ConfigurationError(
                        f"Unknown configuration key: {name}.{key}",
                        config_section=name,
                        config_key=key
                    )
            sections[name] = section_cls(**values)

        config = AppConfig(**sections)
        self._validate(config)
        return config

    def _validate(self, config: AppConfig) -> None:
        resolution = config.resolution
        if isinstance(resolution.ecosystems, str):
            resolution.ecosystems = _as_list(resolution.ecosystems)

        unknown = [name for name in resolution.ecosystems if name not in SUPPORTED_ECOSYSTEMS]
        if unknown:
            raise ConfigurationError(
                f"Invalid ecosystem(s): {', '.join(unknown)}. Supported: {', '.join(SUPPORTED_ECOSYSTEMS)}",
                config_section="resolution",
                config_key="ecosystems"
            )
        if not resolution.ecosystems:
            logger.warning("No ecosystems enabled; resolution will find nothing")

        level = str(config.logging.level).upper()
        if level not in VALID_LOG_LEVELS:
            raise ConfigurationError(
                f"Invalid log level: {config.logging.level}. Valid levels: {', '.join(VALID_LOG_LEVELS)}",
                config_section="logging",
                config_key="level"
            )
        config.logging.level = level


_config_manager: Optional[ConfigManager] = None


def get_config_manager(config_file: Optional[Union[str, Path]] = None) -> ConfigManager:
    """
    Process-wide configuration manager.

    Args:
        config_file: Used only when the manager is created by this call
    """
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager(config_file)
    return _config_manager


def get_config() -> AppConfig:
    return get_config_manager().get_config()


def reset_config_manager() -> None:
    """Forget the process-wide manager; the next access loads afresh."""
    global _config_manager
    _config_manager = None
