"""
Project-level driver that selects ecosystem plugins for a directory.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..config import AppConfig, get_config
from ..error_handling import LockGraphError
from ..licenses import FileLicenseScanner, LicenseScanner, NullLicenseScanner
from ..models import Module
from .base_ecosystem import EcosystemPlugin, PathLike
from .composer_parser import ComposerParser
from .npm_parser import NpmParser

logger = logging.getLogger(__name__)


class ProjectResolver:
    """
    Resolves a project directory across every enabled ecosystem.

    Plugins are selected by probing ``is_valid``; an ecosystem whose marker
    file is absent is skipped, not reported as an error.
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        license_scanner: Optional[LicenseScanner] = None,
        cancel_event: Optional[Any] = None
    ):
        """
        Args:
            config: Application configuration (global config if omitted)
            license_scanner: Overrides the scanner chosen from configuration
            cancel_event: Optional object with ``is_set()`` shared by all plugins
        """
        self.config = config or get_config()
        resolution = self.config.resolution

        if license_scanner is None:
            license_scanner = FileLicenseScanner() if resolution.license_detection else NullLicenseScanner()

        common = {
            "license_scanner": license_scanner,
            "include_dev": resolution.include_dev_dependencies,
            "cancel_event": cancel_event,
        }
        available = {
            "composer": lambda: ComposerParser(url_host=resolution.composer_url_host, **common),
            "npm": lambda: NpmParser(registry_url=resolution.npm_registry_url, **common),
        }

        self._plugins: List[EcosystemPlugin] = [
            available[name]() for name in resolution.ecosystems if name in available
        ]
        logger.debug(f"Registered {len(self._plugins)} ecosystem plugins")

    @property
    def plugins(self) -> List[EcosystemPlugin]:
        return list(self._plugins)

    def get_plugin(self, name: str) -> Optional[EcosystemPlugin]:
        for plugin in self._plugins:
            if plugin.name == name:
                return plugin
        return None

    def applicable_plugins(self, path: PathLike) -> List[EcosystemPlugin]:
        """Plugins whose manifest marker exists in the directory."""
        applicable = []
        for plugin in self._plugins:
            if plugin.is_valid(path):
                applicable.append(plugin)
            else:
                logger.debug(f"No {plugin.manifest_file} in {path}; skipping {plugin.name}")
        return applicable

    def resolve(
        self,
        path: PathLike,
        with_deps: bool = False,
        ecosystems: Optional[List[str]] = None
    ) -> Dict[str, List[Module]]:
        """
        Resolve every applicable ecosystem in a project directory.

        Args:
            path: Project directory
            with_deps: Build dependency trees instead of flat lists
            ecosystems: Restrict resolution to these ecosystem names

        Returns:
            Mapping of ecosystem name to its module list (root first)

        Raises:
            ModulesNotInstalledError: If an applicable ecosystem has nothing installed
            LockFileError: If a lock artifact cannot be read or decoded
        """
        project = Path(path)
        results: Dict[str, List[Module]] = {}

        for plugin in self.applicable_plugins(project):
            if ecosystems and plugin.name not in ecosystems:
                continue

            plugin.has_modules_installed(project)

            if with_deps:
                results[plugin.name] = plugin.list_modules_with_deps(project)
            else:
                results[plugin.name] = plugin.list_used_modules(project)

        if not results:
            logger.warning(f"No supported ecosystem found in {project}")

        return results

    def inspect(self, path: PathLike) -> Dict[str, Dict[str, Any]]:
        """
        Report, per enabled ecosystem, whether it applies and is installed.

        Returns:
            Mapping of ecosystem name to ``valid``, ``installed`` and ``error``
        """
        report = {}
        for plugin in self._plugins:
            entry: Dict[str, Any] = {"valid": plugin.is_valid(path), "installed": False, "error": None}
            if entry["valid"]:
                try:
                    plugin.has_modules_installed(path)
                    entry["installed"] = True
                except LockGraphError as e:
                    entry["error"] = e.message
            report[plugin.name] = entry
        return report
