"""
Base class and contract shared by every ecosystem lock parser.
"""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Type, Union

from ..error_handling import (
    LockFileError, MalformedLockFileError, ManifestError, ModulesNotInstalledError
)
from ..licenses import LicenseScanner, NullLicenseScanner
from ..models import Module, PackageRecord
from .module_builder import ModuleBuilder

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


@dataclass
class LockTree:
    """
    Decoded lock artifact.

    Attributes:
        direct: Records the project declares itself, production before
            development, in lock document order
        packages: Every installed package instance keyed by install path
    """
    direct: List[PackageRecord] = field(default_factory=list)
    packages: Dict[str, PackageRecord] = field(default_factory=dict)


class EcosystemPlugin(ABC):
    """
    Contract implemented once per supported package manager.

    A driver picks the plugins that apply to a directory by calling
    ``is_valid``, gates them with ``has_modules_installed`` and then asks for
    the flat module list or the dependency tree. Every call builds its modules
    from scratch; nothing is cached between calls.
    """

    # Namespace separator reduced away by ``get_name``; None keeps names whole
    name_separator: Optional[str] = "/"

    def __init__(
        self,
        license_scanner: Optional[LicenseScanner] = None,
        include_dev: bool = True,
        cancel_event: Optional[Any] = None
    ):
        """
        Args:
            license_scanner: License collaborator used for enrichment
            include_dev: Whether development dependencies are listed
            cancel_event: Optional object with ``is_set()`` checked between
                record conversions
        """
        self.license_scanner = license_scanner or NullLicenseScanner()
        self.include_dev = include_dev
        self.cancel_event = cancel_event

    @property
    @abstractmethod
    def name(self) -> str:
        """Ecosystem identifier (e.g. 'composer', 'npm')."""
        pass

    @property
    @abstractmethod
    def manifest_file(self) -> str:
        """Marker file whose presence makes this ecosystem applicable."""
        pass

    @property
    @abstractmethod
    def lock_file(self) -> str:
        """Conventional lock artifact filename."""
        pass

    @property
    @abstractmethod
    def install_dir(self) -> str:
        """Directory, relative to the project, packages are installed into."""
        pass

    @abstractmethod
    def get_root_module(self, path: PathLike) -> Module:
        """
        Resolve the project's own module from its manifest.

        Raises:
            ManifestError: If the manifest is missing or cannot be decoded
        """
        pass

    @abstractmethod
    def load_lock(self, project: Path) -> LockTree:
        """
        Read and decode the lock artifact.

        Raises:
            LockFileError: If the lock artifact cannot be read
            MalformedLockFileError: If it cannot be decoded
        """
        pass

    @abstractmethod
    def synthesize_url(self, record: PackageRecord) -> str:
        """Package URL used when the lock record has no distribution URL."""
        pass

    def is_valid(self, path: PathLike) -> bool:
        """True if the directory holds this ecosystem's manifest."""
        return (Path(path) / self.manifest_file).is_file()

    def has_modules_installed(self, path: PathLike) -> None:
        """
        Check that the install directory exists and is not empty.

        Raises:
            ModulesNotInstalledError: If dependencies have not been installed
        """
        install_path = Path(path) / self.install_dir
        if not install_path.is_dir() or not any(install_path.iterdir()):
            raise ModulesNotInstalledError(
                f"No installed {self.name} modules found in {install_path}; "
                f"install the project's dependencies first",
                ecosystem=self.name,
                install_dir=str(install_path)
            )

    def list_used_modules(self, path: PathLike) -> List[Module]:
        """
        Root module followed by every declared production and development
        dependency.
        """
        project = Path(path)
        self.has_modules_installed(project)

        tree = self.load_lock(project)
        builder = self.new_builder(project)
        root = self.get_root_module(project)

        modules = builder.build_flat(root, self._selected(tree.direct))
        logger.info(f"Resolved {len(modules) - 1} {self.name} modules in {project}")
        return modules

    def list_modules_with_deps(self, path: PathLike) -> List[Module]:
        """
        Same modules as ``list_used_modules`` with each module's dependency
        tree populated to full depth.
        """
        project = Path(path)
        self.has_modules_installed(project)

        tree = self.load_lock(project)
        builder = self.new_builder(project)
        root = self.get_root_module(project)

        modules = builder.build_tree(root, self._selected(tree.direct), tree.packages)
        logger.info(f"Resolved {len(modules) - 1} {self.name} modules with dependencies in {project}")
        return modules

    def resolve_dependency(
        self,
        record: PackageRecord,
        dependency: str,
        packages: Dict[str, PackageRecord]
    ) -> Optional[PackageRecord]:
        """
        Find the installed instance a record's declared dependency resolves to.

        The default handles flat install layouts where one version per name
        lives directly under the install directory.
        """
        return packages.get(f"{self.install_dir}/{dependency}")

    def new_builder(self, project: Path) -> ModuleBuilder:
        """Fresh builder owning the state of one resolution call."""
        return ModuleBuilder(self, project, self.cancel_event)

    def _selected(self, records: List[PackageRecord]) -> List[PackageRecord]:
        if self.include_dev:
            return records
        return [record for record in records if not record.is_dev]

    def _read_json(
        self,
        file_path: Path,
        error_cls: Type[Exception] = LockFileError
    ) -> Dict[str, Any]:
        """
        Read a JSON document in one shot.

        Args:
            file_path: File to read
            error_cls: ``LockFileError`` or ``ManifestError``

        Returns:
            Decoded top-level object
        """
        try:
            raw = file_path.read_bytes()
        except OSError as e:
            raise error_cls(
                f"Cannot read {file_path.name}",
                file_path=str(file_path),
                ecosystem=self.name,
                cause=e
            ) from e

        try:
            data = json.loads(raw.decode('utf-8'))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            line_number = getattr(e, 'lineno', None)
            if error_cls is LockFileError:
                raise MalformedLockFileError(
                    f"Invalid JSON in {file_path.name}",
                    file_path=str(file_path),
                    ecosystem=self.name,
                    line_number=line_number,
                    cause=e
                ) from e
            raise error_cls(
                f"Invalid JSON in {file_path.name}",
                file_path=str(file_path),
                ecosystem=self.name,
                cause=e
            ) from e

        if not isinstance(data, dict):
            if error_cls is LockFileError:
                raise MalformedLockFileError(
                    f"{file_path.name} must contain a JSON object",
                    file_path=str(file_path),
                    ecosystem=self.name
                )
            raise error_cls(
                f"{file_path.name} must contain a JSON object",
                file_path=str(file_path),
                ecosystem=self.name
            )

        return data

    def _read_manifest(self, project: Path) -> Dict[str, Any]:
        return self._read_json(project / self.manifest_file, ManifestError)

    def _malformed(self, project: Path, message: str) -> MalformedLockFileError:
        return MalformedLockFileError(
            message,
            file_path=str(project / self.lock_file),
            ecosystem=self.name
        )
