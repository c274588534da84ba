"""
npm lock parser for package.json, package-lock.json and npm-shrinkwrap.json.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..error_handling import LockFileError
from ..models import Author, Module, PackageRecord
from .base_ecosystem import EcosystemPlugin, LockTree, PathLike
from .checksum import parse_integrity
from .normalizer import normalize_version, split_author, tarball_basename

logger = logging.getLogger(__name__)

NPM_MANIFEST_FILE_NAME = "package.json"
NPM_LOCK_FILE_NAME = "package-lock.json"
NPM_SHRINKWRAP_FILE_NAME = "npm-shrinkwrap.json"
NPM_MODULES_DIR = "node_modules"
NODE_MODULES_SEGMENT = "/node_modules/"


class NpmParser(EcosystemPlugin):
    """
    Parser for npm projects.

    Both lockfile layouts are read into one index of installed package
    instances keyed by install path:

    - v1 nests ``dependencies`` the way ``node_modules`` is nested, with
      each entry's own needs under ``requires``.
    - v2/v3 flatten the tree into ``packages`` keyed by install path
      (``node_modules/a/node_modules/b``).

    Declared dependencies resolve to the instance Node itself would load:
    the nearest ``node_modules/<name>`` walking up from the dependent.
    """

    # Scoped names (@scope/name) are the package identity in npm
    name_separator = None

    def __init__(self, *args, registry_url: str = "https://registry.npmjs.org", **kwargs):
        super().__init__(*args, **kwargs)
        self.registry_url = registry_url.rstrip("/")

    @property
    def name(self) -> str:
        return "npm"

    @property
    def manifest_file(self) -> str:
        return NPM_MANIFEST_FILE_NAME

    @property
    def lock_file(self) -> str:
        return NPM_LOCK_FILE_NAME

    @property
    def install_dir(self) -> str:
        return NPM_MODULES_DIR

    def get_root_module(self, path: PathLike) -> Module:
        """
        Build the root module from package.json.

        Args:
            path: Project directory

        Returns:
            Root module
        """
        project = Path(path)
        data = self._read_manifest(project)

        record = PackageRecord(
            name=data.get("name") or project.resolve().name,
            version=str(data.get("version") or ""),
            install_path="",
            dist_url=self._repository_url(data) or data.get("homepage") or "",
            authors=self._authors(data),
            package_type="project",
        )
        return self.new_builder(project).build_module(record, root=True)

    def load_lock(self, project: Path) -> LockTree:
        """
        Decode the lock file; npm-shrinkwrap.json wins over package-lock.json
        when both exist, as it does for npm itself.

        Raises:
            LockFileError: If no lock file can be read
            MalformedLockFileError: If it is not valid JSON or has an
                unexpected shape
        """
        lock_path = project / NPM_SHRINKWRAP_FILE_NAME
        if not lock_path.is_file():
            lock_path = project / NPM_LOCK_FILE_NAME
        if not lock_path.is_file():
            raise LockFileError(
                f"No {NPM_LOCK_FILE_NAME} found; run 'npm install' to create one",
                file_path=str(lock_path),
                ecosystem=self.name
            )

        data = self._read_json(lock_path)

        if isinstance(data.get("packages"), dict):
            packages = self._index_packages(project, data["packages"])
            root_entry = data["packages"].get("") or {}
            if not root_entry:
                root_entry = self._read_manifest(project)
        elif isinstance(data.get("dependencies"), dict) or "lockfileVersion" in data:
            packages = {}
            self._index_v1(project, data.get("dependencies") or {}, "", packages)
            root_entry = self._read_manifest(project)
        else:
            raise self._malformed(project, f"{lock_path.name} has neither 'packages' nor 'dependencies'")

        tree = LockTree(packages=packages)
        seen = set()
        for section, is_dev in (("dependencies", False), ("optionalDependencies", False),
                                ("devDependencies", True)):
            declared = root_entry.get(section) or {}
            if not isinstance(declared, dict):
                raise self._malformed(project, f"'{section}' of the root package must be an object")

            for dependency in declared:
                if dependency in seen:
                    continue
                seen.add(dependency)

                record = packages.get(f"{NPM_MODULES_DIR}/{dependency}")
                if record is None:
                    logger.warning(f"Declared dependency {dependency} is not in {lock_path.name}; skipping")
                    continue
                record.is_dev = is_dev
                tree.direct.append(record)

        logger.debug(f"Indexed {len(packages)} installed packages from {lock_path}")
        return tree

    def synthesize_url(self, record: PackageRecord) -> str:
        if not record.name or not record.version:
            return ""
        version = normalize_version(record.version)
        return f"{self.registry_url}/{record.name}/-/{tarball_basename(record.name)}-{version}.tgz"

    def resolve_dependency(
        self,
        record: PackageRecord,
        dependency: str,
        packages: Dict[str, PackageRecord]
    ) -> Optional[PackageRecord]:
        """
        Node module resolution: look in the dependent's own node_modules,
        then in each enclosing node_modules up to the project root.
        """
        base = record.install_path
        while True:
            if base:
                candidate = f"{base}/{NPM_MODULES_DIR}/{dependency}"
            else:
                candidate = f"{NPM_MODULES_DIR}/{dependency}"

            if candidate in packages:
                return packages[candidate]
            if not base:
                return None

            cut = base.rfind(NODE_MODULES_SEGMENT)
            base = base[:cut] if cut != -1 else ""

    def _index_packages(self, project: Path, entries: Dict[str, Any]) -> Dict[str, PackageRecord]:
        packages: Dict[str, PackageRecord] = {}

        for install_path, info in entries.items():
            if install_path == "":
                continue
            if not isinstance(info, dict):
                raise self._malformed(project, f"Lock entry {install_path} must be an object")

            name = info.get("name") or self._name_from_path(install_path)

            if info.get("link"):
                # Workspace symlink: the real package lives at the target path
                target_path = info.get("resolved") or ""
                target = entries.get(target_path)
                if not isinstance(target, dict):
                    logger.debug(f"Link {install_path} points at unknown target {target_path}")
                    continue
                record = self._to_record(project, target.get("name") or name, target_path, target)
            else:
                record = self._to_record(project, name, install_path, info)

            packages[install_path] = record

        return packages

    def _index_v1(
        self,
        project: Path,
        entries: Dict[str, Any],
        parent_path: str,
        packages: Dict[str, PackageRecord]
    ) -> None:
        for name, info in entries.items():
            if not isinstance(info, dict):
                raise self._malformed(project, f"Lock entry {name} must be an object")

            if parent_path:
                install_path = f"{parent_path}/{NPM_MODULES_DIR}/{name}"
            else:
                install_path = f"{NPM_MODULES_DIR}/{name}"

            packages[install_path] = self._to_record(project, name, install_path, info, requires_key="requires")

            nested = info.get("dependencies")
            if isinstance(nested, dict):
                self._index_v1(project, nested, install_path, packages)

    def _to_record(
        self,
        project: Path,
        name: str,
        install_path: str,
        info: Dict[str, Any],
        requires_key: str = "dependencies"
    ) -> PackageRecord:
        declared_hash = ""
        hash_algorithm = None
        integrity = info.get("integrity")
        if isinstance(integrity, str):
            parsed = parse_integrity(integrity)
            if parsed:
                algorithm, declared_hash = parsed
                hash_algorithm = algorithm.value

        dependencies: Dict[str, str] = {}
        for key in (requires_key, "optionalDependencies"):
            declared = info.get(key)
            if isinstance(declared, dict):
                dependencies.update(declared)

        installed = self._installed_manifest(project, install_path)

        return PackageRecord(
            name=name,
            version=str(info.get("version") or installed.get("version") or ""),
            install_path=install_path,
            dist_url=info.get("resolved") or "",
            declared_hash=declared_hash,
            hash_algorithm=hash_algorithm,
            authors=self._authors(installed),
            dependencies=dependencies,
            is_dev=bool(info.get("dev", False)),
        )

    def _installed_manifest(self, project: Path, install_path: str) -> Dict[str, Any]:
        """package.json of an installed package, or {} when absent or unreadable."""
        manifest = project / install_path / NPM_MANIFEST_FILE_NAME
        try:
            data = json.loads(manifest.read_text(encoding='utf-8'))
        except (OSError, ValueError):
            return {}
        return data if isinstance(data, dict) else {}

    def _authors(self, data: Dict[str, Any]) -> List[Author]:
        people = []
        if data.get("author"):
            people.append(data["author"])
        contributors = data.get("contributors")
        if isinstance(contributors, list):
            people.extend(contributors)

        authors = []
        for person in people:
            if isinstance(person, str):
                name, email = split_author(person)
                authors.append(Author(name, email))
            elif isinstance(person, dict):
                authors.append(Author(person.get("name") or "", person.get("email") or ""))
        return authors

    def _repository_url(self, data: Dict[str, Any]) -> str:
        repository = data.get("repository")
        if isinstance(repository, dict):
            repository = repository.get("url")
        if not isinstance(repository, str) or "://" not in repository:
            return ""
        return repository[len("git+"):] if repository.startswith("git+") else repository

    def _name_from_path(self, install_path: str) -> str:
        cut = install_path.rfind(f"{NPM_MODULES_DIR}/")
        if cut == -1:
            return install_path.rsplit("/", 1)[-1]
        return install_path[cut + len(NPM_MODULES_DIR) + 1:]
