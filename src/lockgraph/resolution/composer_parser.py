"""
Composer (PHP) lock parser for composer.json and composer.lock.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List

from ..models import Author, Module, PackageRecord
from .base_ecosystem import EcosystemPlugin, LockTree, PathLike

logger = logging.getLogger(__name__)

COMPOSER_JSON_FILE_NAME = "composer.json"
COMPOSER_LOCK_FILE_NAME = "composer.lock"
COMPOSER_VENDOR_DIR = "vendor"

# Requirements satisfied by the platform rather than by an installed package
PLATFORM_PACKAGES = {
    "php", "php-64bit", "php-ipv6", "php-zts", "php-debug", "hhvm",
    "composer", "composer-plugin-api", "composer-runtime-api",
}


def is_platform_package(name: str) -> bool:
    """True for ``php``, ``ext-*``, ``lib-*`` and composer API requirements."""
    return name in PLATFORM_PACKAGES or name.startswith(("ext-", "lib-"))


class ComposerParser(EcosystemPlugin):
    """
    Parser for Composer projects.

    ``composer.lock`` lists every installed package, direct and transitive,
    in ``packages`` and ``packages-dev``. The flat listing keeps that order.
    Dependency edges come from each package's ``require`` map and resolve by
    name, since Composer installs exactly one version per package under
    ``vendor/<vendor>/<name>``.
    """

    def __init__(self, *args, url_host: str = "github.com", **kwargs):
        super().__init__(*args, **kwargs)
        self.url_host = url_host

    @property
    def name(self) -> str:
        return "composer"

    @property
    def manifest_file(self) -> str:
        return COMPOSER_JSON_FILE_NAME

    @property
    def lock_file(self) -> str:
        return COMPOSER_LOCK_FILE_NAME

    @property
    def install_dir(self) -> str:
        return COMPOSER_VENDOR_DIR

    def get_root_module(self, path: PathLike) -> Module:
        """
        Build the root module from composer.json.

        Args:
            path: Project directory

        Returns:
            Root module
        """
        project = Path(path)
        data = self._read_manifest(project)

        name = data.get("name") or project.resolve().name
        record = PackageRecord(
            name=name,
            version=str(data.get("version") or ""),
            install_path="",
            dist_url=data.get("homepage") or "",
            authors=self._authors(data.get("authors")),
            package_type=data.get("type") or "project",
        )
        return self.new_builder(project).build_module(record, root=True)

    def load_lock(self, project: Path) -> LockTree:
        """
        Decode composer.lock.

        Raises:
            LockFileError: If composer.lock cannot be read
            MalformedLockFileError: If it is not valid JSON or a package
                entry lacks a name
        """
        data = self._read_json(project / COMPOSER_LOCK_FILE_NAME)

        tree = LockTree()
        for section, is_dev in (("packages", False), ("packages-dev", True)):
            entries = data.get(section) or []
            if not isinstance(entries, list):
                raise self._malformed(project, f"'{section}' in {COMPOSER_LOCK_FILE_NAME} must be a list")

            for entry in entries:
                record = self._to_record(project, entry, is_dev)
                tree.direct.append(record)
                tree.packages[record.install_path] = record

        logger.debug(f"Read {len(tree.direct)} packages from {project / COMPOSER_LOCK_FILE_NAME}")
        return tree

    def synthesize_url(self, record: PackageRecord) -> str:
        return f"https://{self.url_host}/{record.name}.git"

    def _to_record(self, project: Path, entry: Any, is_dev: bool) -> PackageRecord:
        if not isinstance(entry, dict) or not entry.get("name"):
            raise self._malformed(project, f"Package entry without a name in {COMPOSER_LOCK_FILE_NAME}")

        dist = entry.get("dist") or {}
        requires = entry.get("require") or {}
        if not isinstance(dist, dict) or not isinstance(requires, dict):
            raise self._malformed(project, f"Package {entry['name']} has malformed dist/require blocks")

        return PackageRecord(
            name=entry["name"],
            version=str(entry.get("version") or ""),
            install_path=f"{COMPOSER_VENDOR_DIR}/{entry['name']}",
            dist_url=dist.get("url") or "",
            declared_hash=dist.get("shasum") or "",
            hash_algorithm="sha1",
            authors=self._authors(entry.get("authors")),
            package_type=entry.get("type") or "",
            dependencies={
                name: constraint for name, constraint in requires.items()
                if not is_platform_package(name)
            },
            is_dev=is_dev,
        )

    def _authors(self, authors: Any) -> List[Author]:
        if not isinstance(authors, list):
            return []
        return [
            Author(name=author.get("name") or "", email=author.get("email") or "")
            for author in authors if isinstance(author, dict)
        ]
