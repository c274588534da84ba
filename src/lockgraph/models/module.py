"""
Canonical module data model shared by every ecosystem.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Any, Mapping, Optional
from enum import Enum
import json


class HashAlgorithm(Enum):
    """Checksum algorithms a module digest may use."""
    SHA1 = "SHA1"
    SHA224 = "SHA224"
    SHA256 = "SHA256"
    SHA384 = "SHA384"
    SHA512 = "SHA512"
    MD5 = "MD5"

    @classmethod
    def from_name(cls, name: str) -> Optional["HashAlgorithm"]:
        """Look up an algorithm by a loose name such as ``sha512`` or ``sha-1``."""
        key = name.replace("-", "").upper()
        for algorithm in cls:
            if algorithm.value == key:
                return algorithm
        return None


class ChecksumSource(Enum):
    """Where a checksum value came from."""
    DECLARED = "declared"
    URL_PLACEHOLDER = "url-placeholder"
    NONE = "none"


@dataclass(frozen=True)
class CheckSum:
    """
    Digest attached to a module.

    A ``URL_PLACEHOLDER`` source means the value is the digest of the package
    URL string, not of the package content. It identifies the source location
    deterministically but says nothing about integrity.
    """

    algorithm: HashAlgorithm = HashAlgorithm.SHA1
    value: str = ""
    source: ChecksumSource = ChecksumSource.NONE

    @property
    def is_placeholder(self) -> bool:
        return self.source is ChecksumSource.URL_PLACEHOLDER

    def to_dict(self) -> Dict[str, Any]:
        return {
            "algorithm": self.algorithm.value,
            "value": self.value,
            "source": self.source.value,
        }


@dataclass(frozen=True)
class SupplierContact:
    """Name and email of a package's first listed author."""

    name: str = ""
    email: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.name and not self.email

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "email": self.email}


@dataclass(frozen=True)
class Module:
    """
    Represents one resolved package (or the project itself when ``root``).

    Modules are built once per resolution call and treated as immutable
    afterwards. ``modules`` is a read-only mapping from a dependency name to
    its resolved sub-module; it is only populated by the dependency-tree view
    and may share sub-modules with other branches.
    """

    name: str
    version: str
    root: bool = False
    package_url: str = ""
    checksum: CheckSum = field(default_factory=CheckSum)
    supplier: SupplierContact = field(default_factory=SupplierContact)
    local_path: str = ""
    license_declared: str = ""
    license_concluded: str = ""
    copyright: str = ""
    comments_license: str = ""
    ecosystem: str = ""
    package_type: str = ""
    modules: Mapping[str, "Module"] = field(default_factory=dict, hash=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "modules", MappingProxyType(dict(self.modules)))

    @property
    def full_name(self) -> str:
        """Get the module name with version."""
        return f"{self.name}@{self.version}"

    @property
    def dependency_count(self) -> int:
        """Number of direct dependencies in the tree view."""
        return len(self.modules)

    def to_dict(self, include_modules: bool = True) -> Dict[str, Any]:
        """
        Convert the module to a dictionary for serialization.

        Args:
            include_modules: Whether to serialize the nested dependency tree

        Returns:
            Dictionary representation of the module
        """
        data = {
            "name": self.name,
            "version": self.version,
            "full_name": self.full_name,
            "root": self.root,
            "package_url": self.package_url,
            "checksum": self.checksum.to_dict(),
            "supplier": self.supplier.to_dict(),
            "local_path": self.local_path,
            "license_declared": self.license_declared,
            "license_concluded": self.license_concluded,
            "copyright": self.copyright,
            "comments_license": self.comments_license,
            "ecosystem": self.ecosystem,
            "package_type": self.package_type,
        }
        if include_modules:
            data["modules"] = {
                name: module.to_dict() for name, module in self.modules.items()
            }
        return data

    def to_json(self) -> str:
        """
        Convert the module to a JSON string.

        Returns:
            JSON representation of the module
        """
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Module":
        """
        Create a module from a dictionary produced by ``to_dict``.

        Args:
            data: Dictionary containing module data

        Returns:
            Module instance
        """
        checksum_data = data.get("checksum") or {}
        algorithm = HashAlgorithm.from_name(checksum_data.get("algorithm", "SHA1")) or HashAlgorithm.SHA1
        try:
            source = ChecksumSource(checksum_data.get("source", "none"))
        except ValueError:
            source = ChecksumSource.NONE

        supplier_data = data.get("supplier") or {}

        return cls(
            name=data["name"],
            version=data.get("version", ""),
            root=data.get("root", False),
            package_url=data.get("package_url", ""),
            checksum=CheckSum(algorithm, checksum_data.get("value", ""), source),
            supplier=SupplierContact(supplier_data.get("name", ""), supplier_data.get("email", "")),
            local_path=data.get("local_path", ""),
            license_declared=data.get("license_declared", ""),
            license_concluded=data.get("license_concluded", ""),
            copyright=data.get("copyright", ""),
            comments_license=data.get("comments_license", ""),
            ecosystem=data.get("ecosystem", ""),
            package_type=data.get("package_type", ""),
            modules={
                name: cls.from_dict(sub) for name, sub in (data.get("modules") or {}).items()
            },
        )
