"""
Conversion of raw lock records into canonical modules, and assembly of the
flat module list or the nested dependency tree.
"""

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, FrozenSet, List, Optional, Tuple

from ..error_handling import ResolutionCancelled
from ..licenses import (
    LicenseInfo, build_license_concluded, build_license_declared, get_copyright
)
from ..models import HashAlgorithm, Module, PackageRecord, SupplierContact
from .checksum import resolve_checksum
from .normalizer import get_name, normalize_version

if TYPE_CHECKING:
    from .base_ecosystem import EcosystemPlugin

logger = logging.getLogger(__name__)

VisitKey = Tuple[str, str]


@dataclass(frozen=True)
class _Subtree:
    """
    A finished dependency subtree and what its shape depends on.

    ``nodes`` are the keys expanded inside it and ``cut_at`` the outside
    ancestors where a cycle was cut. Built again under another branch, the
    subtree comes out identical as long as every ``cut_at`` key is still an
    ancestor and no expanded key is.
    """
    module: Module
    nodes: FrozenSet[VisitKey]
    cut_at: FrozenSet[VisitKey]

    def reusable_under(self, ancestors: FrozenSet[VisitKey]) -> bool:
        return self.cut_at <= ancestors and self.nodes.isdisjoint(ancestors)


class ModuleBuilder:
    """
    Builds modules for one resolution call.

    The builder is created per call and thrown away afterwards. The only state
    it keeps are per-call memos (license scans by local path, finished
    dependency subtrees and cycle leaves by install key) and a counter
    of converted records for cancellation reporting.
    """

    def __init__(self, plugin: "EcosystemPlugin", project: Path, cancel_event: Optional[Any] = None):
        self.plugin = plugin
        self.project = project
        self.cancel_event = cancel_event
        self._license_cache: Dict[str, Optional[LicenseInfo]] = {}
        self._subtrees: Dict[VisitKey, _Subtree] = {}
        self._leaves: Dict[VisitKey, Module] = {}
        self._converted = 0

    def build_module(
        self,
        record: PackageRecord,
        root: bool = False,
        modules: Optional[Dict[str, Module]] = None
    ) -> Module:
        """
        Convert one raw record into a module.

        Args:
            record: Raw package record
            root: Whether the record is the project itself
            modules: Resolved dependency sub-modules for the tree view

        Returns:
            Enriched, immutable module
        """
        self._check_cancelled()

        package_url = record.dist_url or self.plugin.synthesize_url(record)
        declared_algorithm = None
        if record.hash_algorithm:
            declared_algorithm = HashAlgorithm.from_name(record.hash_algorithm)
        checksum = resolve_checksum(package_url, record.declared_hash, declared_algorithm)

        local_path = str(self.project / record.install_path) if record.install_path else str(self.project)

        license_declared = license_concluded = copyright_text = comments = ""
        license_info = self._scan_license(local_path)
        if license_info is not None:
            license_declared = build_license_declared(license_info.license_id)
            license_concluded = build_license_concluded(license_info.license_id)
            copyright_text = get_copyright(license_info.extracted_text)
            comments = license_info.comments

        supplier = SupplierContact()
        if record.authors:
            author = record.authors[0]
            supplier = SupplierContact(author.name, author.email)

        self._converted += 1
        return Module(
            name=get_name(record.name, self.plugin.name_separator),
            version=normalize_version(record.version),
            root=root,
            package_url=package_url,
            checksum=checksum,
            supplier=supplier,
            local_path=local_path,
            license_declared=license_declared,
            license_concluded=license_concluded,
            copyright=copyright_text,
            comments_license=comments,
            ecosystem=self.plugin.name,
            package_type=record.package_type,
            modules=modules or {},
        )

    def build_flat(self, root: Module, records: List[PackageRecord]) -> List[Module]:
        """Root first, then one module per record in the given order."""
        modules = [root]
        for record in records:
            modules.append(self.build_module(record))
        return modules

    def build_tree(
        self,
        root: Module,
        records: List[PackageRecord],
        packages: Dict[str, PackageRecord]
    ) -> List[Module]:
        """
        Root first, then one module per record, each with its dependency tree.

        The root's ``modules`` holds the directly declared dependencies.
        Subtrees of shared dependencies are built once per call and the same
        immutable module is referenced from every dependent.

        Args:
            root: Project module
            records: Directly declared dependency records
            packages: Every installed instance keyed by install path

        Returns:
            Module list with populated ``modules`` maps
        """
        children = [self._subtree(record, packages, frozenset()).module for record in records]
        root = replace(root, modules={
            record.name: child for record, child in zip(records, children)
        })
        return [root] + children

    def _subtree(
        self,
        record: PackageRecord,
        packages: Dict[str, PackageRecord],
        ancestors: FrozenSet[VisitKey]
    ) -> "_Subtree":
        cached = self._subtrees.get(record.key)
        if cached is not None and cached.reusable_under(ancestors):
            return cached

        # Identity is (name, install path): the same name may be installed
        # twice at different depths with different versions.
        branch = ancestors | {record.key}
        nodes = {record.key}
        cut_at = set()

        dependencies: Dict[str, Module] = {}
        for dependency in record.dependencies:
            resolved = self.plugin.resolve_dependency(record, dependency, packages)
            if resolved is None:
                logger.debug(f"{record.name} declares {dependency} but no installed instance was found")
                continue

            if resolved.key in branch:
                logger.debug(f"Dependency cycle at {resolved.name} ({resolved.install_path}); not descending")
                dependencies[dependency] = self._leaf(resolved)
                cut_at.add(resolved.key)
                continue

            child = self._subtree(resolved, packages, branch)
            dependencies[dependency] = child.module
            nodes |= child.nodes
            cut_at |= child.cut_at

        subtree = _Subtree(
            module=self.build_module(record, modules=dependencies),
            nodes=frozenset(nodes),
            cut_at=frozenset(cut_at - {record.key}),
        )
        self._subtrees[record.key] = subtree
        return subtree

    def _leaf(self, record: PackageRecord) -> Module:
        leaf = self._leaves.get(record.key)
        if leaf is None:
            leaf = self._leaves[record.key] = self.build_module(record)
        return leaf

    def _scan_license(self, local_path: str) -> Optional[LicenseInfo]:
        if local_path in self._license_cache:
            return self._license_cache[local_path]

        try:
            info = self.plugin.license_scanner.scan(local_path)
        except Exception as e:
            # A missing or unscannable local copy never fails resolution
            logger.debug(f"License scan failed for {local_path}: {e}")
            info = None

        self._license_cache[local_path] = info
        return info

    def _check_cancelled(self) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise ResolutionCancelled(
                f"{self.plugin.name} resolution cancelled",
                converted=self._converted,
                context={"project": str(self.project)}
            )
