"""
Module resolution for lock artifacts of several package managers.
"""

from .base_ecosystem import EcosystemPlugin, LockTree
from .checksum import resolve_checksum, hash_url, parse_integrity, is_valid_digest
from .composer_parser import ComposerParser
from .module_builder import ModuleBuilder
from .normalizer import normalize_version, get_name
from .npm_parser import NpmParser
from .project_resolver import ProjectResolver

__all__ = [
    "EcosystemPlugin",
    "LockTree",
    "ModuleBuilder",
    "ComposerParser",
    "NpmParser",
    "ProjectResolver",
    "resolve_checksum",
    "hash_url",
    "parse_integrity",
    "is_valid_digest",
    "normalize_version",
    "get_name"
]
