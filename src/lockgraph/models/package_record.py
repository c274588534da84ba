"""
Raw package records produced by the ecosystem lock parsers.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Optional


@dataclass(frozen=True)
class Author:
    name: str = ""
    email: str = ""


@dataclass
class PackageRecord:
    """
    One package as a lock artifact describes it, before normalization.

    ``install_path`` is relative to the project directory
    (``vendor/acme/foo``, ``node_modules/a/node_modules/b``).
    ``dependencies`` maps declared dependency names to the requested range;
    the range is informational only and never resolved.
    """

    name: str
    version: str
    install_path: str
    dist_url: str = ""
    declared_hash: str = ""
    hash_algorithm: Optional[str] = None
    authors: List[Author] = field(default_factory=list)
    package_type: str = ""
    dependencies: Dict[str, str] = field(default_factory=dict)
    is_dev: bool = False

    @property
    def key(self):
        """Identity of an installed instance: name plus where it is installed."""
        return (self.name, self.install_path)
