"""
Pure functions that map raw ecosystem names and versions to canonical forms.
"""

from typing import Optional


def normalize_version(version: str) -> str:
    """
    Strip a single leading ``v`` from a version string.

    ``"v1.2.3"`` becomes ``"1.2.3"``; versions without the prefix pass
    through unchanged. A bare ``"v"`` normalizes to ``""``.

    Args:
        version: Raw version string from a lock artifact

    Returns:
        Normalized version string
    """
    if not version:
        return ""
    if version.startswith("v"):
        return version[1:]
    return version


def get_name(package_name: str, separator: Optional[str] = "/") -> str:
    """
    Reduce an ecosystem-qualified name to its trailing segment.

    Args:
        package_name: Raw package name, e.g. ``vendor/name``
        separator: Namespace separator of the ecosystem; ``None`` keeps the
            name whole

    Returns:
        Short package name
    """
    if not separator:
        return package_name
    return package_name.split(separator)[-1]


def split_author(author: str):
    """
    Split an npm-style person string ``Name <email> (url)`` into name and email.

    Returns:
        Tuple of (name, email); either may be empty
    """
    name = author
    email = ""

    url_start = name.find("(")
    if url_start != -1 and name.rstrip().endswith(")"):
        name = name[:url_start]

    email_start = name.find("<")
    email_end = name.find(">", email_start + 1)
    if email_start != -1 and email_end != -1:
        email = name[email_start + 1:email_end].strip()
        name = name[:email_start]

    return name.strip(), email


def tarball_basename(package_name: str) -> str:
    """Registry tarball base name: the package name without its ``@scope/``."""
    return package_name.rsplit("/", 1)[-1]
