"""
License and copyright detection for installed packages.

The resolution core only depends on the ``LicenseScanner`` interface: given a
package directory it returns a ``LicenseInfo`` or ``None``. ``None`` is the
normal answer for a package that is not installed or ships no license file,
and the module's license fields are then left empty.
"""

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple, Union

logger = logging.getLogger(__name__)

NOASSERTION = "NOASSERTION"
LICENSE_REF_PREFIX = "LicenseRef-"

LICENSE_FILE_PREFIXES = ("license", "licence", "copying", "unlicense")

KNOWN_SPDX_IDS = {
    "0BSD", "AGPL-3.0-only", "AGPL-3.0-or-later", "Apache-1.1", "Apache-2.0",
    "Artistic-2.0", "BSD-2-Clause", "BSD-3-Clause", "BSL-1.0", "CC-BY-4.0",
    "CC0-1.0", "EPL-1.0", "EPL-2.0", "GPL-2.0-only", "GPL-2.0-or-later",
    "GPL-3.0-only", "GPL-3.0-or-later", "ISC", "LGPL-2.1-only",
    "LGPL-2.1-or-later", "LGPL-3.0-only", "LGPL-3.0-or-later", "MIT",
    "MIT-0", "MPL-2.0", "OFL-1.1", "Python-2.0", "Unlicense", "WTFPL", "Zlib",
}

# (identifier, phrases that must all appear); first match wins
_CLASSIFIERS: List[Tuple[str, Tuple[str, ...]]] = [
    ("AGPL-3.0-only", ("gnu affero general public license", "version 3")),
    ("LGPL-3.0-only", ("gnu lesser general public license", "version 3")),
    ("LGPL-2.1-only", ("gnu lesser general public license", "version 2.1")),
    ("GPL-3.0-only", ("gnu general public license", "version 3")),
    ("GPL-2.0-only", ("gnu general public license", "version 2")),
    ("Apache-2.0", ("apache license", "version 2.0")),
    ("MPL-2.0", ("mozilla public license", "2.0")),
    ("EPL-2.0", ("eclipse public license", "v 2.0")),
    ("BSL-1.0", ("boost software license",)),
    ("Artistic-2.0", ("the artistic license 2.0",)),
    ("CC0-1.0", ("cc0 1.0 universal",)),
    ("Unlicense", ("this is free and unencumbered software released into the public domain",)),
    ("ISC", ("permission to use, copy, modify, and",
             "distribute this software for any purpose with or without fee")),
    ("MIT", ("permission is hereby granted, free of charge",
             "the above copyright notice and this permission notice shall be included")),
    ("BSD-3-Clause", ("redistribution and use in source and binary forms", "neither the name")),
    ("BSD-2-Clause", ("redistribution and use in source and binary forms",)),
    ("WTFPL", ("do what the fuck you want to public license",)),
]

_COPYRIGHT_LINE = re.compile(r"^\s*(?:copyright\b|\(c\)|©).*$", re.IGNORECASE | re.MULTILINE)
_TEMPLATE_MARKERS = ("[yyyy]", "{yyyy}", "<year>", "[year]")
_EXPRESSION_TOKENS = re.compile(r"[()]|\s+(?:AND|OR|WITH)\s+")


@dataclass(frozen=True)
class LicenseInfo:
    """Result of scanning one package directory."""
    license_id: str
    extracted_text: str = ""
    comments: str = ""


class LicenseScanner(ABC):
    """Interface of the license/copyright collaborator."""

    @abstractmethod
    def scan(self, path: Union[str, Path]) -> Optional[LicenseInfo]:
        """
        Scan a package directory for license information.

        Args:
            path: Directory where the package is installed

        Returns:
            LicenseInfo, or None when nothing could be found or read
        """
        pass


class NullLicenseScanner(LicenseScanner):
    """Scanner used when license detection is disabled."""

    def scan(self, path: Union[str, Path]) -> Optional[LicenseInfo]:
        return None


class FileLicenseScanner(LicenseScanner):
    """
    Finds ``LICENSE``/``LICENCE``/``COPYING`` files in a package directory and
    classifies them against a table of common SPDX licenses by their
    distinctive phrases.
    """

    def __init__(self, max_bytes: int = 256 * 1024):
        self.max_bytes = max_bytes

    def scan(self, path: Union[str, Path]) -> Optional[LicenseInfo]:
        directory = Path(path)
        if not directory.is_dir():
            return None

        for license_file in self._license_files(directory):
            try:
                with open(license_file, 'r', encoding='utf-8', errors='replace') as f:
                    text = f.read(self.max_bytes)
            except OSError as e:
                logger.debug(f"Cannot read license file {license_file}: {e}")
                continue

            license_id = classify_license(text)
            if license_id:
                return LicenseInfo(license_id, text, f"License identified from {license_file.name}")

            return LicenseInfo(
                "",
                text,
                f"License file {license_file.name} did not match a known license"
            )

        return None

    def _license_files(self, directory: Path) -> List[Path]:
        try:
            entries = sorted(directory.iterdir())
        except OSError as e:
            logger.debug(f"Cannot list {directory}: {e}")
            return []

        return [
            entry for entry in entries
            if entry.is_file() and entry.name.lower().startswith(LICENSE_FILE_PREFIXES)
        ]


def classify_license(text: str) -> Optional[str]:
    """
    Map license text to an SPDX identifier.

    Returns:
        SPDX identifier or None when no known license matches
    """
    normalized = " ".join(text.lower().split())
    for license_id, phrases in _CLASSIFIERS:
        if all(phrase in normalized for phrase in phrases):
            return license_id
    return None


def _is_known_expression(license_id: str) -> bool:
    tokens = [t.strip() for t in _EXPRESSION_TOKENS.split(license_id) if t and t.strip()]
    return bool(tokens) and all(
        token in KNOWN_SPDX_IDS or token.startswith(LICENSE_REF_PREFIX) for token in tokens
    )


def _license_value(license_id: str) -> str:
    license_id = license_id.strip()
    if not license_id:
        return NOASSERTION
    if license_id.startswith(LICENSE_REF_PREFIX) or _is_known_expression(license_id):
        return license_id
    return LICENSE_REF_PREFIX + re.sub(r"[^A-Za-z0-9.\-]+", "-", license_id).strip("-")


def build_license_declared(license_id: str) -> str:
    """
    SPDX ``PackageLicenseDeclared`` value for a detected license identifier.

    Known identifiers and expressions over them pass through, anything else
    becomes a ``LicenseRef-`` and an empty identifier is ``NOASSERTION``.
    """
    return _license_value(license_id)


def build_license_concluded(license_id: str) -> str:
    """SPDX ``PackageLicenseConcluded`` value; same mapping as the declared one."""
    return _license_value(license_id)


def get_copyright(text: str) -> str:
    """
    First copyright statement found in license text.

    Template lines such as Apache's ``Copyright [yyyy] [name of copyright
    owner]`` are skipped.

    Returns:
        The copyright line, or an empty string
    """
    for match in _COPYRIGHT_LINE.finditer(text or ""):
        line = match.group(0).strip()
        if any(marker in line.lower() for marker in _TEMPLATE_MARKERS):
            continue
        return line
    return ""
