"""
Checksum resolution for lock records.

Policy, in order:

1. A digest declared by the lock record is used verbatim together with its
   algorithm (composer ``dist.shasum`` is SHA-1 hex, npm ``integrity`` is
   ``<algo>-<base64>``).
2. Otherwise the SHA-1 of the resolved package URL string is used.

The second case is a placeholder. It is deterministic and identifies the
source location, but it is not a digest of the package content, so SBOM
consumers must not read it as an integrity guarantee. Modules carry
``ChecksumSource.URL_PLACEHOLDER`` so the emitter can say so.
"""

import base64
import binascii
import hashlib
import logging
import string
from typing import Optional, Tuple

from ..models import CheckSum, ChecksumSource, HashAlgorithm

logger = logging.getLogger(__name__)

DEFAULT_ALGORITHM = HashAlgorithm.SHA1

DIGEST_SIZES = {
    HashAlgorithm.MD5: 16,
    HashAlgorithm.SHA1: 20,
    HashAlgorithm.SHA224: 28,
    HashAlgorithm.SHA256: 32,
    HashAlgorithm.SHA384: 48,
    HashAlgorithm.SHA512: 64,
}


def hash_url(url: str) -> str:
    """
    SHA-1 hex digest of a URL string, or ``""`` for an empty URL.

    Args:
        url: Resolved package URL

    Returns:
        Hex digest
    """
    if not url:
        return ""
    return hashlib.sha1(url.encode("utf-8")).hexdigest()


def parse_integrity(integrity: str) -> Optional[Tuple[HashAlgorithm, str]]:
    """
    Parse a Subresource Integrity string as found in npm lock files.

    Multiple space-separated entries are allowed; the first one with a known
    algorithm wins. Options after ``?`` are ignored.

    Returns:
        Tuple of (algorithm, base64 digest) or None
    """
    for entry in integrity.split():
        algo_name, sep, digest = entry.partition("-")
        if not sep or not digest:
            continue
        algorithm = HashAlgorithm.from_name(algo_name)
        if algorithm is None:
            continue
        return algorithm, digest.split("?", 1)[0]
    return None


def is_valid_digest(algorithm: HashAlgorithm, value: str) -> bool:
    """
    Check that ``value`` encodes a digest of the right length for ``algorithm``.

    Both hex and base64 encodings are accepted.
    """
    size = DIGEST_SIZES[algorithm]

    if len(value) == size * 2 and all(c in string.hexdigits for c in value):
        return True

    try:
        decoded = base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError):
        return False
    return len(decoded) == size


def resolve_checksum(
    package_url: str,
    declared_value: str = "",
    declared_algorithm: Optional[HashAlgorithm] = None
) -> CheckSum:
    """
    Derive a module checksum from a declared digest or the package URL.

    Args:
        package_url: Resolved package URL (explicit or synthesized)
        declared_value: Digest declared by the lock record, if any
        declared_algorithm: Algorithm of the declared digest; SHA-1 if omitted

    Returns:
        CheckSum for the module
    """
    if declared_value:
        algorithm = declared_algorithm or DEFAULT_ALGORITHM
        if is_valid_digest(algorithm, declared_value):
            return CheckSum(algorithm, declared_value, ChecksumSource.DECLARED)
        logger.warning(
            f"Discarding declared {algorithm.value} digest of unexpected length for {package_url}"
        )

    value = hash_url(package_url)
    if not value:
        return CheckSum(DEFAULT_ALGORITHM, "", ChecksumSource.NONE)
    return CheckSum(DEFAULT_ALGORITHM, value, ChecksumSource.URL_PLACEHOLDER)
