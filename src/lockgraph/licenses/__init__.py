"""
License and copyright detection for installed packages.
"""

from .license_scanner import (
    LicenseInfo, LicenseScanner, FileLicenseScanner, NullLicenseScanner,
    classify_license, build_license_declared, build_license_concluded,
    get_copyright, NOASSERTION
)

__all__ = [
    "LicenseInfo",
    "LicenseScanner",
    "FileLicenseScanner",
    "NullLicenseScanner",
    "classify_license",
    "build_license_declared",
    "build_license_concluded",
    "get_copyright",
    "NOASSERTION"
]
