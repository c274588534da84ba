"""
Data models for lock file resolution.
"""

from .module import Module, CheckSum, ChecksumSource, HashAlgorithm, SupplierContact
from .package_record import PackageRecord, Author

__all__ = [
    "Module",
    "CheckSum",
    "ChecksumSource",
    "HashAlgorithm",
    "SupplierContact",
    "PackageRecord",
    "Author"
]
