"""
lockgraph

Normalizes dependency lock artifacts from several package managers into a
single module graph ready for SBOM emission.
"""

__version__ = "0.1.0"
__author__ = "lockgraph maintainers"
__description__ = "Multi-ecosystem lock file resolution into an SBOM-ready module graph"
