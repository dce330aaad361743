"""
Versioning Module for semverstore.

All version logic used by the storage backends lives here: parsing,
printing, ordering, and the bump vocabulary. Backends never look inside a
version string themselves; they store and return text and let this module
decide what it means.

ARCHITECTURAL LAYERS:
====================

1. **Core Version Logic** (version.py):
   - Version: immutable semantic version (major.minor.patch[-pre][+build])
     wrapping ``semver.Version`` for parsing and precedence
   - parse_version / compare_versions helpers

2. **Bump Rules** (bump.py):
   - MajorBump, MinorBump, PatchBump, FinalBump, PreBump: the single-step rules
   - PrereleaseBump: "next minor as rc.1" style combinations
   - bump_from_params: translation of the textual bump/pre vocabulary

3. **Exception Hierarchy** (exceptions.py):
   - VersioningError and its subclasses, shared by every caller

BUMP RULES AT A GLANCE:
======================

    current          rule               result
    1.2.3            major              2.0.0
    1.2.3            minor              1.3.0
    1.2.3            patch              1.2.4
    1.2.4-rc.2       patch              1.2.4
    1.2.4-rc.2       final              1.2.4
    1.2.3            final              NoPrereleaseToFinalizeError
    1.2.3            pre (rc)           1.2.4-rc.1
    1.2.4-rc.1       pre (rc)           1.2.4-rc.2
    1.2.4-rc.2       pre (beta)         1.2.4-beta.1
    1.2.3            minor + pre (rc)   1.3.0-rc.1
"""

from .bump import (
    BumpRule,
    FinalBump,
    MajorBump,
    MinorBump,
    PatchBump,
    PreBump,
    PrereleaseBump,
    bump_from_params,
)
from .exceptions import (
    VersioningError,
    InvalidVersionError,
    InvalidBumpError,
    NoPrereleaseToFinalizeError,
)
from .version import Version, parse_version, compare_versions

__all__ = [
    # Core version utilities
    "Version",
    "parse_version",
    "compare_versions",
    # Bump rules
    "BumpRule",
    "MajorBump",
    "MinorBump",
    "PatchBump",
    "FinalBump",
    "PreBump",
    "PrereleaseBump",
    "bump_from_params",
    # Exception hierarchy
    "VersioningError",
    "InvalidVersionError",
    "InvalidBumpError",
    "NoPrereleaseToFinalizeError",
]
