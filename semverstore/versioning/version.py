"""
Version utility module for semantic version strings.

This module provides the value type shared by every storage backend,
using the ``semver`` library for parsing and precedence rules.
"""

from typing import Iterable, Optional, Tuple, Union

import semver

from .exceptions import InvalidVersionError


Identifiers = Tuple[str, ...]


def _join(identifiers: Optional[Iterable[Union[str, int]]]) -> Optional[str]:
    if not identifiers:
        return None
    return ".".join(str(i) for i in identifiers)


def _split(value: Optional[str]) -> Identifiers:
    if not value:
        return ()
    return tuple(value.split("."))


class Version:
    """
    A semantic version representation using semver.Version.

    This class wraps semver.Version to keep a small immutable API for the
    rest of the package: parsing, printing, ordering and ``replace``.
    Version format: major.minor.patch[-prerelease][+build]

    Precedence follows the semantic versioning rules. Build metadata is
    kept when printing but ignored for ordering and equality.
    """

    __slots__ = ("_version",)

    def __init__(self, version_string: Union[str, "Version"]):
        """
        Initialize a Version from a string.

        Args:
            version_string: Version string such as "1.2.3" or "2.0.0-rc.1+build.5"

        Raises:
            InvalidVersionError: If the string is not a semantic version
        """
        if isinstance(version_string, Version):
            self._version = version_string._version
            return

        # YAML hands out 1.0 as a float; only complete x.y.z strings are accepted
        if isinstance(version_string, (int, float)) and not isinstance(
            version_string, bool
        ):
            version_string = str(version_string)

        if not isinstance(version_string, str):
            raise InvalidVersionError(repr(version_string), "not a string")

        text = version_string.strip()
        try:
            self._version = semver.Version.parse(text)
        except (ValueError, TypeError) as e:
            raise InvalidVersionError(text) from e

    @classmethod
    def from_parts(
        cls,
        major: int,
        minor: int,
        patch: int,
        prerelease: Optional[Iterable[Union[str, int]]] = None,
        build: Optional[Iterable[Union[str, int]]] = None,
    ) -> "Version":
        """Build a Version from its components, validating the result."""
        text = f"{major}.{minor}.{patch}"
        pre = _join(prerelease)
        if pre:
            text += f"-{pre}"
        meta = _join(build)
        if meta:
            text += f"+{meta}"
        return cls(text)

    @property
    def major(self) -> int:
        """Major version component."""
        return self._version.major

    @property
    def minor(self) -> int:
        """Minor version component."""
        return self._version.minor

    @property
    def patch(self) -> int:
        """Patch version component."""
        return self._version.patch

    @property
    def prerelease(self) -> Identifiers:
        """Prerelease identifiers, empty for a release version."""
        return _split(self._version.prerelease)

    @property
    def build(self) -> Identifiers:
        """Build metadata identifiers."""
        return _split(self._version.build)

    @property
    def is_prerelease(self) -> bool:
        return bool(self._version.prerelease)

    def replace(self, **parts) -> "Version":
        """
        Return a new Version with the given components replaced.

        Accepted keywords are major, minor, patch, prerelease and build.
        prerelease and build take a sequence of identifiers (or None/() to clear).
        """
        unknown = set(parts) - {"major", "minor", "patch", "prerelease", "build"}
        if unknown:
            raise TypeError(f"Unknown version components: {', '.join(sorted(unknown))}")

        return Version.from_parts(
            parts.get("major", self.major),
            parts.get("minor", self.minor),
            parts.get("patch", self.patch),
            parts.get("prerelease", self.prerelease),
            parts.get("build", self.build),
        )

    def finalize(self) -> "Version":
        """Return the release version with prerelease and build cleared."""
        return Version.from_parts(self.major, self.minor, self.patch)

    def __str__(self) -> str:
        return str(self._version)

    def __repr__(self) -> str:
        return f"Version('{self}')"

    def __eq__(self, other) -> bool:
        if not isinstance(other, Version):
            return False
        return self._version.compare(other._version) == 0

    def __lt__(self, other) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._version.compare(other._version) < 0

    def __le__(self, other) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._version.compare(other._version) <= 0

    def __gt__(self, other) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._version.compare(other._version) > 0

    def __ge__(self, other) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._version.compare(other._version) >= 0

    def __hash__(self) -> int:
        return hash((self.major, self.minor, self.patch, self.prerelease))


def parse_version(version_string: str) -> Version:
    """
    Parse a version string into a Version object.

    Args:
        version_string: Version string to parse

    Returns:
        Version object

    Raises:
        InvalidVersionError: If version string is invalid
    """
    return Version(version_string)


def compare_versions(version1: str, version2: str) -> int:
    """
    Compare two version strings.

    Args:
        version1: First version string
        version2: Second version string

    Returns:
        -1 if version1 < version2
         0 if version1 == version2
         1 if version1 > version2

    Raises:
        InvalidVersionError: If either version string is invalid
    """
    v1 = Version(version1)
    v2 = Version(version2)

    if v1 < v2:
        return -1
    elif v1 > v2:
        return 1
    else:
        return 0
