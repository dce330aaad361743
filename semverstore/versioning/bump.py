"""
Bump rules: pure transitions from one Version to the next.

Every rule exposes ``apply(version) -> Version`` and never mutates its input.
"""

import re
from dataclasses import dataclass
from typing import Optional, Union

from .exceptions import InvalidBumpError, NoPrereleaseToFinalizeError
from .version import Version

DEFAULT_PRE_LABEL = "rc"

RELEASE_PARTS = ("major", "minor", "patch")

_LABEL_PATTERN = re.compile(r"^(?=.*[A-Za-z-])[0-9A-Za-z-]+$")


def _validate_label(label: str) -> str:
    if not _LABEL_PATTERN.match(label):
        raise InvalidBumpError(
            f"Invalid prerelease label '{label}': use letters, digits and hyphens, "
            "with at least one non-digit"
        )
    return label


def _next_release(version: Version, part: str) -> Version:
    if part == "major":
        return Version.from_parts(version.major + 1, 0, 0)
    elif part == "minor":
        return Version.from_parts(version.major, version.minor + 1, 0)
    elif part == "patch":
        return Version.from_parts(version.major, version.minor, version.patch + 1)
    raise InvalidBumpError(f"Unknown release part: {part}")


@dataclass(frozen=True)
class MajorBump:
    def apply(self, version: Version) -> Version:
        return _next_release(version, "major")


@dataclass(frozen=True)
class MinorBump:
    def apply(self, version: Version) -> Version:
        return _next_release(version, "minor")


@dataclass(frozen=True)
class PatchBump:
    """
    Increment the patch number.

    A prerelease is already "ahead" of its release, so 1.0.1-rc.2 becomes
    1.0.1 rather than 1.0.2.
    """

    def apply(self, version: Version) -> Version:
        if version.is_prerelease:
            return version.finalize()
        return _next_release(version, "patch")


@dataclass(frozen=True)
class FinalBump:
    def apply(self, version: Version) -> Version:
        if not version.is_prerelease:
            raise NoPrereleaseToFinalizeError(str(version))
        return version.finalize()


@dataclass(frozen=True)
class PreBump:
    """
    Advance a prerelease line.

    - 1.0.0 with label "beta" -> 1.0.1-beta.1 (a new line for the next patch)
    - 1.0.1-beta.1 with label "beta" -> 1.0.1-beta.2
    - 1.0.1-beta.2 with label "rc" -> 1.0.1-rc.1
    - label None continues the current label, or starts "rc"
    """

    label: Optional[str] = None

    def __post_init__(self):
        if self.label is not None:
            _validate_label(self.label)

    def apply(self, version: Version) -> Version:
        if not version.is_prerelease:
            return Version.from_parts(
                version.major,
                version.minor,
                version.patch + 1,
                (self.label or DEFAULT_PRE_LABEL, 1),
            )

        current = version.prerelease
        label = self.label or current[0]
        if current[0] != label:
            prerelease = (label, "1")
        elif len(current) > 1 and current[-1].isdigit():
            prerelease = current[:-1] + (str(int(current[-1]) + 1),)
        else:
            prerelease = current + ("1",)

        return Version.from_parts(
            version.major, version.minor, version.patch, prerelease
        )


@dataclass(frozen=True)
class PrereleaseBump:
    """
    Start a prerelease of the next major, minor or patch release.

    1.2.3 with part "minor" and label "rc" -> 1.3.0-rc.1. The release part is
    always incremented, also when the current version is a prerelease.
    """

    part: str
    label: str = DEFAULT_PRE_LABEL

    def __post_init__(self):
        if self.part not in RELEASE_PARTS:
            raise InvalidBumpError(f"Unknown release part: {self.part}")
        _validate_label(self.label)

    def apply(self, version: Version) -> Version:
        return _next_release(version, self.part).replace(prerelease=(self.label, 1))


BumpRule = Union[MajorBump, MinorBump, PatchBump, FinalBump, PreBump, PrereleaseBump]

_SIMPLE_BUMPS = {
    "major": MajorBump,
    "minor": MinorBump,
    "patch": PatchBump,
    "final": FinalBump,
}


def bump_from_params(
    bump: Optional[str] = None, pre: Optional[str] = None
) -> Optional[BumpRule]:
    """
    Translate textual bump parameters into a bump rule.

    Args:
        bump: One of "major", "minor", "patch", "final" (case-insensitive)
        pre: Optional prerelease label

    Returns:
        The matching rule, or None when neither parameter is given

    Raises:
        InvalidBumpError: For unknown words or the "final" + pre combination
    """
    word = bump.strip().lower() if bump else None
    label = (pre.strip() or None) if pre else None

    if word is not None and word not in _SIMPLE_BUMPS:
        raise InvalidBumpError(
            f"Unknown bump '{bump}'. Expected one of: {', '.join(_SIMPLE_BUMPS)}"
        )

    if word is None:
        return PreBump(label) if label else None

    if label is None:
        return _SIMPLE_BUMPS[word]()

    if word == "final":
        raise InvalidBumpError("A final bump cannot be combined with a prerelease label")

    return PrereleaseBump(word, label)
