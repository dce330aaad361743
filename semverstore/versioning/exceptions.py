"""
Exception classes for the versioning module.
"""


class VersioningError(Exception):
    """Base exception for all versioning-related errors."""

    pass


class InvalidVersionError(VersioningError, ValueError):
    """Raised when a version string is not a valid semantic version."""

    def __init__(self, version_string: str, reason: str = ""):
        self.version_string = version_string
        self.reason = reason
        message = f"Invalid version format: '{version_string}'. Expected x.y.z[-pre][+build]"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class NoPrereleaseToFinalizeError(VersioningError):
    """Raised when a final bump is applied to a version without prerelease."""

    def __init__(self, version: str):
        self.version = version
        super().__init__(
            f"Cannot finalize version {version}: it has no prerelease component"
        )


class InvalidBumpError(VersioningError, ValueError):
    """Raised when bump parameters do not describe a valid bump."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)
