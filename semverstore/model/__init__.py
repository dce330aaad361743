"""Pydantic models for semverstore."""

from semverstore.model.source import (
    DEFAULT_COMMIT_MESSAGE,
    DEFAULT_INITIAL_VERSION,
    DEFAULT_REGION,
    DriverKind,
    Source,
)

__all__ = [
    "DriverKind",
    "Source",
    "DEFAULT_COMMIT_MESSAGE",
    "DEFAULT_INITIAL_VERSION",
    "DEFAULT_REGION",
]
