"""semverstore: a semantic version kept in remote storage, bumped safely."""

__version__ = "0.3.0"
