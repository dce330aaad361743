"""Protocol interfaces for drivers and version stores.

Protocols that decouple the bump protocol from any storage client.
"""

from typing import List, Optional, Protocol, Tuple

from semverstore.versioning import BumpRule, Version


class Driver(Protocol):
    """The operations the command line needs from a storage backend."""

    def bump(self, rule: BumpRule) -> Version:
        """Atomically apply ``rule`` to the stored version and return the result."""
        ...

    def set(self, version: Version) -> None:
        """Overwrite the stored version unconditionally."""
        ...

    def check(self, cursor: Optional[Version] = None) -> List[Version]:
        """Return the current version if it is at or above ``cursor``."""
        ...

    def close(self) -> None:
        """Release clients and local work files."""
        ...

    def __enter__(self) -> "Driver":
        ...

    def __exit__(self, exc_type, exc, tb) -> None:
        ...


class VersionStore(Protocol):
    """Read and conditionally write the single stored version string.

    The token returned by ``read`` is opaque to callers. It changes every time
    the stored text changes and is handed back to ``write_if``.
    """

    def read(self) -> Tuple[Optional[str], Optional[str]]:
        """Return ``(text, token)``; text is None when nothing is stored."""
        ...

    def write_if(self, text: str, token: Optional[str]) -> bool:
        """Write ``text`` only if the store still matches ``token``.

        A token of None means "only if nothing is stored". Returns False on a
        conflict; any other failure raises.
        """
        ...

    def write(self, text: str) -> None:
        """Write ``text`` without any concurrency check."""
        ...

    def describe(self) -> str:
        """Human-readable location, used in messages."""
        ...

    def close(self) -> None:
        """Release clients and local work files; safe to call twice."""
        ...
