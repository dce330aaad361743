"""
The read-modify-write protocol shared by every storage backend.

Remote stores offer no atomic increment, so a bump is an optimistic loop:

    1. read the stored text and its concurrency token
    2. apply the bump rule to the parsed version
    3. write the result only if the token is unchanged
    4. on conflict, start again from 1

The only mutual exclusion is the store's conditional write. Attempts are
sequential and re-read immediately before writing; there is no backoff.
"""

import logging
from typing import List, Optional, Tuple

from semverstore.versioning import BumpRule, InvalidVersionError, Version

from .exceptions import ConcurrentModificationError
from .interfaces import VersionStore

logger = logging.getLogger(__name__)

MAX_RETRIES = 12


class VersionDriver:
    """
    Driver implementation over any VersionStore.

    Args:
        store: The backend-specific read/conditional-write primitive
        initial_version: Reported and bumped from while nothing is stored
        max_retries: Number of bump attempts before giving up

    Example:
        >>> driver = VersionDriver(store, Version("1.0.0"))
        >>> driver.bump(MinorBump())
        Version('1.1.0')
    """

    def __init__(
        self,
        store: VersionStore,
        initial_version: Version,
        max_retries: int = MAX_RETRIES,
    ):
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        self.store = store
        self.initial_version = initial_version
        self.max_retries = max_retries

    def _current(self) -> Tuple[Version, Optional[str]]:
        text, token = self.store.read()
        if text is None:
            return self.initial_version, token
        try:
            return Version(text), token
        except InvalidVersionError as e:
            raise InvalidVersionError(
                text, f"stored at {self.store.describe()}"
            ) from e

    def bump(self, rule: BumpRule) -> Version:
        """
        Apply a bump rule to the stored version.

        Returns:
            The version that was written

        Raises:
            ConcurrentModificationError: If every attempt lost a race
            VersioningError: If the rule cannot be applied (never retried)
            StorageUnavailableError: On backend failures (never retried)
        """
        location = self.store.describe()
        for attempt in range(1, self.max_retries + 1):
            current, token = self._current()
            new_version = rule.apply(current)

            if self.store.write_if(str(new_version), token):
                logger.info(f"Bumped {location} from {current} to {new_version}")
                return new_version

            logger.debug(
                f"Version at {location} changed while bumping from {current} "
                f"(attempt {attempt}/{self.max_retries}), retrying"
            )

        raise ConcurrentModificationError(location, self.max_retries)

    def set(self, version: Version) -> None:
        """Overwrite the stored version; last writer wins."""
        self.store.write(str(version))
        logger.info(f"Set {self.store.describe()} to {version}")

    def check(self, cursor: Optional[Version] = None) -> List[Version]:
        """
        Report the current version for change detection.

        Args:
            cursor: Last version the caller has seen, if any

        Returns:
            ``[current]`` when there is no cursor or current >= cursor, else ``[]``
        """
        current, _ = self._current()
        if cursor is None or current >= cursor:
            return [current]
        return []

    def close(self) -> None:
        self.store.close()

    def __enter__(self) -> "VersionDriver":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
