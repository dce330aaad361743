"""
Exception classes for drivers and storage backends.
"""

from typing import Iterable, List, Union


class DriverError(Exception):
    """
    General Exception for drivers.
    """

    def __init__(self, message):
        self.message = message
        super().__init__(self.message)


class InvalidConfigurationError(DriverError):
    """
    Exception raised for missing or invalid backend parameters.

    Carries one message per problem so callers can list them.
    """

    def __init__(self, errors: Union[str, Iterable[str]]):
        if isinstance(errors, str):
            self.errors: List[str] = [errors]
        else:
            self.errors = list(errors)
        super().__init__("\n".join(self.errors))


class UnknownDriverError(DriverError):
    """
    Exception raised when the configured driver kind is not supported.
    """

    def __init__(self, driver: str):
        self.driver = driver
        super().__init__(f"unknown driver: {driver}")


class ConcurrentModificationError(DriverError):
    """
    Exception raised when a bump kept losing the race against other writers.
    """

    def __init__(self, location: str, attempts: int):
        self.location = location
        self.attempts = attempts
        super().__init__(
            f"Version at {location} was modified concurrently on each of "
            f"{attempts} attempts; giving up"
        )


class StorageUnavailableError(DriverError):
    """
    Exception raised for transport and authentication failures of a backend.
    """

    def __init__(self, message):
        self.message = message
        super().__init__(self.message)
