"""Error formatting for CLI output."""

from semverstore.driver.exceptions import (
    ConcurrentModificationError,
    InvalidConfigurationError,
)


def format_error(error: Exception) -> str:
    """Format a library error to present useful information to the user.

    Configuration errors are listed one per line; concurrent modification
    gets a hint, since re-running the command is usually enough.

    Example output:
        Invalid source configuration:
          - bucket: required by the s3 driver
          - initial_version: Value error, Invalid version format: '1.x'
    """
    if isinstance(error, InvalidConfigurationError):
        if len(error.errors) == 1:
            return f"Invalid source configuration: {error.errors[0]}"
        lines = ["Invalid source configuration:"]
        lines.extend(f"  - {message}" for message in error.errors)
        return "\n".join(lines)

    if isinstance(error, ConcurrentModificationError):
        return (
            f"{error}\n  Other writers kept changing the version. "
            "Re-run the command once they are done."
        )

    message = str(error)
    cause = error.__cause__
    if cause is not None and str(cause) and str(cause) not in message:
        message += f"\n  Caused by: {cause}"
    return message
