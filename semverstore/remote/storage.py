import logging
from pathlib import Path
from typing import List, Optional

from semverstore.driver.exceptions import (
    InvalidConfigurationError,
    UnknownDriverError,
)
from semverstore.driver.interfaces import Driver
from semverstore.driver.protocol import VersionDriver
from semverstore.model import DriverKind, Source

from .GCSStorage import GCSVersionStore, client_factory
from .GitStorage import GitVersionStore
from .S3Storage import S3VersionStore, connect

logger = logging.getLogger(__name__)


def driver_kind(name: str) -> DriverKind:
    """
    Resolve a driver name.

    Raises:
        UnknownDriverError: If the name is not a supported backend
    """
    try:
        return DriverKind(name)
    except ValueError:
        raise UnknownDriverError(name) from None


def _credential_errors(source: Source, kind: DriverKind) -> List[str]:
    errors = []
    if kind == DriverKind.s3 and bool(source.access_key_id) != bool(
        source.secret_access_key
    ):
        errors.append(
            "access_key_id and secret_access_key must be given together "
            "(leave both empty to use the default credential chain)"
        )
    if kind == DriverKind.git and source.password and not source.username:
        errors.append("password requires username")
    return errors


def get_driver(source: Source, git_work_dir: Optional[Path] = None) -> Driver:
    """
    Select and configure the backend for a source.

    Args:
    - source (Source): The validated source configuration.
    - git_work_dir (Path): Parent directory for git work clones.

    Returns:
    - Driver: A VersionDriver wrapping the backend's version store; close it
      (or use it as a context manager) to release the backend.

    Raises:
    - UnknownDriverError: For an unsupported driver kind.
    - InvalidConfigurationError: For missing fields or inconsistent credentials.
    """
    kind = driver_kind(source.driver)

    errors = [
        f"{name}: required by the {kind.value} driver"
        for name in source.missing_fields(kind)
    ]
    errors.extend(_credential_errors(source, kind))
    if errors:
        raise InvalidConfigurationError(errors)

    if kind == DriverKind.s3:
        try:
            client = connect(source)
        except ValueError as e:
            raise InvalidConfigurationError(f"endpoint: {e}") from e
        store = S3VersionStore(
            client,
            source.bucket,
            source.key,
            server_side_encryption=source.server_side_encryption,
        )
    elif kind == DriverKind.git:
        store = GitVersionStore(
            source.uri,
            source.branch,
            source.file,
            private_key=source.private_key,
            username=source.username,
            password=source.password,
            git_user=source.git_user,
            commit_message=source.commit_message,
            skip_ssl_verification=source.skip_ssl_verification,
            work_dir=git_work_dir,
        )
    else:
        store = GCSVersionStore(client_factory(source), source.bucket, source.key)

    logger.debug(f"Using {kind.value} driver for {store.describe()}")
    return VersionDriver(store, source.initial)
