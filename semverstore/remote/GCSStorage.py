"""Google Cloud Storage version store.

The object generation is the concurrency token; every write is a
generation-match precondition (0 meaning "must not exist yet").
"""

import json
import logging
from typing import Any, Callable, Optional, Tuple

import requests
from google.api_core import exceptions as gcs_exceptions
from google.auth import exceptions as auth_exceptions

from semverstore.driver.exceptions import (
    InvalidConfigurationError,
    StorageUnavailableError,
)
from semverstore.model import Source

logger = logging.getLogger(__name__)

TRANSPORT_ERRORS = (
    gcs_exceptions.GoogleAPIError,
    auth_exceptions.GoogleAuthError,
    requests.exceptions.RequestException,
)


def client_factory(source: Source) -> Callable[[], Any]:
    """
    Build a callable creating the storage client on first use.

    A ``json_key`` service-account document is parsed eagerly so a broken key
    fails at configuration time; without one, application default
    credentials are used when the client is created.
    """
    info = None
    if source.json_key:
        try:
            info = json.loads(source.json_key)
        except json.JSONDecodeError as e:
            raise InvalidConfigurationError(f"json_key: invalid JSON ({e})") from e
        if not isinstance(info, dict):
            raise InvalidConfigurationError("json_key: expected a JSON object")

    def make_client():
        from google.cloud import storage
        from google.oauth2 import service_account

        if info is None:
            logger.info("Using application default credentials for authentication.")
            return storage.Client()
        credentials = service_account.Credentials.from_service_account_info(info)
        return storage.Client(project=info.get("project_id"), credentials=credentials)

    return make_client


class GCSVersionStore:
    """
    VersionStore backed by one GCS object.

    Args:
        make_client: Zero-argument callable returning a ``storage.Client``
        bucket: Bucket name
        key: Object name of the version file
    """

    def __init__(self, make_client: Callable, bucket: str, key: str):
        self._make_client = make_client
        self._client = None
        self._bucket = None
        self.bucket_name = bucket
        self.key = key

    def describe(self) -> str:
        return f"gs://{self.bucket_name}/{self.key}"

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
        self._client = None
        self._bucket = None

    @property
    def bucket(self):
        if self._bucket is None:
            try:
                self._client = self._make_client()
            except TRANSPORT_ERRORS as e:
                raise StorageUnavailableError(
                    f"Failed to create storage client: {e}"
                ) from e
            self._bucket = self._client.bucket(self.bucket_name)
        return self._bucket

    def read(self) -> Tuple[Optional[str], Optional[str]]:
        try:
            blob = self.bucket.get_blob(self.key)
            if blob is None:
                logger.debug(f"No version stored at {self.describe()} yet")
                return None, None
            # metadata first: the token may be older than the text, never newer
            text = blob.download_as_text().strip()
        except gcs_exceptions.NotFound:
            return None, None
        except TRANSPORT_ERRORS as e:
            raise StorageUnavailableError(
                f"Failed to read {self.describe()}: {e}"
            ) from e

        return text, str(blob.generation)

    def write_if(self, text: str, token: Optional[str]) -> bool:
        generation = int(token) if token is not None else 0
        try:
            self.bucket.blob(self.key).upload_from_string(
                text, content_type="text/plain", if_generation_match=generation
            )
        except gcs_exceptions.PreconditionFailed:
            logger.debug(f"Conditional write to {self.describe()} rejected")
            return False
        except TRANSPORT_ERRORS as e:
            raise StorageUnavailableError(
                f"Failed to write {self.describe()}: {e}"
            ) from e
        return True

    def write(self, text: str) -> None:
        try:
            self.bucket.blob(self.key).upload_from_string(
                text, content_type="text/plain"
            )
        except TRANSPORT_ERRORS as e:
            raise StorageUnavailableError(
                f"Failed to write {self.describe()}: {e}"
            ) from e
