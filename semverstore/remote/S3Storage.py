"""S3 version store.

The version is a single small object. Its ETag is the concurrency token and
writes are made conditional with ``If-Match`` (or ``If-None-Match: *`` for the
first write), so two racing bumps can never both land.

Works with AWS S3 and S3-compatible services (MinIO, Ceph, ...) that
implement conditional PUT.
"""

import logging
from typing import Any, Dict, Optional, Tuple

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from semverstore.driver.exceptions import StorageUnavailableError
from semverstore.driver.protocol import MAX_RETRIES
from semverstore.model import DEFAULT_REGION, Source

logger = logging.getLogger(__name__)

MISSING_CODES = {"NoSuchKey", "NotFound", "404"}
CONFLICT_CODES = {"PreconditionFailed", "ConditionalRequestConflict", "412", "409"}


def _error_code(error: ClientError) -> str:
    return str(error.response.get("Error", {}).get("Code", ""))


def connect(source: Source):
    """
    Create an S3 client for a source.

    Static credentials are used only when both the key id and the secret are
    set; otherwise boto3 falls back to its default credential chain
    (environment, shared config, instance profile, ...).

    Returns:
    - A boto3 S3 client. No request is made here.
    """
    session_args: Dict[str, Any] = {
        "region_name": source.region_name or DEFAULT_REGION,
    }
    if source.access_key_id and source.secret_access_key:
        session_args["aws_access_key_id"] = source.access_key_id
        session_args["aws_secret_access_key"] = source.secret_access_key
        if source.session_token:
            session_args["aws_session_token"] = source.session_token
    else:
        logger.info("Using default credential chain for authentication.")

    config = Config(
        signature_version="s3" if source.use_v2_signing else "s3v4",
        s3={"addressing_style": "path"},
        retries={"max_attempts": MAX_RETRIES, "mode": "standard"},
    )

    session = boto3.session.Session(**session_args)
    return session.client(
        "s3",
        endpoint_url=source.endpoint or None,
        use_ssl=not source.disable_ssl,
        verify=not source.skip_ssl_verification,
        config=config,
    )


class S3VersionStore:
    """
    VersionStore backed by one S3 object.

    Args:
        client: boto3 S3 client (or anything with get_object/put_object)
        bucket: Bucket name
        key: Object key of the version file
        server_side_encryption: Optional SSE algorithm passed on every write
    """

    def __init__(
        self,
        client,
        bucket: str,
        key: str,
        server_side_encryption: Optional[str] = None,
    ):
        self.client = client
        self.bucket = bucket
        self.key = key
        self.server_side_encryption = server_side_encryption

    def describe(self) -> str:
        return f"s3://{self.bucket}/{self.key}"

    def close(self) -> None:
        self.client.close()

    def _put_params(self, text: str) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "Bucket": self.bucket,
            "Key": self.key,
            "Body": text.encode("utf-8"),
            "ContentType": "text/plain",
        }
        if self.server_side_encryption:
            params["ServerSideEncryption"] = self.server_side_encryption
        return params

    def read(self) -> Tuple[Optional[str], Optional[str]]:
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=self.key)
            text = response["Body"].read().decode("utf-8").strip()
        except ClientError as e:
            if _error_code(e) in MISSING_CODES:
                logger.debug(f"No version stored at {self.describe()} yet")
                return None, None
            raise StorageUnavailableError(
                f"Failed to read {self.describe()}: {e}"
            ) from e
        except BotoCoreError as e:
            raise StorageUnavailableError(
                f"Failed to read {self.describe()}: {e}"
            ) from e

        return text, response["ETag"]

    def write_if(self, text: str, token: Optional[str]) -> bool:
        params = self._put_params(text)
        if token is None:
            params["IfNoneMatch"] = "*"
        else:
            params["IfMatch"] = token

        try:
            self.client.put_object(**params)
        except ClientError as e:
            code = _error_code(e)
            # a vanished object also means the token is stale
            if code in CONFLICT_CODES or code in MISSING_CODES:
                logger.debug(f"Conditional write to {self.describe()} rejected: {code}")
                return False
            raise StorageUnavailableError(
                f"Failed to write {self.describe()}: {e}"
            ) from e
        except BotoCoreError as e:
            raise StorageUnavailableError(
                f"Failed to write {self.describe()}: {e}"
            ) from e
        return True

    def write(self, text: str) -> None:
        try:
            self.client.put_object(**self._put_params(text))
        except (ClientError, BotoCoreError) as e:
            raise StorageUnavailableError(
                f"Failed to write {self.describe()}: {e}"
            ) from e
