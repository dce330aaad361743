"""Pydantic model for the source configuration of a version resource."""

from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from semverstore.driver.exceptions import InvalidConfigurationError
from semverstore.versioning import Version

DEFAULT_INITIAL_VERSION = "0.0.0"
DEFAULT_REGION = "us-east-1"
DEFAULT_COMMIT_MESSAGE = "bump to %version%"


class DriverKind(str, Enum):
    """Storage backends."""

    s3 = "s3"
    git = "git"
    gcs = "gcs"


REQUIRED_FIELDS: Dict[DriverKind, List[str]] = {
    DriverKind.s3: ["bucket", "key"],
    DriverKind.git: ["uri", "branch", "file"],
    DriverKind.gcs: ["bucket", "key"],
}


class Source(BaseModel):
    """
    Where the version lives and how to reach it.

    Only the fields of the selected driver are used; the selector checks that
    the ones it needs are present.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    driver: str = Field(DriverKind.s3.value, description="Backend kind")
    initial_version: Optional[str] = Field(
        None, description="Version reported and bumped from while nothing is stored"
    )

    # object storage and managed storage
    bucket: Optional[str] = Field(None, description="Bucket name")
    key: Optional[str] = Field(None, description="Object key holding the version")

    # object storage
    access_key_id: Optional[str] = Field(None, repr=False)
    secret_access_key: Optional[str] = Field(None, repr=False)
    session_token: Optional[str] = Field(None, repr=False)
    region_name: Optional[str] = Field(None, description="Defaults to us-east-1")
    endpoint: Optional[str] = Field(None, description="S3-compatible endpoint URL")
    disable_ssl: bool = False
    skip_ssl_verification: bool = False
    server_side_encryption: Optional[str] = None
    use_v2_signing: bool = False

    # version control
    uri: Optional[str] = Field(None, description="Repository URI")
    branch: Optional[str] = None
    file: Optional[str] = Field(None, description="Path of the version file")
    private_key: Optional[str] = Field(None, repr=False)
    username: Optional[str] = None
    password: Optional[str] = Field(None, repr=False)
    git_user: Optional[str] = Field(None, description='"Name <email>" for commits')
    commit_message: Optional[str] = Field(
        None, description="Template with %version% and %file% placeholders"
    )

    # managed storage
    json_key: Optional[str] = Field(None, repr=False)

    @field_validator("driver", mode="before")
    @classmethod
    def normalize_driver(cls, v: Any) -> Any:
        if v is None:
            return DriverKind.s3.value
        if isinstance(v, str):
            return v.strip().lower() or DriverKind.s3.value
        return v

    @field_validator("initial_version")
    @classmethod
    def validate_initial_version(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        # raises InvalidVersionError, a ValueError
        return str(Version(v))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Source":
        """
        Validate a mapping into a Source.

        Raises:
            InvalidConfigurationError: With one message per invalid field
        """
        if not isinstance(data, Mapping):
            raise InvalidConfigurationError(
                f"source must be a mapping, got {type(data).__name__}"
            )
        try:
            return cls.model_validate(dict(data))
        except PydanticValidationError as e:
            raise InvalidConfigurationError(_format_errors(e)) from e

    @property
    def initial(self) -> Version:
        return Version(self.initial_version or DEFAULT_INITIAL_VERSION)

    def missing_fields(self, kind: DriverKind) -> List[str]:
        """Names of required fields for ``kind`` that are unset or blank."""
        missing = []
        for name in REQUIRED_FIELDS[kind]:
            value = getattr(self, name)
            if value is None or not str(value).strip():
                missing.append(name)
        return missing


def _format_errors(error: PydanticValidationError) -> List[str]:
    messages = []
    for err in error.errors():
        location = ".".join(str(part) for part in err["loc"]) or "source"
        messages.append(f"{location}: {err['msg']}")
    return messages
