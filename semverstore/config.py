"""Configuration: user defaults, environment credentials and source files.

A source is assembled from three layers, later ones winning:

1. ``[source]`` defaults from the user configuration file
2. credentials from the environment (or a ``.env`` file)
3. the source file given on the command line
"""

import configparser
import logging
import os
import platform
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from dotenv import load_dotenv

from semverstore.driver.exceptions import InvalidConfigurationError
from semverstore.model import Source

logger = logging.getLogger(__name__)

APP_NAME = "semverstore"

_home = os.path.expanduser("~")

xdg_config_home = os.environ.get("XDG_CONFIG_HOME") or os.path.join(_home, ".config")

if platform.system() == "Darwin":
    # macOS
    config_dir = Path("~/Library/Application Support/semverstore").expanduser()
else:
    # Linux or others
    config_dir = Path(os.path.join(xdg_config_home, APP_NAME))

ENV_CREDENTIALS = {
    "SEMVERSTORE_S3_ACCESS_KEY": "access_key_id",
    "SEMVERSTORE_S3_SECRET_KEY": "secret_access_key",
    "SEMVERSTORE_S3_SESSION_TOKEN": "session_token",
    "SEMVERSTORE_GCS_JSON_KEY": "json_key",
    "SEMVERSTORE_GIT_PRIVATE_KEY": "private_key",
    "SEMVERSTORE_GIT_USERNAME": "username",
    "SEMVERSTORE_GIT_PASSWORD": "password",
}


def get_config_file() -> Path:
    return config_dir / f"{APP_NAME}.cfg"


class ConfigAccessor:
    """
    Read-only view of the user configuration file.

    Missing files, sections and keys read as defaults; this tool never
    writes the file.
    """

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = Path(config_path) if config_path else get_config_file()
        self.config = configparser.ConfigParser(interpolation=None)
        try:
            self.config.read(self.config_path)
        except configparser.Error as e:
            raise InvalidConfigurationError(
                f"Cannot parse configuration file {self.config_path}: {e}"
            ) from e

    def get(self, section: str, key: str, default: Any = None) -> Any:
        if not self.config.has_option(section, key):
            return default
        return self.config.get(section, key)

    def section(self, section: str) -> Dict[str, str]:
        """All key/value pairs of a section, empty if the section is missing."""
        if not self.config.has_section(section):
            return {}
        return dict(self.config.items(section))


def load_dotenv_file(start: Optional[Path] = None) -> Optional[Path]:
    """
    Load the nearest ``.env`` file, walking up from ``start`` (default: cwd).

    Variables already present in the environment are not overridden.

    Returns:
        The loaded file, or None if there is none
    """
    current_path = Path(start) if start else Path.cwd()
    for parent in [current_path] + list(current_path.parents):
        dotenv_path = parent / ".env"
        if dotenv_path.is_file():
            load_dotenv(dotenv_path=dotenv_path, override=False)
            logger.debug(f"Loaded environment from {dotenv_path}")
            return dotenv_path
    return None


def credentials_from_env(environ: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """Source fields found in the environment, keyed by field name."""
    if environ is None:
        environ = os.environ
    return {
        field: environ[variable]
        for variable, field in ENV_CREDENTIALS.items()
        if environ.get(variable)
    }


def read_source_file(path: Path) -> Dict[str, Any]:
    """
    Read a YAML (or JSON) source file.

    A document of the form ``{"source": {...}}`` is unwrapped, so a resource
    request payload can be passed as is.

    Raises:
        InvalidConfigurationError: If the file is missing or not a mapping
    """
    path = Path(path)
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise InvalidConfigurationError(f"Cannot read source file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise InvalidConfigurationError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise InvalidConfigurationError(
            f"Source file {path} must contain a mapping, got {type(data).__name__}"
        )
    if isinstance(data.get("source"), dict):
        data = data["source"]
    return data


def load_source(
    path: Path,
    config: Optional[ConfigAccessor] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Source:
    """
    Assemble and validate the source for a command.

    Args:
        path: Source file
        config: User configuration (defaults to the user's config file)
        environ: Environment mapping (defaults to os.environ)

    Raises:
        InvalidConfigurationError: For unreadable files or invalid fields
    """
    if config is None:
        config = ConfigAccessor()

    merged: Dict[str, Any] = {}
    merged.update(config.section("source"))
    merged.update(credentials_from_env(environ))
    merged.update(read_source_file(path))
    return Source.from_dict(merged)


def get_git_work_dir(config: Optional[ConfigAccessor] = None) -> Optional[Path]:
    """Configured parent directory for git work clones, if any."""
    if config is None:
        config = ConfigAccessor()
    value = config.get("dirs", "git_work")
    if not value:
        return None
    return Path(value).expanduser()
