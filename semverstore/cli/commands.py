"""cli commands reading and writing the stored version"""

import logging
import sys
from functools import wraps
from pathlib import Path
from typing import Optional

import click

from semverstore.cli.error_formatting import format_error
from semverstore.cli.utils.logging import logger
from semverstore.config import (
    ConfigAccessor,
    get_git_work_dir,
    load_dotenv_file,
    load_source,
)
from semverstore.driver import Driver, DriverError
from semverstore.remote import get_driver
from semverstore.versioning import Version, VersioningError, bump_from_params

from .debug import add_debug_option

BUMP_CHOICES = click.Choice(["major", "minor", "patch", "final"], case_sensitive=False)

source_option = click.option(
    "--source",
    "-s",
    "source_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help="YAML or JSON file describing where the version is stored.",
)


def handle_errors(func):
    """Report library errors as [ERROR] lines and exit with status 1."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (VersioningError, DriverError) as e:
            logger.error(click.style("[ERROR]", fg="red", bold=True) + " " + format_error(e))
            if logger.isEnabledFor(logging.DEBUG):
                logger.exception("Full traceback:")
            sys.exit(1)

    return wrapper


def open_driver(source_path: Path) -> Driver:
    load_dotenv_file()
    config = ConfigAccessor()
    source = load_source(source_path, config=config)
    return get_driver(source, git_work_dir=get_git_work_dir(config))


@add_debug_option
@click.command(name="check")
@source_option
@click.option(
    "--since",
    "since",
    default=None,
    help="Last version seen; nothing is printed if the current one is older.",
)
@handle_errors
def check(source_path: Path, since: Optional[str]):
    """Print the current version."""
    cursor = Version(since) if since else None
    with open_driver(source_path) as driver:
        versions = driver.check(cursor)
    for version in versions:
        click.echo(str(version))


@add_debug_option
@click.command(name="get")
@source_option
@click.option("--bump", "bump", type=BUMP_CHOICES, default=None, help="Bump to apply locally.")
@click.option("--pre", "pre", default=None, help="Prerelease label to apply locally.")
@handle_errors
def get(source_path: Path, bump: Optional[str], pre: Optional[str]):
    """Print the current version, optionally bumped without storing it."""
    rule = bump_from_params(bump, pre)
    with open_driver(source_path) as driver:
        [version] = driver.check(None)
    if rule is not None:
        version = rule.apply(version)
    click.echo(str(version))


@add_debug_option
@click.command(name="bump")
@source_option
@click.option("--bump", "bump", type=BUMP_CHOICES, default=None, help="Part to bump.")
@click.option("--pre", "pre", default=None, help="Prerelease label.")
@handle_errors
def bump(source_path: Path, bump: Optional[str], pre: Optional[str]):
    """Bump the stored version and print the new one."""
    rule = bump_from_params(bump, pre)
    if rule is None:
        raise click.UsageError("Specify --bump and/or --pre")
    with open_driver(source_path) as driver:
        new_version = driver.bump(rule)
    click.echo(str(new_version))


@add_debug_option
@click.command(name="set")
@source_option
@click.argument("version", required=False)
@click.option(
    "--file",
    "version_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Read the version from this file instead.",
)
@handle_errors
def set_version(source_path: Path, version: Optional[str], version_file: Optional[Path]):
    """Overwrite the stored version, without any concurrency check."""
    if (version is None) == (version_file is None):
        raise click.UsageError("Give either VERSION or --file")
    if version_file is not None:
        version = version_file.read_text()
    new_version = Version(version)
    with open_driver(source_path) as driver:
        driver.set(new_version)
    click.echo(str(new_version))
