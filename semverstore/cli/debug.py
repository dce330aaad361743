import click
from click.core import ParameterSource

from .utils.logging import configure_logging

DEBUG_KEY = "semverstore.debug"


def add_debug_option(cmd: click.Command) -> click.Command:
    """Add a --debug/--no-debug flag to a command or group (idempotent)."""
    if any(param.name == "debug" for param in cmd.params):
        return cmd

    cmd.params.insert(
        0,
        click.Option(
            ["--debug/--no-debug"],
            is_eager=True,
            expose_value=False,
            callback=_set_debug,
            help="Enable debug mode",
        ),
    )
    return cmd


def _set_debug(ctx: click.Context, param, value):
    """
    Configure logging for the flag given at this level.

    The flag is shared through the root context, so `semverstore --debug bump`
    and `semverstore bump --debug` behave the same; an unset flag on a
    subcommand keeps what the group decided.
    """
    meta = ctx.find_root().meta
    if ctx.get_parameter_source(param.name) != ParameterSource.DEFAULT:
        meta[DEBUG_KEY] = value
    debug = meta.setdefault(DEBUG_KEY, False)

    configure_logging(debug)
    return debug
