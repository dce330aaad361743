"""semverstore CLI"""

import click

from semverstore import __version__
from semverstore.cli.commands import bump, check, get, set_version

from .debug import add_debug_option


@click.group()
@click.version_option(__version__, prog_name="semverstore")
@click.pass_context
def cli(ctx):
    """
    Keep a semantic version in S3, git or GCS and bump it safely.
    """
    ctx.ensure_object(dict)


cli.add_command(check)
cli.add_command(get)
cli.add_command(bump)
cli.add_command(set_version)

add_debug_option(cli)

if __name__ == "__main__":
    cli(obj={})
