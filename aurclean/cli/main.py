"""aurclean CLI"""

import click

from aurclean import __version__
from aurclean.cli.clean import after, builds, clean, deps, untracked
from aurclean.cli.utils.logging import debug_option


@click.group()
@click.version_option(__version__, prog_name="aurclean")
@debug_option
@click.pass_context
def cli(ctx):
    """
    Clean up the AUR build cache.
    """
    ctx.ensure_object(dict)


cli.add_command(clean)
cli.add_command(untracked)
cli.add_command(after)
cli.add_command(builds)
cli.add_command(deps)

if __name__ == "__main__":
    cli(obj={})
