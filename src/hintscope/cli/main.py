"""hintscope CLI - hintscope command."""

import click

from hintscope import __version__
from hintscope.cli.hints import hints_command
from hintscope.cli.scopes import scopes_command
from hintscope.cli.utils import cli_logging_config, command_error
from hintscope.config import load_config
from hintscope.core.errors import HintScopeError
from hintscope.core.logging import configure_logging


@click.group()
@click.version_option(version=__version__, prog_name="hintscope")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """hintscope - lexical scope index and completion ranking for JavaScript."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    try:
        config = load_config()
    except HintScopeError as e:
        configure_logging(level="DEBUG" if verbose else "WARNING")
        raise command_error(e) from e
    ctx.obj["config"] = config
    configure_logging(config=cli_logging_config(config.logging, verbose=verbose))


cli.add_command(scopes_command, name="scopes")
cli.add_command(hints_command, name="hints")


if __name__ == "__main__":
    cli()
