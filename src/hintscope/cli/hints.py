"""hintscope hints command - ranked completions at an offset."""

import asyncio
import json
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from hintscope.cli.utils import command_config, command_error
from hintscope.config import HintScopeConfig
from hintscope.core.errors import HintScopeError
from hintscope.hints import HintSession
from hintscope.index import FileSystemSource, HintToken, ScopeCoordinator, ScopeInfo


async def _lookup(path: str, offset: int, config: HintScopeConfig) -> ScopeInfo:
    async with ScopeCoordinator(FileSystemSource(), config) as coordinator:
        coordinator.refresh_directory(path)
        await coordinator.wait_idle()
        result = coordinator.get_inner_scope(path, offset)
        if isinstance(result, asyncio.Future):
            return await result
        return result


def _make_table(hints: list[HintToken]) -> Table:
    table = Table(show_header=True, box=None, padding=(0, 1), pad_edge=False)
    table.add_column("hint", style="cyan")
    table.add_column("kind")
    table.add_column("level", justify="right")
    table.add_column("origin", style="dim")
    for hint in hints:
        table.add_row(
            hint.value,
            hint.kind.value,
            "" if hint.level is None else str(hint.level),
            hint.path or "",
        )
    return table


@click.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--offset", type=click.IntRange(min=0), required=True, help="Cursor offset")
@click.option("--prefix", default="", help="Text typed so far")
@click.option("--property", "property_lookup", is_flag=True, help="Complete a property")
@click.option("--context", default=None, help="Object name before the dot")
@click.option("--limit", type=click.IntRange(min=1), default=None, help="Maximum hints")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def hints_command(
    ctx: click.Context,
    file: Path,
    offset: int,
    prefix: str,
    property_lookup: bool,
    context: str | None,
    limit: int | None,
    as_json: bool,
) -> None:
    """Rank completions for FILE at OFFSET.

    Sibling JavaScript files in the same directory contribute properties.
    """
    config = command_config(ctx)
    path = str(file.resolve())
    try:
        info = asyncio.run(_lookup(path, offset, config))
    except HintScopeError as e:
        raise command_error(e) from e

    session = HintSession(path, max_results=limit or config.hints.max_results)
    session.set_scope_info(info)
    hints = session.get_hints(offset, prefix, property_lookup=property_lookup, context=context)

    if as_json:
        payload = [
            {"value": h.value, "kind": h.kind.value, "level": h.level, "path": h.path}
            for h in hints
        ]
        click.echo(json.dumps({"degraded": info.degraded, "hints": payload}, indent=2))
        return

    console = Console()
    if info.degraded:
        console.print("[yellow]File could not be parsed[/yellow] - keywords only")
    if not hints:
        console.print("[dim]No hints[/dim]")
        return
    console.print(_make_table(hints))
