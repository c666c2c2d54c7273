"""hintscope scopes command - print the scope tree of a file."""

import json
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.tree import Tree

from hintscope.cli.utils import command_config, command_error
from hintscope.core.errors import HintScopeError
from hintscope.index import Scope, parse_text


def _scope_to_dict(scope: Scope) -> dict[str, Any]:
    return {
        "kind": scope.kind.value,
        "start": scope.range.start,
        "end": scope.range.end,
        "declarations": [d.name for d in scope.declarations],
        "children": [_scope_to_dict(child) for child in scope.children],
    }


def _label(scope: Scope) -> str:
    names = ", ".join(d.name for d in scope.declarations) or "[dim]no declarations[/dim]"
    return f"[cyan]{scope.kind.value}[/cyan] [{scope.range.start}, {scope.range.end}) {names}"


def _render(scope: Scope, branch: Tree) -> None:
    for child in scope.children:
        _render(child, branch.add(_label(child)))


@click.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def scopes_command(ctx: click.Context, file: Path, as_json: bool) -> None:
    """Parse FILE and show its scope tree."""
    config = command_config(ctx)
    text = file.read_text(encoding="utf-8", errors="replace")
    try:
        parsed = parse_text(text, max_retries=config.parser.max_retries)
    except HintScopeError as e:
        raise command_error(e) from e

    root = parsed.tree.root
    if as_json:
        payload = {
            "path": str(file),
            "attempts": parsed.attempts,
            "globals": parsed.globals,
            "scope": _scope_to_dict(root),
        }
        click.echo(json.dumps(payload, indent=2))
        return

    console = Console()
    console.print(f"[bold]{file}[/bold]")
    tree = Tree(_label(root))
    _render(root, tree)
    console.print(tree)
    if parsed.recovered:
        console.print(
            f"[yellow]Recovered after {parsed.attempts} attempts[/yellow] - "
            "some lines were blanked"
        )
