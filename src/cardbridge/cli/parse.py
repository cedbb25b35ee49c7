import json
from typing import Any

import click

from cardbridge.cards.formatter import format_card_body
from cardbridge.cards.requests import build_card_requests
from cardbridge.config.app import BridgeConfig
from cardbridge.parsing.message import parse_message

from .registry import refresh_name_cache


def _load_blocks(path: str | None) -> list[dict[str, Any]] | None:
    if path is None:
        return None
    with open(path) as f:
        data = json.load(f)
    # Accept a bare block list or a full message/event payload
    if isinstance(data, dict):
        data = data.get("blocks") or data.get("event", {}).get("blocks")
    if not isinstance(data, list):
        raise click.BadParameter("expected a list of blocks", param_hint="--blocks")
    return data


@click.command()
@click.argument("message_file", type=click.File("r"), default="-")
@click.option(
    "--blocks",
    "blocks_file",
    type=click.Path(exists=True, dir_okay=False),
    help="JSON file with the message's rich text blocks",
)
@click.option("--json", "as_json", is_flag=True, help="Print tasks as JSON")
@click.option(
    "--resolve",
    is_flag=True,
    help="Refresh the registry and print the card requests as JSON",
)
@click.pass_context
def parse(
    ctx: click.Context,
    message_file: Any,
    blocks_file: str | None,
    as_json: bool,
    resolve: bool,
) -> None:
    """Parse a chat message and show the tasks it would create."""
    text = message_file.read()
    result = parse_message(text, _load_blocks(blocks_file))

    if resolve:
        config: BridgeConfig = ctx.obj["config"]
        cache = refresh_name_cache(config)
        requests = build_card_requests(
            result.tasks,
            cache,
            aliases=config.aliases.to_aliases(),
            default_deck=config.cards.default_deck,
            default_priority=config.cards.default_priority,
        )
        click.echo(
            json.dumps([request.to_dict() for request in requests], indent=2, ensure_ascii=False)
        )
        return

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        return

    if not result.tasks:
        click.echo("No tasks found.")
        return

    click.echo(f"Found {len(result.tasks)} task(s) via {result.source} parser:")
    for index, task in enumerate(result.tasks, start=1):
        assignee = task.assignee_name or "unassigned"
        deck = task.deck_path or "default deck"
        click.echo(f"\n#{index} {task.title}  [{assignee} -> {deck}]")
        for line in format_card_body(task).split("\n")[1:]:
            click.echo(f"    {line}")
