import asyncio
import json

import click

from cardbridge.config.app import BridgeConfig, save_config
from cardbridge.registry.cache import NameCache, get_name_cache
from cardbridge.registry.client import CodecksRegistryClient
from cardbridge.registry.errors import RegistryError


def refresh_name_cache(config: BridgeConfig) -> NameCache:
    """Refresh the shared name cache from the configured registry."""
    settings = config.registry
    if not settings.account or not settings.token:
        raise click.ClickException(
            "Registry account and token are required "
            "(set registry.account/registry.token or CARDBRIDGE_ACCOUNT/CARDBRIDGE_TOKEN)"
        )

    cache = get_name_cache()

    async def run() -> None:
        async with CodecksRegistryClient(
            account=settings.account,
            token=settings.token,
            base_url=settings.base_url,
            timeout=settings.timeout,
        ) as client:
            await cache.refresh(client, timeout=settings.timeout * 3)

    try:
        asyncio.run(run())
    except RegistryError as e:
        raise click.ClickException(f"Registry refresh failed: {e}") from e
    return cache


@click.group()
def registry() -> None:
    """Inspect the name registry cache."""
    pass


@registry.command()
@click.option("--list", "show_list", is_flag=True, help="List cached spaces, decks and users")
@click.pass_context
def refresh(ctx: click.Context, show_list: bool) -> None:
    """Fetch registry data and show cache stats."""
    cache = refresh_name_cache(ctx.obj["config"])
    click.echo(json.dumps(cache.stats(), indent=2))
    if show_list:
        listing = {
            "spaces": cache.list_spaces(),
            "decks": cache.list_decks(),
            "users": cache.list_users(),
        }
        click.echo(json.dumps(listing, indent=2, ensure_ascii=False))


@registry.command()
@click.argument("kind", type=click.Choice(["space", "deck", "user"]))
@click.argument("name")
@click.pass_context
def resolve(ctx: click.Context, kind: str, name: str) -> None:
    """Resolve a space, deck or user name using configured aliases."""
    config: BridgeConfig = ctx.obj["config"]
    cache = refresh_name_cache(config)
    aliases = config.aliases.to_aliases()

    if kind == "space":
        resolved = cache.resolve_space(name, aliases.spaces)
    elif kind == "deck":
        resolved = cache.resolve_deck(name, aliases.decks, aliases.spaces)
    else:
        resolved = cache.resolve_user(name, aliases.users)

    if resolved is None:
        click.echo(f"{kind} not found: {name}")
        ctx.exit(1)
    click.echo(resolved)


@registry.command()
@click.option("--account", required=True, help="Codecks account subdomain")
@click.option("--token", required=True, help="Codecks session token")
@click.option("--base-url", default=None, help="Override the Codecks API URL")
@click.pass_context
def login(ctx: click.Context, account: str, token: str, base_url: str | None) -> None:
    """Check registry credentials and store them in the config file."""
    config: BridgeConfig = ctx.obj["config"]
    config.registry.account = account
    config.registry.token = token
    if base_url:
        config.registry.base_url = base_url

    cache = refresh_name_cache(config)
    save_config(config, ctx.obj.get("config_path"))

    stats = cache.stats()
    click.echo(
        f"Credentials saved. Registry has {stats['spaces']} space(s), "
        f"{stats['decks']} deck(s) and {stats['users']} user name(s)."
    )
