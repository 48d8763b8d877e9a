"""CLI: pogo auth set-token|status|logout"""

import click
from rich.console import Console

from pogo_rpc.auth import PROVIDER_GOOGLE, PROVIDER_PTC

console = Console()


def _load_config() -> dict:
    from pogo_rpc.cli.main import _load_config
    return _load_config()


def _save_config(cfg: dict) -> None:
    from pogo_rpc.cli.main import _save_config
    _save_config(cfg)


@click.group()
def auth():
    """Authentication commands."""


@auth.command("set-token")
@click.option("--provider", type=click.Choice([PROVIDER_PTC, PROVIDER_GOOGLE]), default=PROVIDER_PTC)
@click.option("--token", prompt=True, hide_input=True, help="Bearer token from the identity provider")
def auth_set_token(provider: str, token: str):
    """Store an identity provider token for later calls."""
    _save_config({**_load_config(), "auth_provider": provider, "auth_token": token})
    console.print(f"[green]Saved {provider} token.[/green]")
    console.print("[dim]Token saved to ~/.pogo/config.json[/dim]")


@auth.command("status")
def auth_status():
    """Show current auth status."""
    cfg = _load_config()
    if cfg.get("auth_token"):
        console.print(f"[green]Token stored[/green] for provider {cfg.get('auth_provider', 'unknown')}")
    else:
        console.print("[yellow]No token stored. Run `pogo auth set-token`.[/yellow]")


@auth.command("logout")
def auth_logout():
    """Forget the stored token."""
    cfg = _load_config()
    cfg.pop("auth_token", None)
    cfg.pop("auth_provider", None)
    _save_config(cfg)
    console.print("[green]Logged out.[/green]")
