"""
pogo-rpc CLI: `pogo` command.

Commands:
  pogo auth set-token         Store a provider token obtained elsewhere
  pogo config show|set        Inspect or change saved settings
  pogo init                   Run the bootstrap call, show the negotiated endpoint
  pogo call <operation>       Send one argument-less operation and print the result
"""

import asyncio
import importlib
import json
import logging
from pathlib import Path
from typing import Any, Optional

try:
    import click
    from rich.console import Console
    from rich.logging import RichHandler
except ImportError:
    raise SystemExit("CLI requires extras: pip install pogo-rpc[cli]")

from pogo_rpc.client import AsyncPogoClient
from pogo_rpc.config import ClientOptions, RetryPolicy
from pogo_rpc.signature import SignatureProvider

console = Console()
CONFIG_FILE = Path.home() / ".pogo" / "config.json"

# Keys `pogo config set` accepts, with the type their value is parsed as.
CONFIG_KEYS: dict[str, type] = {
    "endpoint": str,
    "proxy": str,
    "signer": str,
    "latitude": float,
    "longitude": float,
    "altitude": float,
    "max_tries": int,
    "timeout": float,
}


def _load_config() -> dict:
    try:
        return json.loads(CONFIG_FILE.read_text())
    except (FileNotFoundError, json.JSONDecodeError):
        return {}


def _save_config(cfg: dict) -> None:
    CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
    CONFIG_FILE.write_text(json.dumps(cfg, indent=2))


def _load_signer(path: str) -> SignatureProvider:
    """Load a signature provider from 'package.module:attribute'.

    A class or factory is called without arguments.
    """
    module_name, _, attr = path.partition(":")
    if not attr:
        raise click.BadParameter(f"expected module:attribute, got {path!r}", param_hint="signer")
    obj: Any = getattr(importlib.import_module(module_name), attr)
    if isinstance(obj, type) or (callable(obj) and not hasattr(obj, "sign")):
        obj = obj()
    if not isinstance(obj, SignatureProvider):
        raise click.BadParameter(f"{path} is not a signature provider", param_hint="signer")
    return obj


def _get_client() -> AsyncPogoClient:
    cfg = _load_config()
    if not cfg.get("auth_token") or not cfg.get("auth_provider"):
        console.print("[red]No auth token. Run `pogo auth set-token` first.[/red]")
        raise SystemExit(1)

    options: dict[str, Any] = {}
    if cfg.get("endpoint"):
        options["endpoint"] = cfg["endpoint"]
    if cfg.get("proxy"):
        options["proxy"] = cfg["proxy"]
    if cfg.get("timeout"):
        options["timeout"] = cfg["timeout"]
    if cfg.get("max_tries"):
        options["retry"] = RetryPolicy(max_tries=cfg["max_tries"])

    signer: Optional[SignatureProvider] = _load_signer(cfg["signer"]) if cfg.get("signer") else None
    client = AsyncPogoClient(ClientOptions(**options), signer=signer)
    client.set_auth_info(cfg["auth_provider"], cfg["auth_token"])
    if cfg.get("latitude") is not None and cfg.get("longitude") is not None:
        client.set_position(cfg["latitude"], cfg["longitude"], altitude=cfg.get("altitude", 0.0))
    return client


def _run(coro):
    return asyncio.run(coro)


@click.group()
@click.version_option("0.1.0")
@click.option("-v", "--verbose", is_flag=True, help="Log envelopes, retries and redirects")
def main(verbose: bool):
    """pogo-rpc CLI: talk to the game's RPC endpoint."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )


@main.group("config")
def config_group():
    """Saved settings."""


@config_group.command("show")
def config_show():
    """Print the saved settings (token redacted)."""
    cfg = _load_config()
    if cfg.get("auth_token"):
        cfg["auth_token"] = cfg["auth_token"][:8] + "…"
    console.print_json(json.dumps(cfg))


@config_group.command("set")
@click.argument("key", type=click.Choice(sorted(CONFIG_KEYS)))
@click.argument("value")
def config_set(key: str, value: str):
    """Save a setting."""
    try:
        parsed = CONFIG_KEYS[key](value)
    except ValueError:
        raise click.BadParameter(f"{value!r} is not a valid {CONFIG_KEYS[key].__name__}", param_hint=key)
    _save_config({**_load_config(), key: parsed})
    console.print(f"[green]{key} = {parsed}[/green]")


# Register subcommands from separate modules
from pogo_rpc.cli.auth import auth
from pogo_rpc.cli.rpc import call_cmd, init_cmd

main.add_command(auth)
main.add_command(init_cmd)
main.add_command(call_cmd)


if __name__ == "__main__":
    main()
