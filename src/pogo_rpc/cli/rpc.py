"""CLI: pogo init | pogo call <operation>"""

import json
from typing import Any

import betterproto
import click
from rich.console import Console
from rich.table import Table

from pogo_rpc.errors import PogoError
from pogo_rpc.models.request_types import OPERATIONS, RequestType, display_name, request_type_for

console = Console()


def _get_client():
    from pogo_rpc.cli.main import _get_client
    return _get_client()


def _run(coro):
    from pogo_rpc.cli.main import _run
    return _run(coro)


def _render(value: Any) -> Any:
    if isinstance(value, betterproto.Message):
        return value.to_dict()
    if isinstance(value, (bytes, bytearray)):
        return {"raw": bytes(value).hex(), "length": len(value)}
    return value


@click.command("init")
def init_cmd():
    """Run the bootstrap call and show the endpoint the server assigned."""

    async def _init():
        async with _get_client() as client:
            try:
                with console.status("Bootstrapping session..."):
                    responses = await client.init()
            except PogoError as e:
                console.print(f"[red]{e}[/red]")
                raise SystemExit(1)

            table = Table(title="Session")
            table.add_column("Key", style="bold")
            table.add_column("Value")
            table.add_row("Endpoint", client.endpoint)
            table.add_row("Auth ticket", "yes" if client.session.auth_ticket is not None else "no")
            min_delay = client.session.min_delays.get(RequestType.GET_MAP_OBJECTS)
            table.add_row("Map objects min delay", f"{min_delay:.1f}s" if min_delay is not None else "-")
            table.add_row("Responses", str(len(responses)))
            console.print(table)

    _run(_init())


@click.command("call")
@click.argument("operation", type=click.Choice(sorted(OPERATIONS), case_sensitive=False))
@click.option("--json-output", "--json", is_flag=True)
def call_cmd(operation: str, json_output: bool):
    """Bootstrap, then send one operation that takes no arguments."""

    async def _call():
        async with _get_client() as client:
            request_type = request_type_for(operation)
            try:
                with console.status("Bootstrapping session..."):
                    await client.init()
                with console.status(f"Calling {display_name(request_type)}..."):
                    result = await client.call([client.catalog.request(request_type)])
            except PogoError as e:
                console.print(f"[red]{e}[/red]")
                raise SystemExit(1)

            if json_output:
                click.echo(json.dumps(_render(result), indent=2, default=str))
                return
            console.print(f"[bold]{display_name(request_type)}[/bold]")
            console.print(_render(result))

    _run(_call())
