"""CLI: skype-bridge listen, skype-bridge send"""

from typing import Optional

import click
from rich.console import Console
from rich.markup import escape

from skype_bridge.client import SkypeBridge
from skype_bridge.errors import AcquisitionTimeout, TransportError
from skype_bridge.models.message import CanonicalMessage

console = Console()


def _get_config():
    from skype_bridge.cli.main import _get_config
    return _get_config()


def _run(coro):
    from skype_bridge.cli.main import _run
    return _run(coro)


async def _connect(bridge: SkypeBridge) -> None:
    try:
        with console.status("Logging in to Skype..."):
            await bridge.connect()
    except AcquisitionTimeout as e:
        console.print(f"[red]Login failed: {e}[/red]")
        await bridge.close()
        raise SystemExit(1)
    console.print(f"[dim]Connected as {bridge.config.username} ({bridge.ident})[/dim]")


@click.command("listen")
def listen_cmd():
    """Print messages from the configured room until interrupted."""

    def show(message: CanonicalMessage) -> None:
        console.print(f"[green]{escape(message.sender)}:[/green] {escape(message.text)}")

    config = _get_config()

    async def _listen():
        bridge = SkypeBridge(config)
        await _connect(bridge)
        try:
            await bridge.received(show)
        except TransportError as e:
            console.print(f"[red]Lost connection to the gateway: {e}[/red]")
            raise SystemExit(1)
        finally:
            await bridge.close()

    try:
        _run(_listen())
    except KeyboardInterrupt:
        pass


@click.command("send")
@click.argument("message")
@click.option("--user", default=None, help="Attribute the message to this sender")
@click.option("--source", default=None, help="Network the sender is on, e.g. IRC")
def send_cmd(message: str, user: Optional[str], source: Optional[str]):
    """Send a one-shot message to the configured room."""
    config = _get_config()

    async def _send() -> bool:
        bridge = SkypeBridge(config)
        await _connect(bridge)
        try:
            return await bridge.send(message, user=user, source=source)
        finally:
            await bridge.close()

    if _run(_send()):
        console.print("[green]Sent.[/green]")
    else:
        console.print("[red]Send failed, see log.[/red]")
        raise SystemExit(1)
