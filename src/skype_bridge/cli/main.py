"""
Skype bridge CLI — `skype-bridge` command.

Commands:
  skype-bridge config init     Save username, room and display name
  skype-bridge config show     Print the saved settings
  skype-bridge listen          Log in and print messages from the room
  skype-bridge send <message>  Log in and send one message to the room
"""

import asyncio
import json
import logging
import os
from pathlib import Path

try:
    import click
    from rich.console import Console
except ImportError:
    raise SystemExit("CLI requires extras: pip install skype-bridge[cli]")

from skype_bridge.models.config import BridgeConfig

console = Console()
CONFIG_FILE = Path.home() / ".skype-bridge" / "config.json"
PASSWORD_ENV = "SKYPE_BRIDGE_PASSWORD"


def _load_config() -> dict:
    try:
        return json.loads(CONFIG_FILE.read_text())
    except (FileNotFoundError, json.JSONDecodeError):
        return {}


def _save_config(cfg: dict) -> None:
    CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
    CONFIG_FILE.write_text(json.dumps(cfg, indent=2))


def _get_config() -> BridgeConfig:
    cfg = _load_config()
    if not cfg.get("username") or not cfg.get("room"):
        console.print("[red]Not configured. Run `skype-bridge config init` first.[/red]")
        raise SystemExit(1)
    password = os.environ.get(PASSWORD_ENV) or click.prompt("Password", hide_input=True)
    return BridgeConfig(**{**cfg, "password": password})


def _run(coro):
    return asyncio.run(coro)


@click.group()
@click.version_option("0.1.0")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging")
def main(verbose: bool):
    """Skype bridge CLI — relay a Skype group chat."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# Register subcommands from separate modules
from skype_bridge.cli.config import config
from skype_bridge.cli.relay import listen_cmd, send_cmd

main.add_command(config)
main.add_command(listen_cmd)
main.add_command(send_cmd)


if __name__ == "__main__":
    main()
