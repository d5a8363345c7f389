"""CLI: skype-bridge config init|show"""

import click
from rich.console import Console

console = Console()

# Never written to disk.
SECRET_KEYS = {"password"}


def _load_config() -> dict:
    from skype_bridge.cli.main import _load_config
    return _load_config()


def _save_config(cfg: dict) -> None:
    from skype_bridge.cli.main import _save_config
    _save_config(cfg)


@click.group()
def config():
    """Bridge settings."""


@config.command("init")
@click.option("--username", prompt="Skype username")
@click.option("--room", prompt="Conversation id (e.g. 19:abc@thread.skype)")
@click.option("--display-name", default="", help="Name shown on sent messages")
@click.option("--microsoft", is_flag=True, help="Sign in with a Microsoft account")
def config_init(username: str, room: str, display_name: str, microsoft: bool):
    """Save bridge settings. The password is read at run time."""
    cfg = {k: v for k, v in _load_config().items() if k not in SECRET_KEYS}
    cfg.update({
        "username": username,
        "room": room,
        "display_name": display_name or username,
        "microsoft": microsoft,
    })
    _save_config(cfg)
    console.print(f"[green]Saved settings for {username} in {room}[/green]")


@config.command("show")
def config_show():
    """Show saved settings."""
    cfg = _load_config()
    if not cfg:
        console.print("[yellow]Not configured. Run `skype-bridge config init`.[/yellow]")
        return
    for key, value in cfg.items():
        console.print(f"[bold]{key}[/bold]: {value}")
