"""auenc CLI - Local encrypted secret store."""

import dataclasses
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, NoReturn, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

if TYPE_CHECKING:
    from ..vault import VaultManager

app = typer.Typer(
    name="auenc",
    help="Password-protected local vaults for credentials.",
    no_args_is_help=True,
)

console = Console()


@dataclasses.dataclass
class CLIState:
    """Options shared by all commands."""

    vaults_dir: Optional[Path] = None
    manager: Optional["VaultManager"] = None


def _fail(message: str) -> NoReturn:
    console.print(f"[red]Error: {escape(message)}[/red]")
    raise typer.Exit(1)


def _get_manager(ctx: typer.Context):
    """Build the VaultManager from the environment on first use."""
    from ..vault import ConfigurationError, VaultConfig, VaultManager

    state: CLIState = ctx.obj
    if state.manager is None:
        try:
            config = VaultConfig.from_env()
        except ConfigurationError as e:
            console.print(f"[red]Error: {escape(str(e))}[/red]")
            console.print("Set the AUENC_* variables in the environment or a .env file.")
            raise typer.Exit(1)

        if state.vaults_dir is not None:
            config = dataclasses.replace(config, vaults_dir=state.vaults_dir)
        state.manager = VaultManager(config)
    return state.manager


@app.callback()
def callback(
    ctx: typer.Context,
    vaults_dir: Optional[Path] = typer.Option(
        None,
        "--vaults-dir", "-d",
        help="Vaults directory (default: AUENC_VAULTS_DIR)",
    ),
    log_level: str = typer.Option(
        "WARNING",
        "--log-level",
        envvar="AUENC_LOG_LEVEL",
        help="Log level (DEBUG, INFO, WARNING, ERROR)",
    ),
):
    """Password-protected local vaults for credentials."""
    from dotenv import load_dotenv

    from ..utils.logging import setup_logging

    load_dotenv()
    try:
        setup_logging(log_level)
    except ValueError as e:
        _fail(str(e))

    ctx.obj = CLIState(vaults_dir=vaults_dir)


@app.command()
def create(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Vault name (without extension)"),
    password: str = typer.Option(
        ...,
        "--password", "-p",
        prompt="Set a master password for your vault",
        hide_input=True,
        confirmation_prompt=True,
        help="Master password",
    ),
):
    """
    Create a new empty vault.
    """
    from ..vault import VaultError

    vm = _get_manager(ctx)
    try:
        session = vm.create(name, password)
    except VaultError as e:
        _fail(str(e))

    session.close()
    console.print(f"[green]New vault created:[/green] {escape(str(session.path))}")


@app.command("list")
def list_vaults(ctx: typer.Context):
    """
    List vault files in the vaults directory.
    """
    from ..vault import VaultError

    vm = _get_manager(ctx)
    try:
        vaults = vm.list_vaults()
    except VaultError as e:
        _fail(str(e))

    if not vaults:
        console.print(f"No vault files found in {vm.vaults_dir}", markup=False)
        return

    table = Table(title=Text(f"Vaults in {vm.vaults_dir}"))
    table.add_column("Name", style="cyan")
    table.add_column("Size", justify="right")
    table.add_column("Modified")

    suffix = vm.config.file_suffix
    for path in vaults:
        stat = path.stat()
        table.add_row(
            Text(path.name[: -len(suffix)]),
            f"{stat.st_size} B",
            datetime.fromtimestamp(stat.st_mtime).strftime("%Y-%m-%d %H:%M"),
        )

    console.print(table)


@app.command()
def entries(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Vault name"),
    password: str = typer.Option(
        ...,
        "--password", "-p",
        prompt="Enter your master password",
        hide_input=True,
        help="Master password",
    ),
    show_passwords: bool = typer.Option(
        False,
        "--show-passwords",
        help="Print entry passwords instead of masking them",
    ),
):
    """
    Open a vault and list its entries.
    """
    from ..vault import VaultError

    vm = _get_manager(ctx)
    try:
        session = vm.open(name, password)
    except VaultError as e:
        _fail(str(e))

    with session:
        console.print(f"Vault opened, entries count: {len(session.entries)}")
        if not session.entries:
            return

        table = Table(title=Text(name))
        table.add_column("#", justify="right")
        table.add_column("Type")
        table.add_column("URL", style="cyan")
        table.add_column("Username")
        table.add_column("Password")

        for i, entry in enumerate(session.entries, 1):
            table.add_row(
                str(i),
                Text(entry.type),
                Text(entry.url),
                Text(entry.username),
                Text(entry.password) if show_passwords else "********",
            )

        console.print(table)


@app.command()
def add(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Vault name"),
    url: str = typer.Option(..., "--url", prompt="URL", help="Entry URL"),
    username: str = typer.Option(..., "--username", "-u", prompt="Username", help="Entry username"),
    entry_password: str = typer.Option(
        ...,
        "--entry-password",
        prompt="Password",
        hide_input=True,
        help="Entry password",
    ),
    password: str = typer.Option(
        ...,
        "--password", "-p",
        prompt="Enter your master password",
        hide_input=True,
        help="Master password",
    ),
):
    """
    Add a password entry to a vault and save it.
    """
    from ..vault import Entry, VaultError

    vm = _get_manager(ctx)
    try:
        with vm.open(name, password) as session:
            session.add_entry(Entry(url=url, username=username, password=entry_password))
            session.save(password)
    except VaultError as e:
        _fail(str(e))

    console.print("[green]Entry added and vault saved.[/green]")


@app.command()
def version():
    """Show version information."""
    from .. import __version__

    console.print(f"auenc v{__version__}")
    console.print("Local encrypted secret store")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
