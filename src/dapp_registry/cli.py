"""
DApp Registry CLI - Command-line interface.

Publish, verify, transfer and inspect DApp records from the terminal.
"""

from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from dapp_registry.config import RegistryConfig, build_registry, configure_logging
from dapp_registry.core.exceptions import DappRegistryError, format_exception
from dapp_registry.core.models import DappRecord
from dapp_registry.registry.service import DappRegistry
from dapp_registry.registry.storage import RegistryStore

app = typer.Typer(
    name="dapp-registry",
    help="DApp Registry - publish, verify and transfer DApp records",
    no_args_is_help=True,
)
console = Console()


def _load_config() -> RegistryConfig:
    try:
        config = RegistryConfig.from_env()
    except DappRegistryError as e:
        _print_error(e)
        raise typer.Exit(1)
    configure_logging(config.log_level)
    return config


def _open_registry(config: RegistryConfig) -> DappRegistry:
    """Open an existing registry or exit with an error."""
    if not RegistryStore(config.state_file).exists():
        console.print(
            f"[red]No registry found at {escape(str(config.state_file))}[/red]\n"
            "[yellow]Create one with:[/yellow] dapp-registry init --admin <identity>"
        )
        raise typer.Exit(1)
    try:
        return build_registry(config)
    except DappRegistryError as e:
        _print_error(e)
        raise typer.Exit(1)


def _resolve_caller(caller: str | None, config: RegistryConfig) -> str:
    identity = caller or config.identity
    if not identity:
        console.print(
            "[red]No caller identity given.[/red] Use --as or set DAPP_REGISTRY_IDENTITY."
        )
        raise typer.Exit(1)
    return identity


def _print_error(error: Exception) -> None:
    console.print(f"[red]{escape(format_exception(error))}[/red]")


def _record_panel(record: DappRecord) -> Panel:
    status = "[green]verified[/green]" if record.verified else "[yellow]unverified[/yellow]"
    return Panel.fit(
        f"[bold]{escape(record.name)}[/bold] ({status})\n"
        f"{escape(record.description)}\n\n"
        f"Repository: {escape(record.repo_link)}\n"
        f"Owner: {escape(record.owner)}\n"
        f"Created: {record.created_at}",
        title=f"Record #{record.id}",
    )


@app.command()
def init(
    admin: str = typer.Option(..., "--admin", "-a", help="Admin identity (fixed forever)"),
):
    """Create a new registry with the given admin."""
    config = _load_config()
    if RegistryStore(config.state_file).exists():
        console.print(f"[red]Registry already exists at {escape(str(config.state_file))}[/red]")
        raise typer.Exit(1)

    try:
        registry = build_registry(config, admin=admin)
    except DappRegistryError as e:
        _print_error(e)
        raise typer.Exit(1)

    console.print(
        Panel.fit(
            f"[bold blue]Registry created[/bold blue]\n"
            f"Admin: {escape(registry.admin)}\n"
            f"State: {escape(str(config.state_file))}",
        )
    )


@app.command()
def publish(
    name: str = typer.Argument(..., help="DApp name"),
    description: str = typer.Argument(..., help="DApp description"),
    repo_link: str = typer.Argument(..., help="Source repository link"),
    caller: Optional[str] = typer.Option(None, "--as", help="Caller identity"),
):
    """Publish a new DApp record."""
    config = _load_config()
    identity = _resolve_caller(caller, config)
    registry = _open_registry(config)

    try:
        record_id = registry.publish(name, description, repo_link, caller=identity)
    except DappRegistryError as e:
        _print_error(e)
        raise typer.Exit(1)

    console.print(f"[green]Published record[/green] #{record_id}")


@app.command()
def verify(
    record_id: int = typer.Argument(..., help="Record id"),
    caller: Optional[str] = typer.Option(None, "--as", help="Caller identity"),
):
    """Mark a record as verified (admin only)."""
    config = _load_config()
    identity = _resolve_caller(caller, config)
    registry = _open_registry(config)

    try:
        registry.verify(record_id, caller=identity)
    except DappRegistryError as e:
        _print_error(e)
        raise typer.Exit(1)

    console.print(f"[green]Verified record[/green] #{record_id}")


@app.command()
def transfer(
    record_id: int = typer.Argument(..., help="Record id"),
    new_owner: str = typer.Argument(..., help="Identity of the new owner"),
    caller: Optional[str] = typer.Option(None, "--as", help="Caller identity"),
):
    """Transfer a record to a new owner (current owner only)."""
    config = _load_config()
    identity = _resolve_caller(caller, config)
    registry = _open_registry(config)

    try:
        registry.transfer_ownership(record_id, new_owner, caller=identity)
    except DappRegistryError as e:
        _print_error(e)
        raise typer.Exit(1)

    console.print(f"[green]Transferred record[/green] #{record_id} to {escape(new_owner)}")


@app.command()
def show(
    record_id: int = typer.Argument(..., help="Record id"),
):
    """Show a single record."""
    registry = _open_registry(_load_config())

    try:
        record = registry.get(record_id)
    except DappRegistryError as e:
        _print_error(e)
        raise typer.Exit(1)

    console.print(_record_panel(record))


@app.command("list")
def list_cmd(
    verified: Optional[bool] = typer.Option(
        None, "--verified/--unverified", help="Filter by verification status"
    ),
    owner: Optional[str] = typer.Option(None, "--owner", "-o", help="Filter by owner"),
):
    """List published records."""
    registry = _open_registry(_load_config())
    records = registry.list_records(verified=verified, owner=owner)

    if not records:
        console.print("[yellow]No records found[/yellow]")
        return

    table = Table(title=f"DApp Records ({len(records)})")
    table.add_column("ID", justify="right", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Owner")
    table.add_column("Verified")
    table.add_column("Created", style="dim")

    for summary in (record.to_summary() for record in records):
        table.add_row(
            str(summary["id"]),
            escape(summary["name"]),
            escape(summary["owner"]),
            "[green]yes[/green]" if summary["verified"] else "[yellow]no[/yellow]",
            summary["created_at"][:19],
        )

    console.print(table)


@app.command()
def status():
    """Show registry admin and counts."""
    config = _load_config()
    registry = _open_registry(config)
    stats = registry.stats()

    console.print(Panel.fit("[bold blue]Registry Status[/bold blue]"))
    console.print(f"Admin: {escape(stats['admin'])}")
    console.print(f"Records: {stats['record_count']}")
    console.print(f"Verified: {stats['verified_count']}")
    console.print(f"Owners: {stats['owner_count']}")
    console.print(f"State file: {escape(str(config.state_file))}")


@app.command()
def audit(
    limit: int = typer.Option(20, "--limit", "-n", help="Number of entries to show"),
):
    """Show recent audit entries."""
    from dapp_registry.audit.logger import AuditLogger

    config = _load_config()
    if not config.audit_dir:
        console.print("[yellow]Audit logging is disabled[/yellow]")
        return

    entries = AuditLogger(config.audit_dir).read(limit=limit)
    if not entries:
        console.print("[yellow]No audit entries found[/yellow]")
        return

    table = Table(title=f"Audit Trail ({len(entries)} entries)")
    table.add_column("Time", style="cyan")
    table.add_column("Operation")
    table.add_column("Caller")
    table.add_column("Record", justify="right")
    table.add_column("Result")

    for entry in entries:
        result_style = "green" if entry.result.value == "success" else "red"
        result = f"[{result_style}]{entry.result.value}[/{result_style}]"
        if entry.error_type:
            result += f" {entry.error_type}"
        table.add_row(
            entry.timestamp[:19],
            entry.operation,
            escape(entry.caller) if entry.caller else "-",
            str(entry.record_id) if entry.record_id is not None else "-",
            result,
        )

    console.print(table)


@app.command()
def version():
    """Show DApp Registry version."""
    from dapp_registry import __version__

    console.print(f"DApp Registry v{__version__}")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
