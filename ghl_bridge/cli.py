"""GHL Bridge CLI - server launcher and installation inspection."""

import asyncio

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .config import settings

app = typer.Typer(
    name="ghl-bridge",
    help="HighLevel OAuth and webhook bridge",
    no_args_is_help=True,
)
console = Console()

installations_app = typer.Typer(help="Stored installation commands")
app.add_typer(installations_app, name="installations")


@app.command("serve")
def serve(
    port: int = typer.Option(settings.port, "--port", "-p", help="Port to run on"),
    host: str = typer.Option("0.0.0.0", "--host", help="Host to bind to"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
):
    """Run the bridge HTTP server."""
    import uvicorn

    console.print(f"[bold cyan]GHL bridge listening on http://{host}:{port}[/bold cyan]")
    uvicorn.run("ghl_bridge.app:app", host=host, port=port, reload=reload)


@installations_app.command("list")
def installations_list():
    """Show every stored company and location installation."""
    from .deps import build_services

    services = build_services(settings)

    async def _list():
        await services.store.connect()
        try:
            return await services.manager.list_installations()
        finally:
            await services.store.disconnect()

    records = asyncio.run(_list())
    if not records:
        console.print("[yellow]No installations yet. Install the app to create one.[/yellow]")
        return

    table = Table(title="Installations")
    table.add_column("Type", style="cyan")
    table.add_column("Company ID")
    table.add_column("Location ID")
    table.add_column("Scope", overflow="fold")
    table.add_column("Updated", style="dim")

    for record in records:
        table.add_row(
            record.user_type.value,
            record.company_id or "-",
            record.location_id or "-",
            record.scope,
            record.updated_at.isoformat() if record.updated_at else "-",
        )
    console.print(table)


@installations_app.command("refresh")
def installations_refresh(
    resource_id: str = typer.Argument(..., help="Company or location ID"),
):
    """Run one refresh cycle for an installation."""
    from .auth.client import TokenRefresher
    from .deps import build_services
    from .errors import BridgeError

    services = build_services(settings)
    refresher = TokenRefresher(services.manager, services.oauth)

    async def _refresh():
        await services.store.connect()
        try:
            await refresher.refresh(resource_id)
        finally:
            await services.store.disconnect()

    try:
        asyncio.run(_refresh())
    except BridgeError as e:
        console.print(Panel(f"[red]{e.message}[/red]", title="Refresh failed"))
        raise typer.Exit(1)

    console.print(f"[green]Refreshed tokens for {resource_id}[/green]")


if __name__ == "__main__":
    app()
