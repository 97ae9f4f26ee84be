"""CLI commands for dashproxy.

The CLI is the single entry point: ``init`` writes a default config,
``serve`` runs the HTTP API, ``call`` performs one proxied call locally, and
``widgets`` / ``services`` / ``status`` inspect the configuration.
"""

import asyncio
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from dashproxy import __logo__, __version__
from dashproxy.cli.shared.logging_utils import configure_logging
from dashproxy.cli.shared.network_utils import is_port_in_use, local_base_url

app = typer.Typer(
    name="dashproxy",
    help=f"{__logo__} dashproxy - JSON-RPC proxy for dashboard widgets",
    no_args_is_help=True,
)

console = Console()

ConfigOption = typer.Option(None, "--config", "-c", help="Path to config.json (default: ~/.dashproxy/config.json)")


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"{__logo__} dashproxy v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(None, "--version", "-v", callback=_version_callback, is_eager=True),
):
    """dashproxy - JSON-RPC proxy for dashboard widgets."""


def _load(config_path: Path | None):
    from dashproxy.config.access import get_config

    try:
        return get_config(config_path=config_path)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)


# ============================================================================
# Setup
# ============================================================================


@app.command()
def init(config_path: Path | None = ConfigOption):
    """Create a default configuration file."""
    from dashproxy.config.access import resolve_config_path
    from dashproxy.config.loader import save_config
    from dashproxy.config.schema import Config

    path = resolve_config_path(config_path)
    if path.exists() and not typer.confirm(f"Config already exists at {path}. Overwrite with defaults?"):
        console.print(f"[yellow]Kept existing config at {path}[/yellow]")
        return
    save_config(Config(), path)
    console.print(f"[green]✓[/green] Created config at {path}")
    console.print("Add services under [cyan]services.<group>.<name>.widget[/cyan], then run [cyan]dashproxy serve[/cyan].")


# ============================================================================
# Server
# ============================================================================


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", help="Bind address (default: server.host)"),
    port: int | None = typer.Option(None, "--port", "-p", help="Port (default: server.port)"),
    config_path: Path | None = ConfigOption,
):
    """Run the proxy HTTP API."""
    from dashproxy.api.server import run_server

    config = _load(config_path)
    log_file = configure_logging(config.logging.level, to_file=config.logging.file, name="serve")
    bind_host = host or config.server.host
    bind_port = port or config.server.port
    if is_port_in_use(bind_host, bind_port):
        console.print(
            f"[red]Port {bind_port} is already in use.[/red] "
            f"Stop the other process or pass [cyan]--port[/cyan] (current: {bind_host}:{bind_port})."
        )
        raise typer.Exit(1)

    console.print(f"{__logo__} Starting dashproxy on {local_base_url(bind_host, bind_port)}/")
    console.print(f"[green]✓[/green] Proxy route: GET /api/services/proxy?group=&service=&endpoint=")
    if log_file:
        console.print(f"[dim]Logs: {log_file}[/dim]")
    if not config.server.api_token:
        console.print("[yellow]Warning: server.apiToken is empty; /api is unauthenticated[/yellow]")
    run_server(config, host=bind_host, port=bind_port)


@app.command()
def call(
    group: str = typer.Argument(..., help="Service group"),
    service: str = typer.Argument(..., help="Service name within the group"),
    endpoint: str = typer.Argument(..., help="JSON-RPC method to invoke"),
    config_path: Path | None = ConfigOption,
):
    """Invoke one widget API method through the proxy and print the envelope."""
    from dashproxy.proxy.handler import jsonrpc_proxy_handler
    from dashproxy.proxy.transport import HttpTransport
    from dashproxy.services.resolver import ServiceResolver

    config = _load(config_path)
    configure_logging(config.logging.level)
    response = asyncio.run(
        jsonrpc_proxy_handler(
            group=group,
            service=service,
            endpoint=endpoint,
            resolver=ServiceResolver.from_config(config),
            transport=HttpTransport.from_config(config),
        )
    )
    style = "green" if response.status_code == 200 and "error" not in response.json() else "red"
    console.print(f"[{style}]HTTP {response.status_code}[/{style}]")
    console.print_json(data=response.json(), ensure_ascii=False)
    if response.status_code != 200:
        raise typer.Exit(1)


# ============================================================================
# Inspection
# ============================================================================


@app.command()
def widgets(config_path: Path | None = ConfigOption):
    """List widget types and their API templates."""
    from dashproxy.widgets.registry import build_widget_registry

    registry = build_widget_registry(_load(config_path))
    table = Table(title="Widget types")
    table.add_column("Type", style="cyan")
    table.add_column("API template")
    table.add_column("API calls")
    for capability in registry.capabilities():
        table.add_row(
            capability.widget_type,
            capability.api or "[dim]-[/dim]",
            "[green]✓[/green]" if capability.supports_api else "[red]✗[/red]",
        )
    console.print(table)


@app.command()
def services(config_path: Path | None = ConfigOption):
    """List configured services and whether their widget accepts API calls."""
    from dashproxy.widgets.registry import build_widget_registry

    config = _load(config_path)
    registry = build_widget_registry(config)
    rows = list(config.iter_services())
    if not rows:
        console.print("No services configured.")
        return
    table = Table(title="Services")
    table.add_column("Group", style="cyan")
    table.add_column("Service")
    table.add_column("Widget")
    table.add_column("API calls")
    for group, name, entry in rows:
        widget_type = entry.widget.type if entry.widget else ""
        supported = bool(widget_type) and registry.has_api_support(widget_type)
        table.add_row(group, name, widget_type or "[dim]-[/dim]", "[green]✓[/green]" if supported else "[red]✗[/red]")
    console.print(table)


@app.command()
def status(config_path: Path | None = ConfigOption):
    """Show dashproxy status."""
    from dashproxy.config.access import resolve_config_path

    path = resolve_config_path(config_path)
    config = _load(config_path)
    console.print(f"{__logo__} dashproxy Status\n")
    console.print(f"Config: {path} {'[green]✓[/green]' if path.exists() else '[red]✗[/red]'}")
    console.print(f"Server: {local_base_url(config.server.host, config.server.port)}")
    console.print(f"API token: {'[green]set[/green]' if config.server.api_token else '[dim]not set[/dim]'}")
    console.print(f"Services: {sum(1 for _ in config.iter_services())}")
    console.print(f"Widget overrides: {len(config.widgets)}")


if __name__ == "__main__":
    app()
