"""
gitsync CLI - serve command.

Runs the HTTP API with uvicorn.
"""

import logging

import typer
import uvicorn
from rich.console import Console

from gitsync.core.config import load_config

console = Console()
app = typer.Typer(
    name="serve",
    help="Run the HTTP API server",
    no_args_is_help=False,
)


@app.callback(invoke_without_command=True)
def serve(
    ctx: typer.Context,
    host: str | None = typer.Option(
        None,
        "--host",
        help="Interface to bind (default from config: 127.0.0.1)",
    ),
    port: int | None = typer.Option(
        None,
        "--port",
        "-p",
        help="Port to listen on (default from config: 8080)",
    ),
) -> None:
    """
    Start the gitsync HTTP API.

    Endpoints are served under /api/v1/git, with /health for probes and
    /docs for the OpenAPI UI.

    Examples:
        gitsync serve                    # 127.0.0.1:8080
        gitsync serve --host 0.0.0.0 -p 9000
    """
    if ctx.invoked_subcommand is not None:
        return

    debug = ctx.obj.get("debug", False) if ctx.obj else False
    config = load_config()
    bind_host = host or config.server.host
    bind_port = port or config.server.port

    url = f"http://{bind_host}:{bind_port}"
    console.print("[bold cyan]Starting gitsync API server...[/bold cyan]")
    console.print(f"[dim]API: {url}/api/v1/git[/dim]")
    console.print(f"[dim]Docs: {url}/docs[/dim]")
    console.print("\n[dim]Press Ctrl+C to stop[/dim]\n")

    if debug:
        logging.getLogger("gitsync").setLevel(logging.DEBUG)

    try:
        # Blocks until interrupted
        uvicorn.run(
            "gitsync.core.api.app:app",
            host=bind_host,
            port=bind_port,
            log_level="debug" if debug else "info",
        )
    except KeyboardInterrupt:
        console.print("\n[yellow]Server stopped[/yellow]")
        raise typer.Exit(0)
