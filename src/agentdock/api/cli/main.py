"""agentdock CLI entry point."""

import typer
from rich.console import Console

from agentdock.api.cli.commands import agents, query, tools
from agentdock.application.logging_config import configure_logging
from agentdock.application.settings import AgentDockSettings

app = typer.Typer(
    name="agentdock",
    help="agentdock - tool-using agents for GitHub and Slack",
    add_completion=True,
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()

app.command("query")(query.query_agent)
app.add_typer(agents.app, name="agents", help="Agent management")
app.add_typer(tools.app, name="tools", help="Tool management")


@app.callback()
def main(
    ctx: typer.Context,
    profile: str | None = typer.Option(None, "--profile", "-p", help="Configuration profile"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
):
    """agentdock CLI."""
    settings = AgentDockSettings()
    configure_logging("DEBUG" if debug else "WARNING", json_output=settings.log_json)
    # Store global options in context for subcommands
    ctx.obj = {"profile": profile, "debug": debug}


@app.command()
def version():
    """Show agentdock version."""
    from agentdock import __version__

    console.print(f"[bold blue]agentdock[/bold blue] version [cyan]{__version__}[/cyan]")


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Bind address"),
    port: int = typer.Option(8070, help="Port"),
):
    """Run the HTTP API."""
    import uvicorn

    from agentdock.api.server import create_app

    uvicorn.run(create_app(), host=host, port=port)


if __name__ == "__main__":
    app()
