"""Agents command - List configured agents."""

import typer
from rich.console import Console
from rich.table import Table

from agentdock.application.factory import AgentFactory
from agentdock.application.settings import AgentDockSettings
from agentdock.core.domain.agent import BaseAgent
from agentdock.core.domain.errors import ConfigurationError

app = typer.Typer(help="Agent management")
console = Console()


def load_agents(ctx: typer.Context) -> dict[str, BaseAgent]:
    """Build the agents of the profile selected by the global options."""
    options = ctx.obj or {}
    settings = AgentDockSettings()
    try:
        return AgentFactory(settings).create_agents(options.get("profile"))
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(1)


@app.command("list")
def list_agents(ctx: typer.Context):
    """List agents of the active profile."""
    agents = load_agents(ctx)

    table = Table(title="Configured Agents")
    table.add_column("Name", style="cyan")
    table.add_column("Kind", style="magenta")
    table.add_column("Tools", style="white")
    table.add_column("Fast-path intents", style="green")

    for agent in agents.values():
        info = agent.describe()
        table.add_row(
            info["name"],
            info["kind"],
            ", ".join(info["tools"]) or "-",
            ", ".join(info["intents"]) or "-",
        )

    console.print(table)
