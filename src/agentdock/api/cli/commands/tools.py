"""Tools command - List and inspect available tools."""

import typer
from rich.console import Console
from rich.table import Table

from agentdock.api.cli.commands.agents import load_agents
from agentdock.core.interfaces.tools import ToolProtocol

app = typer.Typer(help="Tool management")
console = Console()


def collect_tools(ctx: typer.Context) -> dict[str, ToolProtocol]:
    """Tools of all agents by registry key; shared tools appear once."""
    tools: dict[str, ToolProtocol] = {}
    for agent in load_agents(ctx).values():
        for key, tool in agent.registry.snapshot().items():
            tools.setdefault(key, tool)
    return tools


@app.command("list")
def list_tools(ctx: typer.Context):
    """List available tools."""
    table = Table(title="Available Tools")
    table.add_column("Key", style="cyan")
    table.add_column("Name", style="cyan")
    table.add_column("Kind", style="magenta")
    table.add_column("Actions", justify="right")
    table.add_column("Description", style="white")

    for key, tool in collect_tools(ctx).items():
        table.add_row(key, tool.name, tool.kind, str(len(tool.actions())), tool.description)

    console.print(table)


@app.command("inspect")
def inspect_tool(
    ctx: typer.Context,
    tool_name: str = typer.Argument(..., help="Tool key or name to inspect"),
):
    """Inspect tool details and action catalog."""
    tools = collect_tools(ctx)
    tool = tools.get(tool_name) or next(
        (t for t in tools.values() if t.name.lower() == tool_name.lower()), None
    )

    if not tool:
        console.print(f"[red]Tool '{tool_name}' not found[/red]")
        raise typer.Exit(1)

    console.print(f"\n[bold cyan]{tool.name}[/bold cyan] ({tool.kind})")
    console.print(f"{tool.description}\n")

    console.print("[bold]Actions:[/bold]")
    console.print_json(data=[action.to_dict() for action in tool.actions()])
