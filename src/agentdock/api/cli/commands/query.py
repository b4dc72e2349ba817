"""Query command - Send one request to an agent."""

import asyncio

import typer
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from agentdock.api.cli.commands.agents import load_agents
from agentdock.core.domain.errors import FastPathExecutionFailure, ModelCompletionFailure

console = Console()


def parse_context(pairs: list[str] | None) -> dict[str, str]:
    """Turn repeated ``key=value`` options into a dict."""
    context: dict[str, str] = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"Expected key=value, got '{pair}'", param_hint="--context")
        context[key.strip()] = value
    return context


def query_agent(
    ctx: typer.Context,
    agent_name: str = typer.Argument(..., help="Name of the agent to ask"),
    text: str = typer.Argument(..., help="Request in natural language"),
    context: list[str] | None = typer.Option(
        None, "--context", "-c", help="Ambient parameter as key=value (repeatable)"
    ),
    json_output: bool = typer.Option(False, "--json", help="Print the raw outcome as JSON"),
):
    """Send a request to an agent and print its response."""
    ambient = parse_context(context)
    agents = load_agents(ctx)

    agent = agents.get(agent_name)
    if agent is None:
        console.print(f"[red]Agent '{agent_name}' not found.[/red] Available: {', '.join(agents)}")
        raise typer.Exit(1)

    try:
        outcome = asyncio.run(agent.process_query(text, ambient))
    except (ModelCompletionFailure, FastPathExecutionFailure) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    finally:
        for a in agents.values():
            a.cleanup()

    if json_output:
        console.print_json(data={"agent": agent.name, **outcome.to_dict()})
        return

    console.print(Panel(Markdown(outcome.response), title=f"[bold blue]{agent.name}[/bold blue]"))

    if outcome.tool_results:
        table = Table(title="Tool Results")
        table.add_column("Key", style="cyan")
        table.add_column("Success")
        table.add_column("Error", style="red")
        for key, result in outcome.tool_results.items():
            table.add_row(key, "[green]yes[/green]" if result.success else "[red]no[/red]", result.error or "")
        console.print(table)
