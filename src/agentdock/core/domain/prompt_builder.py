"""
Prompt Builder

Renders a registry's tool catalogs into the tool-context block included in
every model prompt.
"""

from collections.abc import Mapping

from agentdock.core.interfaces.tools import ToolProtocol

NO_TOOLS = "No tools available."


def format_action(action_name: str, description: str, parameters: Mapping) -> str:
    lines = [f"* {action_name}: {description or 'No description'}"]
    if parameters:
        lines.append("  Parameters:")
        for param_name, spec in parameters.items():
            required_tag = "[REQUIRED]" if spec.required else "[OPTIONAL]"
            default = f" (default: {spec.default})" if spec.default is not None else ""
            lines.append(
                f"  - {param_name} {required_tag}: {spec.description or 'No description'}{default}"
            )
    return "\n".join(lines)


def build_tools_context(tools: Mapping[str, ToolProtocol]) -> str:
    """
    Build the textual tool catalog for the model.

    Args:
        tools: Registry snapshot (key -> tool)

    Returns:
        One block per tool listing its actions and parameters, or
        NO_TOOLS when the registry is empty.
    """
    if not tools:
        return NO_TOOLS

    blocks = []
    for tool in tools.values():
        lines = [
            f"--- TOOL: {tool.name} ---",
            f"Description: {tool.description or 'No description available'}",
            "",
            "Available actions:",
        ]
        for action in tool.actions():
            lines.append(format_action(action.name, action.description, action.parameters))
            lines.append("")
        blocks.append("\n".join(lines))

    return "\n".join(blocks)
