from typing import Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field

from agentdock.core.domain.agent import BaseAgent
from agentdock.core.domain.errors import FastPathExecutionFailure, ModelCompletionFailure

router = APIRouter()
logger = structlog.get_logger()


class QueryRequest(BaseModel):
    """Request to an agent."""
    query: str = Field(..., min_length=1)
    context: dict[str, Any] | None = None
    """Ambient parameters; they fill tag parameters the model left out."""


class ToolResultModel(BaseModel):
    success: bool
    data: Any = None
    error: str | None = None


class QueryResponse(BaseModel):
    """Rewritten response and the results of every executed action."""
    agent: str
    response: str
    tool_results: dict[str, ToolResultModel]


class AgentInfo(BaseModel):
    name: str
    kind: str
    description: str
    tools: list[str]
    intents: list[str]


def get_agents(request: Request) -> dict[str, BaseAgent]:
    return request.app.state.agents


@router.get("/agents", response_model=list[AgentInfo])
async def list_agents(agents: dict[str, BaseAgent] = Depends(get_agents)):
    """List configured agents."""
    return [AgentInfo(**agent.describe()) for agent in agents.values()]


@router.post("/agents/{name}/query", response_model=QueryResponse)
async def query_agent(
    name: str,
    request: QueryRequest,
    agents: dict[str, BaseAgent] = Depends(get_agents),
):
    """Answer a query with the named agent.

    Per-action failures are reported inline in the response text. A failed
    model completion turns into 502 and a timed-out fast-path call into 504.
    """
    agent = agents.get(name)
    if agent is None:
        raise HTTPException(status_code=404, detail=f"Agent '{name}' not found")

    try:
        outcome = await agent.process_query(request.query, request.context)
    except ModelCompletionFailure as e:
        logger.error("query_failed", component="api", agent=name, error=str(e))
        raise HTTPException(status_code=502, detail=str(e))
    except FastPathExecutionFailure as e:
        logger.error("query_timed_out", component="api", agent=name, error=str(e))
        raise HTTPException(status_code=504, detail=str(e))

    return QueryResponse(
        agent=agent.name,
        response=outcome.response,
        tool_results={key: ToolResultModel(**result.to_dict()) for key, result in outcome.tool_results.items()},
    )
