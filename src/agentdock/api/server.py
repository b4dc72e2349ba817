from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from agentdock import __version__
from agentdock.api.routes import agents, health
from agentdock.application.factory import AgentFactory
from agentdock.application.logging_config import configure_logging
from agentdock.application.settings import AgentDockSettings
from agentdock.core.domain.agent import BaseAgent

logger = structlog.get_logger()


def create_app(
    settings: AgentDockSettings | None = None,
    agents_override: dict[str, BaseAgent] | None = None,
) -> FastAPI:
    """Create and configure FastAPI application.

    Agents are built from the configured profile on startup unless
    ``agents_override`` is given.
    """
    settings = settings or AgentDockSettings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.log_level, json_output=settings.log_json)

        app.state.agents = (
            agents_override
            if agents_override is not None
            else AgentFactory(settings).create_agents()
        )
        await logger.ainfo("api_startup", agents=list(app.state.agents))
        yield
        for agent in app.state.agents.values():
            agent.cleanup()
        await logger.ainfo("api_shutdown")

    app = FastAPI(
        title="agentdock API",
        description="Tool-using agents for GitHub and Slack",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(agents.router, prefix="/api/v1", tags=["agents"])
    app.include_router(health.router, tags=["health"])

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(create_app(), host="0.0.0.0", port=8070)
