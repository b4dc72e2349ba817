from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """Liveness probe with the number of loaded agents."""
    agents = getattr(request.app.state, "agents", {})
    return {"status": "healthy", "agents": len(agents)}
