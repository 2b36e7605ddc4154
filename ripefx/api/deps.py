"""
FastAPI dependencies shared across routers.
"""

from fastapi import HTTPException, Request, status

from ripefx.services.rate_service import RateService


async def get_rate_service(request: Request) -> RateService:
    """Return the process-wide RateService created in the app lifespan."""
    service = getattr(request.app.state, "rate_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Rate service is not initialised.",
        )
    return service
