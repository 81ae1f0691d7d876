"""Health check endpoint."""

from fastapi import APIRouter, Depends, Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.infrastructure.api.dependencies import get_session

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(request: Request, session: AsyncSession = Depends(get_session)):
    """Check API and database connectivity."""
    try:
        result = await session.execute(text("SELECT 1"))
        result.scalar()
        db_status = "connected"
    except Exception as e:
        db_status = f"error: {e}"

    streams = getattr(request.app.state, "streams", None)
    return {
        "status": "ok" if db_status == "connected" else "degraded",
        "database": db_status,
        "active_streams": len(streams) if streams is not None else 0,
        "service": "Rental Helpdesk Support AI",
    }
