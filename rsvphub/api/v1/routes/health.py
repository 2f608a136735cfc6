from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Dict
from rsvphub.core.logging import logger
from rsvphub.db.session import get_session

router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=Dict[str, str])
async def health_check(session: AsyncSession = Depends(get_session)):
    """
    Liveness plus a round-trip to the RSVP store.
    
    Returns:
        Dict with overall status and database status
    """
    try:
        await session.execute(text("SELECT 1"))
        database = "ok"
    except Exception as e:
        logger.error(f"Health check database error: {e}")
        database = "unavailable"
    return {"status": "healthy" if database == "ok" else "degraded", "database": database}
