"""
Best-effort audit trail.

Recording who changed what must never block or fail the primary operation:
every error is logged and swallowed here.
"""
from typing import Optional, Dict, Any
from sqlalchemy.ext.asyncio import AsyncSession
from rsvphub.core.logging import logger
from rsvphub.db.models.activity_log import ActivityLog


async def log_activity(
    db: AsyncSession,
    adult_id: Optional[int],
    action_type: str,
    details: Optional[Dict[str, Any]] = None,
) -> bool:
    """
    Append an activity row in its own commit.

    Call only after the primary transaction has been committed.

    Returns:
        True if the row was written, False otherwise
    """
    try:
        db.add(ActivityLog(adult_id=adult_id, action_type=action_type, details=details or {}))
        await db.commit()
        return True
    except Exception as e:
        logger.warning(f"Activity log write failed for {action_type}: {e}")
        try:
            await db.rollback()
        except Exception as rollback_error:
            logger.error(f"Activity log rollback failed: {rollback_error}")
        return False
