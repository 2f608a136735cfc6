from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from rsvphub.core.logging import logger
from rsvphub.core.security import adult_id_from_token
from rsvphub.db.models.adult import Adult
from rsvphub.db.repositories.household import get_adult
from rsvphub.db.session import get_session

bearer = HTTPBearer()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer),
    session: AsyncSession = Depends(get_session),
) -> Adult:
    """The adult named by the bearer token; 401 if the token or adult is invalid."""
    try:
        adult_id = adult_id_from_token(credentials.credentials)
    except ValueError as e:
        logger.debug(f"Rejected bearer token: {e}")
        raise _unauthorized("Could not validate credentials")

    adult = await get_adult(session, adult_id)
    if adult is None:
        raise _unauthorized("Could not validate credentials")
    return adult
