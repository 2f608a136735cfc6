from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from slowapi import Limiter
from slowapi.util import get_remote_address
from rsvphub.core.config import settings
from rsvphub.db.session import get_session
from rsvphub.schemas import PublicRSVPCreate, PublicRSVPUpdate, PublicRSVPCreated, PublicRSVPOut
from rsvphub.services.public_rsvp_service import PublicRSVPService

router = APIRouter(prefix="/public-rsvps", tags=["public-rsvps"])
limiter = Limiter(key_func=get_remote_address)

def get_public_rsvp_service(session: AsyncSession = Depends(get_session)) -> PublicRSVPService:
    return PublicRSVPService(session)


@router.post("/events/{event_id}", response_model=PublicRSVPCreated, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.PUBLIC_RSVP_RATE_LIMIT)
async def create_public_rsvp(
    request: Request,
    event_id: int,
    payload: PublicRSVPCreate,
    service: PublicRSVPService = Depends(get_public_rsvp_service),
):
    """
    RSVP without an account.

    The returned token is shown once; it is the only way to edit or withdraw
    the response later.
    """
    entry_id, token = await service.create(
        event_id,
        payload.first_name,
        payload.last_name,
        payload.email,
        payload.phone,
        payload.total_adults,
        payload.total_kids,
        payload.answer.value,
        payload.comment,
    )
    return PublicRSVPCreated(id=entry_id, token=token)


@router.get("/{token}", response_model=PublicRSVPOut)
async def get_public_rsvp(token: str, service: PublicRSVPService = Depends(get_public_rsvp_service)):
    return await service.get_by_token(token)


@router.put("/{token}", response_model=PublicRSVPOut)
@limiter.limit(settings.PUBLIC_RSVP_RATE_LIMIT)
async def update_public_rsvp(
    request: Request,
    token: str,
    payload: PublicRSVPUpdate,
    service: PublicRSVPService = Depends(get_public_rsvp_service),
):
    return await service.update_by_token(
        token, payload.total_adults, payload.total_kids, payload.answer.value, payload.comment
    )


@router.delete("/{token}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_public_rsvp(token: str, service: PublicRSVPService = Depends(get_public_rsvp_service)):
    await service.delete_by_token(token)
    return None
