"""
Family RSVP routes.

This is the calling layer for the RSVP core: it decides who may act for whom
and which participants they may pick, then hands an already-authorized adult
to the services.
"""
from typing import Optional, Tuple
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from rsvphub.auth import get_current_user
from rsvphub.core.errors import NotFound, PermissionDenied
from rsvphub.db.models.adult import Adult
from rsvphub.db.repositories import household
from rsvphub.db.repositories import rsvps as store
from rsvphub.db.repositories import public_rsvps as ledger
from rsvphub.db.session import get_session
from rsvphub.schemas import (
    FamilyRSVPSet, FamilyRSVPOut, EventRSVPSummary, NamesOut, CommentsOut, RSVPAnswer,
)
from rsvphub.services.comment_service import comments_by_caregiver
from rsvphub.services.rsvp_service import RSVPService

router = APIRouter(prefix="/rsvps", tags=["rsvps"])

def get_rsvp_service(session: AsyncSession = Depends(get_session)) -> RSVPService:
    return RSVPService(session)


def _acting_for(user: Adult, adult_id: Optional[int]) -> Tuple[int, int]:
    """(acting adult, entered by); only admins may act for someone else."""
    if adult_id is None or adult_id == user.id:
        return user.id, user.id
    if not user.is_admin:
        raise PermissionDenied("You can only RSVP for your own family.")
    return adult_id, user.id


async def _check_selection(session: AsyncSession, acting_adult_id: int, payload: FamilyRSVPSet) -> None:
    allowed_adults = {acting_adult_id} | await household.co_caregivers_of(session, acting_adult_id)
    allowed_youth = await household.dependents_of(session, acting_adult_id)
    if any(aid not in allowed_adults for aid in payload.adult_ids if aid > 0):
        raise PermissionDenied("Invalid adult selection.")
    if any(yid not in allowed_youth for yid in payload.youth_ids if yid > 0):
        raise PermissionDenied("Invalid youth selection.")


@router.get("/events/{event_id}/family", response_model=FamilyRSVPOut)
async def get_family_rsvp(
    event_id: int,
    adult_id: Optional[int] = Query(None, description="Admins only: look up another adult's family"),
    user: Adult = Depends(get_current_user),
    rsvp_service: RSVPService = Depends(get_rsvp_service),
):
    acting_adult_id, _ = _acting_for(user, adult_id)
    rsvp = await rsvp_service.get_family_rsvp(event_id, acting_adult_id)
    if not rsvp:
        raise NotFound("RSVP not found.")
    return rsvp


@router.put("/events/{event_id}/family", response_model=FamilyRSVPOut)
async def set_family_rsvp(
    event_id: int,
    payload: FamilyRSVPSet,
    adult_id: Optional[int] = Query(None, description="Admins only: RSVP on behalf of this adult"),
    user: Adult = Depends(get_current_user),
    rsvp_service: RSVPService = Depends(get_rsvp_service),
):
    """
    Create or replace the caller's family RSVP.

    Non-admins may only pick themselves or co-caregivers as adults, and their
    own dependents as youth. An admin acting for another adult is recorded as
    the one who entered it.
    """
    acting_adult_id, entered_by = _acting_for(user, adult_id)
    if not user.is_admin:
        await _check_selection(rsvp_service.session, acting_adult_id, payload)
    await rsvp_service.set_family_rsvp(
        acting_adult_id,
        event_id,
        payload.answer.value,
        payload.adult_ids,
        payload.youth_ids,
        payload.comment,
        payload.n_guests,
        entered_by=entered_by,
    )
    return await rsvp_service.get_family_rsvp(event_id, acting_adult_id)


@router.get("/events/{event_id}/youth/{youth_id}", response_model=FamilyRSVPOut)
async def get_rsvp_for_youth(
    event_id: int,
    youth_id: int,
    user: Adult = Depends(get_current_user),
    rsvp_service: RSVPService = Depends(get_rsvp_service),
):
    if not user.is_admin and not await household.is_caregiver_of(rsvp_service.session, user.id, youth_id):
        raise PermissionDenied("Not a caregiver of this youth.")
    rsvp = await rsvp_service.get_rsvp_for_youth(event_id, youth_id)
    if not rsvp:
        raise NotFound("RSVP not found.")
    return rsvp


@router.get("/events/{event_id}/comments", response_model=CommentsOut)
async def get_event_comments(
    event_id: int,
    user: Adult = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    comments = await comments_by_caregiver(session, event_id)
    if not user.is_admin:
        comments = {aid: text for aid, text in comments.items() if aid == user.id}
    return CommentsOut(event_id=event_id, comments=comments)


@router.get("/events/{event_id}/summary", response_model=EventRSVPSummary)
async def get_event_summary(
    event_id: int,
    user: Adult = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    """Family and public totals per answer, plus their sum."""
    event = await store.get_event(session, event_id)
    if not event:
        raise NotFound("Event not found.")
    family = await store.event_answer_summary(session, event_id)
    public = await ledger.totals_per_answer(session, event_id)
    combined = {
        ans: {
            "adults": family[ans]["adults"] + public[ans]["adults"],
            "kids": family[ans]["youth"] + public[ans]["kids"],
        }
        for ans in family
    }
    return EventRSVPSummary(
        event_id=event_id,
        capacity=event.capacity,
        youth_registered=await store.count_youth_for_event(session, event_id),
        family=family,
        public=public,
        combined=combined,
    )


@router.get("/events/{event_id}/names", response_model=NamesOut)
async def get_names_by_answer(
    event_id: int,
    answer: RSVPAnswer = Query(RSVPAnswer.yes),
    user: Adult = Depends(get_current_user),
    rsvp_service: RSVPService = Depends(get_rsvp_service),
):
    names = await rsvp_service.names_by_answer(event_id, answer.value)
    return NamesOut(answer=answer, **names)
