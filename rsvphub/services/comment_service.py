"""
Comment broadcast: every caregiver connected to an RSVP's participants sees
that RSVP's comment on their own event page.
"""
from typing import Dict
from sqlalchemy.ext.asyncio import AsyncSession
from rsvphub.db.repositories import household
from rsvphub.db.repositories import rsvps as store

SEPARATOR = "\n\n"


async def comments_by_caregiver(db: AsyncSession, event_id: int) -> Dict[int, str]:
    """
    Map adult id -> comment text for an event.

    Each commented RSVP is expanded on its own: its adult members plus its
    creator seed the set, and every adult sharing any youth with a seed joins
    it. An adult reached from several RSVPs accumulates their comments,
    blank-line separated; a comment identical to the stored text is not
    repeated. RSVPs are processed in id order, so the output is stable.
    """
    if event_id <= 0:
        return {}

    by_adult: Dict[int, str] = {}
    for rsvp in await store.list_commented_rsvps(db, event_id):
        text = (rsvp.comment or "").strip()
        if not text:
            continue

        seeds = set((await store.member_ids_by_type(db, rsvp.id))["adult_ids"])
        seeds.add(rsvp.created_by_adult_id)
        related = await household.related_caregivers(db, seeds)

        for adult_id in related:
            if adult_id <= 0:
                continue
            stored = by_adult.get(adult_id)
            if stored is None:
                by_adult[adult_id] = text
            elif stored.strip() != text:
                by_adult[adult_id] = stored.strip() + SEPARATOR + text
    return by_adult


async def comments_by_creator(db: AsyncSession, event_id: int) -> Dict[int, str]:
    """Creator id -> its RSVP's comment, without any family expansion."""
    out: Dict[int, str] = {}
    for rsvp in await store.list_commented_rsvps(db, event_id):
        text = (rsvp.comment or "").strip()
        if rsvp.created_by_adult_id > 0 and text:
            out[rsvp.created_by_adult_id] = text
    return out
