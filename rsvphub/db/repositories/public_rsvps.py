"""
Public (logged-out) RSVP ledger rows.

These rows carry head-counts instead of member rows and are addressed by the
hash of a single-use token handed back to the respondent.
"""
from typing import Optional, List, Dict
from sqlalchemy import select, func, delete
from sqlalchemy.ext.asyncio import AsyncSession
from rsvphub.core.security import hash_public_token
from rsvphub.db.models.public_rsvp import PublicRSVP
from rsvphub.db.models.rsvp import RSVPAnswer
from rsvphub.db.repositories.rsvps import normalize_answer


def _totals(row) -> Dict[str, int]:
    if row is None:
        return {"adults": 0, "kids": 0}
    return {"adults": int(row[0] or 0), "kids": int(row[1] or 0)}


async def insert_public_rsvp(db: AsyncSession, **fields) -> PublicRSVP:
    entry = PublicRSVP(**fields)
    db.add(entry)
    await db.flush()
    return entry


async def get_by_token(db: AsyncSession, plain_token: str) -> Optional[PublicRSVP]:
    if not plain_token:
        return None
    q = select(PublicRSVP).where(PublicRSVP.token_hash == hash_public_token(plain_token))
    res = await db.execute(q)
    return res.scalars().first()


async def delete_public_rsvp(db: AsyncSession, entry_id: int) -> None:
    await db.execute(delete(PublicRSVP).where(PublicRSVP.id == entry_id))


async def list_by_answer(db: AsyncSession, event_id: int, answer) -> List[PublicRSVP]:
    ans = normalize_answer(answer)
    q = (
        select(PublicRSVP)
        .where(PublicRSVP.event_id == event_id, PublicRSVP.answer == ans)
        .order_by(PublicRSVP.last_name, PublicRSVP.first_name, PublicRSVP.id)
    )
    res = await db.execute(q)
    return list(res.scalars().all())


async def totals_by_answer(db: AsyncSession, event_id: int, answer) -> Dict[str, int]:
    """Summed head-counts, shaped like the family participant counts."""
    ans = normalize_answer(answer)
    q = select(
        func.coalesce(func.sum(PublicRSVP.total_adults), 0),
        func.coalesce(func.sum(PublicRSVP.total_kids), 0),
    ).where(PublicRSVP.event_id == event_id, PublicRSVP.answer == ans)
    return _totals((await db.execute(q)).first())


async def totals_all_answers(db: AsyncSession, event_id: int) -> Dict[str, int]:
    q = select(
        func.coalesce(func.sum(PublicRSVP.total_adults), 0),
        func.coalesce(func.sum(PublicRSVP.total_kids), 0),
    ).where(PublicRSVP.event_id == event_id)
    return _totals((await db.execute(q)).first())


async def totals_per_answer(db: AsyncSession, event_id: int) -> Dict[str, Dict[str, int]]:
    return {ans.value: await totals_by_answer(db, event_id, ans) for ans in RSVPAnswer}
