"""
RSVP store: row access for family RSVPs and their members, plus the
read-only aggregates consumed by event pages and reports.
"""
import re
from typing import Optional, List, Dict, Iterable
from sqlalchemy import select, func, delete, distinct, case, union
from sqlalchemy.ext.asyncio import AsyncSession
from rsvphub.cache.cache_decorators import cached
from rsvphub.core.config import settings
from rsvphub.core.errors import InvalidInput
from rsvphub.db.models.adult import Adult
from rsvphub.db.models.youth import Youth
from rsvphub.db.models.event import Event
from rsvphub.db.models.rsvp import RSVP, RSVPMember, RSVPAnswer, ParticipantType


def normalize_answer(answer) -> RSVPAnswer:
    """
    Coerce a user-supplied answer to ``RSVPAnswer``.

    Raises:
        InvalidInput: If the value is not yes/maybe/no
    """
    if isinstance(answer, RSVPAnswer):
        return answer
    value = str(answer or "").strip().lower()
    try:
        return RSVPAnswer(value)
    except ValueError:
        raise InvalidInput("Invalid RSVP answer.")


def normalize_ids(values: Optional[Iterable]) -> List[int]:
    """Positive ints only, de-duplicated, first occurrence wins."""
    out: List[int] = []
    for v in values or []:
        try:
            n = int(v)
        except (TypeError, ValueError):
            continue
        if n > 0 and n not in out:
            out.append(n)
    return out


def _natural_key(text: str):
    return [int(part) if part.isdigit() else part.lower() for part in re.split(r"(\d+)", text)]


def _display_name(last_name: Optional[str], first_name: Optional[str]) -> str:
    ln = (last_name or "").strip()
    fn = (first_name or "").strip()
    return f"{ln}, {fn}".strip(" ,")


# =========================
# Row access
# =========================

async def get_event(db: AsyncSession, event_id: int, for_update: bool = False) -> Optional[Event]:
    q = select(Event).where(Event.id == event_id)
    if for_update:
        q = q.with_for_update()
    res = await db.execute(q)
    return res.scalars().first()


async def find_rsvp_by_creators(
    db: AsyncSession,
    event_id: int,
    creator_ids: Iterable[int],
    preferred_creator_id: Optional[int] = None,
) -> Optional[RSVP]:
    """
    First RSVP for the event created by any of ``creator_ids``.

    Rows by ``preferred_creator_id`` sort first; otherwise the lowest id wins
    so duplicate records resolve the same way every time.
    """
    creators = list(creator_ids)
    if not creators:
        return None
    q = select(RSVP).where(RSVP.event_id == event_id, RSVP.created_by_adult_id.in_(creators))
    if preferred_creator_id is not None:
        q = q.order_by(case((RSVP.created_by_adult_id == preferred_creator_id, 0), else_=1))
    q = q.order_by(RSVP.id).limit(1)
    res = await db.execute(q)
    return res.scalars().first()


async def find_rsvp_for_adult(db: AsyncSession, event_id: int, adult_id: int) -> Optional[RSVP]:
    """
    RSVP the adult created for the event, else any RSVP listing them as an adult member.
    """
    if event_id <= 0 or adult_id <= 0:
        return None
    own = await find_rsvp_by_creators(db, event_id, [adult_id])
    if own:
        return own
    q = (
        select(RSVP)
        .join(RSVPMember, (RSVPMember.rsvp_id == RSVP.id) & (RSVPMember.event_id == RSVP.event_id))
        .where(
            RSVP.event_id == event_id,
            RSVPMember.participant_type == ParticipantType.adult,
            RSVPMember.adult_id == adult_id,
        )
        .order_by(RSVP.id)
        .limit(1)
    )
    res = await db.execute(q)
    return res.scalars().first()


async def insert_rsvp(
    db: AsyncSession,
    event_id: int,
    creator_id: int,
    answer: RSVPAnswer,
    comment: Optional[str],
    n_guests: int,
    entered_by: Optional[int],
) -> RSVP:
    rsvp = RSVP(
        event_id=event_id,
        created_by_adult_id=creator_id,
        entered_by_adult_id=entered_by,
        answer=answer,
        comment=comment,
        n_guests=n_guests,
    )
    db.add(rsvp)
    await db.flush()
    return rsvp


async def update_rsvp(
    db: AsyncSession,
    rsvp: RSVP,
    answer: RSVPAnswer,
    comment: Optional[str],
    n_guests: int,
    entered_by: Optional[int],
) -> RSVP:
    # created_by_adult_id is immutable
    rsvp.answer = answer
    rsvp.comment = comment
    rsvp.n_guests = n_guests
    rsvp.entered_by_adult_id = entered_by
    await db.flush()
    return rsvp


async def replace_members(
    db: AsyncSession,
    rsvp_id: int,
    event_id: int,
    adult_ids: List[int],
    youth_ids: List[int],
) -> None:
    """Delete every member row of the RSVP and insert the requested sets."""
    await db.execute(delete(RSVPMember).where(RSVPMember.rsvp_id == rsvp_id))
    for aid in adult_ids:
        db.add(RSVPMember(rsvp_id=rsvp_id, event_id=event_id,
                          participant_type=ParticipantType.adult, adult_id=aid))
    for yid in youth_ids:
        db.add(RSVPMember(rsvp_id=rsvp_id, event_id=event_id,
                          participant_type=ParticipantType.youth, youth_id=yid))
    await db.flush()


async def list_commented_rsvps(db: AsyncSession, event_id: int) -> List[RSVP]:
    q = (
        select(RSVP)
        .where(RSVP.event_id == event_id, RSVP.comment.is_not(None), func.trim(RSVP.comment) != "")
        .order_by(RSVP.id)
    )
    res = await db.execute(q)
    return list(res.scalars().all())


# =========================
# Counts and member lookups
# =========================

async def member_ids_by_type(db: AsyncSession, rsvp_id: int) -> Dict[str, List[int]]:
    """
    Member ids of an RSVP split by participant kind.

    Returns:
        {'adult_ids': [...], 'youth_ids': [...]} in insertion order
    """
    if rsvp_id <= 0:
        return {"adult_ids": [], "youth_ids": []}
    q = select(RSVPMember).where(RSVPMember.rsvp_id == rsvp_id).order_by(RSVPMember.id)
    res = await db.execute(q)
    adults: List[int] = []
    youths: List[int] = []
    for m in res.scalars().all():
        if m.participant_type == ParticipantType.adult and m.adult_id:
            adults.append(m.adult_id)
        elif m.participant_type == ParticipantType.youth and m.youth_id:
            youths.append(m.youth_id)
    return {"adult_ids": normalize_ids(adults), "youth_ids": normalize_ids(youths)}


async def count_youth_for_event(db: AsyncSession, event_id: int) -> int:
    """Distinct youth across every RSVP of the event, whatever the answer."""
    q = select(func.count(distinct(RSVPMember.youth_id))).where(
        RSVPMember.event_id == event_id,
        RSVPMember.participant_type == ParticipantType.youth,
    )
    res = await db.execute(q)
    return res.scalar() or 0


async def count_youth_for_rsvp(db: AsyncSession, rsvp_id: int) -> int:
    q = select(func.count(RSVPMember.id)).where(
        RSVPMember.rsvp_id == rsvp_id,
        RSVPMember.participant_type == ParticipantType.youth,
    )
    res = await db.execute(q)
    return res.scalar() or 0


async def member_counts_for_rsvp(db: AsyncSession, rsvp_id: int) -> Dict[str, int]:
    if rsvp_id <= 0:
        return {"adults": 0, "youth": 0}
    q = select(
        func.sum(case((RSVPMember.participant_type == ParticipantType.adult, 1), else_=0)),
        func.sum(case((RSVPMember.participant_type == ParticipantType.youth, 1), else_=0)),
    ).where(RSVPMember.rsvp_id == rsvp_id)
    row = (await db.execute(q)).first()
    return {"adults": int(row[0] or 0), "youth": int(row[1] or 0)}


async def count_distinct_participants_by_answer(db: AsyncSession, event_id: int, answer) -> Dict[str, int]:
    ans = normalize_answer(answer)
    q = (
        select(
            func.count(distinct(case((RSVPMember.participant_type == ParticipantType.adult, RSVPMember.adult_id)))),
            func.count(distinct(case((RSVPMember.participant_type == ParticipantType.youth, RSVPMember.youth_id)))),
        )
        .join(RSVP, RSVP.id == RSVPMember.rsvp_id)
        .where(RSVPMember.event_id == event_id, RSVP.answer == ans)
    )
    row = (await db.execute(q)).first()
    return {"adults": int(row[0] or 0), "youth": int(row[1] or 0)}


async def yes_counts(db: AsyncSession, event_id: int) -> Optional[Dict[str, int]]:
    """Distinct yes-participants, or None when the event has no RSVPs at all."""
    counts = await count_distinct_participants_by_answer(db, event_id, RSVPAnswer.yes)
    if counts["adults"] == 0 and counts["youth"] == 0:
        total = (await db.execute(select(func.count(RSVP.id)).where(RSVP.event_id == event_id))).scalar()
        if not total:
            return None
    return counts


async def sum_guests_by_answer(db: AsyncSession, event_id: int, answer) -> int:
    ans = normalize_answer(answer)
    q = select(func.coalesce(func.sum(RSVP.n_guests), 0)).where(RSVP.event_id == event_id, RSVP.answer == ans)
    res = await db.execute(q)
    return int(res.scalar() or 0)


async def answer_for_adult(db: AsyncSession, event_id: int, adult_id: int) -> Optional[RSVPAnswer]:
    """Answer on the RSVP the adult created, if any."""
    if event_id <= 0 or adult_id <= 0:
        return None
    rsvp = await find_rsvp_by_creators(db, event_id, [adult_id])
    return rsvp.answer if rsvp else None


# =========================
# Name lists
# =========================

async def list_adult_entries_by_answer(db: AsyncSession, event_id: int, answer) -> List[Dict]:
    """[{'id': adult_id, 'name': 'Last, First'}] sorted case-insensitively."""
    ans = normalize_answer(answer)
    q = (
        select(Adult.id, Adult.last_name, Adult.first_name)
        .join(RSVPMember, RSVPMember.adult_id == Adult.id)
        .join(RSVP, (RSVP.id == RSVPMember.rsvp_id) & (RSVP.answer == ans))
        .where(RSVPMember.event_id == event_id, RSVPMember.participant_type == ParticipantType.adult)
        .distinct()
    )
    res = await db.execute(q)
    rows = [{"id": r.id, "name": _display_name(r.last_name, r.first_name)} for r in res.all()]
    rows.sort(key=lambda r: _natural_key(r["name"]))
    return rows


async def list_adult_names_by_answer(db: AsyncSession, event_id: int, answer) -> List[str]:
    entries = await list_adult_entries_by_answer(db, event_id, answer)
    return sorted({e["name"] for e in entries}, key=_natural_key)


async def list_youth_names_by_answer(db: AsyncSession, event_id: int, answer) -> List[str]:
    ans = normalize_answer(answer)
    q = (
        select(Youth.last_name, Youth.first_name)
        .join(RSVPMember, RSVPMember.youth_id == Youth.id)
        .join(RSVP, (RSVP.id == RSVPMember.rsvp_id) & (RSVP.answer == ans))
        .where(RSVPMember.event_id == event_id, RSVPMember.participant_type == ParticipantType.youth)
        .distinct()
    )
    res = await db.execute(q)
    names = {_display_name(r.last_name, r.first_name) for r in res.all()}
    return sorted(names, key=_natural_key)


async def list_youth_ids_by_answer(db: AsyncSession, event_id: int, answer) -> List[int]:
    ans = normalize_answer(answer)
    q = (
        select(RSVPMember.youth_id)
        .join(RSVP, (RSVP.id == RSVPMember.rsvp_id) & (RSVP.answer == ans))
        .where(
            RSVPMember.event_id == event_id,
            RSVPMember.participant_type == ParticipantType.youth,
            RSVPMember.youth_id.is_not(None),
        )
        .distinct()
        .order_by(RSVPMember.youth_id)
    )
    res = await db.execute(q)
    return list(res.scalars().all())


async def member_display_names(db: AsyncSession, rsvp_id: int, exclude_adult_id: Optional[int] = None) -> Dict[str, List[str]]:
    """'First Last' names of one RSVP's members, optionally hiding one adult."""
    if rsvp_id <= 0:
        return {"adults": [], "youth": []}
    q = (
        select(RSVPMember, Adult.first_name, Adult.last_name, Youth.first_name, Youth.last_name)
        .outerjoin(Adult, Adult.id == RSVPMember.adult_id)
        .outerjoin(Youth, Youth.id == RSVPMember.youth_id)
        .where(RSVPMember.rsvp_id == rsvp_id)
        .order_by(RSVPMember.id)
    )
    res = await db.execute(q)
    adults: List[str] = []
    youths: List[str] = []
    for member, afn, aln, yfn, yln in res.all():
        if member.participant_type == ParticipantType.youth:
            name = f"{yfn or ''} {yln or ''}".strip()
            if name:
                youths.append(name)
        elif member.adult_id != exclude_adult_id:
            name = f"{afn or ''} {aln or ''}".strip()
            if name:
                adults.append(name)
    return {"adults": adults, "youth": youths}


async def list_event_ids_with_yes_rsvp_for_adult(db: AsyncSession, adult_id: int) -> List[int]:
    """Events where the adult created, or is an adult member of, a yes RSVP."""
    if adult_id <= 0:
        return []
    created = select(RSVP.event_id.label("event_id")).where(
        RSVP.answer == RSVPAnswer.yes, RSVP.created_by_adult_id == adult_id
    )
    member = (
        select(RSVP.event_id.label("event_id"))
        .join(RSVPMember, (RSVPMember.rsvp_id == RSVP.id) & (RSVPMember.event_id == RSVP.event_id))
        .where(
            RSVP.answer == RSVPAnswer.yes,
            RSVPMember.participant_type == ParticipantType.adult,
            RSVPMember.adult_id == adult_id,
        )
    )
    both = union(created, member).subquery()
    res = await db.execute(select(both.c.event_id).order_by(both.c.event_id))
    return list(res.scalars().all())


async def rsvp_summary_for_adult(db: AsyncSession, event_id: int, adult_id: int) -> Optional[Dict]:
    rsvp = await find_rsvp_for_adult(db, event_id, adult_id)
    if not rsvp:
        return None
    counts = await member_counts_for_rsvp(db, rsvp.id)
    return {
        "id": rsvp.id,
        "answer": rsvp.answer.value,
        "n_guests": rsvp.n_guests,
        "created_by_adult_id": rsvp.created_by_adult_id,
        "adult_count": counts["adults"],
        "youth_count": counts["youth"],
    }


@cached('rsvps:summary', expire=settings.SUMMARY_CACHE_SECONDS)
async def event_answer_summary(db: AsyncSession, event_id: int) -> Dict[str, Dict[str, int]]:
    """
    Per-answer family totals for an event, cached between writes.

    Returns:
        {'yes': {'adults', 'youth', 'guests'}, 'maybe': {...}, 'no': {...}}
    """
    summary = {}
    for ans in RSVPAnswer:
        counts = await count_distinct_participants_by_answer(db, event_id, ans)
        counts["guests"] = await sum_guests_by_answer(db, event_id, ans)
        summary[ans.value] = counts
    return summary
