"""
Household graph queries over the caregiver_links edge table.

Each call re-reads the edges; links may be added or removed between calls
(a co-parent joining mid-session) and nothing here keeps a snapshot.
"""
from typing import Set, Optional
from sqlalchemy import select, func
from sqlalchemy.orm import aliased
from sqlalchemy.ext.asyncio import AsyncSession
from rsvphub.db.models.adult import Adult
from rsvphub.db.models.household import CaregiverLink


async def get_adult(db: AsyncSession, adult_id: int) -> Optional[Adult]:
    res = await db.execute(select(Adult).where(Adult.id == adult_id))
    return res.scalars().first()


async def dependents_of(db: AsyncSession, adult_id: int) -> Set[int]:
    """
    All youth linked to an adult.

    Args:
        db: Database session
        adult_id: Adult's id

    Returns:
        Set of youth ids (empty if the adult has none)
    """
    q = select(CaregiverLink.youth_id).where(CaregiverLink.adult_id == adult_id)
    res = await db.execute(q)
    return set(res.scalars().all())


async def co_caregivers_of(db: AsyncSession, adult_id: int) -> Set[int]:
    """
    Adults who share at least one dependent with the given adult, excluding it.

    Two hops: adult -> its youth -> every adult linked to any of those youth.
    """
    mine = aliased(CaregiverLink)
    theirs = aliased(CaregiverLink)
    q = (
        select(theirs.adult_id)
        .join(mine, mine.youth_id == theirs.youth_id)
        .where(mine.adult_id == adult_id, theirs.adult_id != adult_id)
        .distinct()
    )
    res = await db.execute(q)
    return set(res.scalars().all())


async def caregivers_of(db: AsyncSession, youth_id: int) -> Set[int]:
    """All adults directly linked to a youth."""
    q = select(CaregiverLink.adult_id).where(CaregiverLink.youth_id == youth_id)
    res = await db.execute(q)
    return set(res.scalars().all())


async def related_caregivers(db: AsyncSession, seed_adult_ids: Set[int]) -> Set[int]:
    # seeds plus everyone sharing any youth with any seed
    if not seed_adult_ids:
        return set()
    seed_youth = select(CaregiverLink.youth_id).where(CaregiverLink.adult_id.in_(seed_adult_ids))
    q = select(CaregiverLink.adult_id).where(CaregiverLink.youth_id.in_(seed_youth)).distinct()
    res = await db.execute(q)
    return set(seed_adult_ids) | set(res.scalars().all())


async def is_caregiver_of(db: AsyncSession, adult_id: int, youth_id: int) -> bool:
    q = select(CaregiverLink.id).where(
        CaregiverLink.adult_id == adult_id,
        CaregiverLink.youth_id == youth_id,
    ).limit(1)
    res = await db.execute(q)
    return res.scalar() is not None


async def count_caregivers(db: AsyncSession, youth_id: int) -> int:
    q = select(func.count(CaregiverLink.id)).where(CaregiverLink.youth_id == youth_id)
    res = await db.execute(q)
    return res.scalar() or 0
