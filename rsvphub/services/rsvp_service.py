"""
Family RSVP writes: capacity-checked, transactional replace of a family's
answer and member list.
"""
from typing import Optional, Iterable, Dict, List
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from rsvphub.cache.redis_client import invalidate_event_aggregates
from rsvphub.core.config import settings
from rsvphub.core.errors import InvalidInput, NotFound, CapacityExceeded
from rsvphub.core.logging import logger
from rsvphub.db.repositories import rsvps as store
from rsvphub.db.repositories.activity import log_activity
from rsvphub.events import publisher
from rsvphub.services.resolver import FamilyRSVPResolver


class RSVPService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.resolver = FamilyRSVPResolver(session)

    async def set_family_rsvp(
        self,
        acting_adult_id: int,
        event_id: int,
        answer,
        adult_ids: Optional[Iterable] = None,
        youth_ids: Optional[Iterable] = None,
        comment: Optional[str] = None,
        n_guests: int = 0,
        entered_by: Optional[int] = None,
    ) -> int:
        """
        Create or update the family's RSVP for an event and replace its members.

        The existing record is resolved through the acting adult's co-caregivers,
        so any member of a family edits the same row. The youth cap is checked
        against the event total minus this family's current youth, letting a
        family keep its seats while changing its answer.

        Args:
            acting_adult_id: Already-authorized adult the change is made for
            event_id: Event id
            answer: yes / maybe / no
            adult_ids: Adults attending
            youth_ids: Youth attending
            comment: Free text; blank is stored as NULL
            n_guests: Extra guests; negatives clamp to 0
            entered_by: Who typed it in (an admin on the family's behalf); defaults to the acting adult

        Returns:
            The RSVP id

        Raises:
            InvalidInput: Bad answer, event id or member ids
            NotFound: Event does not exist
            CapacityExceeded: The youth cap would be breached
        """
        event_id = int(event_id or 0)
        if event_id <= 0:
            raise InvalidInput("Invalid event.")
        if not acting_adult_id or int(acting_adult_id) <= 0:
            raise InvalidInput("Invalid adult.")
        acting_adult_id = int(acting_adult_id)
        ans = store.normalize_answer(answer)
        n_guests = max(0, int(n_guests or 0))
        adults = store.normalize_ids(adult_ids)
        youths = store.normalize_ids(youth_ids)
        text = comment.strip() if comment and comment.strip() else None
        entered_by = entered_by or acting_adult_id

        try:
            event = await store.get_event(self.session, event_id, for_update=settings.RSVP_SERIALIZE_PER_EVENT)
            if not event:
                raise NotFound("Event not found.")
            capacity = event.capacity

            existing = await self.resolver.resolve_by_adult(event_id, acting_adult_id)

            if event.has_capacity_limit:
                current = await store.count_youth_for_event(self.session, event_id)
                mine = await store.count_youth_for_rsvp(self.session, existing.id) if existing else 0
                projected = current - mine + len(youths)
                if projected > capacity:
                    raise CapacityExceeded(capacity=capacity, projected=projected)

            if existing:
                rsvp = await store.update_rsvp(self.session, existing, ans, text, n_guests, entered_by)
            else:
                rsvp = await store.insert_rsvp(self.session, event_id, acting_adult_id, ans, text, n_guests, entered_by)
            rsvp_id = rsvp.id
            creator_id = rsvp.created_by_adult_id

            await store.replace_members(self.session, rsvp_id, event_id, adults, youths)
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            logger.warning(f"Family RSVP for event {event_id} rejected by the store: {e.orig}")
            raise InvalidInput("Unknown adult or youth in the member list.")
        except Exception:
            await self.session.rollback()
            raise

        logger.info(
            f"Family RSVP {rsvp_id} set for event {event_id} by adult {acting_adult_id}: "
            f"{ans.value}, {len(adults)} adults, {len(youths)} youth, {n_guests} guests"
        )
        await self._after_write(rsvp_id, event_id, creator_id, entered_by, ans.value, n_guests, adults, youths)
        return rsvp_id

    async def _after_write(self, rsvp_id, event_id, creator_id, entered_by, answer, n_guests, adults, youths):
        details = {
            "event_id": event_id,
            "rsvp_id": rsvp_id,
            "answer": answer,
            "n_guests": n_guests,
            "adult_count": len(adults),
            "youth_count": len(youths),
        }
        await log_activity(self.session, entered_by, "rsvp.set_family", details)
        await invalidate_event_aggregates(event_id)
        await publisher.publish_safely(
            "rsvp.family_set",
            {**details, "created_by_adult_id": creator_id, "entered_by_adult_id": entered_by},
        )

    async def get_family_rsvp(self, event_id: int, adult_id: int) -> Optional[Dict]:
        """Resolved family RSVP with its member ids, or None."""
        rsvp = await self.resolver.resolve_by_adult(event_id, adult_id)
        return await self._with_members(rsvp)

    async def get_rsvp_for_youth(self, event_id: int, youth_id: int) -> Optional[Dict]:
        rsvp = await self.resolver.resolve_by_youth(event_id, youth_id)
        return await self._with_members(rsvp)

    async def _with_members(self, rsvp) -> Optional[Dict]:
        if rsvp is None:
            return None
        members = await store.member_ids_by_type(self.session, rsvp.id)
        return {
            "id": rsvp.id,
            "event_id": rsvp.event_id,
            "created_by_adult_id": rsvp.created_by_adult_id,
            "entered_by_adult_id": rsvp.entered_by_adult_id,
            "answer": rsvp.answer.value,
            "comment": rsvp.comment,
            "n_guests": rsvp.n_guests,
            **members,
        }

    async def names_by_answer(self, event_id: int, answer) -> Dict[str, List[str]]:
        return {
            "adults": await store.list_adult_names_by_answer(self.session, event_id, answer),
            "youth": await store.list_youth_names_by_answer(self.session, event_id, answer),
        }
