"""Family-aware lookup of the one RSVP that speaks for a household."""
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from rsvphub.db.models.rsvp import RSVP
from rsvphub.db.repositories import household
from rsvphub.db.repositories.rsvps import find_rsvp_by_creators


class FamilyRSVPResolver:
    """
    Finds the authoritative RSVP for an event by walking the household graph
    outward from an adult or a youth.

    Reads only; callers that write must resolve inside their own transaction.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def resolve_by_adult(self, event_id: int, adult_id: int) -> Optional[RSVP]:
        """
        RSVP created by the adult or any co-caregiver.

        When co-caregivers created separate records, the adult's own record wins
        so the acting user keeps editing what they submitted; among the others
        the lowest id is returned.
        """
        if event_id <= 0 or adult_id <= 0:
            return None
        candidates = {adult_id} | await household.co_caregivers_of(self.session, adult_id)
        return await find_rsvp_by_creators(
            self.session, event_id, candidates, preferred_creator_id=adult_id
        )

    async def resolve_by_youth(self, event_id: int, youth_id: int) -> Optional[RSVP]:
        """RSVP created by any caregiver of the youth (lowest id first)."""
        if event_id <= 0 or youth_id <= 0:
            return None
        candidates = await household.caregivers_of(self.session, youth_id)
        if not candidates:
            return None
        return await find_rsvp_by_creators(self.session, event_id, candidates)
