from typing import Optional, Tuple, Dict, List
from pydantic import BaseModel, EmailStr, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from rsvphub.cache.redis_client import invalidate_event_aggregates
from rsvphub.core.errors import InvalidInput, NotFound
from rsvphub.core.logging import logger
from rsvphub.core.security import new_public_token
from rsvphub.db.models.public_rsvp import PublicRSVP
from rsvphub.db.repositories import public_rsvps as ledger
from rsvphub.db.repositories.activity import log_activity
from rsvphub.db.repositories.rsvps import get_event, normalize_answer
from rsvphub.events import publisher


class _EmailCheck(BaseModel):
    email: EmailStr


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _validate_email(email: str) -> str:
    try:
        return str(_EmailCheck(email=(email or "").strip()).email)
    except ValidationError:
        raise InvalidInput("A valid email is required.")


class PublicRSVPService:
    """
    Token-addressed RSVPs from respondents without an account.

    Totals come back in the same adults/kids shape as family counts; merging
    the two is left to the caller.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self,
        event_id: int,
        first_name: str,
        last_name: str,
        email: str,
        phone: Optional[str],
        total_adults: int,
        total_kids: int,
        answer,
        comment: Optional[str] = None,
    ) -> Tuple[int, str]:
        """
        Record a public RSVP.

        Returns:
            (id, plain_token); only the token's hash is stored, so the plain
            value must be handed to the respondent now

        Raises:
            InvalidInput: Bad event id, missing name, bad email or answer
            NotFound: Event does not exist
        """
        if not event_id or int(event_id) <= 0:
            raise InvalidInput("Invalid event.")
        first = _clean(first_name)
        last = _clean(last_name)
        if not first or not last:
            raise InvalidInput("Name is required.")
        email = _validate_email(email)
        ans = normalize_answer(answer)

        if not await get_event(self.session, int(event_id)):
            raise NotFound("Event not found.")

        plain_token, token_hash = new_public_token()
        try:
            entry = await ledger.insert_public_rsvp(
                self.session,
                event_id=int(event_id),
                first_name=first,
                last_name=last,
                email=email,
                phone=_clean(phone),
                total_adults=max(0, int(total_adults or 0)),
                total_kids=max(0, int(total_kids or 0)),
                answer=ans,
                comment=_clean(comment),
                token_hash=token_hash,
            )
            entry_id = entry.id
            details = {
                "event_id": entry.event_id,
                "rsvp_id": entry_id,
                "email": email,
                "answer": ans.value,
                "total_adults": entry.total_adults,
                "total_kids": entry.total_kids,
            }
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(f"Public RSVP {entry_id} created for event {event_id}")
        await self._after_write("public_rsvp_created", details)
        return entry_id, plain_token

    async def get_by_token(self, token: str) -> PublicRSVP:
        entry = await ledger.get_by_token(self.session, token)
        if not entry:
            raise NotFound("RSVP not found.")
        return entry

    async def update_by_token(
        self,
        token: str,
        total_adults: int,
        total_kids: int,
        answer,
        comment: Optional[str] = None,
    ) -> PublicRSVP:
        ans = normalize_answer(answer)
        entry = await self.get_by_token(token)
        try:
            entry.total_adults = max(0, int(total_adults or 0))
            entry.total_kids = max(0, int(total_kids or 0))
            entry.answer = ans
            entry.comment = _clean(comment)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(f"Public RSVP {entry.id} updated")
        await self._after_write("public_rsvp_updated", {
            "event_id": entry.event_id,
            "rsvp_id": entry.id,
            "answer": ans.value,
            "total_adults": entry.total_adults,
            "total_kids": entry.total_kids,
        })
        return entry

    async def delete_by_token(self, token: str) -> None:
        entry = await self.get_by_token(token)
        entry_id, event_id = entry.id, entry.event_id
        try:
            await ledger.delete_public_rsvp(self.session, entry_id)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(f"Public RSVP {entry_id} deleted")
        await self._after_write("public_rsvp_deleted", {"event_id": event_id, "rsvp_id": entry_id})

    async def list_by_answer(self, event_id: int, answer) -> List[PublicRSVP]:
        return await ledger.list_by_answer(self.session, event_id, answer)

    async def totals_by_answer(self, event_id: int, answer) -> Dict[str, int]:
        return await ledger.totals_by_answer(self.session, event_id, answer)

    async def totals_all_answers(self, event_id: int) -> Dict[str, int]:
        return await ledger.totals_all_answers(self.session, event_id)

    async def _after_write(self, action: str, details: dict):
        await log_activity(self.session, None, action, details)
        await invalidate_event_aggregates(details.get("event_id"))
        await publisher.publish_safely(action.replace("public_rsvp_", "rsvp.public_"), details)
