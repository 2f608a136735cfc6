"""
Unit tests for the family RSVP upsert: resolution, capacity and member replacement.
"""
import pytest
from sqlalchemy import select, func, delete

from rsvphub.core.errors import InvalidInput, NotFound, CapacityExceeded
from rsvphub.db.models import RSVP, RSVPMember, ActivityLog
from rsvphub.db.repositories import activity
from rsvphub.db.repositories import rsvps as store
from rsvphub.services.rsvp_service import RSVPService


async def _rsvp_count(db, event_id: int) -> int:
    res = await db.execute(select(func.count(RSVP.id)).where(RSVP.event_id == event_id))
    return res.scalar()


async def _member_count(db, event_id: int) -> int:
    res = await db.execute(select(func.count(RSVPMember.id)).where(RSVPMember.event_id == event_id))
    return res.scalar()


@pytest.mark.unit
@pytest.mark.asyncio
class TestSetFamilyRSVP:

    async def test_creates_rsvp_with_members(self, db_session, household, make_event):
        event_id = await make_event()
        service = RSVPService(db_session)

        rsvp_id = await service.set_family_rsvp(
            household.a, event_id, "Yes", [household.a], [household.y1, household.y2],
            comment="  Bringing snacks  ", n_guests=1,
        )

        rsvp = await service.get_family_rsvp(event_id, household.a)
        assert rsvp["id"] == rsvp_id
        assert rsvp["answer"] == "yes"
        assert rsvp["comment"] == "Bringing snacks"
        assert rsvp["n_guests"] == 1
        assert rsvp["created_by_adult_id"] == household.a
        assert rsvp["entered_by_adult_id"] == household.a
        assert rsvp["adult_ids"] == [household.a]
        assert rsvp["youth_ids"] == [household.y1, household.y2]

    async def test_co_caregivers_share_one_record(self, db_session, household, make_event):
        event_id = await make_event()
        service = RSVPService(db_session)

        first = await service.set_family_rsvp(household.a, event_id, "yes", [household.a], [household.y1])
        second = await service.set_family_rsvp(household.b, event_id, "maybe", [household.b], [household.y1])

        assert first == second
        assert await _rsvp_count(db_session, event_id) == 1
        rsvp = await service.get_family_rsvp(event_id, household.a)
        # creator never changes; the editor is recorded
        assert rsvp["created_by_adult_id"] == household.a
        assert rsvp["entered_by_adult_id"] == household.b
        assert rsvp["answer"] == "maybe"

    async def test_co_parent_edit_replaces_comment_and_members(self, db_session, household, make_event):
        """A answers for both kids; B then answers for Y2 only with a new comment."""
        event_id = await make_event(capacity=10)
        service = RSVPService(db_session)

        a_rsvp = await service.set_family_rsvp(
            household.a, event_id, "yes", [household.a], [household.y1, household.y2], comment="From A"
        )
        b_rsvp = await service.set_family_rsvp(
            household.b, event_id, "yes", [household.b], [household.y2], comment="From B"
        )

        assert b_rsvp == a_rsvp
        rsvp = await service.get_family_rsvp(event_id, household.b)
        assert rsvp["comment"] == "From B"
        assert rsvp["adult_ids"] == [household.b]
        assert rsvp["youth_ids"] == [household.y2]
        assert await _member_count(db_session, event_id) == 2

    async def test_capacity_exceeded_leaves_no_writes(self, db_session, household, make_event):
        event_id = await make_event(capacity=2)
        service = RSVPService(db_session)
        await service.set_family_rsvp(household.c, event_id, "yes", [household.c], [household.y3])

        with pytest.raises(CapacityExceeded) as exc_info:
            await service.set_family_rsvp(
                household.a, event_id, "yes", [household.a], [household.y1, household.y2]
            )

        assert exc_info.value.capacity == 2
        assert exc_info.value.projected == 3
        assert "maximum number of youth" in exc_info.value.message
        assert await _rsvp_count(db_session, event_id) == 1
        assert await _member_count(db_session, event_id) == 2

    async def test_capacity_counts_every_answer(self, db_session, household, make_event):
        event_id = await make_event(capacity=1)
        service = RSVPService(db_session)
        await service.set_family_rsvp(household.c, event_id, "no", [], [household.y3])

        with pytest.raises(CapacityExceeded):
            await service.set_family_rsvp(household.a, event_id, "yes", [], [household.y1])

    async def test_family_keeps_its_own_seats(self, db_session, household, make_event):
        event_id = await make_event(capacity=2)
        service = RSVPService(db_session)
        await service.set_family_rsvp(household.a, event_id, "yes", [household.a], [household.y1, household.y2])

        # a full event still lets the family change its answer or its partner resubmit
        await service.set_family_rsvp(household.a, event_id, "maybe", [household.a], [household.y1, household.y2])
        await service.set_family_rsvp(household.b, event_id, "no", [household.b], [household.y2, household.y1])

        rsvp = await service.get_family_rsvp(event_id, household.a)
        assert rsvp["answer"] == "no"
        assert sorted(rsvp["youth_ids"]) == sorted([household.y1, household.y2])

    async def test_full_event_rejects_another_family(self, db_session, household, make_event):
        event_id = await make_event(capacity=2)
        service = RSVPService(db_session)
        await service.set_family_rsvp(household.a, event_id, "yes", [], [household.y1, household.y2])

        with pytest.raises(CapacityExceeded):
            await service.set_family_rsvp(household.c, event_id, "yes", [], [household.y3])
        # adults only still fit
        await service.set_family_rsvp(household.c, event_id, "yes", [household.c], [])

        assert await _rsvp_count(db_session, event_id) == 2

    async def test_non_positive_capacity_is_unlimited(self, db_session, household, make_event):
        event_id = await make_event(capacity=0)
        service = RSVPService(db_session)

        await service.set_family_rsvp(household.a, event_id, "yes", [], [household.y1, household.y2])
        await service.set_family_rsvp(household.c, event_id, "yes", [], [household.y3])

        assert await _rsvp_count(db_session, event_id) == 2

    async def test_member_replacement_is_total(self, db_session, household, make_event):
        event_id = await make_event()
        service = RSVPService(db_session)
        await service.set_family_rsvp(
            household.a, event_id, "yes", [household.a, household.b], [household.y1, household.y2]
        )

        await service.set_family_rsvp(household.a, event_id, "yes", [], [])

        rsvp = await service.get_family_rsvp(event_id, household.a)
        assert rsvp["adult_ids"] == []
        assert rsvp["youth_ids"] == []
        assert await _member_count(db_session, event_id) == 0

    async def test_ids_are_normalized(self, db_session, household, make_event):
        event_id = await make_event()
        service = RSVPService(db_session)

        await service.set_family_rsvp(
            household.a, event_id, "yes",
            [str(household.a), household.a, 0, -4, "junk"],
            [household.y2, str(household.y1), household.y2],
        )

        rsvp = await service.get_family_rsvp(event_id, household.a)
        assert rsvp["adult_ids"] == [household.a]
        assert rsvp["youth_ids"] == [household.y2, household.y1]

    async def test_guests_clamped_and_blank_comment_cleared(self, db_session, household, make_event):
        event_id = await make_event()
        service = RSVPService(db_session)

        await service.set_family_rsvp(household.a, event_id, "yes", [], [], comment="   ", n_guests=-3)

        rsvp = await service.get_family_rsvp(event_id, household.a)
        assert rsvp["n_guests"] == 0
        assert rsvp["comment"] is None

    async def test_entered_by_admin(self, db_session, household, make_event):
        event_id = await make_event()
        service = RSVPService(db_session)

        await service.set_family_rsvp(household.a, event_id, "yes", [household.a], [], entered_by=household.admin)

        rsvp = await service.get_family_rsvp(event_id, household.a)
        assert rsvp["created_by_adult_id"] == household.a
        assert rsvp["entered_by_adult_id"] == household.admin

    @pytest.mark.parametrize("answer", ["attending", "", None])
    async def test_invalid_answer(self, db_session, household, make_event, answer):
        event_id = await make_event()
        service = RSVPService(db_session)

        with pytest.raises(InvalidInput, match="Invalid RSVP answer"):
            await service.set_family_rsvp(household.a, event_id, answer, [], [])

    async def test_invalid_event_id(self, db_session, household):
        with pytest.raises(InvalidInput, match="Invalid event"):
            await RSVPService(db_session).set_family_rsvp(household.a, 0, "yes", [], [])

    async def test_missing_event(self, db_session, household):
        with pytest.raises(NotFound, match="Event not found"):
            await RSVPService(db_session).set_family_rsvp(household.a, 9999, "yes", [], [])

    async def test_lock_can_be_switched_off(self, db_session, household, make_event, monkeypatch):
        from rsvphub.core.config import settings
        monkeypatch.setattr(settings, "RSVP_SERIALIZE_PER_EVENT", False)
        event_id = await make_event(capacity=1)
        service = RSVPService(db_session)

        await service.set_family_rsvp(household.a, event_id, "yes", [], [household.y1])
        with pytest.raises(CapacityExceeded):
            await service.set_family_rsvp(household.c, event_id, "yes", [], [household.y3])

    async def test_failure_mid_replacement_rolls_back(self, db_session, household, make_event, monkeypatch):
        """Members already deleted when the write fails come back with the old answer."""
        h = household
        event_id = await make_event()
        service = RSVPService(db_session)
        rsvp_id = await service.set_family_rsvp(h.a, event_id, "yes", [h.a, h.b], [h.y1], comment="Original")

        async def delete_then_fail(db, rsvp_id, event_id, adult_ids, youth_ids):
            await db.execute(delete(RSVPMember).where(RSVPMember.rsvp_id == rsvp_id))
            await db.flush()
            raise RuntimeError("store went away")

        monkeypatch.setattr(store, "replace_members", delete_then_fail)

        with pytest.raises(RuntimeError, match="store went away"):
            await service.set_family_rsvp(h.b, event_id, "no", [h.b], [], comment="Changed")

        rsvp = await service.get_family_rsvp(event_id, h.a)
        assert rsvp["id"] == rsvp_id
        assert rsvp["answer"] == "yes"
        assert rsvp["comment"] == "Original"
        assert rsvp["entered_by_adult_id"] == h.a
        assert rsvp["adult_ids"] == [h.a, h.b]
        assert rsvp["youth_ids"] == [h.y1]
        assert await _member_count(db_session, event_id) == 3


@pytest.mark.unit
@pytest.mark.asyncio
class TestFamilyRSVPSideEffects:

    async def test_activity_logged(self, db_session, household, make_event):
        event_id = await make_event()
        rsvp_id = await RSVPService(db_session).set_family_rsvp(
            household.a, event_id, "yes", [household.a], [household.y1], entered_by=household.admin
        )

        res = await db_session.execute(select(ActivityLog).where(ActivityLog.action_type == "rsvp.set_family"))
        entries = res.scalars().all()
        assert len(entries) == 1
        assert entries[0].adult_id == household.admin
        assert entries[0].details["rsvp_id"] == rsvp_id
        assert entries[0].details["youth_count"] == 1

    async def test_change_is_published(self, db_session, household, make_event, mock_publish_event):
        event_id = await make_event()
        rsvp_id = await RSVPService(db_session).set_family_rsvp(household.b, event_id, "maybe", [household.b], [])

        assert len(mock_publish_event) == 1
        routing_key, payload = mock_publish_event[0]
        assert routing_key == "rsvp.family_set"
        assert payload["type"] == "rsvp.family_set"
        assert payload["rsvp_id"] == rsvp_id
        assert payload["answer"] == "maybe"

    async def test_broker_failure_does_not_fail_write(self, db_session, household, make_event, monkeypatch):
        from rsvphub.core.config import settings
        from rsvphub.events import publisher

        async def broken(routing_key, payload):
            raise ConnectionError("broker down")

        monkeypatch.setattr(settings, "EVENTS_ENABLED", True)
        monkeypatch.setattr(publisher, "publish_event", broken)
        event_id = await make_event()

        rsvp_id = await RSVPService(db_session).set_family_rsvp(household.a, event_id, "yes", [], [])

        assert rsvp_id > 0
        assert await _rsvp_count(db_session, event_id) == 1

    async def test_no_rsvp_for_unrelated_adult(self, db_session, household, make_event):
        event_id = await make_event()
        service = RSVPService(db_session)
        await service.set_family_rsvp(household.a, event_id, "yes", [], [household.y1])

        assert await service.get_family_rsvp(event_id, household.c) is None
        assert (await service.get_rsvp_for_youth(event_id, household.y1))["youth_ids"] == [household.y1]
        assert await service.get_rsvp_for_youth(event_id, household.y3) is None

    async def test_audit_failure_does_not_fail_write(self, db_session, household, make_event, monkeypatch):
        def broken_log(**kwargs):
            raise RuntimeError("activity_log unavailable")

        monkeypatch.setattr(activity, "ActivityLog", broken_log)
        event_id = await make_event()

        rsvp_id = await RSVPService(db_session).set_family_rsvp(
            household.a, event_id, "yes", [household.a], [household.y1]
        )

        assert rsvp_id > 0
        assert await _rsvp_count(db_session, event_id) == 1
        assert await _member_count(db_session, event_id) == 2
        res = await db_session.execute(select(func.count(ActivityLog.id)))
        assert res.scalar() == 0

    async def test_log_activity_reports_failure(self, db_session, monkeypatch):
        def broken_log(**kwargs):
            raise RuntimeError("activity_log unavailable")

        monkeypatch.setattr(activity, "ActivityLog", broken_log)

        assert await activity.log_activity(db_session, 1, "rsvp.set_family", {"event_id": 1}) is False
