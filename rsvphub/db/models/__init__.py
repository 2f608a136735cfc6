"""Database models package."""
from rsvphub.db.models.adult import Adult, RoleEnum
from rsvphub.db.models.youth import Youth
from rsvphub.db.models.household import CaregiverLink
from rsvphub.db.models.event import Event
from rsvphub.db.models.rsvp import RSVP, RSVPMember, RSVPAnswer, ParticipantType
from rsvphub.db.models.public_rsvp import PublicRSVP
from rsvphub.db.models.activity_log import ActivityLog

__all__ = [
    "Adult", "RoleEnum", "Youth", "CaregiverLink", "Event",
    "RSVP", "RSVPMember", "RSVPAnswer", "ParticipantType",
    "PublicRSVP", "ActivityLog",
]
