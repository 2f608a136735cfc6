from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey, func, Enum, Index, CheckConstraint
from rsvphub.db.session import Base
import enum

class RSVPAnswer(str, enum.Enum):
    yes = "yes"
    maybe = "maybe"
    no = "no"

class ParticipantType(str, enum.Enum):
    adult = "adult"
    youth = "youth"

class RSVP(Base):
    """
    One family's response to one event.

    No unique constraint on (event_id, created_by_adult_id): writers go
    through the family resolver, which keeps a single row per family.
    """
    __tablename__ = "rsvps"
    id = Column(Integer, primary_key=True, autoincrement=True)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False)
    created_by_adult_id = Column(Integer, ForeignKey("adults.id"), nullable=False)
    entered_by_adult_id = Column(Integer, ForeignKey("adults.id"), nullable=True)
    answer = Column(Enum(RSVPAnswer), nullable=False, default=RSVPAnswer.yes)
    comment = Column(Text, nullable=True)
    n_guests = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index('idx_rsvp_event_creator', 'event_id', 'created_by_adult_id'),
        Index('idx_rsvp_event_answer', 'event_id', 'answer'),
    )

class RSVPMember(Base):
    __tablename__ = "rsvp_members"
    id = Column(Integer, primary_key=True, autoincrement=True)
    rsvp_id = Column(Integer, ForeignKey("rsvps.id", ondelete="CASCADE"), nullable=False)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False)
    participant_type = Column(Enum(ParticipantType), nullable=False)
    adult_id = Column(Integer, ForeignKey("adults.id"), nullable=True)
    youth_id = Column(Integer, ForeignKey("youths.id"), nullable=True)

    __table_args__ = (
        CheckConstraint(
            "(participant_type = 'adult' AND adult_id IS NOT NULL AND youth_id IS NULL) OR "
            "(participant_type = 'youth' AND youth_id IS NOT NULL AND adult_id IS NULL)",
            name='ck_rsvp_member_kind',
        ),
        Index('idx_rsvp_member_rsvp', 'rsvp_id'),
        Index('idx_rsvp_member_event_type', 'event_id', 'participant_type'),
    )
