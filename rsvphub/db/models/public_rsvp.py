from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, func, Enum, Index
from rsvphub.db.session import Base
from rsvphub.db.models.rsvp import RSVPAnswer

class PublicRSVP(Base):
    """Logged-out household response; not part of the household graph."""
    __tablename__ = "public_rsvps"
    id = Column(Integer, primary_key=True, autoincrement=True)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)
    total_adults = Column(Integer, nullable=False, default=0)
    total_kids = Column(Integer, nullable=False, default=0)
    answer = Column(Enum(RSVPAnswer), nullable=False, default=RSVPAnswer.yes)
    comment = Column(Text, nullable=True)
    token_hash = Column(String(64), nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index('idx_public_rsvp_event_answer', 'event_id', 'answer'),
    )
