from sqlalchemy import Column, Integer, String, DateTime, func, Index
from rsvphub.db.session import Base

class Event(Base):
    __tablename__ = "events"
    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    starts_at = Column(DateTime(timezone=True), nullable=True)
    # Max distinct youths across all RSVPs; NULL or <= 0 means unlimited
    capacity = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index('idx_event_date', 'starts_at'),
    )

    @property
    def has_capacity_limit(self) -> bool:
        return self.capacity is not None and self.capacity > 0
