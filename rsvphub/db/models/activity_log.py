from sqlalchemy import Column, Integer, String, DateTime, JSON, func, Index
from rsvphub.db.session import Base

class ActivityLog(Base):
    __tablename__ = "activity_log"
    id = Column(Integer, primary_key=True, autoincrement=True)
    adult_id = Column(Integer, nullable=True)  # None for logged-out actors
    action_type = Column(String(64), nullable=False)
    details = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index('idx_activity_action', 'action_type'),
        Index('idx_activity_adult', 'adult_id'),
    )
