from sqlalchemy import Column, Integer, String, DateTime, func
from rsvphub.db.session import Base

class Youth(Base):
    __tablename__ = "youths"
    id = Column(Integer, primary_key=True, autoincrement=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
