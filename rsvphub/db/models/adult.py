from sqlalchemy import Column, Integer, String, DateTime, func, Enum
from rsvphub.db.session import Base
import enum

class RoleEnum(str, enum.Enum):
    member = "member"
    admin = "admin"

class Adult(Base):
    """Account holder; owned by the identity subsystem, read here by id."""
    __tablename__ = "adults"
    id = Column(Integer, primary_key=True, autoincrement=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    role = Column(Enum(RoleEnum), default=RoleEnum.member, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    @property
    def is_admin(self) -> bool:
        return self.role == RoleEnum.admin
