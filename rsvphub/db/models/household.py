from sqlalchemy import Column, Integer, ForeignKey, Index, UniqueConstraint
from rsvphub.db.session import Base

class CaregiverLink(Base):
    """
    Undirected adult <-> youth edge of the household graph.

    Maintained by profile management; the RSVP core only reads it.
    """
    __tablename__ = "caregiver_links"
    id = Column(Integer, primary_key=True, autoincrement=True)
    adult_id = Column(Integer, ForeignKey("adults.id", ondelete="CASCADE"), nullable=False)
    youth_id = Column(Integer, ForeignKey("youths.id", ondelete="CASCADE"), nullable=False)

    __table_args__ = (
        UniqueConstraint('adult_id', 'youth_id', name='uq_caregiver_adult_youth'),
        Index('idx_caregiver_adult', 'adult_id'),
        Index('idx_caregiver_youth', 'youth_id'),
    )
