from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List, Dict
from rsvphub.db.models.rsvp import RSVPAnswer


class FamilyRSVPSet(BaseModel):
    """Body of a family RSVP submission."""
    answer: RSVPAnswer
    adult_ids: List[int] = Field(default_factory=list)
    youth_ids: List[int] = Field(default_factory=list)
    comment: Optional[str] = None
    n_guests: int = 0

class FamilyRSVPOut(BaseModel):
    id: int
    event_id: int
    created_by_adult_id: int
    entered_by_adult_id: Optional[int] = None
    answer: RSVPAnswer
    comment: Optional[str] = None
    n_guests: int
    adult_ids: List[int]
    youth_ids: List[int]

class ParticipantCounts(BaseModel):
    adults: int
    youth: int
    guests: int = 0

class HeadCounts(BaseModel):
    adults: int
    kids: int

class EventRSVPSummary(BaseModel):
    event_id: int
    capacity: Optional[int] = None
    youth_registered: int
    family: Dict[str, ParticipantCounts]
    public: Dict[str, HeadCounts]
    combined: Dict[str, HeadCounts]

class NamesOut(BaseModel):
    answer: RSVPAnswer
    adults: List[str]
    youth: List[str]

class CommentsOut(BaseModel):
    event_id: int
    comments: Dict[int, str]

class PublicRSVPCreate(BaseModel):
    first_name: str
    last_name: str
    email: EmailStr
    phone: Optional[str] = None
    total_adults: int = 0
    total_kids: int = 0
    answer: RSVPAnswer = RSVPAnswer.yes
    comment: Optional[str] = None

class PublicRSVPUpdate(BaseModel):
    total_adults: int = 0
    total_kids: int = 0
    answer: RSVPAnswer
    comment: Optional[str] = None

class PublicRSVPCreated(BaseModel):
    id: int
    token: str

class PublicRSVPOut(BaseModel):
    id: int
    event_id: int
    first_name: str
    last_name: str
    total_adults: int
    total_kids: int
    answer: RSVPAnswer
    comment: Optional[str] = None

    class Config:
        from_attributes = True
