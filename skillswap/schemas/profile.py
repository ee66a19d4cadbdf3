from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime
from enum import Enum

class Availability(str, Enum):
    WEEKENDS = "Weekends"
    EVENINGS = "Evenings"
    WEEKDAYS = "Weekdays"
    MORNINGS = "Mornings"

def clean_skill_labels(labels: List[str]) -> List[str]:
    """Trim labels, drop blanks and exact duplicates, keep order."""
    cleaned = []
    for label in labels:
        label = label.strip()
        if label and label not in cleaned:
            cleaned.append(label)
    return cleaned

class Profile(BaseModel):
    id: str
    name: str
    location: Optional[str] = None
    skills_offered: List[str] = []
    skills_wanted: List[str] = []
    availability: List[Availability] = []
    is_public: bool = True
    rating: float = 0
    total_ratings: int = Field(0, ge=0)
    avatar_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("skills_offered", "skills_wanted", "availability", mode="before")
    @classmethod
    def none_as_empty(cls, value):
        return value or []

class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    location: Optional[str] = Field(None, max_length=200)
    skills_offered: Optional[List[str]] = None
    skills_wanted: Optional[List[str]] = None
    availability: Optional[List[Availability]] = None
    is_public: Optional[bool] = None
    avatar_url: Optional[str] = None

    @field_validator("skills_offered", "skills_wanted")
    @classmethod
    def clean_skills(cls, value):
        if value is None:
            return value
        return clean_skill_labels(value)

    @field_validator("availability")
    @classmethod
    def unique_slots(cls, value):
        if value is None:
            return value
        return list(dict.fromkeys(value))

class SkillMatchResponse(BaseModel):
    user_id: str
    can_offer: List[str]
    can_learn: List[str]
    is_mutual: bool
