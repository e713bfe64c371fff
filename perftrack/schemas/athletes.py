from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class AthleteCreate(BaseModel):
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    email: str = Field(min_length=3)
    level: Optional[str] = None
    u: Optional[str] = None
    program_type: Optional[str] = None
    password: Optional[str] = None


class AthleteUpdate(BaseModel):
    """Only these fields can be changed through the update route."""
    model_config = ConfigDict(extra="forbid")

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    level: Optional[str] = None
    program_type: Optional[str] = None
    photo_url: Optional[str] = None
    height: Optional[float] = Field(default=None, gt=0)
    weight: Optional[float] = Field(default=None, gt=0)
    u: Optional[str] = None


class WeightUpdate(BaseModel):
    weight: float = Field(gt=0)


class HeightUpdate(BaseModel):
    height: float = Field(gt=0)


class CoachNote(BaseModel):
    coach_name: Optional[str] = None
    coach_note: str = Field(min_length=1)
    section: str = "general"
    is_athlete: bool = False


class NoteRequest(BaseModel):
    note: Optional[CoachNote] = None
