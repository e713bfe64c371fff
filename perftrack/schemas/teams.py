from typing import List, Optional

from pydantic import BaseModel, Field

LEVELS = ("Youth", "High School", "College", "Pro", "all")


class TeamCreate(BaseModel):
    name: str = Field(min_length=1)
    coach: str
    players: List[str]
    u: str
    assistants: List[str] = []


class GroupCreate(BaseModel):
    name: str = Field(min_length=1)
    level: str = "all"
    head_coach: List[str] = []
    assistants: List[str] = []


class GroupAddAthlete(BaseModel):
    athleteId: str
