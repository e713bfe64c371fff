from typing import Optional

from pydantic import BaseModel, Field


class CoachCreate(BaseModel):
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    email: str = Field(min_length=3)
    password: str = Field(min_length=1)
    photo_url: Optional[str] = None
