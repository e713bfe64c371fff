from pydantic import BaseModel, Field


class SessionRename(BaseModel):
    sessionName: str = Field(min_length=1)
    techName: str
