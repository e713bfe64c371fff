from typing import List, Optional

from pydantic import BaseModel


class TagCreate(BaseModel):
    # name/notes are checked in the handler so the error message is fixed
    name: Optional[str] = None
    notes: Optional[str] = None
    description: Optional[str] = None
    links: Optional[List[str]] = None

    automatic: bool = False
    tech: Optional[str] = None
    metric: Optional[str] = None
    min: Optional[float] = None
    max: Optional[float] = None
    greaterThan: Optional[float] = None
    lessThan: Optional[float] = None

    # attach an existing tag instead of creating one
    tagId: Optional[str] = None


class FolderCreate(BaseModel):
    folderName: str


class FolderMove(BaseModel):
    tagId: str
    folderId: str
