from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ScoreRange(BaseModel):
    min: float
    max: float
    score: float


class TemplateField(BaseModel):
    label: str
    type: str = "text"
    required: bool = False
    options: List[str] = []
    client_id: Optional[str] = None
    is_scored: bool = False
    score_ranges: List[ScoreRange] = []
    max_score: Optional[float] = None
    weight: float = 1
    passing_score: Optional[float] = None


class TemplateSection(BaseModel):
    title: str
    fields: List[TemplateField] = []
    is_scored: bool = False
    max_score: Optional[float] = None
    weight: float = 1
    passing_score: Optional[float] = None


class TemplateCreate(BaseModel):
    name: str = Field(min_length=1)
    desc: Optional[str] = None
    sections: List[TemplateSection]
    graphs: List[Dict[str, Any]] = []
    available: bool = True


class TemplateAvailability(BaseModel):
    model_config = ConfigDict(extra="forbid")

    available: bool


class AssessmentSection(BaseModel):
    title: str
    responses: Dict[str, Any] = {}


class AssessmentCreate(BaseModel):
    athleteId: str
    templateId: str
    title: Optional[str] = None
    sections: List[AssessmentSection]
