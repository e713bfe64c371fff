from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class GoalCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    goal_name: str = Field(min_length=1)
    tech: str
    metric_to_track: str
    goal_value: float
    avg_max: Literal["avg", "max"] = "max"
