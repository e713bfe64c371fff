from typing import List, Optional

from pydantic import BaseModel


class Point(BaseModel):
    x: float
    y: float


class MissDistance(BaseModel):
    inches: Optional[float] = None
    percent: Optional[float] = None


class IntendedPitch(BaseModel):
    pitchType: str
    intended: Point
    actual: Point
    distance: MissDistance = MissDistance()
    level: Optional[str] = None


class IntendedSession(BaseModel):
    athleteId: str
    sessionName: Optional[str] = None
    pitches: List[IntendedPitch]
