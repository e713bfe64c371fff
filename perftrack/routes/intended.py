# perftrack/routes/intended.py
import logging
import uuid

from fastapi import APIRouter, Depends

from perftrack.auth import get_current_user
from perftrack.db.mongo import DocumentStore
from perftrack.db.sql import MetricsStore
from perftrack.db.tables import Intended
from perftrack.deps import get_docs, get_metrics
from perftrack.errors import BadRequest, NotFound
from perftrack.schemas.intended import IntendedSession
from perftrack.services.goals import update_goals_after_ingest
from perftrack.services.lookups import get_athlete
from perftrack.services.rows import fetch_session
from perftrack.utils.logger import log_activity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/intended-zone", tags=["intended-zone"], dependencies=[Depends(get_current_user)])


@router.post("", status_code=201)
def create_session(
    body: IntendedSession,
    user: dict = Depends(get_current_user),
    docs: DocumentStore = Depends(get_docs),
    metrics: MetricsStore = Depends(get_metrics),
):
    if not body.pitches:
        raise BadRequest("No pitches provided")
    athlete = get_athlete(docs, body.athleteId, {"_id": 1, "level": 1})

    session_id = str(uuid.uuid4())
    rows = [
        {
            "athlete_id": str(athlete["_id"]),
            "session_id": session_id,
            "session_name": body.sessionName,
            "play_level": p.level or athlete.get("level"),
            "pitch_type": p.pitchType,
            "intended_x": p.intended.x,
            "intended_y": p.intended.y,
            "actual_x": p.actual.x,
            "actual_y": p.actual.y,
            "distance_inches": p.distance.inches,
            "distance_percent": p.distance.percent,
        }
        for p in body.pitches
    ]
    with metrics.session_scope() as s:
        s.add_all([Intended(**r) for r in rows])

    # rows are committed; a failure here leaves them in place
    update_goals_after_ingest(docs, athlete["_id"], "intended", rows)

    log_activity(docs, user_id=user["user_id"], action="intended_session_created",
                 metadata={"athlete_id": body.athleteId, "session_id": session_id, "pitches": len(rows)})
    return {"sessionId": session_id}


@router.get("/session/{session_id}")
def get_session(session_id: str, metrics: MetricsStore = Depends(get_metrics)):
    pitches = fetch_session(metrics, Intended, session_id)
    if not pitches:
        raise NotFound("No pitches found")
    return {"intendedData": pitches}
