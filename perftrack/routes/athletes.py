# perftrack/routes/athletes.py
import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query
from pymongo import ReturnDocument
from sqlalchemy import select

from perftrack.auth import get_current_user
from perftrack.authz import require_role
from perftrack.db.mongo import DocumentStore
from perftrack.db.sql import MetricsStore
from perftrack.db.tables import WeightLog
from perftrack.deps import get_docs, get_identity, get_metrics
from perftrack.errors import BadRequest, Conflict, NotFound, oid
from perftrack.identity import IdentityProvider
from perftrack.schemas.athletes import AthleteCreate, AthleteUpdate, HeightUpdate, NoteRequest, WeightUpdate
from perftrack.services.lookups import TAG_FIELDS, get_athlete, parse_bool, visible_notes
from perftrack.utils.logger import log_activity
from perftrack.utils.serialize import to_jsonable

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["athletes"], dependencies=[Depends(get_current_user)])


def _utcnow():
    return datetime.now(timezone.utc)


def _log_weight(metrics: MetricsStore, athlete_id: str, weight: float) -> None:
    # second store; the document write before this is not rolled back if it fails
    with metrics.session_scope() as s:
        s.add(WeightLog(athlete_id=athlete_id, weight=weight, date=_utcnow()))


@router.get("/athletes")
def list_athletes(u: Optional[str] = Query(None), docs: DocumentStore = Depends(get_docs)):
    if not u:
        raise BadRequest("Missing u param")
    athletes = list(docs.athletes.find({"u": u}).sort([("last_name", 1), ("first_name", 1)]))
    return {"athletes": to_jsonable(athletes)}


@router.post("/athletes", status_code=201)
def add_athlete(
    body: AthleteCreate,
    user: dict = Depends(require_role("ADMIN", "COACH")),
    docs: DocumentStore = Depends(get_docs),
    identity: IdentityProvider = Depends(get_identity),
):
    if body.password and identity.get_by_email(body.email):
        raise Conflict("A user with this email already exists")

    doc = {
        "first_name": body.first_name.strip(),
        "last_name": body.last_name.strip(),
        "email": body.email.strip().lower(),
        "level": body.level,
        "u": body.u or user.get("object_id"),
        "program_type": body.program_type,
        "height": None,
        "weight": None,
        "photo_url": None,
        "coaches_notes": [],
        "goals": [],
        "assessments": [],
        "created_at": _utcnow(),
    }
    for field in TAG_FIELDS.values():
        doc[field] = []
    res = docs.athletes.insert_one(doc)

    if body.password:
        identity.create_user(body.email, body.password, "ATHLETE", str(res.inserted_id))

    log_activity(docs, user_id=user["user_id"], action="athlete_created", metadata={"athlete_id": str(res.inserted_id)})
    return {"athlete": to_jsonable(doc)}


@router.get("/manage-athletes")
def manage_athletes(user: dict = Depends(require_role("ADMIN", "COACH")), docs: DocumentStore = Depends(get_docs)):
    if user["role"] == "ADMIN":
        athletes = list(docs.athletes.find({}).sort([("last_name", 1), ("first_name", 1)]))
        return {"athletes": to_jsonable(athletes)}

    if not user.get("object_id"):
        return {"athletes": []}
    player_ids = set()
    for team in docs.teams.find({"coach": oid(user["object_id"], "coach id")}, {"players": 1}):
        player_ids.update(team.get("players") or [])
    athletes = list(docs.athletes.find({"_id": {"$in": list(player_ids)}}).sort([("last_name", 1), ("first_name", 1)]))
    return {"athletes": to_jsonable(athletes)}


@router.get("/athlete/{athlete_id}")
def get_one(
    athlete_id: str,
    isAthlete: Optional[str] = Query(None),
    section: Optional[str] = Query(None),
    docs: DocumentStore = Depends(get_docs),
):
    athlete = get_athlete(docs, athlete_id)
    athlete["coaches_notes"] = visible_notes(athlete, section, parse_bool(isAthlete))
    return {"athlete": to_jsonable(athlete)}


@router.put("/athlete/{athlete_id}/update")
def update_athlete(
    athlete_id: str,
    body: AthleteUpdate,
    user: dict = Depends(get_current_user),
    docs: DocumentStore = Depends(get_docs),
    metrics: MetricsStore = Depends(get_metrics),
):
    changes = body.model_dump(exclude_unset=True)
    if not changes:
        raise BadRequest("No fields to update")

    athlete = docs.athletes.find_one_and_update(
        {"_id": oid(athlete_id, "athleteId")},
        {"$set": changes},
        return_document=ReturnDocument.AFTER,
    )
    if not athlete:
        raise NotFound("Athlete not found")
    if changes.get("weight") is not None:
        _log_weight(metrics, athlete_id, changes["weight"])

    log_activity(docs, user_id=user["user_id"], action="athlete_updated", metadata={"athlete_id": athlete_id, "fields": sorted(changes)})
    return {"athlete": to_jsonable(athlete)}


@router.delete("/athlete/{athlete_id}")
def delete_athlete(
    athlete_id: str,
    user: dict = Depends(require_role("ADMIN", "COACH")),
    docs: DocumentStore = Depends(get_docs),
    identity: IdentityProvider = Depends(get_identity),
):
    _id = oid(athlete_id, "athleteId")
    res = docs.athletes.delete_one({"_id": _id})
    if res.deleted_count == 0:
        raise NotFound("Athlete not found")

    docs.teams.update_many({"players": _id}, {"$pull": {"players": _id}})
    docs.groups.update_many({"athletes": _id}, {"$pull": {"athletes": _id}})
    docs.goals.delete_many({"athlete": _id})
    identity.delete_by_object_id(athlete_id)

    log_activity(docs, user_id=user["user_id"], action="athlete_deleted", metadata={"athlete_id": athlete_id})
    return {"message": "Athlete deleted"}


# ---------- body metrics ----------
@router.put("/athlete/{athlete_id}/weight")
def update_weight(
    athlete_id: str,
    body: WeightUpdate,
    user: dict = Depends(get_current_user),
    docs: DocumentStore = Depends(get_docs),
    metrics: MetricsStore = Depends(get_metrics),
):
    res = docs.athletes.update_one({"_id": oid(athlete_id, "athleteId")}, {"$set": {"weight": body.weight}})
    if res.matched_count == 0:
        raise NotFound("Athlete not found")
    _log_weight(metrics, athlete_id, body.weight)

    log_activity(docs, user_id=user["user_id"], action="weight_updated", metadata={"athlete_id": athlete_id, "weight": body.weight})
    return {"weight": body.weight}


@router.get("/athlete/{athlete_id}/weight/progress")
def weight_progress(
    athlete_id: str,
    docs: DocumentStore = Depends(get_docs),
    metrics: MetricsStore = Depends(get_metrics),
):
    get_athlete(docs, athlete_id, {"_id": 1})
    with metrics.session_scope() as s:
        logs = s.scalars(
            select(WeightLog).where(WeightLog.athlete_id == athlete_id).order_by(WeightLog.date, WeightLog.id)
        ).all()
        out = [{"weight": w.weight, "date": w.date.isoformat()} for w in logs]
    return {"weightLogs": out}


@router.put("/athlete/{athlete_id}/height")
def update_height(athlete_id: str, body: HeightUpdate, docs: DocumentStore = Depends(get_docs)):
    res = docs.athletes.update_one({"_id": oid(athlete_id, "athleteId")}, {"$set": {"height": body.height}})
    if res.matched_count == 0:
        raise NotFound("Athlete not found")
    return {"height": body.height}


@router.get("/athlete/{athlete_id}/bw")
def body_weight(athlete_id: str, docs: DocumentStore = Depends(get_docs)):
    athlete = get_athlete(docs, athlete_id, {"height": 1, "weight": 1})
    return {"height": athlete.get("height"), "weight": athlete.get("weight")}


@router.put("/athlete/{athlete_id}/notes")
def add_note(
    athlete_id: str,
    body: NoteRequest,
    user: dict = Depends(require_role("ADMIN", "COACH")),
    docs: DocumentStore = Depends(get_docs),
):
    if body.note is None:
        raise BadRequest("Missing Coaches Note")
    note = body.note.model_dump()
    note["date"] = _utcnow()

    res = docs.athletes.update_one({"_id": oid(athlete_id, "athleteId")}, {"$push": {"coaches_notes": note}})
    if res.matched_count == 0:
        raise NotFound("Athlete not found")
    return {"message": "Note saved!"}
