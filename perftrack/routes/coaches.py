# perftrack/routes/coaches.py
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from perftrack.auth import get_current_user
from perftrack.authz import require_role
from perftrack.db.mongo import DocumentStore
from perftrack.deps import get_docs, get_identity
from perftrack.errors import Conflict, NotFound, oid
from perftrack.identity import IdentityProvider
from perftrack.schemas.coaches import CoachCreate
from perftrack.utils.logger import log_activity
from perftrack.utils.serialize import to_jsonable

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/coaches", tags=["coaches"], dependencies=[Depends(get_current_user)])


@router.get("")
def list_coaches(docs: DocumentStore = Depends(get_docs)):
    coaches = list(docs.coaches.find({}).sort([("last_name", 1), ("first_name", 1)]))
    return {"coaches": to_jsonable(coaches)}


@router.post("", status_code=201)
def add_coach(
    body: CoachCreate,
    user: dict = Depends(require_role("ADMIN")),
    docs: DocumentStore = Depends(get_docs),
    identity: IdentityProvider = Depends(get_identity),
):
    if identity.get_by_email(body.email):
        raise Conflict("A user with this email already exists")

    coach = {
        "first_name": body.first_name.strip(),
        "last_name": body.last_name.strip(),
        "email": body.email.strip().lower(),
        "photo_url": body.photo_url,
        "teams": [],
        "created_at": datetime.now(timezone.utc),
    }
    res = docs.coaches.insert_one(coach)
    identity.create_user(body.email, body.password, "COACH", str(res.inserted_id))

    log_activity(docs, user_id=user["user_id"], action="coach_created", metadata={"coach_id": str(res.inserted_id)})
    return {"coach": to_jsonable(coach)}


@router.get("/{coach_id}")
def get_coach(coach_id: str, docs: DocumentStore = Depends(get_docs)):
    _id = oid(coach_id, "coachId")
    coach = docs.coaches.find_one({"_id": _id})
    if not coach:
        raise NotFound("Coach not found")
    groups = list(docs.groups.find({"head_coach": _id}))
    return {"coach": to_jsonable(coach), "groups": to_jsonable(groups)}


@router.delete("/{coach_id}")
def delete_coach(
    coach_id: str,
    user: dict = Depends(require_role("ADMIN")),
    docs: DocumentStore = Depends(get_docs),
    identity: IdentityProvider = Depends(get_identity),
):
    _id = oid(coach_id, "coachId")
    res = docs.coaches.delete_one({"_id": _id})
    if res.deleted_count == 0:
        raise NotFound("Coach not found")

    docs.teams.update_many({"assistants": _id}, {"$pull": {"assistants": _id}})
    docs.groups.update_many({}, {"$pull": {"head_coach": _id, "assistants": _id}})
    identity.delete_by_object_id(coach_id)

    log_activity(docs, user_id=user["user_id"], action="coach_deleted", metadata={"coach_id": coach_id})
    return {"message": "Coach deleted"}
