# perftrack/routes/teams.py
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from perftrack.auth import get_current_user
from perftrack.authz import require_role
from perftrack.db.mongo import DocumentStore
from perftrack.deps import get_docs
from perftrack.errors import BadRequest, NotFound, oid
from perftrack.schemas.teams import LEVELS, GroupAddAthlete, GroupCreate, TeamCreate
from perftrack.utils.logger import log_activity
from perftrack.utils.serialize import to_jsonable

router = APIRouter(prefix="/api", tags=["teams"], dependencies=[Depends(get_current_user)])


def _get_group(docs: DocumentStore, group_id: str) -> dict:
    group = docs.groups.find_one({"_id": oid(group_id, "groupId")})
    if not group:
        raise NotFound("Group not found")
    return group


# ---------- teams ----------
@router.get("/team")
def list_teams(docs: DocumentStore = Depends(get_docs)):
    return {"teams": to_jsonable(list(docs.teams.find({}).sort("name", 1)))}


@router.post("/team/create-team", status_code=201)
def create_team(
    body: TeamCreate,
    user: dict = Depends(require_role("ADMIN", "COACH")),
    docs: DocumentStore = Depends(get_docs),
):
    coach_id = oid(body.coach, "coach")
    team = {
        "name": body.name.strip(),
        "coach": coach_id,
        "assistants": [oid(a, "assistant") for a in body.assistants],
        "players": list(dict.fromkeys(oid(p, "player") for p in body.players)),
        "u": body.u,
        "created_at": datetime.now(timezone.utc),
    }
    res = docs.teams.insert_one(team)
    docs.coaches.update_one({"_id": coach_id}, {"$addToSet": {"teams": res.inserted_id}})

    log_activity(docs, user_id=user["user_id"], action="team_created", metadata={"team_id": str(res.inserted_id)})
    return {"team": to_jsonable(team)}


@router.delete("/team/{team_id}")
def delete_team(
    team_id: str,
    user: dict = Depends(require_role("ADMIN", "COACH")),
    docs: DocumentStore = Depends(get_docs),
):
    _id = oid(team_id, "teamId")
    res = docs.teams.delete_one({"_id": _id})
    if res.deleted_count == 0:
        raise NotFound("Team not found")
    docs.coaches.update_many({"teams": _id}, {"$pull": {"teams": _id}})
    return {"message": "Team deleted"}


@router.get("/team/{team_id}/athletes")
def team_athletes(team_id: str, docs: DocumentStore = Depends(get_docs)):
    team = docs.teams.find_one({"_id": oid(team_id, "teamId")})
    if not team:
        raise NotFound("Team not found")
    athletes = list(docs.athletes.find({"_id": {"$in": team.get("players") or []}}))
    return {"athletes": to_jsonable(athletes)}


# ---------- my teams / groups ----------
@router.get("/my-teams")
def my_teams(user: dict = Depends(get_current_user), docs: DocumentStore = Depends(get_docs)):
    if not user.get("object_id"):
        raise BadRequest("missing Coach ID")
    coach_id = oid(user["object_id"], "coach id")
    teams = list(docs.teams.find({"$or": [{"coach": coach_id}, {"assistants": coach_id}]}))
    return {"teams": to_jsonable(teams)}


@router.post("/my-teams", status_code=201)
def create_group(
    body: GroupCreate,
    user: dict = Depends(require_role("ADMIN", "COACH")),
    docs: DocumentStore = Depends(get_docs),
):
    if body.level not in LEVELS:
        raise BadRequest(f"Invalid level: {body.level}")
    head = [oid(c, "head_coach") for c in body.head_coach]
    if not head and user.get("object_id"):
        head = [oid(user["object_id"], "coach id")]
    group = {
        "name": body.name.strip(),
        "level": body.level,
        "head_coach": head,
        "assistants": [oid(a, "assistant") for a in body.assistants],
        "athletes": [],
    }
    docs.groups.insert_one(group)
    return {"group": to_jsonable(group)}


@router.get("/my-teams/{group_id}")
def get_group(group_id: str, docs: DocumentStore = Depends(get_docs)):
    group = _get_group(docs, group_id)
    athletes = list(docs.athletes.find({"_id": {"$in": group.get("athletes") or []}}))
    head_coaches = list(docs.coaches.find({"_id": {"$in": group.get("head_coach") or []}}))
    assistants = list(docs.coaches.find({"_id": {"$in": group.get("assistants") or []}}))
    return to_jsonable({
        "name": group.get("name"),
        "level": group.get("level"),
        "athletes": athletes,
        "headCoaches": head_coaches,
        "assistants": assistants,
    })


@router.get("/my-teams/{group_id}/add-athlete/{level}")
def candidates(group_id: str, level: str, docs: DocumentStore = Depends(get_docs)):
    group = _get_group(docs, group_id)
    query = {"_id": {"$nin": group.get("athletes") or []}}
    if level != "all":
        query["level"] = level
    athletes = list(docs.athletes.find(query).sort([("last_name", 1), ("first_name", 1)]))
    return {"athletes": to_jsonable(athletes)}


@router.post("/my-teams/{group_id}/add-athlete/{level}")
def add_to_group(
    group_id: str,
    level: str,
    body: GroupAddAthlete,
    docs: DocumentStore = Depends(get_docs),
):
    group = _get_group(docs, group_id)
    athlete_id = oid(body.athleteId, "athleteId")
    if not docs.athletes.find_one({"_id": athlete_id}, {"_id": 1}):
        raise NotFound("Athlete not found")
    docs.groups.update_one({"_id": group["_id"]}, {"$addToSet": {"athletes": athlete_id}})
    return {"message": "Athlete added to group"}


@router.delete("/my-teams/{group_id}/remove-athlete/{athlete_id}")
def remove_from_group(group_id: str, athlete_id: str, docs: DocumentStore = Depends(get_docs)):
    group = _get_group(docs, group_id)
    _id = oid(athlete_id, "athleteId")
    if _id not in (group.get("athletes") or []):
        raise NotFound("Athlete not in group")
    docs.groups.update_one({"_id": group["_id"]}, {"$pull": {"athletes": _id}})
    return {"message": "Athlete removed from group"}
