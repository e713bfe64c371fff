# perftrack/routes/goals.py
from fastapi import APIRouter, Depends

from perftrack.auth import get_current_user
from perftrack.db.mongo import DocumentStore
from perftrack.deps import get_docs
from perftrack.errors import BadRequest, NotFound, oid
from perftrack.schemas.goals import GoalCreate
from perftrack.services.goals import GOAL_TECHS, METRIC_COLUMNS
from perftrack.services.lookups import get_athlete
from perftrack.utils.serialize import to_jsonable

router = APIRouter(prefix="/api/athlete", tags=["goals"], dependencies=[Depends(get_current_user)])


@router.get("/{athlete_id}/goals")
def list_goals(athlete_id: str, docs: DocumentStore = Depends(get_docs)):
    athlete = get_athlete(docs, athlete_id, {"_id": 1})
    return {"goals": to_jsonable(list(docs.goals.find({"athlete": athlete["_id"]})))}


@router.post("/{athlete_id}/goals", status_code=201)
def create_goal(athlete_id: str, body: GoalCreate, docs: DocumentStore = Depends(get_docs)):
    if body.tech not in GOAL_TECHS:
        raise BadRequest(f"Invalid tech: {body.tech}")
    if body.metric_to_track not in METRIC_COLUMNS[body.tech]:
        raise BadRequest(f"Invalid metric for {body.tech}: {body.metric_to_track}")
    athlete = get_athlete(docs, athlete_id, {"_id": 1})

    goal = body.model_dump()
    goal.update({
        "athlete": athlete["_id"],
        "current_value": 0,
        "sum": 0,
        "length": 0,
        "complete": False,
    })
    res = docs.goals.insert_one(goal)
    docs.athletes.update_one({"_id": athlete["_id"]}, {"$push": {"goals": res.inserted_id}})
    return {"goal": to_jsonable(goal)}


@router.get("/{athlete_id}/goals/{goal_id}")
def get_goal(athlete_id: str, goal_id: str, docs: DocumentStore = Depends(get_docs)):
    goal = docs.goals.find_one({"_id": oid(goal_id, "goalId"), "athlete": oid(athlete_id, "athleteId")})
    if not goal:
        raise NotFound("Goal not found")
    return {"goal": to_jsonable(goal)}


@router.delete("/{athlete_id}/goals/{goal_id}")
def delete_goal(athlete_id: str, goal_id: str, docs: DocumentStore = Depends(get_docs)):
    _id = oid(goal_id, "goalId")
    athlete = oid(athlete_id, "athleteId")
    res = docs.goals.delete_one({"_id": _id, "athlete": athlete})
    if res.deleted_count == 0:
        raise NotFound("Goal not found")
    docs.athletes.update_one({"_id": athlete}, {"$pull": {"goals": _id}})
    return {"message": "Goal deleted"}
