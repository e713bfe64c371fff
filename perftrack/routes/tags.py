# perftrack/routes/tags.py
"""
Coach tags and tag folders.

A tag id lives in one per-tech array on the athlete (see ``TAG_FIELDS``) and
in at most one folder. Removing a tag from an athlete touches only that
athlete's array.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends
from pymongo import ReturnDocument

from perftrack.auth import get_current_user
from perftrack.db.mongo import DocumentStore
from perftrack.deps import get_docs
from perftrack.errors import BadRequest, NotFound, oid
from perftrack.schemas.tags import FolderCreate, FolderMove, TagCreate
from perftrack.services.lookups import TAG_FIELDS, get_athlete, tag_field
from perftrack.utils.logger import log_activity
from perftrack.utils.serialize import to_jsonable

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/tags", tags=["tags"], dependencies=[Depends(get_current_user)])

MISSING_FIELDS = "Missing required fields: name and notes are required."


def _build_tag(body: TagCreate, tech: Optional[str] = None) -> dict:
    """Validate and shape a new tag. Raises before anything is written."""
    if not (body.name or "").strip() or not (body.notes or "").strip():
        raise BadRequest(MISSING_FIELDS)

    tag = {
        "name": body.name.strip(),
        "description": body.description,
        "notes": body.notes,
        "links": body.links or [],
        "tech": tech or body.tech,
        "automatic": body.automatic,
        "session": False,
        "session_id": None,
        "created_at": datetime.now(timezone.utc),
    }
    if body.automatic:
        if not tag["tech"] or not body.metric:
            raise BadRequest("Automatic tags require tech and metric")
        tag.update({
            "metric": body.metric,
            "min": body.min,
            "max": body.max,
            "greater_than": body.greaterThan,
            "less_than": body.lessThan,
        })
    return tag


# ---------- library ----------
@router.get("")
def all_tags(docs: DocumentStore = Depends(get_docs)):
    tags = list(docs.tags.find({"session": {"$ne": True}}).sort("name", 1))
    folders = list(docs.tag_folders.find({}).sort("name", 1))
    return {"tags": to_jsonable(tags), "folders": to_jsonable(folders)}


@router.post("", status_code=201)
def create_tag(body: TagCreate, user: dict = Depends(get_current_user), docs: DocumentStore = Depends(get_docs)):
    if body.tech:
        tag_field(body.tech)
    tag = _build_tag(body)
    docs.tags.insert_one(tag)
    log_activity(docs, user_id=user["user_id"], action="tag_created", metadata={"tag_id": str(tag["_id"])})
    return {"tag": to_jsonable(tag)}


@router.get("/tag/{tag_id}")
def get_tag(tag_id: str, docs: DocumentStore = Depends(get_docs)):
    tag = docs.tags.find_one({"_id": oid(tag_id, "tagId")})
    if not tag:
        raise NotFound("Tag not found")
    return {"tag": to_jsonable(tag)}


@router.delete("/tag/{tag_id}")
def delete_tag(tag_id: str, user: dict = Depends(get_current_user), docs: DocumentStore = Depends(get_docs)):
    _id = oid(tag_id, "tagId")
    res = docs.tags.delete_one({"_id": _id})
    if res.deleted_count == 0:
        raise NotFound("Tag not found")
    docs.tag_folders.update_many({"tags": _id}, {"$pull": {"tags": _id}})
    docs.athletes.update_many({}, {"$pull": {field: _id for field in TAG_FIELDS.values()}})
    log_activity(docs, user_id=user["user_id"], action="tag_deleted", metadata={"tag_id": tag_id})
    return {"message": "Tag deleted"}


@router.get("/tag/{tech}/{tag_id}")
def get_tech_tag(tech: str, tag_id: str, docs: DocumentStore = Depends(get_docs)):
    tag = docs.tags.find_one({"_id": oid(tag_id, "tagId"), "tech": tech})
    if not tag:
        raise NotFound("Tag not found")
    return {"tag": to_jsonable(tag)}


# ---------- folders ----------
@router.post("/folder", status_code=201)
def create_folder(body: FolderCreate, docs: DocumentStore = Depends(get_docs)):
    name = body.folderName.strip()
    if not name:
        raise BadRequest("Missing folderName")
    folder = {"name": name, "tags": []}
    docs.tag_folders.insert_one(folder)
    return {"folder": to_jsonable(folder)}


@router.post("/folder/update")
def move_tag(body: FolderMove, docs: DocumentStore = Depends(get_docs)):
    tag_id = oid(body.tagId, "tagId")
    folder_id = oid(body.folderId, "folderId")
    if not docs.tag_folders.find_one({"_id": folder_id}, {"_id": 1}):
        raise NotFound("Folder not found")
    if not docs.tags.find_one({"_id": tag_id}, {"_id": 1}):
        raise NotFound("Tag not found")

    # a tag sits in one folder at a time
    docs.tag_folders.update_many({"tags": tag_id}, {"$pull": {"tags": tag_id}})
    folder = docs.tag_folders.find_one_and_update(
        {"_id": folder_id},
        {"$push": {"tags": tag_id}},
        return_document=ReturnDocument.AFTER,
    )
    return {"folder": to_jsonable(folder)}


@router.delete("/folder/{folder_id}")
def delete_folder(folder_id: str, docs: DocumentStore = Depends(get_docs)):
    res = docs.tag_folders.delete_one({"_id": oid(folder_id, "folderId")})
    if res.deleted_count == 0:
        raise NotFound("Folder not found")
    return {"message": "Folder deleted"}


# ---------- per athlete ----------
@router.get("/{athlete_id}/{tech}")
def athlete_tags(athlete_id: str, tech: str, docs: DocumentStore = Depends(get_docs)):
    field = tag_field(tech)
    athlete = get_athlete(docs, athlete_id, {field: 1})
    ids = athlete.get(field) or []
    found = {t["_id"]: t for t in docs.tags.find({"_id": {"$in": ids}})}
    return {"tags": to_jsonable([found[i] for i in ids if i in found])}


@router.post("/{athlete_id}/{tech}", status_code=201)
def add_athlete_tag(
    athlete_id: str,
    tech: str,
    body: TagCreate,
    user: dict = Depends(get_current_user),
    docs: DocumentStore = Depends(get_docs),
):
    field = tag_field(tech)
    athlete = get_athlete(docs, athlete_id, {"_id": 1})

    if body.tagId and not body.name:
        tag = docs.tags.find_one({"_id": oid(body.tagId, "tagId")})
        if not tag:
            raise NotFound("Tag not found")
        docs.athletes.update_one({"_id": athlete["_id"]}, {"$addToSet": {field: tag["_id"]}})
        return {"tag": to_jsonable(tag)}

    tag = _build_tag(body, tech=tech.lower())
    docs.tags.insert_one(tag)
    docs.athletes.update_one({"_id": athlete["_id"]}, {"$push": {field: tag["_id"]}})

    log_activity(docs, user_id=user["user_id"], action="tag_created", metadata={"tag_id": str(tag["_id"]), "athlete_id": athlete_id})
    return {"tag": to_jsonable(tag)}


@router.delete("/{athlete_id}/{tech}/{tag_id}")
def remove_athlete_tag(
    athlete_id: str,
    tech: str,
    tag_id: str,
    user: dict = Depends(get_current_user),
    docs: DocumentStore = Depends(get_docs),
):
    field = tag_field(tech)
    _id = oid(tag_id, "tagId")
    res = docs.athletes.update_one({"_id": oid(athlete_id, "athleteId")}, {"$pull": {field: _id}})
    if res.matched_count == 0:
        raise NotFound("Athlete not found")
    log_activity(docs, user_id=user["user_id"], action="tag_removed", metadata={"tag_id": tag_id, "athlete_id": athlete_id, "tech": tech})
    return {"message": "Tag removed"}
