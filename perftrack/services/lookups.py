# perftrack/services/lookups.py
from typing import Optional

from perftrack.db.mongo import DocumentStore
from perftrack.errors import BadRequest, NotFound, oid

# tag tech -> athlete array holding that tech's tag ids
TAG_FIELDS = {
    "blast": "blast_tags",
    "hittrax": "hit_tags",
    "trackman": "track_tags",
    "armcare": "arm_tags",
    "forceplates": "force_tags",
    "assessments": "assessment_tags",
}


def tag_field(tech: str) -> str:
    field = TAG_FIELDS.get((tech or "").strip().lower())
    if not field:
        raise BadRequest(f"Invalid tech: {tech}")
    return field


def get_athlete(docs: DocumentStore, athlete_id: str, projection: Optional[dict] = None) -> dict:
    athlete = docs.athletes.find_one({"_id": oid(athlete_id, "athleteId")}, projection)
    if not athlete:
        raise NotFound("Athlete not found")
    return athlete


def parse_bool(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in {"true", "1", "yes"}


def visible_notes(athlete: dict, section: Optional[str] = None, is_athlete: bool = False) -> list:
    """Coach notes for a section; athletes only see the ones marked for them."""
    notes = athlete.get("coaches_notes") or []
    if section:
        notes = [n for n in notes if n.get("section") == section]
    if is_athlete:
        notes = [n for n in notes if n.get("is_athlete")]
    return notes
