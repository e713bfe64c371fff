# perftrack/routes/assessments.py
from datetime import datetime, timezone

from bson import ObjectId
from fastapi import APIRouter, Depends
from pymongo import ReturnDocument

from perftrack.auth import get_current_user
from perftrack.authz import require_role
from perftrack.db.mongo import DocumentStore
from perftrack.deps import get_docs
from perftrack.errors import BadRequest, NotFound, oid
from perftrack.schemas.assessments import AssessmentCreate, TemplateAvailability, TemplateCreate
from perftrack.scoring import score_assessment
from perftrack.services.lookups import get_athlete
from perftrack.utils.logger import log_activity
from perftrack.utils.serialize import to_jsonable

router = APIRouter(prefix="/api/assessment", tags=["assessments"], dependencies=[Depends(get_current_user)])


def _get_template(docs: DocumentStore, template_id: str) -> dict:
    template = docs.templates.find_one({"_id": oid(template_id, "templateId")})
    if not template:
        raise NotFound("Template not found")
    return template


# ---------- templates ----------
@router.post("/template", status_code=201)
def create_template(
    body: TemplateCreate,
    user: dict = Depends(require_role("ADMIN", "COACH")),
    docs: DocumentStore = Depends(get_docs),
):
    if not body.sections:
        raise BadRequest("Template needs at least one section")

    template = body.model_dump()
    # responses are keyed by field _id
    for section in template["sections"]:
        section["_id"] = ObjectId()
        for field in section["fields"]:
            field["_id"] = ObjectId()
    template["created_at"] = datetime.now(timezone.utc)

    docs.templates.insert_one(template)
    log_activity(docs, user_id=user["user_id"], action="template_created", metadata={"template_id": str(template["_id"])})
    return {"template": to_jsonable(template)}


@router.get("/template")
def list_templates(docs: DocumentStore = Depends(get_docs)):
    return {"templates": to_jsonable(list(docs.templates.find({}).sort("name", 1)))}


@router.get("/template/{template_id}")
def get_template(template_id: str, docs: DocumentStore = Depends(get_docs)):
    return {"template": to_jsonable(_get_template(docs, template_id))}


@router.patch("/template/{template_id}")
def set_availability(
    template_id: str,
    body: TemplateAvailability,
    user: dict = Depends(require_role("ADMIN", "COACH")),
    docs: DocumentStore = Depends(get_docs),
):
    template = docs.templates.find_one_and_update(
        {"_id": oid(template_id, "templateId")},
        {"$set": {"available": body.available}},
        return_document=ReturnDocument.AFTER,
    )
    if not template:
        raise NotFound("Template not found")
    return {"template": to_jsonable(template)}


# ---------- assessments ----------
@router.post("", status_code=201)
def create_assessment(
    body: AssessmentCreate,
    user: dict = Depends(require_role("ADMIN", "COACH")),
    docs: DocumentStore = Depends(get_docs),
):
    athlete = get_athlete(docs, body.athleteId, {"_id": 1})
    template = _get_template(docs, body.templateId)
    if not template.get("available", True):
        raise BadRequest("Template is not available")

    assessment = {
        "title": body.title or template.get("name"),
        "athlete": athlete["_id"],
        "template": template["_id"],
        "sections": [s.model_dump() for s in body.sections],
        "created_at": datetime.now(timezone.utc),
    }
    res = docs.assessments.insert_one(assessment)
    docs.athletes.update_one({"_id": athlete["_id"]}, {"$push": {"assessments": res.inserted_id}})

    log_activity(docs, user_id=user["user_id"], action="assessment_created",
                 metadata={"assessment_id": str(res.inserted_id), "athlete_id": body.athleteId})
    return {"assessment": to_jsonable(assessment)}


@router.get("/{athlete_id}")
def list_assessments(athlete_id: str, docs: DocumentStore = Depends(get_docs)):
    athlete = get_athlete(docs, athlete_id, {"_id": 1})
    assessments = list(docs.assessments.find({"athlete": athlete["_id"]}).sort("created_at", -1))
    return {"assessments": to_jsonable(assessments)}


@router.get("/{athlete_id}/{assessment_id}")
def get_assessment(athlete_id: str, assessment_id: str, docs: DocumentStore = Depends(get_docs)):
    assessment = docs.assessments.find_one({"_id": oid(assessment_id, "assessmentId")})
    if not assessment:
        raise NotFound("Assessment not found")
    if assessment.get("athlete") != oid(athlete_id, "athleteId"):
        raise BadRequest("ID conflict")

    template = docs.templates.find_one({"_id": assessment.get("template")})
    if not template:
        raise NotFound("Template not found")

    return to_jsonable({
        "assessment": assessment,
        "template": template,
        **score_assessment(assessment, template),
    })
