# perftrack/routes/uploads.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from perftrack.auth import get_current_user
from perftrack.authz import require_role
from perftrack.db.mongo import DocumentStore
from perftrack.db.sql import MetricsStore
from perftrack.deps import get_docs, get_metrics
from perftrack.errors import BadRequest
from perftrack.services.ingest import SESSION_TECHS, ingest_session
from perftrack.services.lookups import get_athlete
from perftrack.utils.csvio import read_csv_bytes
from perftrack.utils.logger import log_activity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/athlete", tags=["uploads"], dependencies=[Depends(get_current_user)])


def read_upload(file: UploadFile) -> list[dict]:
    content = file.file.read()
    if not content:
        raise BadRequest("File is empty.")
    try:
        return read_csv_bytes(content)
    except ValueError as e:
        raise BadRequest(str(e))


@router.post("/{athlete_id}/upload/{tech}", status_code=201)
def upload_session(
    athlete_id: str,
    tech: str,
    file: UploadFile = File(...),
    sessionName: Optional[str] = Form(None),
    playLevel: Optional[str] = Form(None),
    user: dict = Depends(require_role("ADMIN", "COACH")),
    docs: DocumentStore = Depends(get_docs),
    metrics: MetricsStore = Depends(get_metrics),
):
    tech = tech.strip().lower()
    if tech not in SESSION_TECHS:
        raise BadRequest(f"Invalid tech: {tech}")
    athlete = get_athlete(docs, athlete_id, {"_id": 1, "level": 1})

    rows = read_upload(file)
    result = ingest_session(docs, metrics, tech, rows, athlete, sessionName, playLevel)

    log_activity(
        docs,
        user_id=user["user_id"],
        action="upload_ingested",
        metadata={"athlete_id": athlete_id, "tech": tech, "filename": file.filename, **result},
    )
    return {
        "message": f"{result['inserted']} rows uploaded",
        "sessionId": result["session_id"],
        "inserted": result["inserted"],
        "warnings": result["warnings"],
    }
