# perftrack/routes/forceplates.py
from fastapi import APIRouter, Depends, File, UploadFile

from perftrack import aggregation as agg
from perftrack.auth import get_current_user
from perftrack.authz import require_role
from perftrack.db.mongo import DocumentStore
from perftrack.db.sql import MetricsStore
from perftrack.db.tables import ForceCMJ, ForceHop, ForceIMTP, ForceSJ
from perftrack.deps import get_docs, get_metrics
from perftrack.errors import NotFound
from perftrack.routes.uploads import read_upload
from perftrack.services.ingest import ingest_force_plates
from perftrack.services.rows import fetch_rows
from perftrack.utils.logger import log_activity

router = APIRouter(prefix="/api", tags=["forceplates"], dependencies=[Depends(get_current_user)])


def _tests(metrics: MetricsStore, model, athlete_id: str) -> list[dict]:
    # force tables have no DATE_COLUMNS entry; order by date here
    rows = fetch_rows(metrics, model, athlete_id)
    return sorted(rows, key=lambda r: (r.get("date") or "", r["id"]))


def _cmj_point(r: dict) -> dict:
    return {
        "id": r["id"],
        "date": r.get("date"),
        "peakPower": r.get("peak_power_w"),
        "jumpHeight": r.get("jmp_height"),
        "rsiModified": r.get("rsi_modified"),
    }


@router.get("/athlete/{athlete_id}/forceplates")
def overview(athlete_id: str, metrics: MetricsStore = Depends(get_metrics)):
    cmj = _tests(metrics, ForceCMJ, athlete_id)
    sj = _tests(metrics, ForceSJ, athlete_id)
    imtp = _tests(metrics, ForceIMTP, athlete_id)
    hop = _tests(metrics, ForceHop, athlete_id)
    return {
        "cmjTests": [{"id": r["id"], "date": r.get("date")} for r in cmj],
        "sjTests": [{"id": r["id"], "date": r.get("date")} for r in sj],
        "imtpTests": [{"id": r["id"], "date": r.get("date")} for r in imtp],
        "hopTests": [{"id": r["id"], "date": r.get("date")} for r in hop],
        "cmjData": {"peakPower": agg.overall_max(cmj, "peak_power_w"), "jumpHeight": agg.overall_max(cmj, "jmp_height")},
        "sjData": {"peakPower": agg.overall_max(sj, "peak_power_w"), "jumpHeight": agg.overall_max(sj, "jmp_height")},
        "imtpData": {"peakVertForce": agg.overall_max(imtp, "peak_vert_force")},
        "hopData": {"rsi": agg.overall_max(hop, "best_rsif")},
    }


@router.get("/athlete/{athlete_id}/forceplates/cmj")
def cmj_tests(athlete_id: str, metrics: MetricsStore = Depends(get_metrics)):
    return {"data": [_cmj_point(r) for r in _tests(metrics, ForceCMJ, athlete_id)]}


@router.get("/athlete/{athlete_id}/forceplates/cmj/{test_number}")
def cmj_test(athlete_id: str, test_number: int, metrics: MetricsStore = Depends(get_metrics)):
    tests = _tests(metrics, ForceCMJ, athlete_id)
    # 1-based, in test date order
    if test_number < 1 or test_number > len(tests):
        raise NotFound("No data found")
    r = tests[test_number - 1]
    return {
        "peakPower": r.get("peak_power_w"),
        "jumpHeight": r.get("jmp_height"),
        "rsiModified": r.get("rsi_modified"),
        "countermovementDepth": r.get("countermovement_depth"),
        "bodyWeight": r.get("body_weight"),
        "testDate": r.get("date"),
    }


@router.get("/athlete/{athlete_id}/forceplates/sj")
def sj_tests(athlete_id: str, metrics: MetricsStore = Depends(get_metrics)):
    data = [
        {"id": r["id"], "date": r.get("date"), "peakPower": r.get("peak_power_w"), "jumpHeight": r.get("jmp_height")}
        for r in _tests(metrics, ForceSJ, athlete_id)
    ]
    return {"data": data}


@router.get("/athlete/{athlete_id}/forceplates/hop")
def hop_tests(athlete_id: str, metrics: MetricsStore = Depends(get_metrics)):
    data = [
        {"id": r["id"], "date": r.get("date"), "bestRSIF": r.get("best_rsif"), "bestJumpHeight": r.get("best_jump_height")}
        for r in _tests(metrics, ForceHop, athlete_id)
    ]
    return {"data": data}


@router.post("/forceplates", status_code=201)
def upload_force_plates(
    file: UploadFile = File(...),
    user: dict = Depends(require_role("ADMIN", "COACH")),
    docs: DocumentStore = Depends(get_docs),
    metrics: MetricsStore = Depends(get_metrics),
):
    result = ingest_force_plates(docs, metrics, read_upload(file))
    log_activity(docs, user_id=user["user_id"], action="forceplates_ingested", metadata={"filename": file.filename, **result})
    return {
        "message": f"{result['test_type']}: {result['inserted']} tests added",
        "inserted": result["inserted"],
        "skipped": result["skipped"],
    }
