# perftrack/services/ingest.py
"""
Sensor CSV exports -> relational rows.

Each tech has a column table: (column, parser, header aliases). Headers are
matched after normalization, so 'Bat Speed (mph)' and 'bat_speed_mph' are
the same header.
"""
from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, Optional

from sqlalchemy import select

from perftrack.db.mongo import DocumentStore
from perftrack.db.sql import MetricsStore
from perftrack.db.tables import (
    ArmCare,
    BlastMotion,
    ForceCMJ,
    ForceHop,
    ForceIMTP,
    ForceSJ,
    HitTrax,
    HittraxBlast,
    Trackman,
)
from perftrack.errors import BadRequest
from perftrack.services.goals import update_goals_after_ingest
from perftrack.utils.csvio import clean_text, column_lookup, header_warnings, parse_date, pick, safe_float, safe_int

logger = logging.getLogger(__name__)

ColumnSpec = tuple[str, Callable, tuple[str, ...]]

TRACKMAN_COLUMNS: list[ColumnSpec] = [
    ("pitch_release_speed", safe_float, ("pitch_release_speed_imp", "Pitch Release Speed (mph)", "Pitch Speed", "RelSpeed")),
    ("pitch_type", clean_text, ("Pitch Type", "TaggedPitchType")),
    ("pitcher_name", clean_text, ("Pitcher Name", "Pitcher")),
    ("release_height", safe_float, ("Release Height (ft)", "RelHeight")),
    ("release_side", safe_float, ("Release Side (ft)", "RelSide")),
    ("extension", safe_float, ("Extension (ft)", "Extension")),
    ("tilt", clean_text, ("Tilt",)),
    ("measured_tilt", clean_text, ("Measured Tilt",)),
    ("gyro", safe_float, ("Gyro (°)", "Gyro")),
    ("spin_efficiency", safe_float, ("Spin Efficiency (%)", "Spin Efficiency")),
    ("induced_vertical_break", safe_float, ("Induced Vertical Break (in)", "InducedVertBreak")),
    ("horizontal_break", safe_float, ("Horizontal Break (in)", "HorzBreak")),
    ("vertical_approach_angle", safe_float, ("Vertical Approach Angle (°)", "VertApprAngle")),
    ("horizontal_approach_angle", safe_float, ("Horizontal Approach Angle (°)", "HorzApprAngle")),
    ("location_height", safe_float, ("Location Height (ft)", "PlateLocHeight")),
    ("location_side", safe_float, ("Location Side (ft)", "PlateLocSide")),
    ("zone_location", clean_text, ("Zone Location",)),
    ("spin_rate", safe_float, ("Spin rate (rpm)", "Spin Rate", "SpinRate")),
    ("created_at", parse_date, ("Date", "Time Stamp", "Timestamp")),
]

BLAST_COLUMNS: list[ColumnSpec] = [
    ("date", parse_date, ("Date",)),
    ("equipment", clean_text, ("Equipment",)),
    ("handedness", clean_text, ("Handedness",)),
    ("swing_details", clean_text, ("Swing Details",)),
    ("plane_score", safe_float, ("Plane Score",)),
    ("connection_score", safe_float, ("Connection Score",)),
    ("rotation_score", safe_float, ("Rotation Score",)),
    ("bat_speed", safe_float, ("Bat Speed (mph)", "Bat Speed")),
    ("rotational_acceleration", safe_float, ("Rotational Acceleration (g)", "Rotational Acceleration")),
    ("on_plane_efficiency", safe_float, ("On Plane Efficiency (%)", "On Plane Efficiency")),
    ("attack_angle", safe_float, ("Attack Angle (deg)", "Attack Angle")),
    ("early_connection", safe_float, ("Early Connection (deg)", "Early Connection")),
    ("connection_at_impact", safe_float, ("Connection at Impact (deg)", "Connection at Impact")),
    ("vertical_bat_angle", safe_float, ("Vertical Bat Angle (deg)", "Vertical Bat Angle")),
    ("power", safe_float, ("Power (kW)", "Power")),
    ("time_to_contact", safe_float, ("Time to Contact (sec)", "Time to Contact")),
    ("peak_hand_speed", safe_float, ("Peak Hand Speed (mph)", "Peak Hand Speed")),
]

HITTRAX_COLUMNS: list[ColumnSpec] = [
    ("date", parse_date, ("date", "Date")),
    ("ab", safe_int, ("AB",)),
    ("pitch", safe_float, ("pitch", "Pitch")),
    ("strike_zone", clean_text, ("strikeZone", "Strike Zone")),
    ("p_type", clean_text, ("pType", "Pitch Type")),
    ("velo", safe_float, ("velo", "Exit Velocity")),
    ("la", safe_float, ("LA", "Launch Angle")),
    ("dist", safe_float, ("dist", "Distance")),
    ("res", clean_text, ("res", "Result")),
    ("type", clean_text, ("type", "Hit Type")),
    ("horiz_angle", safe_float, ("horizAngle", "Horizontal Angle")),
    ("pts", safe_float, ("pts", "Points")),
]

ARMCARE_COLUMNS: list[ColumnSpec] = [
    ("exam_date", parse_date, ("examDate", "Exam Date")),
    ("exam_type", clean_text, ("examType", "Exam Type")),
    ("arm_score", safe_float, ("armScore", "Arm Score")),
    ("total_strength", safe_float, ("totalStrength", "Total Strength")),
    ("irtarm_strength", safe_float, ("irtarmStrength",)),
    ("ertarm_strength", safe_float, ("ertarmStrength",)),
    ("starm_strength", safe_float, ("starmStrength",)),
    ("gtarm_strength", safe_float, ("gtarmStrength",)),
    ("irtarm_rom", safe_float, ("irtarmRom",)),
    ("ertarm_rom", safe_float, ("ertarmRom",)),
    ("ftarm_rom", safe_float, ("ftarmRom",)),
    ("shoulder_balance", safe_float, ("shoulderBalance", "Shoulder Balance")),
    ("velo", safe_float, ("velo", "Velo")),
    ("svr", safe_float, ("svr", "SVR")),
    ("weight_lbs", safe_float, ("weightLbs", "Weight (lbs)")),
]

HITTRAX_BLAST_COLUMNS: list[ColumnSpec] = [
    ("date", parse_date, ("Date",)),
    ("blast_id", clean_text, ("Blast ID", "blastId")),
    ("hittrax_id", clean_text, ("HitTrax ID", "hittraxId")),
    ("pitch", safe_float, ("Pitch",)),
    ("velo", safe_float, ("Exit Velocity", "exitVelo", "Velo")),
    ("la", safe_float, ("Launch Angle", "launchAngle", "LA")),
    ("dist", safe_float, ("Distance", "Dist")),
    ("result", clean_text, ("Result",)),
    ("bat_speed", safe_float, ("Bat Speed (mph)", "Bat Speed")),
    ("peak_hand_speed", safe_float, ("Peak Hand Speed (mph)", "Peak Hand Speed")),
    ("attack_angle", safe_float, ("Attack Angle (deg)", "Attack Angle")),
    ("squared_up_rate", safe_float, ("Squared Up Rate (%)", "Squared Up Rate", "squaredUpRate")),
    ("potential_velo", safe_float, ("Potential Velo (mph)", "Potential Velo", "potentialVelo")),
    ("plane_efficiency", safe_float, ("Plane Efficiency (%)", "Plane Efficiency", "planeEfficiency")),
    ("vert_bat_angle", safe_float, ("Vertical Bat Angle (deg)", "Vertical Bat Angle", "vertBatAngle")),
]


def _keep_trackman(r: dict) -> bool:
    return (r.get("pitch_release_speed") or 0) > 0


def _keep_blast(r: dict) -> bool:
    return bool(r.get("equipment") and r.get("handedness"))


def _keep_hittrax(r: dict) -> bool:
    return r.get("velo") is not None


def _keep_armcare(r: dict) -> bool:
    return r.get("exam_date") is not None


def _keep_hittrax_blast(r: dict) -> bool:
    return r.get("squared_up_rate") is not None


# upload path segment -> (goal/tag tech key, model, columns, row filter, expected headers)
SESSION_TECHS = {
    "trackman": ("trackman", Trackman, TRACKMAN_COLUMNS, _keep_trackman, {"pitch_release_speed_imp", "Pitch Type", "Spin rate (rpm)"}),
    "blast-motion": ("blast", BlastMotion, BLAST_COLUMNS, _keep_blast, {"Equipment", "Handedness", "Bat Speed (mph)"}),
    "hittrax": ("hittrax", HitTrax, HITTRAX_COLUMNS, _keep_hittrax, {"velo", "LA", "dist"}),
    "armcare": ("armcare", ArmCare, ARMCARE_COLUMNS, _keep_armcare, {"examDate", "armScore"}),
    "hittrax-blast": ("hittraxblast", HittraxBlast, HITTRAX_BLAST_COLUMNS, _keep_hittrax_blast,
                      {"Squared Up Rate", "Exit Velocity", "Bat Speed"}),
}


def map_row(raw: dict, columns: list[ColumnSpec]) -> dict:
    lookup = column_lookup(raw)
    return {name: parse(pick(raw, lookup, *aliases)) for name, parse, aliases in columns}


def build_session_rows(tech: str, raw_rows: list[dict], athlete_id: str, session_id: str,
                       session_name: Optional[str] = None, play_level: Optional[str] = None) -> list[dict]:
    _, model, columns, keep, _ = SESSION_TECHS[tech]
    out = []
    for raw in raw_rows:
        row = map_row(raw, columns)
        if not keep(row):
            continue
        if "created_at" in row and row["created_at"] is None:
            del row["created_at"]
        row["athlete_id"] = athlete_id
        row["session_id"] = session_id
        if hasattr(model, "session_name"):
            row["session_name"] = session_name
        if hasattr(model, "play_level"):
            row["play_level"] = play_level
        out.append(row)
    return out


def ingest_session(docs: DocumentStore, metrics: MetricsStore, tech: str, raw_rows: list[dict],
                   athlete: dict, session_name: Optional[str] = None, play_level: Optional[str] = None) -> dict:
    """
    Insert one upload as a new session and fold it into the athlete's goals.
    The SQL insert commits before the goal update (two stores, no shared transaction).
    """
    goal_tech, model, _, _, expected = SESSION_TECHS[tech]
    warnings = header_warnings(raw_rows, expected, tech)
    athlete_id = str(athlete["_id"])
    session_id = str(uuid.uuid4())
    if not session_name:
        session_name = f"{tech} {datetime.now(timezone.utc):%Y-%m-%d %H:%M}"

    rows = build_session_rows(tech, raw_rows, athlete_id, session_id, session_name,
                              play_level or athlete.get("level"))
    if not rows:
        raise BadRequest("No valid data found in the uploaded file")

    with metrics.session_scope() as s:
        s.add_all([model(**r) for r in rows])

    logger.info("ingested %d %s rows athlete=%s session=%s", len(rows), tech, athlete_id, session_id)
    update_goals_after_ingest(docs, athlete["_id"], goal_tech, rows)
    return {"session_id": session_id, "inserted": len(rows), "warnings": warnings}


# ----------------- force plates -----------------
FORCE_TESTS = {
    "CMJ": (ForceCMJ, [
        ("body_weight", safe_float, ("BW [KG]",)),
        ("reps", safe_int, ("Reps",)),
        ("jmp_height", safe_float, ("Jump Height (Imp-Mom) [cm]",)),
        ("peak_power_w", safe_float, ("Peak Power [W]",)),
        ("peak_power_bm", safe_float, ("Peak Power / BM [W/kg]",)),
        ("rsi_modified", safe_float, ("RSI-modified [m/s]",)),
        ("countermovement_depth", safe_float, ("Countermovement Depth [cm]",)),
    ]),
    "SJ": (ForceSJ, [
        ("body_weight", safe_float, ("BW [KG]",)),
        ("reps", safe_int, ("Reps",)),
        ("jmp_height", safe_float, ("Jump Height (Imp-Mom) [cm]", "Jump Height (Flight Time) [cm]")),
        ("peak_power_w", safe_float, ("Peak Power [W]",)),
        ("peak_power_bm", safe_float, ("Peak Power / BM [W/kg]",)),
    ]),
    "HJ": (ForceHop, [
        ("body_weight", safe_float, ("BW [KG]",)),
        ("reps", safe_int, ("Reps",)),
        ("best_jump_height", safe_float, ("Best Jump Height (Flight Time) [cm]",)),
        ("best_rsif", safe_float, ("Best RSI (Flight/Contact Time)",)),
        ("best_rsij", safe_float, ("Best RSI (Jump Height/Contact Time) [m/s]",)),
    ]),
    "IMTP": (ForceIMTP, [
        ("body_weight", safe_float, ("BW [KG]",)),
        ("peak_vert_force", safe_float, ("Peak Vertical Force [N]",)),
        ("net_peak_vert_force", safe_float, ("Net Peak Vertical Force [N]",)),
    ]),
}


def _row_name(raw: dict) -> Optional[str]:
    name = raw.get("Name")
    if not name:
        key = next((k for k in raw if "name" in k.lower()), None)
        name = raw.get(key) if key else None
    return clean_text(name)


def ingest_force_plates(docs: DocumentStore, metrics: MetricsStore, raw_rows: list[dict]) -> dict:
    if not raw_rows:
        raise BadRequest("CSV appears to be empty")

    test_type = (clean_text(raw_rows[0].get("Test Type")) or "").upper()
    if test_type not in FORCE_TESTS:
        raise BadRequest(f"Unsupported test type: {test_type or 'missing'}")
    model, columns = FORCE_TESTS[test_type]

    inserted = skipped = 0
    athlete_ids: dict[tuple, Optional[str]] = {}
    with metrics.session_scope() as s:
        for raw in raw_rows:
            name = _row_name(raw)
            parts = name.split(None, 1) if name else []
            if len(parts) < 2:
                skipped += 1
                continue
            key = (parts[0], parts[1])
            if key not in athlete_ids:
                a = docs.athletes.find_one({"first_name": parts[0], "last_name": parts[1]}, {"_id": 1})
                athlete_ids[key] = str(a["_id"]) if a else None
            athlete_id = athlete_ids[key]
            if not athlete_id:
                skipped += 1
                continue

            when = parse_date(raw.get("Date"))
            time = clean_text(raw.get("Time"))
            dup = s.execute(
                select(model.id).where(model.athlete_id == athlete_id, model.date == when, model.time == time)
            ).first()
            if dup:
                skipped += 1
                continue

            row = map_row(raw, columns)
            s.add(model(athlete_id=athlete_id, date=when, time=time, **row))
            s.flush()
            inserted += 1

    logger.info("force plates %s: inserted=%d skipped=%d", test_type, inserted, skipped)
    return {"test_type": test_type, "inserted": inserted, "skipped": skipped}
