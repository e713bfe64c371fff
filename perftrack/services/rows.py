# perftrack/services/rows.py
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Float, Integer, func, select

from perftrack.db.sql import MetricsStore
from perftrack.db.tables import ArmCare, BlastMotion, HitTrax, HittraxBlast, Intended, Trackman
from perftrack.errors import BadRequest

# query-string tech names -> table
TECH_MODELS = {
    "blast": BlastMotion,
    "blastmotion": BlastMotion,
    "blast-motion": BlastMotion,
    "hittrax": HitTrax,
    "trackman": Trackman,
    "intended": Intended,
    "armcare": ArmCare,
    "hittraxblast": HittraxBlast,
}

# column each table is dated by
DATE_COLUMNS = {
    Trackman: "created_at",
    BlastMotion: "date",
    HitTrax: "date",
    HittraxBlast: "date",
    ArmCare: "exam_date",
    Intended: "created_at",
}


def model_for(tech: Optional[str]):
    model = TECH_MODELS.get((tech or "").strip().lower())
    if model is None:
        raise BadRequest(f"Invalid tech: {tech}")
    return model


def numeric_column(model, name: Optional[str]):
    col = model.__table__.columns.get(name or "")
    if col is None or not isinstance(col.type, (Float, Integer)) or col.name == "id":
        raise BadRequest(f"Invalid metric: {name}")
    return col


def date_column(model):
    return getattr(model, DATE_COLUMNS[model])


def fetch_rows(metrics: MetricsStore, model, athlete_id: str, since: Optional[datetime] = None,
               newest_first: bool = False, **filters) -> list[dict]:
    dated = date_column(model) if model in DATE_COLUMNS else None
    stmt = select(model).where(model.athlete_id == athlete_id)
    for name, value in filters.items():
        stmt = stmt.where(getattr(model, name) == value)
    if since is not None and dated is not None:
        stmt = stmt.where(dated >= since)
    if dated is not None:
        stmt = stmt.order_by(dated.desc() if newest_first else dated.asc(), model.id)
    else:
        stmt = stmt.order_by(model.id)
    with metrics.session_scope() as s:
        return [r.to_dict() for r in s.scalars(stmt).all()]


def fetch_level_rows(metrics: MetricsStore, model, level: str) -> list[dict]:
    """Every athlete's rows at one play level, newest first."""
    dated = date_column(model)
    stmt = select(model).where(model.play_level == level).order_by(dated.desc(), model.id)
    with metrics.session_scope() as s:
        return [r.to_dict() for r in s.scalars(stmt).all()]


def fetch_session(metrics: MetricsStore, model, session_id: str) -> list[dict]:
    with metrics.session_scope() as s:
        rows = s.scalars(select(model).where(model.session_id == session_id).order_by(model.id)).all()
        return [r.to_dict() for r in rows]


def count_rows(metrics: MetricsStore, model, athlete_id: Optional[str] = None) -> int:
    stmt = select(func.count()).select_from(model)
    if athlete_id is not None:
        stmt = stmt.where(model.athlete_id == athlete_id)
    with metrics.session_scope() as s:
        return s.scalar(stmt) or 0


def has_rows(metrics: MetricsStore, model, athlete_id: str) -> bool:
    with metrics.session_scope() as s:
        return s.scalar(select(model.id).where(model.athlete_id == athlete_id).limit(1)) is not None
