# perftrack/services/goals.py
from __future__ import annotations

import logging
from typing import Iterable

from bson import ObjectId

from perftrack.db.mongo import DocumentStore

logger = logging.getLogger(__name__)

# goal.metric_to_track -> row column, per tech
METRIC_COLUMNS = {
    "trackman": {
        "Pitch Release Speed": "pitch_release_speed",
        "Spin Efficiency": "spin_efficiency",
        "Induced Vertical Break": "induced_vertical_break",
        "Horizontal Break": "horizontal_break",
        "Spin Rate": "spin_rate",
    },
    "blast": {
        "Bat Speed": "bat_speed",
        "Peak Hand Speed": "peak_hand_speed",
        "Rotational Acceleration": "rotational_acceleration",
        "Power": "power",
        "Attack Angle": "attack_angle",
    },
    "hittrax": {
        "Exit Velocity": "velo",
        "Distance": "dist",
        "Launch Angle": "la",
    },
    "armcare": {
        "Arm Score": "arm_score",
        "Total Strength": "total_strength",
        "Velo": "velo",
        "Shoulder Balance": "shoulder_balance",
    },
    "intended": {
        "Miss Distance": "distance_inches",
        "Miss Percent": "distance_percent",
    },
}

GOAL_TECHS = tuple(METRIC_COLUMNS)


def apply_goal_progress(goal: dict, values: list) -> dict:
    """
    Fold freshly ingested values into a goal. Returns the fields to $set,
    or {} when there is nothing to fold in.
    """
    nums = [v for v in values if isinstance(v, (int, float)) and not isinstance(v, bool)]
    if not nums:
        return {}

    if goal.get("avg_max") == "avg":
        total = (goal.get("sum") or 0) + sum(nums)
        length = (goal.get("length") or 0) + len(nums)
        current = total / length
    else:
        total, length = 0, 0
        current = max([goal.get("current_value") or 0] + nums)

    return {
        "current_value": current,
        "sum": total,
        "length": length,
        "complete": current >= (goal.get("goal_value") or 0),
    }


def update_goals_after_ingest(docs: DocumentStore, athlete: ObjectId, tech: str, rows: Iterable[dict]) -> int:
    rows = list(rows)
    columns = METRIC_COLUMNS.get(tech, {})
    updated = 0
    for goal in docs.goals.find({"athlete": athlete, "tech": tech}):
        column = columns.get(goal.get("metric_to_track"))
        if not column:
            logger.info("no column for goal metric %r (tech=%s)", goal.get("metric_to_track"), tech)
            continue
        changes = apply_goal_progress(goal, [r.get(column) for r in rows])
        if not changes:
            continue
        docs.goals.update_one({"_id": goal["_id"]}, {"$set": changes})
        updated += 1
        logger.info("goal %s -> %s", goal.get("goal_name"), changes["current_value"])
    return updated
