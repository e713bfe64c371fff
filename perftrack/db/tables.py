# perftrack/db/tables.py
from datetime import date, datetime, timezone

from sqlalchemy import Column, DateTime, Float, Integer, String
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _utcnow():
    return datetime.now(timezone.utc)


class RowMixin:
    """Flat sensor rows: dict out, ISO dates."""

    def to_dict(self) -> dict:
        out = {}
        for col in self.__table__.columns:
            v = getattr(self, col.name)
            if isinstance(v, (datetime, date)):
                v = v.isoformat()
            out[col.name] = v
        return out


class Trackman(RowMixin, Base):
    __tablename__ = "trackman"

    id = Column(Integer, primary_key=True, index=True)
    athlete_id = Column(String, index=True, nullable=False)
    session_id = Column(String, index=True, nullable=False)
    session_name = Column(String)
    play_level = Column(String)

    pitch_release_speed = Column(Float)
    pitch_type = Column(String)
    pitcher_name = Column(String)
    release_height = Column(Float)
    release_side = Column(Float)
    extension = Column(Float)
    tilt = Column(String)
    measured_tilt = Column(String)
    gyro = Column(Float)
    spin_efficiency = Column(Float)
    induced_vertical_break = Column(Float)
    horizontal_break = Column(Float)
    vertical_approach_angle = Column(Float)
    horizontal_approach_angle = Column(Float)
    location_height = Column(Float)
    location_side = Column(Float)
    zone_location = Column(String)
    spin_rate = Column(Float)

    created_at = Column(DateTime, default=_utcnow)


class BlastMotion(RowMixin, Base):
    __tablename__ = "blast_motion"

    id = Column(Integer, primary_key=True, index=True)
    athlete_id = Column(String, index=True, nullable=False)
    session_id = Column(String, index=True, nullable=False)
    session_name = Column(String)
    play_level = Column(String)
    date = Column(DateTime)

    equipment = Column(String)
    handedness = Column(String)
    swing_details = Column(String)
    plane_score = Column(Float)
    connection_score = Column(Float)
    rotation_score = Column(Float)
    bat_speed = Column(Float)
    rotational_acceleration = Column(Float)
    on_plane_efficiency = Column(Float)
    attack_angle = Column(Float)
    early_connection = Column(Float)
    connection_at_impact = Column(Float)
    vertical_bat_angle = Column(Float)
    power = Column(Float)
    time_to_contact = Column(Float)
    peak_hand_speed = Column(Float)

    created_at = Column(DateTime, default=_utcnow)


class HitTrax(RowMixin, Base):
    __tablename__ = "hittrax"

    id = Column(Integer, primary_key=True, index=True)
    athlete_id = Column(String, index=True, nullable=False)
    session_id = Column(String, index=True, nullable=False)
    session_name = Column(String)
    play_level = Column(String)
    date = Column(DateTime)

    ab = Column(Integer)
    pitch = Column(Float)
    strike_zone = Column(String)
    p_type = Column(String)
    velo = Column(Float)
    la = Column(Float)
    dist = Column(Float)
    res = Column(String)
    type = Column(String)
    horiz_angle = Column(Float)
    pts = Column(Float)

    created_at = Column(DateTime, default=_utcnow)


class HittraxBlast(RowMixin, Base):
    __tablename__ = "hittrax_blast"

    id = Column(Integer, primary_key=True, index=True)
    athlete_id = Column(String, index=True, nullable=False)
    session_id = Column(String, index=True, nullable=False)
    session_name = Column(String)
    play_level = Column(String)
    date = Column(DateTime)

    # paired swing: one Blast sensor reading matched to one HitTrax ball
    blast_id = Column(String)
    hittrax_id = Column(String)
    pitch = Column(Float)
    velo = Column(Float)
    la = Column(Float)
    dist = Column(Float)
    result = Column(String)
    bat_speed = Column(Float)
    peak_hand_speed = Column(Float)
    attack_angle = Column(Float)
    squared_up_rate = Column(Float)
    potential_velo = Column(Float)
    plane_efficiency = Column(Float)
    vert_bat_angle = Column(Float)

    created_at = Column(DateTime, default=_utcnow)


class ArmCare(RowMixin, Base):
    __tablename__ = "arm_care"

    id = Column(Integer, primary_key=True, index=True)
    athlete_id = Column(String, index=True, nullable=False)
    session_id = Column(String, index=True, nullable=False)
    exam_date = Column(DateTime)
    exam_type = Column(String)

    arm_score = Column(Float)
    total_strength = Column(Float)
    irtarm_strength = Column(Float)
    ertarm_strength = Column(Float)
    starm_strength = Column(Float)
    gtarm_strength = Column(Float)
    irtarm_rom = Column(Float)
    ertarm_rom = Column(Float)
    ftarm_rom = Column(Float)
    shoulder_balance = Column(Float)
    velo = Column(Float)
    svr = Column(Float)
    weight_lbs = Column(Float)

    created_at = Column(DateTime, default=_utcnow)


class ForceCMJ(RowMixin, Base):
    __tablename__ = "force_cmj"

    id = Column(Integer, primary_key=True, index=True)
    athlete_id = Column(String, index=True, nullable=False)
    date = Column(DateTime)
    time = Column(String)

    body_weight = Column(Float)
    reps = Column(Integer)
    jmp_height = Column(Float)
    peak_power_w = Column(Float)
    peak_power_bm = Column(Float)
    rsi_modified = Column(Float)
    countermovement_depth = Column(Float)


class ForceSJ(RowMixin, Base):
    __tablename__ = "force_sj"

    id = Column(Integer, primary_key=True, index=True)
    athlete_id = Column(String, index=True, nullable=False)
    date = Column(DateTime)
    time = Column(String)

    body_weight = Column(Float)
    reps = Column(Integer)
    jmp_height = Column(Float)
    peak_power_w = Column(Float)
    peak_power_bm = Column(Float)


class ForceHop(RowMixin, Base):
    __tablename__ = "force_hop"

    id = Column(Integer, primary_key=True, index=True)
    athlete_id = Column(String, index=True, nullable=False)
    date = Column(DateTime)
    time = Column(String)

    body_weight = Column(Float)
    reps = Column(Integer)
    best_jump_height = Column(Float)
    best_rsif = Column(Float)
    best_rsij = Column(Float)


class ForceIMTP(RowMixin, Base):
    __tablename__ = "force_imtp"

    id = Column(Integer, primary_key=True, index=True)
    athlete_id = Column(String, index=True, nullable=False)
    date = Column(DateTime)
    time = Column(String)

    body_weight = Column(Float)
    peak_vert_force = Column(Float)
    net_peak_vert_force = Column(Float)


class Intended(RowMixin, Base):
    __tablename__ = "intended"

    id = Column(Integer, primary_key=True, index=True)
    athlete_id = Column(String, index=True, nullable=False)
    session_id = Column(String, index=True, nullable=False)
    session_name = Column(String)
    play_level = Column(String)

    pitch_type = Column(String)
    intended_x = Column(Float)
    intended_y = Column(Float)
    actual_x = Column(Float)
    actual_y = Column(Float)
    distance_inches = Column(Float)
    distance_percent = Column(Float)

    created_at = Column(DateTime, default=_utcnow)


class WeightLog(RowMixin, Base):
    __tablename__ = "weight_log"

    id = Column(Integer, primary_key=True, index=True)
    athlete_id = Column(String, index=True, nullable=False)
    weight = Column(Float, nullable=False)
    date = Column(DateTime, default=_utcnow, nullable=False)
