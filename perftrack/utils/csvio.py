# perftrack/utils/csvio.py
from __future__ import annotations

import csv
import io
import re
from datetime import datetime, timezone
from typing import Optional


# ----------------- string/number helpers -----------------
def _norm(s: Optional[str]) -> str:
    return (s or "").strip()


def _key(s: Optional[str]) -> str:
    return re.sub(r"[^a-z0-9]+", "", (s or "").lower())


def safe_int(s) -> Optional[int]:
    try:
        return int(float(_norm(str(s)).replace(",", ""))) if s is not None and _norm(str(s)) != "" else None
    except ValueError:
        return None


def safe_float(s) -> Optional[float]:
    try:
        return float(_norm(str(s)).replace(",", "")) if s is not None and _norm(str(s)) != "" else None
    except ValueError:
        return None


def clean_text(s) -> Optional[str]:
    v = _norm(None if s is None else str(s))
    return v or None


_DATE_FORMATS = (
    "%Y-%m-%d",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S",
    "%m/%d/%Y",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%y",
    "%b %d, %Y",
    "%B %d, %Y",
)


def parse_date(s) -> Optional[datetime]:
    """Dates as the sensor exports write them; naive results are taken as UTC."""
    v = _norm(None if s is None else str(s))
    if not v:
        return None
    if v.endswith("Z"):
        v = v[:-1]
    try:
        dt = datetime.fromisoformat(v)
    except ValueError:
        dt = None
        for fmt in _DATE_FORMATS:
            try:
                dt = datetime.strptime(v, fmt)
                break
            except ValueError:
                continue
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


# ----------------- file helpers -----------------
def _clean_header(h: str) -> str:
    return (h or "").replace("\ufeff", "").replace('"', "").replace("'", "").strip()


def read_csv_bytes(file_bytes: bytes, encoding_try=("utf-8-sig", "utf-8", "latin-1")) -> list[dict]:
    text = None
    last_err = None
    for enc in encoding_try:
        try:
            text = file_bytes.decode(enc)
            break
        except UnicodeDecodeError as e:
            last_err = e
    if text is None:
        raise ValueError(f"Could not decode CSV: {last_err}")

    # Try to sniff delimiter; fallback to comma
    try:
        sample = text[:4096]
        dialect = csv.Sniffer().sniff(sample, delimiters=",;\t|")
        delimiter = dialect.delimiter
    except csv.Error:
        delimiter = ","

    reader = csv.reader(io.StringIO(text), delimiter=delimiter)
    try:
        raw_headers = next(reader)
    except StopIteration:
        return []

    headers = [_clean_header(h) for h in raw_headers]

    rows: list[dict] = []
    for row in reader:
        if not any(_norm(c) for c in row):
            continue
        # Pad shorter rows
        if len(row) < len(headers):
            row += [""] * (len(headers) - len(row))
        rows.append({headers[i]: row[i] for i in range(len(headers))})

    return rows


def column_lookup(row: dict) -> dict:
    """Normalized header -> original header, so 'Bat Speed (mph)' matches 'batspeedmph'."""
    return {_key(h): h for h in row.keys() if h}


def pick(row: dict, lookup: dict, *aliases: str):
    for alias in aliases:
        h = lookup.get(_key(alias))
        if h is not None:
            v = row.get(h)
            if _norm(v) != "":
                return v
    return None


def header_warnings(rows: list[dict], expected_any: set[str], label: str) -> list[str]:
    """Soft header checks -> return warnings (do not block upload)."""
    warns: list[str] = []
    if not rows:
        warns.append("CSV has no rows.")
        return warns
    headers = set(_key(h) for h in rows[0].keys() if h)
    if headers.isdisjoint({_key(e) for e in expected_any}):
        warns.append(f"{label} CSV doesn't contain any of the expected columns ({', '.join(sorted(expected_any))}).")
    return warns
