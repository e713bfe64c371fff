# perftrack/utils/serialize.py
from typing import Any

from bson import ObjectId
from fastapi.encoders import jsonable_encoder


def to_jsonable(doc: Any) -> Any:
    """Mongo documents (ObjectId, datetime) -> plain JSON types."""
    return jsonable_encoder(doc, custom_encoder={ObjectId: str})
