"""
MongoDB access for the Portfolio CMS.

`db` is the module-level database handle (None when MONGODB_URI is unset).
Routes get it through the `get_db` dependency so tests can swap it.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import HTTPException
from pymongo import MongoClient
from pymongo.database import Database

from config import get_settings

logger = logging.getLogger(__name__)

SortSpec = Sequence[Tuple[str, int]]


def _connect() -> Optional[Database]:
    settings = get_settings()
    if not settings.mongodb_uri:
        logger.warning("MONGODB_URI is not set; database not available")
        return None
    client = MongoClient(
        settings.mongodb_uri, tz_aware=True, serverSelectionTimeoutMS=5000
    )
    logger.info("MongoDB client created for database %s", settings.database_name)
    return client[settings.database_name]


db: Optional[Database] = _connect()


def get_db() -> Database:
    if db is None:
        raise HTTPException(status_code=500, detail="Database not available")
    return db


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_object_id(value: str) -> Optional[ObjectId]:
    """Parse a path id; None when it is not a valid ObjectId."""
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def serialize_document(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    # normalize _id to string id
    if doc is None:
        return None
    out = dict(doc)
    out["id"] = str(out.pop("_id"))
    return out


def create_document(
    collection_name: str,
    data: Dict[str, Any],
    database: Optional[Database] = None,
) -> Dict[str, Any]:
    """Insert a document stamped with createdAt/updatedAt and return it."""
    database = database if database is not None else get_db()
    now = utc_now()
    doc = {**data, "createdAt": now, "updatedAt": now}
    result = database[collection_name].insert_one(doc)
    doc["_id"] = result.inserted_id
    return doc


def get_documents(
    collection_name: str,
    sort: Optional[SortSpec] = None,
    database: Optional[Database] = None,
) -> List[Dict[str, Any]]:
    database = database if database is not None else get_db()
    cursor = database[collection_name].find()
    if sort:
        cursor = cursor.sort(list(sort))
    return list(cursor)
