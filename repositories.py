"""
Collection-level access for each content type.

Singleton sections (about, hero, contact) live under a fixed `_id` and are
created with defaults the first time they are read. List collections carry a
free-form `order` and are listed by `order` then creation time.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from fastapi import Depends
from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.database import Database

from bilingual import BilingualWriter, get_writer
from database import SortSpec, create_document, get_db, get_documents, to_object_id, utc_now

logger = logging.getLogger(__name__)

SINGLETON_ID = "singleton"


# ==========
# Singletons
# ==========
class SingletonRepository:
    collection_name: str = ""

    def __init__(self, database: Database):
        self.database = database

    @property
    def collection(self):
        return self.database[self.collection_name]

    def defaults(self) -> Dict[str, Any]:
        return {}

    def fetch(self) -> Dict[str, Any]:
        doc = self.collection.find_one({"_id": SINGLETON_ID})
        if doc is not None:
            return doc
        now = utc_now()
        # $setOnInsert keeps concurrent first reads from creating two defaults
        doc = self.collection.find_one_and_update(
            {"_id": SINGLETON_ID},
            {"$setOnInsert": {**self.defaults(), "createdAt": now, "updatedAt": now}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        logger.info("Created default %s section", self.collection_name)
        return doc

    def update(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        self.fetch()
        return self.collection.find_one_and_update(
            {"_id": SINGLETON_ID},
            {"$set": {**fields, "updatedAt": utc_now()}},
            return_document=ReturnDocument.AFTER,
        )

    def unset(self, *fields: str) -> Dict[str, Any]:
        self.fetch()
        return self.collection.find_one_and_update(
            {"_id": SINGLETON_ID},
            {"$unset": {f: "" for f in fields}, "$set": {"updatedAt": utc_now()}},
            return_document=ReturnDocument.AFTER,
        )


class AboutRepository(SingletonRepository):
    collection_name = "about"
    translatable = ("content",)
    default_content = "Welcome to our portfolio!"

    def __init__(self, database: Database, writer: BilingualWriter):
        super().__init__(database)
        self.writer = writer

    def defaults(self) -> Dict[str, Any]:
        return {"content": self.writer.pair(self.default_content)}


class HeroRepository(SingletonRepository):
    collection_name = "hero"
    translatable = ("title", "subtitle")

    def defaults(self) -> Dict[str, Any]:
        return {
            "title": {"en": "Welcome to My Portfolio", "ar": "مرحبا بكم في محفظتي"},
            "subtitle": {"en": "Creative Professional", "ar": "محترف مبدع"},
        }


class ContactRepository(SingletonRepository):
    collection_name = "contact"

    def defaults(self) -> Dict[str, Any]:
        return {"email": "", "name": "", "instagramHandle": ""}


# ==========
# List items
# ==========
class ListRepository:
    collection_name: str = ""
    translatable: Tuple[str, ...] = ()
    sort: SortSpec = (("order", ASCENDING), ("createdAt", DESCENDING))

    def __init__(self, database: Database):
        self.database = database

    @property
    def collection(self):
        return self.database[self.collection_name]

    def list(self) -> List[Dict[str, Any]]:
        return get_documents(self.collection_name, sort=self.sort, database=self.database)

    def get(self, item_id: str) -> Optional[Dict[str, Any]]:
        oid = to_object_id(item_id)
        if oid is None:
            return None
        return self.collection.find_one({"_id": oid})

    def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        data = {"order": 0, **data}
        return create_document(self.collection_name, data, database=self.database)

    def update(self, item_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Set only the given fields; None when no item has this id."""
        oid = to_object_id(item_id)
        if oid is None:
            return None
        return self.collection.find_one_and_update(
            {"_id": oid},
            {"$set": {**fields, "updatedAt": utc_now()}},
            return_document=ReturnDocument.AFTER,
        )

    def delete(self, item_id: str) -> Optional[Dict[str, Any]]:
        oid = to_object_id(item_id)
        if oid is None:
            return None
        return self.collection.find_one_and_delete({"_id": oid})


class ExperienceRepository(ListRepository):
    collection_name = "experience"
    translatable = ("name",)


class TestimonialRepository(ListRepository):
    collection_name = "testimonial"
    translatable = ("comment", "activityPackage")


class GalleryRepository(ListRepository):
    collection_name = "gallery"


class JourneyRepository(ListRepository):
    collection_name = "journey"
    translatable = ("title", "body")
    # chronological
    sort = (("order", ASCENDING), ("createdAt", ASCENDING))


# =====
# Admin
# =====
class AdminRepository:
    collection_name = "admin"

    def __init__(self, database: Database):
        self.database = database

    @property
    def collection(self):
        return self.database[self.collection_name]

    def by_email(self, email: str) -> Optional[Dict[str, Any]]:
        return self.collection.find_one({"email": email.strip().lower()})

    def by_id(self, admin_id: str) -> Optional[Dict[str, Any]]:
        oid = to_object_id(admin_id)
        if oid is None:
            return None
        return self.collection.find_one({"_id": oid})

    def ensure_seeded(self, email: str, password_hash: str) -> bool:
        """Create the first admin; False when one already exists."""
        self.collection.create_index("email", unique=True)
        if self.collection.find_one({}) is not None:
            return False
        create_document(
            self.collection_name,
            {"email": email.strip().lower(), "passwordHash": password_hash},
            database=self.database,
        )
        return True

    def set_password(self, admin_id, password_hash: str) -> None:
        """Replace the hash; any outstanding reset token stops working."""
        self.collection.update_one(
            {"_id": admin_id},
            {
                "$set": {"passwordHash": password_hash, "updatedAt": utc_now()},
                "$unset": {"resetToken": "", "resetTokenExpiry": ""},
            },
        )

    def store_reset_token(self, admin_id, token: str, expires_at: datetime) -> None:
        self.collection.update_one(
            {"_id": admin_id},
            {"$set": {"resetToken": token, "resetTokenExpiry": expires_at}},
        )

    def redeem_reset_token(self, token: str, password_hash: str) -> bool:
        """Replace the password if `token` is live; the token is consumed."""
        admin = self.collection.find_one({"resetToken": token})
        if admin is None:
            return False
        expires_at = admin.get("resetTokenExpiry")
        if expires_at is None:
            return False
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        now = utc_now()
        if expires_at <= now:
            return False
        # matching on the token again makes a concurrent second redeem a no-op
        result = self.collection.update_one(
            {"_id": admin["_id"], "resetToken": token},
            {
                "$set": {"passwordHash": password_hash, "updatedAt": now},
                "$unset": {"resetToken": "", "resetTokenExpiry": ""},
            },
        )
        return result.modified_count == 1


# ============
# Dependencies
# ============
def get_admin_repository(db: Database = Depends(get_db)) -> AdminRepository:
    return AdminRepository(db)


def get_about_repository(
    db: Database = Depends(get_db), writer: BilingualWriter = Depends(get_writer)
) -> AboutRepository:
    return AboutRepository(db, writer)


def get_hero_repository(db: Database = Depends(get_db)) -> HeroRepository:
    return HeroRepository(db)


def get_contact_repository(db: Database = Depends(get_db)) -> ContactRepository:
    return ContactRepository(db)


def get_experience_repository(db: Database = Depends(get_db)) -> ExperienceRepository:
    return ExperienceRepository(db)


def get_testimonial_repository(db: Database = Depends(get_db)) -> TestimonialRepository:
    return TestimonialRepository(db)


def get_gallery_repository(db: Database = Depends(get_db)) -> GalleryRepository:
    return GalleryRepository(db)


def get_journey_repository(db: Database = Depends(get_db)) -> JourneyRepository:
    return JourneyRepository(db)
