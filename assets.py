"""
Image asset storage (Cloudinary) and upload validation.
"""

import io
import logging
import uuid
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Dict, List, Protocol

import cloudinary
import cloudinary.uploader
from fastapi import HTTPException, UploadFile

from config import get_settings

logger = logging.getLogger(__name__)

MB = 1024 * 1024
PROFILE_IMAGE_MAX_BYTES = 5 * MB
HERO_IMAGE_MAX_BYTES = 10 * MB
GALLERY_IMAGE_MAX_BYTES = 5 * MB

PROFILE_FOLDER = "portfolio_profile"
HERO_FOLDER = "portfolio_hero"
GALLERY_FOLDER = "portfolio_gallery"


@dataclass
class StoredAsset:
    url: str
    asset_id: str


class AssetStore(Protocol):
    def upload(self, data: bytes, folder: str) -> StoredAsset:
        ...

    def delete(self, asset_id: str) -> None:
        ...


class CloudinaryAssetStore:
    def __init__(self, cloud_name: str, api_key: str, api_secret: str):
        cloudinary.config(
            cloud_name=cloud_name,
            api_key=api_key,
            api_secret=api_secret,
            secure=True,
        )

    def upload(self, data: bytes, folder: str) -> StoredAsset:
        result = cloudinary.uploader.upload(
            io.BytesIO(data), folder=folder, resource_type="image"
        )
        logger.info("Uploaded image %s", result["public_id"])
        return StoredAsset(url=result["secure_url"], asset_id=result["public_id"])

    def delete(self, asset_id: str) -> None:
        result = cloudinary.uploader.destroy(asset_id, resource_type="image")
        # "not found" means the asset is already gone
        if result.get("result") not in ("ok", "not found"):
            raise RuntimeError(f"Could not delete image {asset_id}: {result}")
        logger.info("Deleted image %s (%s)", asset_id, result.get("result"))


@dataclass
class InMemoryAssetStore:
    """Stand-in used when Cloudinary is not configured."""

    base_url: str = "https://example.test/assets"
    stored: Dict[str, bytes] = field(default_factory=dict)
    deleted: List[str] = field(default_factory=list)

    def upload(self, data: bytes, folder: str) -> StoredAsset:
        asset_id = f"{folder}/{uuid.uuid4().hex}"
        self.stored[asset_id] = data
        return StoredAsset(url=f"{self.base_url}/{asset_id}", asset_id=asset_id)

    def delete(self, asset_id: str) -> None:
        self.stored.pop(asset_id, None)
        self.deleted.append(asset_id)


@lru_cache(maxsize=1)
def get_asset_store() -> AssetStore:
    settings = get_settings()
    if not settings.use_cloudinary:
        logger.warning("Cloudinary not configured; images are kept in memory")
        return InMemoryAssetStore()
    return CloudinaryAssetStore(
        settings.cloudinary_cloud_name,
        settings.cloudinary_api_key,
        settings.cloudinary_api_secret,
    )


def read_image(upload: UploadFile, max_bytes: int) -> bytes:
    """Validate an uploaded image and return its bytes; 400 when unacceptable."""
    if not (upload.content_type or "").startswith("image/"):
        raise HTTPException(status_code=400, detail="Only image files are allowed")
    data = upload.file.read(max_bytes + 1)
    if not data:
        raise HTTPException(status_code=400, detail="No image file provided")
    if len(data) > max_bytes:
        raise HTTPException(
            status_code=400,
            detail=f"Image exceeds the {max_bytes // MB}MB limit",
        )
    return data
