import logging
from contextlib import asynccontextmanager
from typing import Any, Dict

from fastapi import Depends, FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from pymongo.database import Database
from pymongo.errors import PyMongoError
from slowapi.middleware import SlowAPIMiddleware

import database
from assets import (
    GALLERY_FOLDER,
    GALLERY_IMAGE_MAX_BYTES,
    HERO_FOLDER,
    HERO_IMAGE_MAX_BYTES,
    PROFILE_FOLDER,
    PROFILE_IMAGE_MAX_BYTES,
    AssetStore,
    get_asset_store,
    read_image,
)
from bilingual import BilingualWriter, get_writer
from config import get_settings
from database import get_db, serialize_document
from errors import ServerError, register_exception_handlers
from limiter import limiter
from logging_config import setup_logging
from mailer import Mailer, get_mailer
from repositories import (
    AboutRepository,
    AdminRepository,
    ContactRepository,
    ExperienceRepository,
    GalleryRepository,
    HeroRepository,
    JourneyRepository,
    SingletonRepository,
    TestimonialRepository,
    get_about_repository,
    get_admin_repository,
    get_contact_repository,
    get_experience_repository,
    get_gallery_repository,
    get_hero_repository,
    get_journey_repository,
    get_testimonial_repository,
)
from schemas import (
    AboutUpdate,
    ChangePasswordRequest,
    ContactUpdate,
    ExperienceCreate,
    ExperienceUpdate,
    ForgotPasswordRequest,
    GalleryUpdate,
    HeroUpdate,
    JourneyCreate,
    JourneyUpdate,
    LoginRequest,
    ResetPasswordRequest,
    TestimonialCreate,
    TestimonialUpdate,
    TokenResponse,
)
from security import (
    create_access_token,
    create_reset_token,
    get_current_admin,
    hash_password,
    seed_admin,
    verify_password,
)

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if database.db is not None:
        try:
            seed_admin(AdminRepository(database.db))
        except PyMongoError:
            # requests still answer 500 until the database is reachable
            logger.exception("Admin seed failed")
    else:
        logger.warning("Skipping admin seed; database not available")
    yield


# ==================
# FastAPI app config
# ==================
settings = get_settings()
app = FastAPI(title="Portfolio CMS API", lifespan=lifespan)

app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
register_exception_handlers(app)


# =========
# Utilities
# =========

def _not_found(what: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"{what} not found")


def _replace_image(
    repo: SingletonRepository,
    store: AssetStore,
    data: bytes,
    folder: str,
    url_field: str,
    id_field: str,
) -> Dict[str, Any]:
    """Swap the section's image: old asset removed first, then upload, then persist."""
    current = repo.fetch()
    try:
        if current.get(id_field):
            store.delete(current[id_field])
        stored = store.upload(data, folder)
    except Exception as e:
        raise ServerError("Upload failed", str(e)) from e
    return repo.update({url_field: stored.url, id_field: stored.asset_id})


def _remove_image(
    repo: SingletonRepository, store: AssetStore, url_field: str, id_field: str, what: str
) -> Dict[str, Any]:
    current = repo.fetch()
    if not current.get(id_field):
        raise _not_found(what)
    store.delete(current[id_field])
    return repo.unset(url_field, id_field)


# ======
# Routes
# ======
@app.get("/")
def root():
    return {"status": "ok", "service": "portfolio-cms-api"}


@app.get("/api/health")
def health(db: Database = Depends(get_db)):
    db.command("ping")
    return {"backend": "running", "database": "connected"}


# Auth
@app.post("/api/auth/login", response_model=TokenResponse)
def login(data: LoginRequest, admins: AdminRepository = Depends(get_admin_repository)):
    admin = admins.by_email(data.email)
    if admin is None or not verify_password(data.password, admin["passwordHash"]):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    token = create_access_token({"sub": str(admin["_id"]), "email": admin["email"], "role": "admin"})
    logger.info("Admin %s logged in", admin["email"])
    return TokenResponse(token=token)


@app.post("/api/auth/forgot-password")
def forgot_password(
    data: ForgotPasswordRequest,
    request: Request,
    admins: AdminRepository = Depends(get_admin_repository),
    mailer: Mailer = Depends(get_mailer),
):
    admin = admins.by_email(data.email)
    if admin is None:
        raise HTTPException(status_code=404, detail="User not found")
    token, expires_at = create_reset_token()
    admins.store_reset_token(admin["_id"], token, expires_at)
    reset_url = f"{str(request.base_url).rstrip('/')}/reset-password?token={token}"
    mailer.send_password_reset(admin["email"], reset_url)
    return {"message": "Reset email sent"}


@app.post("/api/auth/reset-password")
def reset_password(data: ResetPasswordRequest, admins: AdminRepository = Depends(get_admin_repository)):
    if not admins.redeem_reset_token(data.token, hash_password(data.new_password)):
        raise HTTPException(status_code=400, detail="Invalid or expired token")
    return {"message": "Password reset successful"}


@app.post("/api/auth/change-password")
def change_password(
    data: ChangePasswordRequest,
    admin: dict = Depends(get_current_admin),
    admins: AdminRepository = Depends(get_admin_repository),
):
    if not verify_password(data.current_password, admin["passwordHash"]):
        raise HTTPException(status_code=401, detail="Current password is incorrect")
    admins.set_password(admin["_id"], hash_password(data.new_password))
    return {"message": "Password changed successfully"}


@app.get("/api/auth/me")
def me(admin: dict = Depends(get_current_admin)):
    return {"id": str(admin["_id"]), "email": admin["email"], "role": "admin"}


# About
@app.get("/api/about")
def get_about(repo: AboutRepository = Depends(get_about_repository)):
    return serialize_document(repo.fetch())


@app.put("/api/about")
def update_about(
    data: AboutUpdate,
    _: dict = Depends(get_current_admin),
    repo: AboutRepository = Depends(get_about_repository),
    writer: BilingualWriter = Depends(get_writer),
):
    fields = writer.compose(data.to_document(), repo.translatable)
    about = repo.update(fields)
    return {"message": "About section updated", "about": serialize_document(about)}


@app.post("/api/about/profile-image")
def upload_profile_image(
    _: dict = Depends(get_current_admin),
    image: UploadFile = File(...),
    repo: AboutRepository = Depends(get_about_repository),
    store: AssetStore = Depends(get_asset_store),
):
    data = read_image(image, PROFILE_IMAGE_MAX_BYTES)
    about = _replace_image(repo, store, data, PROFILE_FOLDER, "profileImageUrl", "profileImageAssetId")
    return {"message": "Profile image uploaded", "about": serialize_document(about)}


@app.delete("/api/about/profile-image")
def delete_profile_image(
    _: dict = Depends(get_current_admin),
    repo: AboutRepository = Depends(get_about_repository),
    store: AssetStore = Depends(get_asset_store),
):
    about = _remove_image(repo, store, "profileImageUrl", "profileImageAssetId", "Profile image")
    return {"message": "Profile image deleted", "about": serialize_document(about)}


# Hero
@app.get("/api/hero")
def get_hero(repo: HeroRepository = Depends(get_hero_repository)):
    return serialize_document(repo.fetch())


@app.put("/api/hero")
def update_hero(
    data: HeroUpdate,
    _: dict = Depends(get_current_admin),
    repo: HeroRepository = Depends(get_hero_repository),
    writer: BilingualWriter = Depends(get_writer),
):
    fields = writer.compose(data.to_document(), repo.translatable)
    hero = repo.update(fields) if fields else repo.fetch()
    return {"message": "Hero section updated", "hero": serialize_document(hero)}


@app.post("/api/hero/background-image")
def upload_background_image(
    _: dict = Depends(get_current_admin),
    image: UploadFile = File(...),
    repo: HeroRepository = Depends(get_hero_repository),
    store: AssetStore = Depends(get_asset_store),
):
    data = read_image(image, HERO_IMAGE_MAX_BYTES)
    hero = _replace_image(repo, store, data, HERO_FOLDER, "backgroundImageUrl", "backgroundImageAssetId")
    return {"message": "Hero background image uploaded", "hero": serialize_document(hero)}


@app.delete("/api/hero/background-image")
def delete_background_image(
    _: dict = Depends(get_current_admin),
    repo: HeroRepository = Depends(get_hero_repository),
    store: AssetStore = Depends(get_asset_store),
):
    hero = _remove_image(repo, store, "backgroundImageUrl", "backgroundImageAssetId", "Background image")
    return {"message": "Hero background image deleted", "hero": serialize_document(hero)}


# Experience
@app.get("/api/experience")
def list_experience(repo: ExperienceRepository = Depends(get_experience_repository)):
    return [serialize_document(it) for it in repo.list()]


@app.post("/api/experience", status_code=201)
def create_experience(
    data: ExperienceCreate,
    _: dict = Depends(get_current_admin),
    repo: ExperienceRepository = Depends(get_experience_repository),
    writer: BilingualWriter = Depends(get_writer),
):
    payload = data.model_dump(by_alias=True)
    if data.in_progress:
        payload["date"] = None
    experience = repo.create(writer.compose(payload, repo.translatable))
    return {"message": "Experience created", "experience": serialize_document(experience)}


@app.put("/api/experience/{item_id}")
def update_experience(
    item_id: str,
    data: ExperienceUpdate,
    _: dict = Depends(get_current_admin),
    repo: ExperienceRepository = Depends(get_experience_repository),
    writer: BilingualWriter = Depends(get_writer),
):
    payload = data.to_document()
    if data.in_progress:
        payload["date"] = None
    experience = repo.update(item_id, writer.compose(payload, repo.translatable))
    if experience is None:
        raise _not_found("Experience")
    return {"message": "Experience updated", "experience": serialize_document(experience)}


@app.delete("/api/experience/{item_id}")
def delete_experience(
    item_id: str,
    _: dict = Depends(get_current_admin),
    repo: ExperienceRepository = Depends(get_experience_repository),
):
    if repo.delete(item_id) is None:
        raise _not_found("Experience")
    return {"message": "Experience deleted"}


# Testimonials
@app.get("/api/testimonial")
def list_testimonials(repo: TestimonialRepository = Depends(get_testimonial_repository)):
    return [serialize_document(it) for it in repo.list()]


@app.post("/api/testimonial", status_code=201)
def create_testimonial(
    data: TestimonialCreate,
    _: dict = Depends(get_current_admin),
    repo: TestimonialRepository = Depends(get_testimonial_repository),
    writer: BilingualWriter = Depends(get_writer),
):
    payload = data.model_dump(by_alias=True, exclude_none=True)
    testimonial = repo.create(writer.compose(payload, repo.translatable))
    return {"message": "Testimonial created", "testimonial": serialize_document(testimonial)}


@app.put("/api/testimonial/{item_id}")
def update_testimonial(
    item_id: str,
    data: TestimonialUpdate,
    _: dict = Depends(get_current_admin),
    repo: TestimonialRepository = Depends(get_testimonial_repository),
    writer: BilingualWriter = Depends(get_writer),
):
    fields = writer.compose(data.to_document(), repo.translatable, clear_empty=True)
    testimonial = repo.update(item_id, fields)
    if testimonial is None:
        raise _not_found("Testimonial")
    return {"message": "Testimonial updated", "testimonial": serialize_document(testimonial)}


@app.delete("/api/testimonial/{item_id}")
def delete_testimonial(
    item_id: str,
    _: dict = Depends(get_current_admin),
    repo: TestimonialRepository = Depends(get_testimonial_repository),
):
    if repo.delete(item_id) is None:
        raise _not_found("Testimonial")
    return {"message": "Testimonial deleted"}


# Gallery
@app.get("/api/gallery")
def list_gallery(repo: GalleryRepository = Depends(get_gallery_repository)):
    return [serialize_document(it) for it in repo.list()]


@app.post("/api/gallery", status_code=201)
def upload_gallery_image(
    _: dict = Depends(get_current_admin),
    image: UploadFile = File(...),
    caption: str = Form(""),
    order: int = Form(0),
    repo: GalleryRepository = Depends(get_gallery_repository),
    store: AssetStore = Depends(get_asset_store),
):
    data = read_image(image, GALLERY_IMAGE_MAX_BYTES)
    try:
        stored = store.upload(data, GALLERY_FOLDER)
    except Exception as e:
        raise ServerError("Upload failed", str(e)) from e
    gallery = repo.create(
        {"imageUrl": stored.url, "assetId": stored.asset_id, "caption": caption, "order": order}
    )
    return {"message": "Image uploaded", "gallery": serialize_document(gallery)}


@app.put("/api/gallery/{item_id}")
def update_gallery_image(
    item_id: str,
    data: GalleryUpdate,
    _: dict = Depends(get_current_admin),
    repo: GalleryRepository = Depends(get_gallery_repository),
):
    gallery = repo.update(item_id, data.to_document())
    if gallery is None:
        raise _not_found("Image")
    return {"message": "Image info updated", "gallery": serialize_document(gallery)}


@app.delete("/api/gallery/{item_id}")
def delete_gallery_image(
    item_id: str,
    _: dict = Depends(get_current_admin),
    repo: GalleryRepository = Depends(get_gallery_repository),
    store: AssetStore = Depends(get_asset_store),
):
    gallery = repo.get(item_id)
    if gallery is None:
        raise _not_found("Image")
    store.delete(gallery["assetId"])
    repo.delete(item_id)
    return {"message": "Image deleted"}


# Journey
@app.get("/api/journey")
def list_journey(repo: JourneyRepository = Depends(get_journey_repository)):
    return [serialize_document(it) for it in repo.list()]


@app.post("/api/journey", status_code=201)
def create_journey_item(
    data: JourneyCreate,
    _: dict = Depends(get_current_admin),
    repo: JourneyRepository = Depends(get_journey_repository),
    writer: BilingualWriter = Depends(get_writer),
):
    journey = repo.create(writer.compose(data.model_dump(by_alias=True), repo.translatable))
    return {"message": "Journey item created", "journey": serialize_document(journey)}


@app.put("/api/journey/{item_id}")
def update_journey_item(
    item_id: str,
    data: JourneyUpdate,
    _: dict = Depends(get_current_admin),
    repo: JourneyRepository = Depends(get_journey_repository),
    writer: BilingualWriter = Depends(get_writer),
):
    journey = repo.update(item_id, writer.compose(data.to_document(), repo.translatable))
    if journey is None:
        raise _not_found("Journey item")
    return {"message": "Journey item updated", "journey": serialize_document(journey)}


@app.delete("/api/journey/{item_id}")
def delete_journey_item(
    item_id: str,
    _: dict = Depends(get_current_admin),
    repo: JourneyRepository = Depends(get_journey_repository),
):
    if repo.delete(item_id) is None:
        raise _not_found("Journey item")
    return {"message": "Journey item deleted"}


# Contact
@app.get("/api/contact")
def get_contact(repo: ContactRepository = Depends(get_contact_repository)):
    return serialize_document(repo.fetch())


@app.put("/api/contact")
def update_contact(
    data: ContactUpdate,
    _: dict = Depends(get_current_admin),
    repo: ContactRepository = Depends(get_contact_repository),
):
    contact = repo.update(data.to_document())
    return {"message": "Contact info updated", "contact": serialize_document(contact)}
