"""
Request/response schemas for the Portfolio CMS.

Documents are stored and served with camelCase keys, so every model takes
camelCase on the wire and snake_case in Python.

Text that faces the public site is accepted either as plain English
("Great trip!") or as {"en": "...", "ar": "..."} when the admin wants to
provide the Arabic by hand.
"""

from typing import Annotated, Any, Optional, Union

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self) -> dict:
        """Fields the client actually sent, keyed as stored."""
        return self.model_dump(by_alias=True, exclude_unset=True, exclude_none=True)


class BilingualText(BaseModel):
    en: str
    ar: Optional[str] = None


def _not_blank(value: Any) -> Any:
    text = value.en if isinstance(value, BilingualText) else value
    if not text or not text.strip():
        raise ValueError("must not be blank")
    return value


PlainText = Annotated[str, AfterValidator(_not_blank)]
# English text that must be present
RequiredText = Annotated[Union[str, BilingualText], AfterValidator(_not_blank)]
# English text that may be sent empty to clear the field
OptionalText = Union[str, BilingualText]


# ====
# Auth
# ====
class LoginRequest(BaseModel):
    email: str
    password: str


class TokenResponse(CamelModel):
    message: str = "Login successful"
    token: str
    token_type: str = "bearer"


class ForgotPasswordRequest(BaseModel):
    email: str


class ResetPasswordRequest(CamelModel):
    token: PlainText
    new_password: str = Field(min_length=6)


class ChangePasswordRequest(CamelModel):
    current_password: str
    new_password: str = Field(min_length=6)


# ==================
# Singleton sections
# ==================
class AboutUpdate(CamelModel):
    content: RequiredText


class HeroUpdate(CamelModel):
    title: Optional[RequiredText] = None
    subtitle: Optional[RequiredText] = None


class ContactUpdate(CamelModel):
    email: Optional[str] = None
    name: Optional[str] = None
    instagram_handle: Optional[str] = None


# ==========
# List items
# ==========
class ExperienceCreate(CamelModel):
    name: RequiredText
    date: Optional[str] = None
    in_progress: bool = False
    order: int = 0


class ExperienceUpdate(CamelModel):
    name: Optional[RequiredText] = None
    date: Optional[str] = None
    in_progress: Optional[bool] = None
    order: Optional[int] = None


class TestimonialCreate(CamelModel):
    name: PlainText
    comment: RequiredText
    activity_package: Optional[OptionalText] = None
    order: int = 0


class TestimonialUpdate(CamelModel):
    name: Optional[PlainText] = None
    comment: Optional[RequiredText] = None
    activity_package: Optional[OptionalText] = None
    order: Optional[int] = None


class GalleryUpdate(CamelModel):
    caption: Optional[str] = None
    order: Optional[int] = None


class JourneyCreate(CamelModel):
    age: PlainText
    title: RequiredText
    body: RequiredText
    order: int = 0


class JourneyUpdate(CamelModel):
    age: Optional[PlainText] = None
    title: Optional[RequiredText] = None
    body: Optional[RequiredText] = None
    order: Optional[int] = None
