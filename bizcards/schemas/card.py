"""Card schemas."""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from bizcards.schemas.user import PHONE_PATTERN

URL_PATTERN = r"^(https?://|www\.)\S+\.\S{2,}$"


class Address(BaseModel):
    """Postal address of a business."""

    state: str = Field("", max_length=256)
    country: str = Field(..., min_length=2, max_length=256)
    city: str = Field(..., min_length=2, max_length=256)
    street: str = Field(..., min_length=2, max_length=256)
    house_number: int = Field(..., ge=0)
    zip: int | None = None


class CardCreate(BaseModel):
    """Create a new card. The business number is assigned by the server."""

    title: str = Field(..., min_length=2, max_length=256)
    subtitle: str = Field(..., min_length=2, max_length=256)
    description: str = Field(..., min_length=2, max_length=1024)
    phone: str = Field(..., pattern=PHONE_PATTERN)
    email: EmailStr = Field(..., max_length=255)
    web: str | None = Field(None, pattern=URL_PATTERN, max_length=512)
    image_url: str | None = Field(None, pattern=URL_PATTERN, max_length=512)
    image_alt: str | None = Field(None, max_length=256)
    address: Address


class CardUpdate(BaseModel):
    """Update a card. Owner, business number and likes cannot change here."""

    title: str | None = Field(None, min_length=2, max_length=256)
    subtitle: str | None = Field(None, min_length=2, max_length=256)
    description: str | None = Field(None, min_length=2, max_length=1024)
    phone: str | None = Field(None, pattern=PHONE_PATTERN)
    email: EmailStr | None = Field(None, max_length=255)
    web: str | None = Field(None, pattern=URL_PATTERN, max_length=512)
    image_url: str | None = Field(None, pattern=URL_PATTERN, max_length=512)
    image_alt: str | None = Field(None, max_length=256)
    address: Address | None = None


class CardResponse(BaseModel):
    """Card response."""

    id: int
    title: str
    subtitle: str
    description: str
    phone: str
    email: str
    web: str | None
    image_url: str | None
    image_alt: str | None
    address: Address
    biz_number: int
    is_blocked: bool
    likes: list[int]
    like_count: int
    # Only shown to the owner and admins
    user_id: int | None = None
    created_at: datetime
    updated_at: datetime


class CardDeleted(BaseModel):
    """Result of deleting a card."""

    deleted: bool
    id: int
