from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Annotated
from urllib.parse import urlparse

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Latin digits only; Arabic-Indic digits must be normalized before validation
PHONE_PATTERN = r"^01[0-9]{9}$"
EMAIL_PATTERN = r"^[A-Za-z0-9._%+\-]+@[A-Za-z0-9\-]+(?:\.[A-Za-z0-9\-]+)*\.[A-Za-z]{2,}$"
HEX_COLOR_PATTERN = r"^#[0-9a-fA-F]{6}$"
MAX_SERVICES = 6


def _absolute_url(value: str) -> str:
    parsed = urlparse(value)
    if not parsed.scheme or not parsed.netloc:
        raise ValueError("must be an absolute URL")
    return value


AbsoluteUrl = Annotated[str, AfterValidator(_absolute_url)]


class BusinessType(StrEnum):
    restaurant = "restaurant"
    store = "store"
    services = "services"
    clinic = "clinic"
    salon = "salon"
    other = "other"


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class Service(_CamelModel):
    title: str = Field(min_length=2, max_length=100)
    description: str = Field(max_length=300)
    icon: str | None = None  # emoji or icon class


class BusinessRecord(_CamelModel):
    business_name: str = Field(min_length=2, max_length=100)
    tagline: str | None = Field(default=None, max_length=200)
    phone: str = Field(pattern=PHONE_PATTERN)
    whatsapp: str | None = Field(default=None, pattern=PHONE_PATTERN)
    email: str | None = Field(default=None, pattern=EMAIL_PATTERN)
    address: str | None = Field(default=None, max_length=200)
    city: str | None = Field(default=None, max_length=50)
    services: list[Service] = Field(default_factory=list, max_length=MAX_SERVICES)
    hero_image: AbsoluteUrl | None = None
    logo: AbsoluteUrl | None = None
    facebook: AbsoluteUrl | None = None
    instagram: AbsoluteUrl | None = None
    business_type: BusinessType = BusinessType.other


class SiteConfig(_CamelModel):
    template_id: str = "landwind-v1"
    primary_color: str = Field(default="#14b8a6", pattern=HEX_COLOR_PATTERN)
    secondary_color: str = Field(default="#7e3af2", pattern=HEX_COLOR_PATTERN)
    font_family: str = "Cairo"
    rtl: bool = True


class PreviewData(_CamelModel):
    business: BusinessRecord
    config: SiteConfig = Field(default_factory=SiteConfig)
    generated_at: datetime | None = None
