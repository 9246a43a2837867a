"""
Testimonial, destination highlight and site settings schemas.
Field aliases are the names stored in the content store and read by the site.
"""

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(v):
    if isinstance(v, str):
        v = v.strip()
        return v or None
    return v


def _check_url(v: Optional[str]) -> Optional[str]:
    if v is not None and not v.lower().startswith(("http://", "https://")):
        raise ValueError("must be an http(s) URL")
    return v


def _check_email(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    local, _, domain = v.partition("@")
    if not local or "." not in domain:
        raise ValueError("must be an email address")
    return v


class _StoreModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class Testimonial(_StoreModel):
    """
    Customer testimonial shown on the website.
    Collection: "testimonials"
    """
    name: str = Field(..., min_length=1, description="Customer name")
    role: Optional[str] = Field(None, description="e.g. Travel Enthusiast")
    image_url: Optional[str] = Field(None, alias="imageUrl", description="Avatar URL")
    rating: int = Field(5, ge=1, le=5, description="Star rating 1-5")
    message: str = Field(..., min_length=1, description="Testimonial text")

    @field_validator("name", "role", "image_url", "message", mode="before")
    @classmethod
    def _strip(cls, v):
        return _blank_to_none(v)

    @field_validator("rating", mode="before")
    @classmethod
    def _whole_rating(cls, v):
        if isinstance(v, bool) or (isinstance(v, float) and not v.is_integer()):
            raise ValueError("rating must be a whole number of stars")
        return v

    @field_validator("image_url")
    @classmethod
    def _image_url(cls, v):
        return _check_url(v)


class VideoHighlight(_StoreModel):
    """Destination highlight rendered as an embedded video."""
    type: Literal["video"]
    video_url: str = Field(..., alias="videoUrl")
    thumbnail: str

    @field_validator("video_url", "thumbnail", mode="before")
    @classmethod
    def _strip(cls, v):
        return _blank_to_none(v)

    @field_validator("video_url", "thumbnail")
    @classmethod
    def _urls(cls, v):
        return _check_url(v)


class DescriptionHighlight(_StoreModel):
    """Destination highlight rendered as text over a background image."""
    type: Literal["description"]
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    background: str

    @field_validator("title", "description", "background", mode="before")
    @classmethod
    def _strip(cls, v):
        return _blank_to_none(v)

    @field_validator("background")
    @classmethod
    def _background_url(cls, v):
        return _check_url(v)


# Collection: "destination-highlights". Only the selected variant's fields are kept.
DestinationHighlight = Annotated[
    Union[VideoHighlight, DescriptionHighlight],
    Field(discriminator="type"),
]


class SiteSettings(_StoreModel):
    """
    Site-wide contact details.
    Collection: "settings", document "site"
    """
    site_name: str = Field("Safar Air International", alias="siteName", min_length=1)
    site_email: str = Field("info@safarair.com", alias="siteEmail")
    site_phone: str = Field("+1 (555) 123-4567", alias="sitePhone")

    @field_validator("site_email")
    @classmethod
    def _email(cls, v):
        return _check_email(v)


class SiteSettingsUpdate(_StoreModel):
    """Partial settings update (merge write)."""
    site_name: Optional[str] = Field(None, alias="siteName", min_length=1)
    site_email: Optional[str] = Field(None, alias="siteEmail")
    site_phone: Optional[str] = Field(None, alias="sitePhone")

    @field_validator("site_email")
    @classmethod
    def _email(cls, v):
        return _check_email(v)
