"""
Package schemas.

Packages live in one document per category under ``packages/<category>``;
the document's ``items`` field is the ordered list of package records. Each
category has its own record model carrying only the fields valid for it, so
a record moved to another category loses fields the new category does not
know about.

``title``/``name`` and ``days``/``duration`` are written with the same value:
the public site reads either spelling.
"""

from enum import Enum
from typing import Any, ClassVar, Dict, List, Mapping, Optional, Tuple, Type, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from app.core.errors import ValidationFailed


class PackageCategory(str, Enum):
    TOP_DESTINATIONS = "top-destinations"
    BEST_DEALS = "best-deals"
    MOST_SEARCHED = "most-searched"
    CURATED = "curated"
    UMRAH = "umrah"


CATEGORY_LABELS = {
    PackageCategory.TOP_DESTINATIONS: "Top Destinations",
    PackageCategory.BEST_DEALS: "Best Deals",
    PackageCategory.MOST_SEARCHED: "Most Searched",
    PackageCategory.CURATED: "Curated",
    PackageCategory.UMRAH: "Umrah",
}


def parse_features(value: Union[str, List[Any], None]) -> Optional[List[str]]:
    """Split comma-separated features, trimming entries and dropping empty ones."""
    if value is None:
        return None
    parts = value.split(",") if isinstance(value, str) else [str(v) for v in value]
    features = [p.strip() for p in parts if p and p.strip()]
    return features or None


def _check_image_url(value: Optional[str]) -> Optional[str]:
    if value is not None and not value.lower().startswith(("http://", "https://")):
        raise ValueError("must be an http(s) URL")
    return value


# ---------------------------------------------------------------------------
# Form submission (every field optional; the category decides what is required)
# ---------------------------------------------------------------------------

class PackageForm(BaseModel):
    """Package form as submitted by the admin panel."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    title: Optional[str] = None
    name: Optional[str] = None
    days: Optional[str] = None
    duration: Optional[str] = None
    price: Optional[str] = None
    discount: Optional[str] = None
    image_url: Optional[str] = Field(None, alias="imageUrl")
    description: Optional[str] = None
    location: Optional[str] = None
    rating: Optional[str] = None
    features: Optional[List[str]] = None

    @field_validator(
        "title", "name", "days", "duration", "price", "discount",
        "image_url", "description", "location", "rating",
        mode="before",
    )
    @classmethod
    def _blank_to_none(cls, v):
        if v is None:
            return None
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            v = str(v)
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @field_validator("features", mode="before")
    @classmethod
    def _split_features(cls, v):
        return parse_features(v)

    def mirrored_values(self) -> Dict[str, Any]:
        """Form values with title/name and days/duration mirrored."""
        values = self.model_dump(exclude_none=True)
        title = self.title or self.name
        if title:
            values["title"] = values["name"] = title
        duration = self.duration or self.days
        if duration:
            values["duration"] = values["days"] = duration
        return values


# ---------------------------------------------------------------------------
# Per-category records
# ---------------------------------------------------------------------------

class PackageRecord(BaseModel):
    """Fields every category carries."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    category: ClassVar[PackageCategory]

    title: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    image_url: str = Field(..., alias="imageUrl")
    description: Optional[str] = None

    @field_validator("image_url")
    @classmethod
    def _image_url(cls, v):
        return _check_image_url(v)

    def to_document(self) -> Dict[str, Any]:
        """Stored shape: store field names, omitted optionals absent."""
        return self.model_dump(by_alias=True, exclude_none=True)


class TopDestinationRecord(PackageRecord):
    category: ClassVar[PackageCategory] = PackageCategory.TOP_DESTINATIONS

    days: Optional[str] = None
    duration: Optional[str] = None
    price: Optional[str] = None
    location: Optional[str] = None


class BestDealRecord(PackageRecord):
    category: ClassVar[PackageCategory] = PackageCategory.BEST_DEALS

    price: str = Field(..., min_length=1)
    discount: Optional[str] = None
    days: Optional[str] = None
    duration: Optional[str] = None


class MostSearchedRecord(PackageRecord):
    category: ClassVar[PackageCategory] = PackageCategory.MOST_SEARCHED

    days: Optional[str] = None
    duration: Optional[str] = None
    price: Optional[str] = None
    location: Optional[str] = None


class CuratedRecord(PackageRecord):
    category: ClassVar[PackageCategory] = PackageCategory.CURATED


class UmrahRecord(PackageRecord):
    category: ClassVar[PackageCategory] = PackageCategory.UMRAH

    price: str = Field(..., min_length=1)
    duration: str = Field(..., min_length=1)
    days: Optional[str] = None
    location: Optional[str] = None
    rating: Optional[str] = None
    features: Optional[List[str]] = None

    @field_validator("rating")
    @classmethod
    def _rating_range(cls, v):
        if v is None:
            return v
        try:
            score = float(v)
        except ValueError:
            raise ValueError("must be a number between 0 and 5")
        if not 0 <= score <= 5:
            raise ValueError("must be a number between 0 and 5")
        return v


RECORD_MODELS: Dict[PackageCategory, Type[PackageRecord]] = {
    model.category: model
    for model in (TopDestinationRecord, BestDealRecord, MostSearchedRecord, CuratedRecord, UmrahRecord)
}


def field_policy(category: PackageCategory) -> Tuple[List[str], List[str]]:
    """(required, optional) form field names for ``category``.

    Mirror fields the form never asks for (``name``, and ``days`` or
    ``duration``) are left out.
    """
    required, optional = [], []
    for name, info in RECORD_MODELS[category].model_fields.items():
        (required if info.is_required() else optional).append(info.alias or name)
    hidden = {"name", "days" if "duration" in required else "duration"}
    return (
        [f for f in required if f not in hidden],
        [f for f in optional if f not in hidden],
    )


def parse_category(value: Union[str, PackageCategory]) -> PackageCategory:
    try:
        return PackageCategory(value)
    except ValueError:
        allowed = ", ".join(c.value for c in PackageCategory)
        raise ValidationFailed(f"Unknown package category {value!r}. Expected one of: {allowed}")


def build_package_record(
    category: Union[str, PackageCategory],
    data: Union[Mapping[str, Any], BaseModel],
) -> PackageRecord:
    """Validate a form submission against its category's field policy.

    Raises ``ValidationFailed`` without touching the store.
    """
    category = parse_category(category)
    if isinstance(data, BaseModel):
        data = data.model_dump(by_alias=True, exclude_none=True)
    try:
        form = PackageForm.model_validate(dict(data))
        return RECORD_MODELS[category].model_validate(form.mirrored_values())
    except ValidationError as exc:
        raise ValidationFailed.from_pydantic(exc, prefix=f"Invalid {category.value} package")
