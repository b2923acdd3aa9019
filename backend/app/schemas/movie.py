from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Wire models use camelCase keys but accept snake_case too."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def _normalize_genres(value):
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return value
    seen: list[str] = []
    for item in value:
        if isinstance(item, str):
            item = item.strip()
            if not item or item in seen:
                continue
        seen.append(item)
    return seen


class MovieFields(CamelModel):
    """Create/update payload. Every field is optional here; the repository
    decides which ones are required."""

    title: str | None = None
    release_year: int | None = None
    genre: list[str] | None = None
    rating: float | None = Field(default=None, ge=0, le=10)
    featured: bool | None = None
    description: str | None = None
    poster: str | None = None
    trailer: str | None = None
    video: str | None = None
    duration: str | None = None

    @field_validator("genre", mode="before")
    @classmethod
    def normalize_genre(cls, v):
        return None if v is None else _normalize_genres(v)

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, v):
        return v.strip() if isinstance(v, str) else v


class MovieRead(CamelModel):
    id: int
    title: str
    release_year: int
    genre: list[str]
    rating: float = 0.0
    featured: bool = False
    description: str = ""
    poster: str | None = None
    trailer: str | None = None
    video: str | None = None
    duration: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
