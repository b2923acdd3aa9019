from datetime import UTC, datetime

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel


class Movie(SQLModel, table=True):
    __tablename__ = "movies"

    id: int | None = Field(default=None, primary_key=True)
    title: str
    release_year: int
    genre: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    rating: float = Field(default=0.0)
    featured: bool = Field(default=False)
    description: str = Field(default="")
    poster: str | None = Field(default=None)
    trailer: str | None = Field(default=None)
    video: str | None = Field(default=None)
    duration: str | None = Field(default=None)  # e.g. "2h 30m"
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
