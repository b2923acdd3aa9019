"""Movie repository: CRUD over the ``movies`` table."""

import logging
from datetime import UTC, datetime
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from app.errors import BadRequestError, InternalError, NotFoundError
from app.models.movie import Movie

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("title", "release_year", "genre")
MUTABLE_FIELDS = (
    "title",
    "release_year",
    "genre",
    "rating",
    "featured",
    "description",
    "poster",
    "trailer",
    "video",
    "duration",
)
# Columns that fall back to their default rather than accept null.
DEFAULTED_FIELDS = ("rating", "featured", "description")


def _missing_required(fields: dict[str, Any]) -> list[str]:
    missing = []
    for name in REQUIRED_FIELDS:
        value = fields.get(name)
        if value is None or value == "" or value == []:
            missing.append(name)
    return missing


def _commit(session: Session, movie: Movie, action: str) -> None:
    try:
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.exception(f"Failed to {action} movie {movie.id}")
        raise InternalError(f"Failed to {action} movie") from e


def list_movies(session: Session) -> list[Movie]:
    try:
        return list(session.exec(select(Movie).order_by(Movie.id)).all())
    except SQLAlchemyError as e:
        logger.exception("Failed to fetch movies")
        raise InternalError("Failed to fetch movies") from e


def get_movie(session: Session, movie_id: int) -> Movie:
    movie = session.get(Movie, movie_id)
    if not movie:
        raise NotFoundError("Movie not found")
    return movie


def create_movie(session: Session, fields: dict[str, Any]) -> Movie:
    """Persist a new movie. title, release_year and a non-empty genre are required."""
    if _missing_required(fields):
        raise BadRequestError("Title, releaseYear, and genre are required")

    data = {k: v for k, v in fields.items() if k in MUTABLE_FIELDS and v is not None}
    movie = Movie(**data)
    session.add(movie)
    _commit(session, movie, "add")
    session.refresh(movie)
    logger.info(f"Created movie {movie.id} ({movie.title})")
    return movie


def update_movie(session: Session, movie_id: int, fields: dict[str, Any]) -> Movie:
    """Merge the given fields into an existing movie; other fields keep their values."""
    movie = get_movie(session, movie_id)

    changes = {
        k: v
        for k, v in fields.items()
        if k in MUTABLE_FIELDS and not (v is None and k in DEFAULTED_FIELDS)
    }
    missing = _missing_required(changes)
    if any(k in changes for k in missing):
        raise BadRequestError("Title, releaseYear, and genre cannot be empty")

    for key, value in changes.items():
        setattr(movie, key, value)
    movie.updated_at = datetime.now(UTC)
    session.add(movie)
    _commit(session, movie, "update")
    session.refresh(movie)
    logger.info(f"Updated movie {movie.id}: {sorted(changes)}")
    return movie


def delete_movie(session: Session, movie_id: int) -> Movie:
    """Remove a movie and return the record as it was before deletion."""
    movie = get_movie(session, movie_id)
    deleted = Movie.model_validate(movie.model_dump())
    session.delete(movie)
    _commit(session, deleted, "delete")
    logger.info(f"Deleted movie {movie_id}")
    return deleted
