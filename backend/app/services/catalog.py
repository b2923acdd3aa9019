"""Catalog query layer: read-only filtering over an already fetched movie list.

Everything here is a pure function. Filters are built from small predicates
(``movie -> bool``) that compose with ``all_of`` / ``any_of``; result order
always follows the input order. Movies may be model objects or mappings
(snake_case or the API's camelCase keys).
"""

from collections import Counter
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, TypeVar

from pydantic.alias_generators import to_camel

M = TypeVar("M")
Predicate = Callable[[Any], bool]


def _field(movie, name: str, default=None):
    if isinstance(movie, Mapping):
        if name in movie:
            return movie[name]
        return movie.get(to_camel(name), default)
    return getattr(movie, name, default)


def _genres(movie) -> list[str]:
    return _field(movie, "genre") or []


def _text(value: str | None) -> str:
    return (value or "").lower()


# --- Predicates ---


def matches_query(query: str) -> Predicate:
    """Case-insensitive substring match on title, description or any genre tag."""
    needle = query.strip().lower()

    def predicate(movie) -> bool:
        if not needle:
            return True
        return (
            needle in _text(_field(movie, "title"))
            or needle in _text(_field(movie, "description"))
            or any(needle in _text(g) for g in _genres(movie))
        )

    return predicate


def has_genre(genre: str) -> Predicate:
    """Case-insensitive exact match against any of the movie's genres."""
    wanted = genre.strip().lower()
    return lambda movie: any(_text(g) == wanted for g in _genres(movie))


def in_any_genre(genres: Iterable[str]) -> Predicate:
    """True when the movie has at least one of ``genres``. No genres selected
    means no restriction."""
    selected = [g for g in genres if g.strip()]
    if not selected:
        return lambda movie: True
    return any_of(*(has_genre(g) for g in selected))


def released_between(start: int | None = None, end: int | None = None) -> Predicate:
    """Inclusive release-year range; a missing bound is open."""

    def predicate(movie) -> bool:
        if start is not None and _field(movie, "release_year") < start:
            return False
        if end is not None and _field(movie, "release_year") > end:
            return False
        return True

    return predicate


def rated_at_least(minimum: float) -> Predicate:
    if minimum <= 0:
        return lambda movie: True
    return lambda movie: (_field(movie, "rating") or 0) >= minimum


def all_of(*predicates: Predicate) -> Predicate:
    return lambda movie: all(p(movie) for p in predicates)


def any_of(*predicates: Predicate) -> Predicate:
    return lambda movie: any(p(movie) for p in predicates)


# --- Queries ---


@dataclass
class CatalogFilter:
    query: str = ""
    genres: list[str] = field(default_factory=list)
    year_from: int | None = None
    year_to: int | None = None
    min_rating: float = 0.0

    def predicate(self) -> Predicate:
        return all_of(
            matches_query(self.query),
            in_any_genre(self.genres),
            released_between(self.year_from, self.year_to),
            rated_at_least(self.min_rating),
        )


def filter_movies(movies: Iterable[M], predicate: Predicate) -> list[M]:
    return [m for m in movies if predicate(m)]


def search(movies: Iterable[M], query: str) -> list[M]:
    return filter_movies(movies, matches_query(query))


def filter_by_genre(movies: Iterable[M], genre: str) -> list[M]:
    return filter_movies(movies, has_genre(genre))


def apply_filters(movies: Iterable[M], filters: CatalogFilter) -> list[M]:
    """Search page semantics: every filter must hold, genres are OR'ed."""
    return filter_movies(movies, filters.predicate())


def featured(movies: Iterable[M]) -> list[M]:
    return [m for m in movies if _field(m, "featured")]


def unique_genres(movies: Iterable[Any]) -> list[str]:
    return sorted({g for m in movies for g in _genres(m)})


def group_by_genre(movies: Sequence[M]) -> dict[str, list[M]]:
    """Genre rows for the home page: each genre, sorted, with its movies in list order."""
    return {g: [m for m in movies if g in _genres(m)] for g in unique_genres(movies)}


def find_by_id(movies: Iterable[M], movie_id: int) -> M | None:
    return next((m for m in movies if _field(m, "id") == movie_id), None)


def similar_movies(movies: Iterable[M], movie, limit: int = 5) -> list[M]:
    """Other movies sharing at least one genre with ``movie``, first ``limit``."""
    own_id = _field(movie, "id")
    wanted = set(_genres(movie))
    similar = [
        m
        for m in movies
        if _field(m, "id") != own_id and wanted.intersection(_genres(m))
    ]
    return similar[:limit]


def genre_counts(movies: Iterable[Any]) -> dict[str, int]:
    """Number of movies per genre tag, in first-seen order."""
    return dict(Counter(g for m in movies for g in _genres(m)))
