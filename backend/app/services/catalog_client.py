"""Client-side catalog store.

Keeps the fetched movie list in memory and talks to the REST API for auth and
admin mutations. Data flows one way: fetch on load, apply the server's answer
locally after each successful mutation, re-fetch when a mutation fails.
Failures never raise; they are reported to subscribers as notifications.
"""

import logging
from collections.abc import Callable
from typing import Any

import httpx
from pydantic import ValidationError

from app.schemas.movie import MovieFields, MovieRead
from app.services import catalog

logger = logging.getLogger(__name__)

Listener = Callable[[str, str], None]  # (level, message)


class CatalogStore:
    def __init__(self, base_url: str, client: httpx.AsyncClient | None = None):
        self.client = client or httpx.AsyncClient(base_url=base_url, timeout=10.0)
        self.movies: list[MovieRead] = []
        self.loading = False
        self.token: str | None = None
        self.username: str | None = None
        self.is_admin = False
        self._listeners: list[Listener] = []

    async def __aenter__(self) -> "CatalogStore":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    # --- Notifications ---

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def _notify(self, level: str, message: str) -> None:
        for listener in self._listeners:
            listener(level, message)

    # --- Transport ---

    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    async def _request(
        self, method: str, path: str, failure: str, **kwargs: Any
    ) -> httpx.Response | None:
        """Send a request; on any failure notify and return None."""
        try:
            resp = await self.client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.warning(f"{method} {path} failed: {e}")
            self._notify("error", failure)
            return None
        if resp.is_success:
            return resp
        detail = None
        try:
            body = resp.json()
            if isinstance(body, dict):
                detail = body.get("detail")
        except ValueError:
            pass
        logger.warning(f"{method} {path} returned {resp.status_code}: {detail}")
        self._notify("error", f"{failure}: {detail}" if detail else failure)
        return None

    # --- Auth ---

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    async def register(self, username: str, password: str) -> bool:
        resp = await self._request(
            "POST",
            "/auth/register",
            "Registration failed",
            json={"username": username, "password": password},
        )
        if resp is None:
            return False
        self._notify("success", "Registration successful")
        return True

    async def login(self, username: str, password: str) -> bool:
        resp = await self._request(
            "POST",
            "/auth/login",
            "Login failed",
            json={"username": username, "password": password},
        )
        if resp is None:
            return False
        try:
            data = resp.json()
            token = data["token"]
        except (ValueError, TypeError, KeyError):
            logger.warning("Login response carried no token")
            self._notify("error", "Login failed: malformed response")
            return False
        self.token = token
        self.is_admin = bool(data.get("isAdmin"))
        self.username = username
        self._notify("success", "Login successful")
        return True

    def logout(self) -> None:
        self.token = None
        self.username = None
        self.is_admin = False
        self._notify("success", "Logged out successfully")

    # --- Movies ---

    async def load(self) -> list[MovieRead]:
        """Fetch the full list; on failure the current list is kept."""
        self.loading = True
        try:
            resp = await self._request(
                "GET", "/movies", "Failed to fetch movies from backend"
            )
            if resp is not None:
                self.movies = [MovieRead.model_validate(m) for m in resp.json()]
        finally:
            self.loading = False
        return self.movies

    def _payload(
        self, fields: dict[str, Any] | MovieFields, failure: str
    ) -> dict[str, Any] | None:
        if not isinstance(fields, MovieFields):
            try:
                fields = MovieFields.model_validate(fields)
            except ValidationError as e:
                logger.warning(f"Rejected movie fields: {e.error_count()} errors")
                self._notify("error", f"{failure}: invalid movie fields")
                return None
        return fields.model_dump(by_alias=True, exclude_unset=True)

    async def add_movie(self, fields: dict[str, Any] | MovieFields) -> MovieRead | None:
        payload = self._payload(fields, "Failed to add movie")
        if payload is None:
            return None
        resp = await self._request(
            "POST",
            "/movies",
            "Failed to add movie",
            json=payload,
            headers=self._auth_headers(),
        )
        if resp is None:
            await self.load()
            return None
        movie = MovieRead.model_validate(resp.json())
        self.movies = [*self.movies, movie]
        self._notify("success", "Movie added successfully")
        return movie

    async def update_movie(
        self, movie_id: int, fields: dict[str, Any] | MovieFields
    ) -> MovieRead | None:
        payload = self._payload(fields, "Failed to update movie")
        if payload is None:
            return None
        resp = await self._request(
            "PUT",
            f"/movies/{movie_id}",
            "Failed to update movie",
            json=payload,
            headers=self._auth_headers(),
        )
        if resp is None:
            await self.load()
            return None
        updated = MovieRead.model_validate(resp.json())
        self.movies = [updated if m.id == updated.id else m for m in self.movies]
        self._notify("success", "Movie updated successfully")
        return updated

    async def delete_movie(self, movie_id: int) -> bool:
        resp = await self._request(
            "DELETE",
            f"/movies/{movie_id}",
            "Failed to delete movie",
            headers=self._auth_headers(),
        )
        if resp is None:
            await self.load()
            return False
        self.movies = [m for m in self.movies if m.id != movie_id]
        self._notify("success", "Movie deleted successfully")
        return True

    # --- Queries over the loaded list ---

    def get_movie(self, movie_id: int) -> MovieRead | None:
        return catalog.find_by_id(self.movies, movie_id)

    @property
    def featured_movies(self) -> list[MovieRead]:
        return catalog.featured(self.movies)

    @property
    def genres(self) -> list[str]:
        return catalog.unique_genres(self.movies)

    @property
    def genre_counts(self) -> dict[str, int]:
        return catalog.genre_counts(self.movies)

    def similar_movies(self, movie_id: int, limit: int = 5) -> list[MovieRead]:
        movie = self.get_movie(movie_id)
        if movie is None:
            return []
        return catalog.similar_movies(self.movies, movie, limit=limit)

    def search(self, query: str) -> list[MovieRead]:
        return catalog.search(self.movies, query)

    def filter_by_genre(self, genre: str) -> list[MovieRead]:
        return catalog.filter_by_genre(self.movies, genre)

    def apply_filters(self, filters: catalog.CatalogFilter) -> list[MovieRead]:
        return catalog.apply_filters(self.movies, filters)
