from datetime import UTC, datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError
from sqlmodel import Session

from app.api.deps import get_admin_claims
from app.errors import ForbiddenError
from app.models.movie import Movie
from app.models.user import User
from app.services import tokens


def _auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def _create(client: TestClient, token: str, payload: dict) -> dict:
    response = client.post("/api/movies", json=payload, headers=_auth(token))
    assert response.status_code == 201, response.text
    return response.json()


# ==================== Read ====================


def test_list_movies_empty(client: TestClient):
    response = client.get("/api/movies")
    assert response.status_code == 200
    assert response.json() == []


def test_list_movies_keeps_insertion_order(
    client: TestClient, admin_token: str, movie_payload: dict
):
    for title in ("Zodiac", "Alien", "Memento"):
        _create(client, admin_token, {**movie_payload, "title": title})
    titles = [m["title"] for m in client.get("/api/movies").json()]
    assert titles == ["Zodiac", "Alien", "Memento"]


def test_get_movie(client: TestClient, admin_token: str, movie_payload: dict):
    created = _create(client, admin_token, movie_payload)
    response = client.get(f"/api/movies/{created['id']}")
    assert response.status_code == 200
    assert response.json()["title"] == "Inception"


def test_get_movie_not_found(client: TestClient):
    response = client.get("/api/movies/9999")
    assert response.status_code == 404
    assert response.json() == {"detail": "Movie not found", "error": "not_found"}


# ==================== Create ====================


def test_create_movie(client: TestClient, admin_token: str, movie_payload: dict):
    data = _create(client, admin_token, movie_payload)
    assert data["id"] is not None
    assert data["title"] == "Inception"
    assert data["releaseYear"] == 2010
    assert data["genre"] == ["Science Fiction", "Thriller"]
    assert data["rating"] == 8.8
    assert data["featured"] is False

    listed = client.get("/api/movies").json()
    assert [m["id"] for m in listed] == [data["id"]]


def test_create_movie_defaults(client: TestClient, admin_token: str):
    data = _create(
        client,
        admin_token,
        {"title": "Heat", "releaseYear": 1995, "genre": ["Crime"]},
    )
    assert data["rating"] == 0
    assert data["featured"] is False
    assert data["description"] == ""
    assert data["poster"] is None
    assert data["video"] is None


def test_create_movie_accepts_snake_case(client: TestClient, admin_token: str):
    data = _create(
        client,
        admin_token,
        {"title": "Heat", "release_year": 1995, "genre": "Crime"},
    )
    assert data["releaseYear"] == 1995
    assert data["genre"] == ["Crime"]


@pytest.mark.parametrize(
    "missing",
    [
        {"title": None},
        {"title": ""},
        {"releaseYear": None},
        {"genre": []},
        {"genre": None},
    ],
)
def test_create_movie_requires_title_year_genre(
    client: TestClient, admin_token: str, movie_payload: dict, missing: dict
):
    payload = {**movie_payload, **missing}
    response = client.post("/api/movies", json=payload, headers=_auth(admin_token))
    assert response.status_code == 400
    assert "required" in response.json()["detail"]
    assert client.get("/api/movies").json() == []


def test_create_movie_omitted_fields(client: TestClient, admin_token: str):
    response = client.post(
        "/api/movies",
        json={"title": "Only a title"},
        headers=_auth(admin_token),
    )
    assert response.status_code == 400


def test_create_movie_rating_out_of_range(
    client: TestClient, admin_token: str, movie_payload: dict
):
    response = client.post(
        "/api/movies",
        json={**movie_payload, "rating": 11},
        headers=_auth(admin_token),
    )
    assert response.status_code == 400
    assert response.json()["error"] == "bad_request"


def test_create_movie_bad_year_type(
    client: TestClient, admin_token: str, movie_payload: dict
):
    response = client.post(
        "/api/movies",
        json={**movie_payload, "releaseYear": "last year"},
        headers=_auth(admin_token),
    )
    assert response.status_code == 400


# ==================== Update ====================


def test_update_movie_partial(client: TestClient, admin_token: str, movie_payload: dict):
    created = _create(client, admin_token, movie_payload)
    response = client.put(
        f"/api/movies/{created['id']}",
        json={"rating": 9.1, "featured": True},
        headers=_auth(admin_token),
    )
    assert response.status_code == 200
    updated = response.json()
    assert updated["rating"] == 9.1
    assert updated["featured"] is True

    unchanged = {k for k in created if k not in ("rating", "featured", "updatedAt")}
    for key in unchanged:
        assert updated[key] == created[key], key


def test_update_movie_persists(client: TestClient, admin_token: str, movie_payload: dict):
    created = _create(client, admin_token, movie_payload)
    client.put(
        f"/api/movies/{created['id']}",
        json={"title": "Inception (Director's Cut)"},
        headers=_auth(admin_token),
    )
    fetched = client.get(f"/api/movies/{created['id']}").json()
    assert fetched["title"] == "Inception (Director's Cut)"
    assert fetched["genre"] == movie_payload["genre"]


def test_update_movie_not_found(client: TestClient, admin_token: str):
    response = client.put(
        "/api/movies/9999",
        json={"title": "Nope"},
        headers=_auth(admin_token),
    )
    assert response.status_code == 404


def test_update_movie_cannot_blank_required(
    client: TestClient, admin_token: str, movie_payload: dict
):
    created = _create(client, admin_token, movie_payload)
    response = client.put(
        f"/api/movies/{created['id']}",
        json={"genre": []},
        headers=_auth(admin_token),
    )
    assert response.status_code == 400
    fetched = client.get(f"/api/movies/{created['id']}").json()
    assert fetched["genre"] == movie_payload["genre"]


# ==================== Delete ====================


def test_delete_movie(client: TestClient, admin_token: str, movie_payload: dict):
    created = _create(client, admin_token, movie_payload)
    response = client.delete(f"/api/movies/{created['id']}", headers=_auth(admin_token))
    assert response.status_code == 200
    assert response.json()["id"] == created["id"]
    assert response.json()["title"] == "Inception"
    assert client.get("/api/movies").json() == []


def test_delete_movie_not_found(client: TestClient, admin_token: str):
    response = client.delete("/api/movies/9999", headers=_auth(admin_token))
    assert response.status_code == 404


# ==================== Access control ====================


@pytest.mark.parametrize(
    "method,path",
    [("post", "/api/movies"), ("put", "/api/movies/1"), ("delete", "/api/movies/1")],
)
def test_mutation_without_token(client: TestClient, method: str, path: str):
    kwargs = {} if method == "delete" else {"json": {"title": "x"}}
    response = getattr(client, method)(path, **kwargs)
    assert response.status_code == 401
    assert response.json()["detail"] == "No token provided"
    assert response.headers["www-authenticate"] == "Bearer"


@pytest.mark.parametrize(
    "header",
    ["Bearer not-a-token", "Token abc", "Bearer", "Basic dXNlcjpwYXNz"],
)
def test_mutation_with_invalid_token(
    client: TestClient, movie_payload: dict, header: str
):
    response = client.post(
        "/api/movies",
        json=movie_payload,
        headers={"Authorization": header},
    )
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid token"


def test_mutation_with_expired_token(client: TestClient, movie_payload: dict):
    expired = tokens.issue(1, "admin", True, now=datetime.now(UTC) - timedelta(hours=3))
    response = client.post("/api/movies", json=movie_payload, headers=_auth(expired))
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid token"


def test_non_admin_cannot_mutate(
    client: TestClient, user_token: str, admin_token: str, movie_payload: dict
):
    response = client.post("/api/movies", json=movie_payload, headers=_auth(user_token))
    assert response.status_code == 403
    assert response.json() == {"detail": "Admin required", "error": "forbidden"}

    created = _create(client, admin_token, movie_payload)
    response = client.put(
        f"/api/movies/{created['id']}",
        json={"title": "Hijacked"},
        headers=_auth(user_token),
    )
    assert response.status_code == 403
    response = client.delete(f"/api/movies/{created['id']}", headers=_auth(user_token))
    assert response.status_code == 403
    assert client.get(f"/api/movies/{created['id']}").json()["title"] == "Inception"


def test_reading_needs_no_token(client: TestClient):
    assert client.get("/api/movies").status_code == 200
    assert client.get("/api/movies", headers=_auth("garbage")).status_code == 200


# ==================== Store failures ====================


def test_store_failure_maps_to_internal(
    client: TestClient, session: Session, admin_token: str, movie_payload: dict, monkeypatch
):
    def broken_commit():
        raise OperationalError("INSERT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(session, "commit", broken_commit)
    response = client.post("/api/movies", json=movie_payload, headers=_auth(admin_token))
    assert response.status_code == 500
    assert response.json() == {"detail": "Failed to add movie", "error": "internal"}


# ==================== End to end ====================


def test_register_login_and_manage_catalog(client: TestClient, movie_payload: dict):
    response = client.post(
        "/api/auth/register",
        json={"username": "alice", "password": "pw1"},
    )
    assert response.status_code == 201

    response = client.post(
        "/api/auth/login",
        json={"username": "alice", "password": "pw1"},
    )
    assert response.status_code == 200
    alice = response.json()
    assert alice["isAdmin"] is False

    response = client.post("/api/movies", json=movie_payload, headers=_auth(alice["token"]))
    assert response.status_code in (401, 403)

    admin = client.post(
        "/api/auth/login",
        json={"username": "admin", "password": "admin"},
    ).json()
    response = client.post("/api/movies", json=movie_payload, headers=_auth(admin["token"]))
    assert response.status_code == 201
    movie_id = response.json()["id"]

    assert movie_id in [m["id"] for m in client.get("/api/movies").json()]

    response = client.delete(f"/api/movies/{movie_id}", headers=_auth(admin["token"]))
    assert response.status_code == 200

    assert movie_id not in [m["id"] for m in client.get("/api/movies").json()]


@pytest.mark.asyncio
async def test_admin_dependency_raises_forbidden():
    claims = tokens.verify(tokens.issue(2, "bob", False))
    with pytest.raises(ForbiddenError) as exc:
        await get_admin_claims(claims)
    assert exc.value.status_code == 403
    assert exc.value.message == "Admin required"


def test_timestamps_are_timezone_aware():
    movie = Movie(title="Heat", release_year=1995, genre=["Crime"])
    assert movie.created_at.tzinfo is not None
    assert movie.updated_at.tzinfo is not None
    user = User(username="bob", password_hash="x")
    assert user.created_at.tzinfo is not None


def test_update_refreshes_updated_at(
    client: TestClient, admin_token: str, movie_payload: dict, session: Session
):
    created = _create(client, admin_token, movie_payload)
    before = session.get(Movie, created["id"]).updated_at
    response = client.put(
        f"/api/movies/{created['id']}",
        json={"rating": 9.0},
        headers=_auth(admin_token),
    )
    assert response.status_code == 200
    session.expire_all()
    assert session.get(Movie, created["id"]).updated_at >= before
