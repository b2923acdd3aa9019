import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from app.database import get_session
from app.main import app
from app.models.user import User
from app.services.credentials import hash_password


@pytest.fixture(name="session")
def session_fixture():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        # Seed admin user
        admin = User(
            username="admin",
            password_hash=hash_password("admin"),
            is_admin=True,
        )
        session.add(admin)
        session.commit()
        yield session


@pytest.fixture(name="client")
def client_fixture(session: Session):
    def get_session_override():
        yield session

    app.dependency_overrides[get_session] = get_session_override
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture
def admin_token(client: TestClient) -> str:
    response = client.post(
        "/api/auth/login",
        json={"username": "admin", "password": "admin"},
    )
    return response.json()["token"]


@pytest.fixture
def user_token(client: TestClient, session: Session) -> str:
    user = User(
        username="testuser",
        password_hash=hash_password("testpass"),
    )
    session.add(user)
    session.commit()
    response = client.post(
        "/api/auth/login",
        json={"username": "testuser", "password": "testpass"},
    )
    return response.json()["token"]


@pytest.fixture
def movie_payload() -> dict:
    return {
        "title": "Inception",
        "releaseYear": 2010,
        "genre": ["Science Fiction", "Thriller"],
        "rating": 8.8,
        "description": "A thief who steals corporate secrets through dream-sharing.",
        "poster": "https://example.com/inception.jpg",
        "trailer": "https://example.com/inception-trailer.mp4",
    }
