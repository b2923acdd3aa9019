from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.database import get_session
from app.errors import BadRequestError
from app.schemas.auth import CredentialsRequest, LoginResponse, MessageResponse
from app.services import credentials, tokens

router = APIRouter(prefix="/auth", tags=["auth"])


def _require_credentials(body: CredentialsRequest) -> tuple[str, str]:
    username = (body.username or "").strip()
    if not username or not body.password:
        raise BadRequestError("Username and password required")
    return username, body.password


@router.post("/register", response_model=MessageResponse, status_code=201)
def register(body: CredentialsRequest, session: Session = Depends(get_session)):
    username, password = _require_credentials(body)
    credentials.register(session, username, password)
    return MessageResponse(message="User registered")


@router.post("/login", response_model=LoginResponse)
def login(body: CredentialsRequest, session: Session = Depends(get_session)):
    username, password = _require_credentials(body)
    user = credentials.verify(session, username, password)
    return LoginResponse(
        token=tokens.issue(user.id, user.username, user.is_admin),
        is_admin=user.is_admin,
    )
