"""Credential store: bcrypt-hashed passwords keyed by unique username."""

import logging

import bcrypt
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from app.config import settings
from app.errors import ConflictError, InternalError, UnauthorizedError
from app.models.user import User

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes of a password.
BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(_password_bytes(password), salt).decode()


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(_password_bytes(plain), hashed.encode())
    except (ValueError, TypeError):
        return False


def get_user(session: Session, username: str) -> User | None:
    return session.exec(select(User).where(User.username == username)).first()


def register(
    session: Session, username: str, password: str, is_admin: bool = False
) -> User:
    """Store a new user. Raises ConflictError when the username is taken."""
    if get_user(session, username):
        raise ConflictError("Username already exists")

    user = User(
        username=username,
        password_hash=hash_password(password),
        is_admin=is_admin,
    )
    session.add(user)
    try:
        session.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration of the same name.
        session.rollback()
        raise ConflictError("Username already exists")
    except SQLAlchemyError as e:
        session.rollback()
        logger.exception(f"Failed to store user {username}")
        raise InternalError("Registration failed") from e
    session.refresh(user)
    logger.info(f"Registered user {username} (admin={is_admin})")
    return user


def verify(session: Session, username: str, password: str) -> User:
    """Return the stored user when the password matches, else UnauthorizedError."""
    user = get_user(session, username)
    if not user or not verify_password(password, user.password_hash):
        logger.info(f"Failed login for {username}")
        raise UnauthorizedError("Invalid credentials")
    return user
