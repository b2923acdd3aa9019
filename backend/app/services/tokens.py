"""Stateless bearer tokens (HS256 JWT) carrying identity and the admin flag."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from app.config import settings
from app.errors import UnauthorizedError

ALGORITHM = "HS256"


@dataclass(frozen=True)
class TokenClaims:
    user_id: int
    username: str
    is_admin: bool
    issued_at: datetime
    expires_at: datetime


def token_lifetime() -> timedelta:
    return timedelta(hours=settings.token_expire_hours)


def issue(
    user_id: int, username: str, is_admin: bool, now: datetime | None = None
) -> str:
    # Claims carry whole seconds; truncate so the lifetime is exact.
    now = (now or datetime.now(UTC)).replace(microsecond=0)
    return jwt.encode(
        {
            "sub": str(user_id),
            "username": username,
            "is_admin": bool(is_admin),
            "iat": int(now.timestamp()),
            "exp": int((now + token_lifetime()).timestamp()),
        },
        settings.secret_key,
        algorithm=ALGORITHM,
    )


def verify(token: str, now: datetime | None = None) -> TokenClaims:
    """Check signature and expiry and return the embedded claims.

    Expiry is compared against ``now`` (defaults to the current time) so
    callers can evaluate a token at a given instant.
    """
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[ALGORITHM],
            options={"verify_exp": False},
        )
        user_id = int(payload["sub"])
        username = str(payload["username"])
        is_admin = bool(payload.get("is_admin", False))
        issued_at = datetime.fromtimestamp(int(payload["iat"]), UTC)
        expires_at = datetime.fromtimestamp(int(payload["exp"]), UTC)
    except (JWTError, KeyError, TypeError, ValueError):
        raise UnauthorizedError("Invalid token")

    now = now or datetime.now(UTC)
    if now > expires_at:
        raise UnauthorizedError("Invalid token")
    return TokenClaims(
        user_id=user_id,
        username=username,
        is_admin=is_admin,
        issued_at=issued_at,
        expires_at=expires_at,
    )
