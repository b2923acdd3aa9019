from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.errors import ForbiddenError, UnauthorizedError
from app.services import tokens
from app.services.tokens import TokenClaims

# auto_error=False so a missing header and a malformed one can be told apart.
security = HTTPBearer(auto_error=False)

_BEARER = {"WWW-Authenticate": "Bearer"}


async def get_current_claims(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> TokenClaims:
    if credentials is None:
        if request.headers.get("Authorization"):
            raise HTTPException(status_code=401, detail="Invalid token", headers=_BEARER)
        raise HTTPException(status_code=401, detail="No token provided", headers=_BEARER)
    try:
        claims = tokens.verify(credentials.credentials)
    except UnauthorizedError as e:
        raise HTTPException(status_code=401, detail=e.message, headers=_BEARER)
    request.state.claims = claims
    return claims


async def get_admin_claims(claims: TokenClaims = Depends(get_current_claims)) -> TokenClaims:
    if not claims.is_admin:
        raise ForbiddenError("Admin required")
    return claims
