from app.schemas.movie import CamelModel


class CredentialsRequest(CamelModel):
    # Optional so that missing fields are reported as 400, not 422.
    username: str | None = None
    password: str | None = None


class LoginResponse(CamelModel):
    token: str
    is_admin: bool
    token_type: str = "bearer"


class MessageResponse(CamelModel):
    message: str
