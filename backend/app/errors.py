"""Error taxonomy shared by the services and the HTTP layer.

Services raise these; ``app.main`` renders them as
``{"detail": <message>, "error": <code>}`` with the matching status code.
"""


class CatalogError(Exception):
    """Base class for every failure the API reports to a caller."""

    status_code = 500
    error = "internal"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class BadRequestError(CatalogError):
    """Missing or invalid input fields."""

    status_code = 400
    error = "bad_request"


class UnauthorizedError(CatalogError):
    """Missing, malformed or expired token, or bad login credentials."""

    status_code = 401
    error = "unauthorized"


class ForbiddenError(CatalogError):
    """Valid token that lacks the required role."""

    status_code = 403
    error = "forbidden"


class NotFoundError(CatalogError):
    status_code = 404
    error = "not_found"


class ConflictError(CatalogError):
    status_code = 409
    error = "conflict"


class InternalError(CatalogError):
    """Persistence or otherwise unexpected failure."""
