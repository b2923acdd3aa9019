import logging
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlmodel import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.auth import router as auth_router
from app.api.movies import router as movies_router
from app.config import DEFAULT_SECRET_KEY, settings
from app.database import engine, init_db
from app.errors import CatalogError
from app.services import credentials

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)

_ERROR_CODES = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
}


def seed_admin(session: Session) -> None:
    """Create the configured admin account if it does not exist yet."""
    if not settings.admin_password:
        return
    admin = credentials.get_user(session, settings.admin_username)
    if not admin:
        credentials.register(
            session, settings.admin_username, settings.admin_password, is_admin=True
        )
    elif not admin.is_admin:
        logger.warning(f"User {settings.admin_username} exists but is not an admin")


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.secret_key == DEFAULT_SECRET_KEY:
        logger.warning("MOVIES_SECRET_KEY is not set; using the development default")
    init_db()
    with Session(engine) as session:
        seed_admin(session)
    yield


app = FastAPI(title="Movie Catalog", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router, prefix="/api")
app.include_router(movies_router, prefix="/api")


@app.exception_handler(CatalogError)
async def catalog_error_handler(request: Request, exc: CatalogError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": exc.error},
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "error": _ERROR_CODES.get(exc.status_code, "internal")},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(
        str(p) for p in first.get("loc", ()) if p not in ("body", "path", "query")
    )
    message = first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=400,
        content={
            "detail": f"{field}: {message}" if field else message,
            "error": "bad_request",
        },
    )


@app.get("/health")
@app.get("/api/health")
async def health():
    return {"status": "ok", "time": datetime.now(UTC).isoformat()}


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "error": "internal"},
    )
