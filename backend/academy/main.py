import logging
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError, TimeoutError as PoolTimeoutError

from academy.config import settings
from academy.db.session import engine, init_db
from academy.errors import AppError, InternalError, RangeNotSatisfiable, Unavailable, ValidationError
from academy.routers import auth, users, videos, exams, video_exams, exam_results, guest_applications
from academy.middleware import LoggingMiddleware

# Logging
log_level = getattr(logging, settings.log_level.upper(), logging.INFO)
logging.basicConfig(
    level=log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)
logging.getLogger("uvicorn.access").setLevel(logging.INFO)
logging.getLogger("uvicorn").setLevel(logging.INFO)

if settings.log_sql:
    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)
else:
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)

app = FastAPI(title="Academy API", version="0.1.0", root_path=settings.root_path)

app.add_middleware(LoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Range"],
    expose_headers=["Content-Range", "Accept-Ranges"],
)


def error_response(exc: AppError) -> Response:
    if isinstance(exc, RangeNotSatisfiable):
        # 416 carries only Content-Range, never a body
        return Response(status_code=exc.status_code, headers=exc.headers)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.kind, "detail": exc.detail},
        headers=exc.headers,
    )


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error(f"{exc.kind} on {request.method} {request.url.path}: {exc.detail}")
    return error_response(exc)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = f"{location}: {first.get('msg', 'invalid')}" if location else "Invalid request"
    return error_response(ValidationError(message))


@app.exception_handler(PoolTimeoutError)
async def pool_timeout_handler(request: Request, exc: PoolTimeoutError):
    logger.error(f"Database pool exhausted on {request.method} {request.url.path}: {exc}")
    return error_response(Unavailable("Database busy, try again"))


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Database error: {exc.__class__.__name__}: {exc}", exc_info=True)
    return error_response(InternalError(str(exc) if settings.debug else "Database error"))


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(
        f"Unhandled exception: {exc.__class__.__name__}: {str(exc)}",
        exc_info=True,
        extra={"path": str(request.url), "method": request.method}
    )
    return error_response(InternalError(str(exc) if settings.debug else "Internal server error"))


ROUTERS = [
    (auth.router, "/auth", "auth"),
    (users.router, "/users", "users"),
    (videos.router, "/videos", "videos"),
    (exams.router, "/exams", "exams"),
    (video_exams.router, "/video-exams", "video-exams"),
    (exam_results.router, "/exam-results", "exam-results"),
    (guest_applications.router, "/guest-applications", "guest-applications"),
]

for router, prefix, tag in ROUTERS:
    app.include_router(router, prefix=f"/api{prefix}", tags=[tag])
# Legacy unprefixed aliases used by older clients
for router, prefix, tag in ROUTERS:
    app.include_router(router, prefix=prefix, tags=[tag], include_in_schema=False)


@app.on_event("startup")
async def startup_event():
    logger.info("Starting Academy API server...")
    logger.info(f"Database: {settings.database_url.split('@')[1] if '@' in settings.database_url else 'configured'}")
    logger.info(f"CORS origins: {', '.join(settings.allowed_origins) or '-'}")
    if settings.auto_create_schema:
        await init_db()
    logger.info("Server started successfully")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Shutting down server...")
    await engine.dispose()


@app.get("/api/health")
def health():
    from datetime import datetime, timezone
    return {"ok": True, "time": datetime.now(timezone.utc).isoformat()}


@app.get("/api/db/ping")
async def db_ping():
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    return {"ok": True}
