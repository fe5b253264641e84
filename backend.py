import asyncio
import logging
import time
import uuid
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from app.config import FRONTEND_URL, LOG_LEVEL, NOTIFICATION_PURGE_INTERVAL_SECONDS
from app.database import SessionLocal, check_database_connection, init_db
from app.errors import ServiceError
from app.routers import (
    auth_router,
    users_router,
    friends_router,
    posts_router,
    comments_router,
    notifications_router,
    messages_router,
    messages_ws_router,
)
from app.services.notifications import purge_expired_notifications


def configure_logging() -> logging.Logger:
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    return logging.getLogger("entreprenapp")


logger = configure_logging()


def _strip_trailing_slash(value: str) -> str:
    return value[:-1] if value.endswith("/") else value


allowed_origins = [
    _strip_trailing_slash(FRONTEND_URL),
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]


def run_notification_purge() -> int:
    db = SessionLocal()
    try:
        return purge_expired_notifications(db)
    finally:
        db.close()


async def purge_notifications_periodically(interval: int = NOTIFICATION_PURGE_INTERVAL_SECONDS):
    """Delete expired notifications every ``interval`` seconds until cancelled."""
    while True:
        try:
            await asyncio.to_thread(run_notification_purge)
        except Exception:
            logger.exception("Notification purge failed")
        await asyncio.sleep(interval)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting EntreprenApp API")
    init_db()
    purge_task = asyncio.create_task(purge_notifications_periodically())
    yield
    purge_task.cancel()
    logger.info("Shutting down EntreprenApp API")


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        fields = [".".join(str(part) for part in error["loc"] if part != "body") for error in exc.errors()]
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "detail": "Invalid request: " + ", ".join(f for f in fields if f),
                "errors": [
                    {"field": field, "message": error["msg"]}
                    for field, error in zip(fields, exc.errors())
                ],
            },
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        request_id = getattr(request.state, "request_id", "unknown")
        logger.exception("Unhandled error | request_id=%s", request_id)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )


def create_app() -> FastAPI:
    app = FastAPI(title="EntreprenApp API", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        start = time.perf_counter()

        response = await call_next(request)

        elapsed_ms = round((time.perf_counter() - start) * 1000, 2)
        response.headers["X-Request-ID"] = request_id
        logger.info(
            "%s %s -> %s (%sms) request_id=%s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            request_id,
        )
        return response

    register_exception_handlers(app)

    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(friends_router)
    app.include_router(posts_router)
    app.include_router(comments_router)
    app.include_router(notifications_router)
    app.include_router(messages_router)
    app.include_router(messages_ws_router)

    @app.get("/")
    async def root():
        return {"message": "EntreprenApp API is running"}

    @app.get("/health")
    async def health():
        """Liveness plus database reachability."""
        database_ok = check_database_connection()
        return JSONResponse(
            status_code=status.HTTP_200_OK if database_ok else status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "ok" if database_ok else "degraded", "database": database_ok},
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("backend:app", host="0.0.0.0", port=8000, reload=True)
