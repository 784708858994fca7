import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from db.base import Base
from db.session import engine
from errors import AppError
from models import pdf_uploads, rules  # noqa: F401  registers tables on Base
from routers.campaigns import router as campaigns_router
from routers.uploads import router as uploads_router
from services.rate_limiter import SlidingWindowRateLimiter
from settings import get_settings

settings = get_settings()

# --------------------------------------------------
# LOGGING
# --------------------------------------------------
logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


# --------------------------------------------------
# APP
# --------------------------------------------------
app = FastAPI(
    title="PDF Upload Relay",
    version="1.0.0",
    swagger_ui_parameters={
        "displayRequestDuration": True,
    },
)

app.state.rate_limiter = SlidingWindowRateLimiter(
    max_requests=settings.rate_limit_max_requests,
    window_seconds=settings.rate_limit_window_seconds,
)


# --------------------------------------------------
# DB INIT
# --------------------------------------------------
@app.on_event("startup")
def _init_db():
    try:
        Base.metadata.create_all(bind=engine)
    except Exception:
        logger.exception("DB init failed")

    logger.info("Datastore: %s", "configured" if settings.database_url else "NOT configured")
    logger.info("Object store: %s", "configured" if settings.object_store_configured else "NOT configured")
    if not settings.cloudinary_api_secret:
        logger.error("CLOUDINARY_API_SECRET is not set; upload signing will fail")


# --------------------------------------------------
# CORS
# --------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info("%s - %s %s", datetime.now(timezone.utc).isoformat(), request.method, request.url.path)
    return await call_next(request)


# --------------------------------------------------
# ERRORS
# --------------------------------------------------
def _error_body(message: str, detail: str | None = None) -> dict:
    body = {"success": False, "message": message}
    if detail and not get_settings().is_production:
        body["error"] = detail
    return body


@app.exception_handler(AppError)
async def handle_app_error(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s (%s)", request.method, request.url.path, exc.message, exc.detail)
    return JSONResponse(status_code=exc.status_code, content=_error_body(exc.message, exc.detail))


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError):
    errors = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ())[1:]),
            "message": err.get("msg", ""),
        }
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": "Validation failed", "errors": errors},
    )


@app.exception_handler(StarletteHTTPException)
async def handle_http_error(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        message = f"Route {request.url.path} not found"
    else:
        message = str(exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"success": False, "message": message})


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=_error_body("Internal server error", str(exc)))


# --------------------------------------------------
# ROUTERS
# --------------------------------------------------
app.include_router(uploads_router)
app.include_router(campaigns_router)


# --------------------------------------------------
# HEALTH CHECK
# --------------------------------------------------
@app.get("/health")
def health():
    return {
        "status": "OK",
        "message": "PDF upload relay is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "services": {
            "datastore": "Configured" if settings.database_url else "Not configured",
            "object_store": "Configured" if settings.object_store_configured else "Not configured",
        },
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.port)
