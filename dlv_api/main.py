import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from dlv_api.config import settings
from dlv_api.database import Base, engine
from dlv_api.limiter import limiter
from dlv_api.middleware.request_logging import RequestLoggingMiddleware
from dlv_api.middleware.security import SecurityHeadersMiddleware
from dlv_api.models import auth_session, citizen, license_application  # noqa: F401  (register tables)
from dlv_api.routers import applications, auth, citizens, health, uploads
from dlv_api.utils.response import ApiError, create_response, error_response, handle_exception
from dlv_api.utils.timeutils import to_iso, utcnow
from seed import run_seed

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.PROJECT_NAME, version=settings.VERSION)

# Auto create tables
Base.metadata.create_all(bind=engine)

app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=not settings.is_development,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Accept", "Origin", "X-Requested-With"],
    expose_headers=["Content-Length", "Content-Type"],
)


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    return handle_exception(exc)


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return error_response(
        status.HTTP_429_TOO_MANY_REQUESTS,
        "Too many requests from this IP, please try again later.",
        "RATE_LIMIT_EXCEEDED",
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    details = [
        {"field": ".".join(str(part) for part in err.get("loc", ())[1:]), "message": err.get("msg")}
        for err in exc.errors()
    ]
    return error_response(status.HTTP_400_BAD_REQUEST, "Request validation failed", "VALIDATION_ERROR", details=details)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        return error_response(exc.status_code, f"Route {request.url.path} not found", "ROUTE_NOT_FOUND")
    return error_response(exc.status_code, str(exc.detail), "HTTP_ERROR")


@app.on_event("startup")
async def startup_event():
    logger.info("%s starting (environment=%s)", settings.PROJECT_NAME, settings.APP_ENV)
    if settings.SEED_ON_STARTUP:
        run_seed()


# Add routes
app.include_router(health.router)
app.include_router(auth.router)
app.include_router(citizens.router)
app.include_router(applications.router)
app.include_router(uploads.router)


@app.get("/")
def home():
    try:
        return create_response(
            message="DLV Burundi API Server",
            data={
                "version": settings.VERSION,
                "status": "running",
                "environment": settings.APP_ENV,
                "timestamp": to_iso(utcnow()),
                "endpoints": {
                    "health": "/api/health",
                    "auth": "/api/auth",
                    "citizens": "/api/citizens",
                    "applications": "/api/applications",
                    "uploads": "/api/uploads",
                },
            },
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        return handle_exception(exc)
