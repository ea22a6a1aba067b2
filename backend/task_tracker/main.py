import logging
import traceback

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from task_tracker.core.config import settings
from task_tracker.core.errors import ApiError
from task_tracker.core.logging_config import configure_logging
from task_tracker.core.rate_limit import limiter
from task_tracker.routes.auth import router as auth_router
from task_tracker.routes.tasks import router as tasks_router

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Task Tracker")
logger.info(
    "Startup config: ENV=%s rate_limiting=%s access_expiry=%s refresh_expiry=%s",
    settings.ENV,
    limiter.enabled,
    settings.JWT_ACCESS_EXPIRY,
    settings.JWT_REFRESH_EXPIRY,
)
settings.warn_insecure_defaults()

_ERROR_CODE_BY_STATUS: dict[int, str] = {
    400: "VALIDATION_ERROR",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    413: "PAYLOAD_TOO_LARGE",
    422: "VALIDATION_ERROR",
    429: "RATE_LIMITED",
    500: "INTERNAL_ERROR",
}


def _error_code(status_code: int) -> str:
    return _ERROR_CODE_BY_STATUS.get(int(status_code), "HTTP_ERROR")


@app.exception_handler(ApiError)
def api_error_handler(request: Request, exc: ApiError):  # noqa: ARG001
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload(), headers=exc.headers)


@app.exception_handler(RequestValidationError)
def validation_exception_handler(request: Request, exc: RequestValidationError):  # noqa: ARG001
    errors = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        errors.append({"field": ".".join(loc), "message": err.get("msg", "Invalid value")})
    return JSONResponse(
        status_code=400,
        content={
            "error": "VALIDATION_ERROR",
            "message": "Validation error",
            "details": {"errors": errors},
        },
    )


@app.exception_handler(StarletteHTTPException)
def http_exception_handler(request: Request, exc: StarletteHTTPException):  # noqa: ARG001
    detail = exc.detail
    if exc.status_code == 404 and detail == "Not Found":
        message = "Route not found"
    else:
        message = detail if isinstance(detail, str) and detail else "Request failed"
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": _error_code(exc.status_code), "message": message},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RateLimitExceeded)
def rate_limit_handler(request: Request, exc: RateLimitExceeded):  # noqa: ARG001
    return JSONResponse(
        status_code=429,
        content={"error": "RATE_LIMITED", "message": "Too many authentication attempts, please try again later"},
    )


@app.exception_handler(Exception)
def internal_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path, exc_info=exc)
    payload: dict = {"error": "INTERNAL_ERROR", "message": "Internal server error"}
    if not settings.is_prod:
        payload["details"] = {
            "type": exc.__class__.__name__,
            "message": str(exc),
            "stack": traceback.format_exception(type(exc), exc, exc.__traceback__),
        }
    return JSONResponse(status_code=500, content=payload)


app.state.limiter = limiter

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(tasks_router)


@app.get("/health")
def health_check():
    return {"status": "ok"}
