import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .errors import StorageError, TaskError
from .logging_setup import setup_logging
from .routers import calendar as calendar_router
from .routers import tasks as tasks_router
from .settings import get_settings

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {
        "name": "tasks",
        "description": "Create, list, filter, sort, complete and delete the caller's tasks.",
    },
    {
        "name": "calendar",
        "description": "Per-day workload of open tasks for a calendar month.",
    },
]

_settings = get_settings()
setup_logging(_settings.log_level, _settings.log_file)

app = FastAPI(
    title="Taskboard",
    description="Personal task tracking API with a workload calendar and pluggable storage backends.",
    version="0.1.0",
    openapi_tags=openapi_tags,
)

# Configure CORS based on settings (.env -> CORS_ALLOW_ORIGINS), with '*' fallback
allow_all = (_settings.cors_allow_origins == ["*"]) or (len(_settings.cors_allow_origins) == 0)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if allow_all else _settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Return a consistent JSON structure for request validation errors.

    Response format:
        {
            "error": "ValidationError",
            "message": "Request validation failed",
            "detail": [... pydantic/fastapi error details ...]
        }
    """
    return JSONResponse(
        status_code=422,
        content={
            "error": "ValidationError",
            "message": "Request validation failed",
            "detail": jsonable_encoder(exc.errors()),
        },
    )


@app.exception_handler(TaskError)
async def task_error_handler(request: Request, exc: TaskError) -> JSONResponse:
    """
    Map service errors to HTTP: ValidationError 422, ForbiddenError 403,
    NotFoundError 404, StorageError 500. Storage failures never expose backend
    details to the client.
    """
    if isinstance(exc, StorageError):
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        content = {"error": exc.kind, "message": "Storage failure", "detail": []}
    else:
        content = {"error": exc.kind, "message": exc.message, "detail": jsonable_encoder(exc.detail)}
    return JSONResponse(status_code=exc.status_code, content=content)


# PUBLIC_INTERFACE
@app.get("/", summary="Health Check", tags=["health"])
def health_check():
    """
    Health check endpoint.

    Returns:
        A JSON object indicating service health.
    """
    return {"message": "Healthy", "backend": _settings.persistence_backend}


app.include_router(tasks_router.router)
app.include_router(calendar_router.router)
