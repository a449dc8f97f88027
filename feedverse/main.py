import json
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from feedverse.core.db import init_db
from feedverse.core.logging import setup_logging
from feedverse.core.settings import get_settings
from feedverse.routers import api

# Initialize
settings = get_settings()
logger = setup_logging()


@asynccontextmanager
async def lifespan(_app: FastAPI):
    logger.info("Starting up...")
    if settings.feed_store == "sql":
        init_db()
        logger.info("Database initialized")
    yield


# Create app
app = FastAPI(
    title=settings.app_name,
    version="1.0.0",
    description="Podroll feed discovery and album resolution",
    lifespan=lifespan,
)


def _serialize_validation_errors(errors: list) -> list:
    """Convert validation errors to JSON-serializable format."""
    serialized = []
    for error in errors:
        serialized_error = {
            "loc": error.get("loc"),
            "msg": str(error.get("msg", "")),
            "type": error.get("type"),
        }
        if "input" in error:
            try:
                json.dumps(error["input"])
                serialized_error["input"] = error["input"]
            except (TypeError, ValueError):
                serialized_error["input"] = str(error["input"])
        serialized.append(serialized_error)
    return serialized


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Log request validation failures and return them as 422."""
    logger.warning(
        "Validation error on %s %s",
        request.method,
        request.url.path,
        extra={
            "component": "api",
            "operation": "request_validation",
            "context_data": {"errors": _serialize_validation_errors(exc.errors())},
        },
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": _serialize_validation_errors(exc.errors())},
    )


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all incoming HTTP requests with timing information."""
    start_time = time.perf_counter()
    logger.info(f">>> {request.method} {request.url.path}")

    response = await call_next(request)

    duration_ms = (time.perf_counter() - start_time) * 1000
    response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"

    line = f"<<< {request.method} {request.url.path} - {response.status_code} [{duration_ms:.2f}ms]"
    # Crawls legitimately take seconds; only flag them past the slow threshold
    if duration_ms < 5000:
        logger.info(line)
    else:
        logger.warning(f"{line} (very slow)")

    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api.router, prefix="/api")


@app.get("/health")
async def health_check():
    return {"status": "healthy", "service": settings.app_name}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
