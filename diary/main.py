"""Entry point for the diary asset server."""

import time
import uuid

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from common.logging_config import setup_logging
from diary.config import DIARY_HOST, DIARY_PORT, load_settings
from diary.exceptions import (
    AssetNotFoundError,
    AssetStorageError,
    BadRequestError,
    DiaryException,
    PayloadTooLargeError,
    UnauthorizedError,
)
from diary.routes.asset_routes import router as asset_router

logger = setup_logging('diary')

app = FastAPI(
    title="Diary Asset Server",
    description="Per-user asset storage for the diary backend",
    version="1.0.0"
)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Middleware to log all HTTP requests and responses.
    """
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    start_time = time.time()

    logger.info(
        f"Request started: {request.method} {request.url.path} [request_id={request_id}]"
    )

    response = await call_next(request)

    duration = time.time() - start_time
    user_id = getattr(request.state, 'user_id', None)

    logger.info(
        f"Request completed: {request.method} {request.url.path} "
        f"status={response.status_code} duration={duration:.3f}s "
        f"[request_id={request_id}] [user_id={user_id or 'anonymous'}]"
    )

    response.headers["X-Request-ID"] = request_id

    return response


@app.on_event("startup")
async def startup_event():
    settings = load_settings()
    logger.info(
        f"Diary asset server starting: asset_path={settings.asset_path} "
        f"max_files={settings.max_batch_files} max_per_file_bytes={settings.max_per_file_bytes} "
        f"max_total_bytes={settings.max_batch_total_bytes} api_key_count={len(settings.api_keys)}"
    )


@app.exception_handler(UnauthorizedError)
async def unauthorized_handler(request: Request, exc: UnauthorizedError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(
        f"Unauthorized: {exc} [request_id={request_id}] path={request.url.path}"
    )
    return error_response(status.HTTP_401_UNAUTHORIZED, str(exc))


@app.exception_handler(BadRequestError)
async def bad_request_handler(request: Request, exc: BadRequestError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    user_id = getattr(request.state, 'user_id', 'unknown')
    logger.warning(
        f"Bad request: {exc} [request_id={request_id}] [user_id={user_id}] path={request.url.path}"
    )
    return error_response(status.HTTP_400_BAD_REQUEST, str(exc))


@app.exception_handler(PayloadTooLargeError)
async def payload_too_large_handler(request: Request, exc: PayloadTooLargeError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    user_id = getattr(request.state, 'user_id', 'unknown')
    logger.warning(
        f"Payload too large: {exc} [request_id={request_id}] [user_id={user_id}] path={request.url.path}"
    )
    return error_response(status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, str(exc))


@app.exception_handler(AssetNotFoundError)
async def asset_not_found_handler(request: Request, exc: AssetNotFoundError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(
        f"Asset not found: {exc} [request_id={request_id}] path={request.url.path}"
    )
    return error_response(status.HTTP_404_NOT_FOUND, str(exc))


@app.exception_handler(AssetStorageError)
async def asset_storage_handler(request: Request, exc: AssetStorageError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    user_id = getattr(request.state, 'user_id', 'unknown')
    logger.error(
        f"Asset storage error: {exc} [request_id={request_id}] [user_id={user_id}] path={request.url.path}",
        exc_info=True
    )
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))


@app.exception_handler(DiaryException)
async def diary_exception_handler(request: Request, exc: DiaryException):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.error(
        f"Diary exception: {exc} [request_id={request_id}] path={request.url.path}",
        exc_info=True
    )
    return error_response(exc.status_code, str(exc))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    fields = ", ".join(".".join(str(part) for part in err.get("loc", ())) for err in exc.errors())
    logger.warning(
        f"Invalid request: {fields} [request_id={request_id}] path={request.url.path}"
    )
    return error_response(status.HTTP_400_BAD_REQUEST, f"invalid request: {fields}")


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def unexpected_exception_handler(request: Request, exc: Exception):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.error(
        f"Unhandled exception: {exc!r} [request_id={request_id}] path={request.url.path}",
        exc_info=True
    )
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "internal server error")


app.include_router(asset_router)


@app.get("/")
async def root():
    """
    Root endpoint for health check.
    """
    return {"message": "Diary Asset Server", "status": "running"}


@app.get("/health")
async def health_check():
    """
    Health check endpoint for Docker healthcheck.
    """
    return {"status": "healthy", "service": "diary-assets"}


def main() -> None:
    """
    Start the FastAPI server with uvicorn.
    """
    uvicorn.run(
        "diary.main:app",
        host=DIARY_HOST,
        port=DIARY_PORT,
    )


if __name__ == "__main__":
    main()
