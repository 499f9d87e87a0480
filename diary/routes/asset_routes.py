"""Asset upload and download API routes."""

import sys
from typing import Optional

from fastapi import APIRouter, Depends, File, Query, Request, UploadFile
from fastapi.responses import FileResponse, PlainTextResponse
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile as StarletteUploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException

from common.logging_config import get_logger
from diary.assets.limits import compute_batch_limits
from diary.assets.validation import content_type
from diary.auth import get_current_user
from diary.config import Settings, get_settings
from diary.exceptions import BadRequestError, TooManyFilesError
from diary.schemas.assets import AssetsBatchResponse
from diary.schemas.common import ErrorResponse
from diary.services.asset_service import AssetService
from diary.services.batch_service import AssetBatchService
from diary.types import BatchLimits, IncomingFile

logger = get_logger(__name__)

router = APIRouter(
    prefix="/v1/assets",
    tags=["Assets"],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        413: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)


def to_incoming_file(upload: UploadFile) -> IncomingFile:
    """
    Adapt a decoded multipart part to the storage layer's file type.
    """
    def open_stream():
        upload.file.seek(0)
        return upload.file

    return IncomingFile(
        original_name=upload.filename or "",
        declared_size=upload.size,
        content_type=content_type(upload.content_type),
        open_stream=open_stream,
    )


def multipart_file_cap(limits: BatchLimits) -> int:
    """
    Bound for the multipart parser's file count, unbounded when max_files is 0.
    """
    return limits.max_files if limits.max_files > 0 else sys.maxsize


@router.post("/batch", response_model=AssetsBatchResponse)
async def upload_assets_batch(
    request: Request,
    current_user: str = Depends(get_current_user),
    settings: Settings = Depends(get_settings),
):
    """
    Upload several assets in one request, all or nothing.

    Parameters:
        - assets: Files to upload (multipart/form-data, repeated field)
        - Authorization header: Bearer <api_key>, or the session cookie

    Returns:
        - files: originalName, savedName, size and contentType per file, in request order
        - count: Number of stored files

    Raises:
        - 400: Malformed form, empty batch or invalid extension
        - 401: Missing or invalid identity
        - 413: Too many files, file too large or batch too large
        - 500: Storage failure
    """
    limits = compute_batch_limits(settings)

    try:
        async with request.form(max_files=multipart_file_cap(limits)) as form:
            parts = form.getlist("assets")
            if any(not isinstance(part, StarletteUploadFile) for part in parts):
                raise BadRequestError("invalid multipart form: assets must be files")
            incoming = [to_incoming_file(part) for part in parts]

            logger.info(
                f"Batch upload request [user_id={current_user}] files={len(incoming)} "
                f"content_length={request.headers.get('content-length')} "
                f"max_total_bytes={limits.max_total_bytes}"
            )

            service = AssetBatchService(settings.asset_path)
            result = await run_in_threadpool(service.process_batch, current_user, incoming, limits)
    except StarletteHTTPException as e:
        if e.status_code == 400 and str(e.detail).startswith("Too many files"):
            logger.warning(
                f"Batch upload validation failed: too many files "
                f"[user_id={current_user}] max={limits.max_files}"
            )
            raise TooManyFilesError("too many files in batch") from e
        raise

    return AssetsBatchResponse.from_result(result)


@router.post("", response_class=PlainTextResponse)
async def upload_asset(
    asset: Optional[UploadFile] = File(None),
    current_user: str = Depends(get_current_user),
    settings: Settings = Depends(get_settings),
):
    """
    Upload a single asset.

    Parameters:
        - asset: File to upload (multipart/form-data)

    Returns:
        - Saved file name as plain text

    Raises:
        - 400: Missing file or invalid extension
        - 401: Missing or invalid identity
        - 413: File too large
        - 500: Storage failure
    """
    if asset is None:
        raise BadRequestError("missing asset")

    service = AssetService(settings.asset_path)
    saved = await run_in_threadpool(
        service.save_single, current_user, to_incoming_file(asset), compute_batch_limits(settings)
    )
    return PlainTextResponse(saved.saved_name)


@router.get("")
async def download_asset(
    path: str = Query(..., description="Saved asset name"),
    current_user: str = Depends(get_current_user),
    settings: Settings = Depends(get_settings),
):
    """
    Download one of the user's assets.

    Raises:
        - 401: Missing or invalid identity
        - 404: Asset not found
    """
    service = AssetService(settings.asset_path)
    asset_path = service.resolve(current_user, path)
    return FileResponse(asset_path)
