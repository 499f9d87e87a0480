"""Pydantic schemas for API responses."""

from diary.schemas.assets import AssetsBatchFile, AssetsBatchResponse
from diary.schemas.common import ErrorResponse

__all__ = [
    "AssetsBatchFile",
    "AssetsBatchResponse",
    "ErrorResponse",
]
