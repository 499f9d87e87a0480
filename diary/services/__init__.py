"""Service layer for business logic."""

from diary.services.asset_service import AssetService
from diary.services.batch_service import AssetBatchService

__all__ = [
    "AssetBatchService",
    "AssetService",
]
