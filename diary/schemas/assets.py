"""Pydantic schemas for asset endpoints."""

from typing import List

from pydantic import BaseModel, ConfigDict, Field

from diary.types import BatchResult, SavedFile


class AssetsBatchFile(BaseModel):
    """Metadata of one stored file in a batch response."""
    model_config = ConfigDict(populate_by_name=True)

    original_name: str = Field(alias="originalName")
    saved_name: str = Field(alias="savedName")
    size: int
    content_type: str = Field(alias="contentType")

    @classmethod
    def from_saved(cls, saved: SavedFile) -> "AssetsBatchFile":
        return cls(
            original_name=saved.original_name,
            saved_name=saved.saved_name,
            size=saved.size,
            content_type=saved.content_type,
        )


class AssetsBatchResponse(BaseModel):
    """Response model for batch upload."""
    files: List[AssetsBatchFile]
    count: int

    @classmethod
    def from_result(cls, result: BatchResult) -> "AssetsBatchResponse":
        return cls(
            files=[AssetsBatchFile.from_saved(saved) for saved in result.files],
            count=result.count,
        )
