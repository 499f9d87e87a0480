"""API routes package."""

from diary.routes.asset_routes import router as asset_router

__all__ = ["asset_router"]
