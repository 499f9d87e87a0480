"""Upload limits policy derived from server configuration."""

from diary.config import Settings
from diary.types import BatchLimits


def compute_batch_limits(settings: Settings) -> BatchLimits:
    """
    Derive batch upload thresholds from configuration.

    Negative configured values are treated as 0 (unlimited).

    Args:
        settings: Active server settings

    Returns:
        BatchLimits for the current request
    """
    return BatchLimits(
        max_files=max(settings.max_batch_files, 0),
        max_per_file_bytes=max(settings.max_per_file_bytes, 0),
        max_total_bytes=max(settings.max_batch_total_bytes, 0),
    )


def exceeds(value: int, limit: int) -> bool:
    """Return True when limit is enabled (> 0) and value is above it."""
    return limit > 0 and value > limit
