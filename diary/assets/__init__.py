"""Asset policy and on-disk storage."""

from diary.assets.limits import compute_batch_limits
from diary.assets.storage import rollback_files, save_file_atomically
from diary.assets.validation import content_type, validate_extension

__all__ = [
    "compute_batch_limits",
    "content_type",
    "rollback_files",
    "save_file_atomically",
    "validate_extension",
]
