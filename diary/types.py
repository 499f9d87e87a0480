"""Asset ingestion data type definitions."""

from dataclasses import dataclass, field
from typing import BinaryIO, Callable, List, Optional


@dataclass(frozen=True)
class BatchLimits:
    """
    Upload thresholds for one request. Zero disables a check.
    """
    max_files: int = 0
    max_per_file_bytes: int = 0
    max_total_bytes: int = 0


@dataclass
class IncomingFile:
    """
    A decoded file part awaiting storage.

    open_stream returns a single-use binary stream and may raise OSError.
    declared_size is None or <= 0 when the client did not report it.
    """
    original_name: str
    declared_size: Optional[int]
    content_type: str
    open_stream: Callable[[], BinaryIO]

    @property
    def has_declared_size(self) -> bool:
        return self.declared_size is not None and self.declared_size > 0


@dataclass(frozen=True)
class SavedFile:
    """
    A file committed to the user's asset directory.
    """
    original_name: str
    saved_name: str
    size: int
    content_type: str
    absolute_path: str


@dataclass
class BatchResult:
    """
    Files committed by a batch upload, in request order.
    """
    files: List[SavedFile] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.files)
