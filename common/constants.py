"""Project-wide constants (upload policy defaults, allow-list)."""

MIB: int = 1024 * 1024

DEFAULT_MAX_BATCH_FILES: int = 20
DEFAULT_MAX_PER_FILE_BYTES: int = 50 * MIB
DEFAULT_MAX_BATCH_TOTAL_BYTES: int = 200 * MIB

WRITE_PIECE_SIZE: int = 64 * 1024

DEFAULT_CONTENT_TYPE: str = "application/octet-stream"

IMAGE_EXTENSIONS = frozenset({"jpg", "jpeg", "png", "gif", "webp", "bmp", "svg"})
VIDEO_EXTENSIONS = frozenset({"mp4", "webm", "ogg", "mov", "avi"})
ALLOWED_EXTENSIONS = IMAGE_EXTENSIONS | VIDEO_EXTENSIONS

DEFAULT_COOKIE_NAME: str = "diarycookie"
