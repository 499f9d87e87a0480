"""Single asset upload and lookup."""

from pathlib import Path

from common.logging_config import get_logger
from diary.assets.limits import exceeds
from diary.assets.storage import resolve_asset_path, save_file_atomically, user_asset_dir
from diary.assets.validation import validate_extension
from diary.exceptions import AssetStorageError, FileTooLargeError
from diary.types import BatchLimits, IncomingFile, SavedFile

logger = get_logger(__name__)


class AssetService:
    def __init__(self, asset_root: str):
        self.asset_root = asset_root

    def save_single(self, user_id: str, incoming: IncomingFile, limits: BatchLimits) -> SavedFile:
        target_dir = str(user_asset_dir(self.asset_root, user_id))
        name = incoming.original_name

        validate_extension(name)
        if incoming.has_declared_size and exceeds(incoming.declared_size, limits.max_per_file_bytes):
            logger.warning(
                f"Asset upload rejected: too large [user_id={user_id}] filename={name} "
                f"size={incoming.declared_size} max={limits.max_per_file_bytes}"
            )
            raise FileTooLargeError(f"file too large: {name}")

        try:
            stream = incoming.open_stream()
        except OSError as e:
            logger.error(f"Failed to open uploaded asset [user_id={user_id}] filename={name}: {e}")
            raise AssetStorageError(f"failed to open file ({name})") from e

        try:
            saved_name, path, size = save_file_atomically(
                target_dir, name, stream, limits.max_per_file_bytes
            )
        finally:
            stream.close()

        logger.info(f"Asset uploaded [user_id={user_id}] saved_name={saved_name} size={size}")
        return SavedFile(
            original_name=name,
            saved_name=saved_name,
            size=size,
            content_type=incoming.content_type,
            absolute_path=path,
        )

    def resolve(self, user_id: str, relative_path: str) -> Path:
        """
        Locate a stored asset of the user.

        Raises:
            AssetNotFoundError: If the asset is missing or outside the user's directory
        """
        return resolve_asset_path(self.asset_root, user_id, relative_path)
