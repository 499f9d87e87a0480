"""Manages asset files on disk: atomic writes, rollback and path resolution."""

import os
import tempfile
import uuid
from pathlib import Path
from typing import BinaryIO, List, Optional, Tuple

from common.constants import WRITE_PIECE_SIZE
from common.logging_config import get_logger
from diary.assets.limits import exceeds
from diary.assets.validation import file_extension
from diary.exceptions import AssetNotFoundError, AssetStorageError, FileTooLargeError, UnauthorizedError

logger = get_logger(__name__)

TEMP_PREFIX = ".upload-"
TEMP_SUFFIX = ".tmp"


def user_asset_dir(asset_root: str, user_id: str) -> Path:
    """
    Get the asset directory of a user.

    Args:
        asset_root: Root directory for all users' assets
        user_id: Authenticated user identifier

    Returns:
        Path object <asset_root>/<user_id>

    Raises:
        UnauthorizedError: If user_id is not a single safe path segment
    """
    if not user_id or user_id in (".", "..") or "/" in user_id or "\\" in user_id or "\x00" in user_id:
        raise UnauthorizedError("unauthorized")
    return Path(asset_root) / user_id


def generate_saved_name(declared_name: str, directory: Path) -> str:
    """
    Generate a collision-resistant file name keeping the declared extension.

    Args:
        declared_name: Name as sent by the client
        directory: Directory the file will be stored in

    Returns:
        Name in format: {uuid4}.{ext} (extension lowercased)
    """
    ext = file_extension(declared_name)
    suffix = f".{ext}" if ext else ""
    while True:
        name = f"{uuid.uuid4()}{suffix}"
        if not (directory / name).exists():
            return name


def save_file_atomically(
    destination_dir: str,
    declared_name: str,
    stream: BinaryIO,
    max_bytes: int = 0,
) -> Tuple[str, str, int]:
    """
    Write a stream to a temporary file and rename it into place.

    The temporary file lives in destination_dir so the final step is a
    rename on the same filesystem. Nothing is left behind on failure.

    Args:
        destination_dir: Directory to store the file in (created if absent)
        declared_name: Name as sent by the client
        stream: Readable binary stream, consumed once
        max_bytes: Abort once more than this many bytes are read (0 = unlimited)

    Returns:
        Tuple of (saved_name, absolute_path, bytes_written)

    Raises:
        FileTooLargeError: If the stream is longer than max_bytes
        AssetStorageError: If creating, writing or renaming fails
    """
    target_dir = Path(destination_dir)
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise AssetStorageError(f"failed to prepare asset directory: {e.strerror or type(e).__name__}") from e

    saved_name = generate_saved_name(declared_name, target_dir)
    final_path = os.path.abspath(target_dir / saved_name)
    tmp_path: Optional[str] = None
    written = 0

    try:
        with tempfile.NamedTemporaryFile(
            "wb", delete=False, dir=str(target_dir), prefix=TEMP_PREFIX, suffix=TEMP_SUFFIX
        ) as tmp:
            tmp_path = tmp.name
            while True:
                piece = stream.read(WRITE_PIECE_SIZE)
                if not piece:
                    break
                written += len(piece)
                if exceeds(written, max_bytes):
                    raise FileTooLargeError(f"file too large: {declared_name}")
                tmp.write(piece)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_path, final_path)
    except OSError as e:
        _discard_temp(tmp_path)
        raise AssetStorageError(
            f"failed to save file {declared_name}: {e.strerror or type(e).__name__}"
        ) from e
    except Exception:
        _discard_temp(tmp_path)
        raise

    logger.debug(f"Saved asset {saved_name} ({written} bytes)")
    return saved_name, final_path, written


def _discard_temp(tmp_path: Optional[str]) -> None:
    if tmp_path is None:
        return
    try:
        os.remove(tmp_path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Failed to remove temporary file {tmp_path}: {e}")


def rollback_files(paths: List[str]) -> List[str]:
    """
    Delete committed files, most recently created first.

    Failures are logged, never raised.

    Args:
        paths: Absolute paths in commit order

    Returns:
        List of paths that could not be deleted
    """
    failed = []
    for path in reversed(paths):
        try:
            os.remove(path)
            logger.debug(f"Rolled back asset {path}")
        except FileNotFoundError:
            continue
        except OSError as e:
            logger.warning(f"Rollback could not delete {path}: {e}")
            failed.append(path)
    return failed


def resolve_asset_path(asset_root: str, user_id: str, relative_path: str) -> Path:
    """
    Resolve a stored asset of a user, refusing paths outside their directory.

    Args:
        asset_root: Root directory for all users' assets
        user_id: Authenticated user identifier
        relative_path: Asset name relative to the user directory

    Returns:
        Absolute Path of the existing asset

    Raises:
        AssetNotFoundError: If the path escapes the user directory or does not exist
    """
    user_dir = user_asset_dir(asset_root, user_id).resolve()
    if not relative_path or os.path.isabs(relative_path):
        raise AssetNotFoundError("asset not found")

    candidate = (user_dir / relative_path).resolve()
    if user_dir not in candidate.parents or not candidate.is_file():
        raise AssetNotFoundError("asset not found")
    return candidate
