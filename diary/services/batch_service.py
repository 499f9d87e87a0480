"""Batch asset upload with all-or-nothing semantics."""

from typing import List, Sequence

from common.logging_config import get_logger
from diary.assets.limits import exceeds
from diary.assets.storage import rollback_files, save_file_atomically, user_asset_dir
from diary.assets.validation import validate_extension
from diary.exceptions import (
    AssetStorageError,
    EmptyBatchError,
    FileTooLargeError,
    TooManyFilesError,
    TotalTooLargeError,
)
from diary.types import BatchLimits, BatchResult, IncomingFile, SavedFile

logger = get_logger(__name__)


class AssetBatchService:
    def __init__(self, asset_root: str):
        self.asset_root = asset_root

    def process_batch(
        self,
        user_id: str,
        files: Sequence[IncomingFile],
        limits: BatchLimits,
    ) -> BatchResult:
        """
        Validate and store a batch of files for a user.

        Either every file is committed, or none of them survives.

        Args:
            user_id: Authenticated user identifier
            files: Decoded file parts, in request order
            limits: Thresholds for this request

        Returns:
            BatchResult with one SavedFile per input file

        Raises:
            BadRequestError: Empty batch or invalid extension
            PayloadTooLargeError: Count, per-file or total limit exceeded
            AssetStorageError: A file could not be opened or written
        """
        target_dir = user_asset_dir(self.asset_root, user_id)
        self.prevalidate(files, limits)
        return self._commit_all(user_id, str(target_dir), files, limits)

    def prevalidate(self, files: Sequence[IncomingFile], limits: BatchLimits) -> None:
        """
        Check request metadata before anything touches the disk.
        """
        if not files:
            logger.warning("Batch upload validation failed: no files provided")
            raise EmptyBatchError("missing assets")

        if exceeds(len(files), limits.max_files):
            logger.warning(
                f"Batch upload validation failed: too many files "
                f"(count={len(files)}, max={limits.max_files})"
            )
            raise TooManyFilesError("too many files in batch")

        declared_total = 0
        for index, incoming in enumerate(files):
            validate_extension(incoming.original_name, index)
            # unknown sizes are enforced later against the bytes actually written
            if incoming.has_declared_size:
                declared_total += incoming.declared_size

        if exceeds(declared_total, limits.max_total_bytes):
            logger.warning(
                f"Batch upload validation failed: total size exceeded "
                f"(total={declared_total}, max={limits.max_total_bytes})"
            )
            raise TotalTooLargeError("batch total size exceeded")

    def _commit_all(
        self,
        user_id: str,
        target_dir: str,
        files: Sequence[IncomingFile],
        limits: BatchLimits,
    ) -> BatchResult:
        result = BatchResult()
        committed: List[str] = []
        written_total = 0

        try:
            for index, incoming in enumerate(files):
                saved = self._commit_one(user_id, target_dir, index, incoming, limits)
                committed.append(saved.absolute_path)
                result.files.append(saved)

                written_total += saved.size
                if exceeds(written_total, limits.max_total_bytes):
                    logger.error(
                        f"Batch total exceeded while writing [user_id={user_id}] "
                        f"file_index={index} total={written_total} max={limits.max_total_bytes}"
                    )
                    raise TotalTooLargeError("batch total size exceeded")
        except Exception:
            if committed:
                logger.info(f"Rolling back {len(committed)} committed files [user_id={user_id}]")
                failed = rollback_files(committed)
                if failed:
                    logger.error(f"Rollback left {len(failed)} files behind [user_id={user_id}]")
            raise

        logger.info(f"Batch upload committed {result.count} files [user_id={user_id}]")
        return result

    def _commit_one(
        self,
        user_id: str,
        target_dir: str,
        index: int,
        incoming: IncomingFile,
        limits: BatchLimits,
    ) -> SavedFile:
        name = incoming.original_name

        if incoming.has_declared_size and exceeds(incoming.declared_size, limits.max_per_file_bytes):
            logger.error(
                f"File too large in batch upload [user_id={user_id}] file_index={index} "
                f"filename={name} size={incoming.declared_size} max={limits.max_per_file_bytes}"
            )
            raise FileTooLargeError(f"file too large: file {index} ({name})")

        try:
            stream = incoming.open_stream()
        except OSError as e:
            logger.error(
                f"Failed to open file part [user_id={user_id}] file_index={index} filename={name}: {e}"
            )
            raise AssetStorageError(f"failed to open file {index} ({name})") from e

        try:
            saved_name, path, size = save_file_atomically(
                target_dir, name, stream, limits.max_per_file_bytes
            )
        except FileTooLargeError as e:
            logger.error(
                f"File exceeded size limit while streaming [user_id={user_id}] file_index={index} "
                f"filename={name} max={limits.max_per_file_bytes}"
            )
            raise FileTooLargeError(f"file too large: file {index} ({name})") from e
        except AssetStorageError as e:
            logger.error(
                f"Failed to save file atomically [user_id={user_id}] file_index={index} "
                f"filename={name} target_path={target_dir}: {e}"
            )
            raise AssetStorageError(f"failed to save file {index} ({name})") from e
        finally:
            stream.close()

        return SavedFile(
            original_name=name,
            saved_name=saved_name,
            size=size,
            content_type=incoming.content_type,
            absolute_path=path,
        )
