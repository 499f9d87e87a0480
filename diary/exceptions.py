"""Custom exception classes for the diary asset server."""

from typing import Optional


class DiaryException(Exception):
    """
    Base exception class for all diary server errors.
    """
    status_code = 500


class UnauthorizedError(DiaryException):
    """
    Raised when no valid user identity accompanies the request.
    """
    status_code = 401


class BadRequestError(DiaryException):
    """
    Raised when the client sent a request that cannot be processed.
    """
    status_code = 400


class EmptyBatchError(BadRequestError):
    """
    Raised when a batch upload carries no files.
    """
    pass


class InvalidExtensionError(BadRequestError):
    """
    Raised when a filename's extension is not in the allow-list.
    """

    def __init__(self, filename: str, index: Optional[int] = None):
        self.filename = filename
        self.index = index
        if index is None:
            message = f"invalid file extension: {filename}"
        else:
            message = f"invalid file extension for file {index} ({filename})"
        super().__init__(message)


class PayloadTooLargeError(DiaryException):
    """
    Base class for size and count limit violations.
    """
    status_code = 413


class TooManyFilesError(PayloadTooLargeError):
    """
    Raised when a batch carries more files than allowed.
    """
    pass


class FileTooLargeError(PayloadTooLargeError):
    """
    Raised when a single file exceeds the per-file byte limit.
    """
    pass


class TotalTooLargeError(PayloadTooLargeError):
    """
    Raised when the files of a batch exceed the total byte limit.
    """
    pass


class AssetNotFoundError(DiaryException):
    """
    Raised when a requested asset does not exist for the user.
    """
    status_code = 404


class AssetStorageError(DiaryException):
    """
    Raised when opening, writing or renaming an asset fails.
    """
    status_code = 500
