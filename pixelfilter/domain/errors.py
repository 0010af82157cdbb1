from __future__ import annotations


class ImageProcessingError(Exception):
    """Base class for every failure surfaced to the HTTP caller."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class MissingUploadError(ImageProcessingError):
    status_code = 400


class UploadTooLargeError(MissingUploadError):
    status_code = 413


class StagingError(ImageProcessingError):
    status_code = 500


class DecodeError(ImageProcessingError):
    status_code = 400


class FilterError(ImageProcessingError):
    status_code = 500


class EncodeError(ImageProcessingError):
    status_code = 500


class ResponseWriteError(ImageProcessingError):
    status_code = 500
