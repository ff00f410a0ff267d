"""
Upload pipeline exceptions.

Every failure the pipeline reports to a caller is an ``UploadError``. The
class decides the HTTP status; the message is what the caller sees.
"""

from typing import Optional


GENERIC_FAILURE_MESSAGE = "Upload process failed."


class UploadError(Exception):
    """Base exception for all upload pipeline errors."""

    status_code = 500

    def __init__(self, message: Optional[str] = None):
        self.message = message or GENERIC_FAILURE_MESSAGE
        super().__init__(self.message)


# -----------------------------------------------------------------------------
# Client errors
# -----------------------------------------------------------------------------

class ValidationError(UploadError):
    """Raised when the submitted form cannot start a pipeline."""

    status_code = 400


class MissingFieldError(ValidationError):
    """A required preference field is absent or blank."""

    def __init__(self, message: str = "Missing required fields."):
        super().__init__(message)


class NoSourceError(ValidationError):
    """Neither a usable video file nor a video link was supplied."""

    def __init__(self, message: str = "Provide either a video file or link."):
        super().__init__(message)


# -----------------------------------------------------------------------------
# Acquisition errors
# -----------------------------------------------------------------------------

class AcquisitionError(UploadError):
    """Raised when the video asset cannot be materialized locally."""
    pass


class DownloadError(AcquisitionError):
    """The remote link could not be fetched."""

    def __init__(self, message: str, status: Optional[int] = None):
        self.status = status
        super().__init__(message)


class StorageWriteError(AcquisitionError):
    """Writing the asset to ephemeral storage failed."""
    pass


class AssetTooLargeError(AcquisitionError):
    """The asset exceeds the configured size ceiling."""

    status_code = 413


# -----------------------------------------------------------------------------
# Collaborator errors
# -----------------------------------------------------------------------------

class CollaboratorError(UploadError):
    """Metadata generation or publishing failed."""
    pass


class PublishError(CollaboratorError):
    """The publishing service did not return a usable result."""
    pass
