"""
Exceptions raised by the resize pipeline.

Validation errors abort an invocation before any storage call, fetch errors
abort before cleanup. Cleanup and cache invalidation failures never leave
their stage; they are recorded as outcomes instead.
"""

from typing import Optional


class ResizerError(Exception):
    """Base exception for the resizer package."""

    def __init__(self, message: str, stage: Optional[str] = None):
        self.message = message
        self.stage = stage
        super().__init__(self.message)


class ConfigError(ResizerError):
    """Raised when configuration values cannot be parsed."""


class ValidationError(ResizerError):
    """Raised when a trigger event fails its preconditions."""

    def __init__(self, message: str):
        super().__init__(message, stage='validate')


class EventError(ValidationError):
    """Raised when the notification does not contain an object record."""


class SameBucketError(ValidationError):
    """Raised when source and destination buckets are the same."""

    def __init__(self, bucket: str):
        self.bucket = bucket
        super().__init__("Source and destination buckets are the same.")


class ImageTypeError(ValidationError):
    """Raised when the object key has no extension."""

    def __init__(self, key: str):
        self.key = key
        super().__init__("Could not determine the image type.")


class UnsupportedImageTypeError(ValidationError):
    """Raised when the extension is not a supported image type."""

    def __init__(self, image_type: str):
        self.image_type = image_type
        super().__init__(f"Unsupported image type: {image_type}")


class FetchError(ResizerError):
    """Raised when the source object cannot be downloaded."""

    def __init__(self, bucket: str, key: str, cause: Exception):
        self.bucket = bucket
        self.key = key
        self.cause = cause
        super().__init__(f"Could not fetch {bucket}/{key}: {cause}", stage='fetch')


class ResizeError(ResizerError):
    """Raised when an image cannot be decoded, resized or encoded."""

    def __init__(self, message: str):
        super().__init__(message, stage='transform')


class StorageError(ResizerError):
    """Raised when a batch storage call reports per-object errors."""
