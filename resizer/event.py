"""
Event reading and key resolution for object-created notifications.
"""

import logging
import posixpath
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote_plus, unquote_plus

from .config import Dimension
from .exceptions import (
    EventError,
    ImageTypeError,
    SameBucketError,
    UnsupportedImageTypeError,
)


SUPPORTED_TYPES = ('jpg', 'png')

MIME_TYPES = {
    'jpg': 'image/jpeg',
    'png': 'image/png',
}


@dataclass(frozen=True)
class SourceObject:
    """Bucket and decoded key of the object that triggered the invocation."""
    bucket: str
    key: str


@dataclass(frozen=True)
class PipelineContext:
    """
    Values derived once per invocation.

    Attributes:
        source_bucket: Bucket the original was written to
        source_key: Decoded key of the original
        destination_bucket: Bucket receiving the variants
        destination_prefix: Source key without its extension
        image_type: 'jpg' or 'png'
        mime_content_type: Upload with a MIME type instead of the bare type
    """
    source_bucket: str
    source_key: str
    destination_bucket: str
    destination_prefix: str
    image_type: str
    mime_content_type: bool = False

    @property
    def content_type(self) -> str:
        if self.mime_content_type:
            return MIME_TYPES[self.image_type]
        return self.image_type

    @property
    def cleanup_prefix(self) -> str:
        """
        Listing prefix covering only this image's variants.

        Siblings sharing the prefix text, such as 'photos/cat-old.jpg' or
        'photos/category/100x100.jpg', are left alone.
        """
        return f"{self.destination_prefix}/"

    def variant_key(self, dimension: Dimension) -> str:
        """Destination key for one variant, e.g. 'photos/cat/100x100.jpg'."""
        return f"{self.destination_prefix}/{dimension.label}.{self.image_type}"


def read_event(event: dict, logger: Optional[logging.Logger] = None) -> SourceObject:
    """
    Extract the source object from an S3 notification.

    Only the first record is used. The key arrives URL-encoded with spaces
    as '+'.

    Args:
        event: Notification payload
        logger: Optional logger instance

    Returns:
        SourceObject with the decoded key
    """
    logger = logger or logging.getLogger(__name__)
    try:
        record = event['Records'][0]
        bucket = record['s3']['bucket']['name']
        raw_key = record['s3']['object']['key']
    except (KeyError, IndexError, TypeError):
        raise EventError("Event does not contain an S3 object record")

    key = unquote_plus(raw_key)
    logger.debug(f"Decoded key {raw_key!r} -> {key!r}")
    return SourceObject(bucket=bucket, key=key)


def resolve(
    source: SourceObject,
    destination_bucket: str,
    mime_content_type: bool = False,
) -> PipelineContext:
    """
    Validate the source object and derive the pipeline context.

    Raises:
        SameBucketError: Source and destination buckets are equal
        ImageTypeError: Key has no extension
        UnsupportedImageTypeError: Extension is not 'jpg' or 'png'
    """
    if source.bucket == destination_bucket:
        raise SameBucketError(source.bucket)

    basename = posixpath.basename(source.key)
    if '.' not in basename:
        raise ImageTypeError(source.key)

    prefix, image_type = source.key.rsplit('.', 1)

    # Exact, case-sensitive match
    if image_type not in SUPPORTED_TYPES:
        raise UnsupportedImageTypeError(image_type)

    return PipelineContext(
        source_bucket=source.bucket,
        source_key=source.key,
        destination_bucket=destination_bucket,
        destination_prefix=prefix,
        image_type=image_type,
        mime_content_type=mime_content_type,
    )


def make_event(bucket: str, key: str) -> dict:
    """Build a minimal object-created notification, used by the CLI."""
    return {
        'Records': [
            {
                'eventSource': 'aws:s3',
                'eventName': 'ObjectCreated:Put',
                's3': {
                    'bucket': {'name': bucket},
                    'object': {'key': quote_plus(key, safe='/')},
                },
            }
        ]
    }
