"""
Configuration for the resize pipeline.

Values are read once from the environment at process start and are not
modified afterwards.
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .exceptions import ConfigError


DEFAULT_DIMENSIONS = '100x100,200x200'
DEFAULT_INVALIDATION_PATH = '/dev/imageserver/custom*'


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == '':
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


@dataclass(frozen=True)
class Dimension:
    """
    A target width/height pair for one resized variant.

    Attributes:
        width: Target width in pixels
        height: Target height in pixels
    """
    width: int
    height: int

    @property
    def label(self) -> str:
        """Name used in variant keys, e.g. '100x100'."""
        return f"{self.width}x{self.height}"

    @classmethod
    def parse(cls, text: str) -> 'Dimension':
        """Parse a 'WxH' string."""
        try:
            width, height = text.strip().lower().split('x')
            return cls(int(width), int(height))
        except ValueError:
            raise ConfigError(f"Invalid dimension '{text}', expected WIDTHxHEIGHT")

    def __str__(self) -> str:
        return self.label


def parse_dimensions(text: str) -> Tuple[Dimension, ...]:
    """
    Parse a comma separated list of dimensions.

    Args:
        text: Dimensions such as '100x100,200x200'

    Returns:
        Dimensions in the order given
    """
    return tuple(Dimension.parse(part) for part in text.split(',') if part.strip())


@dataclass
class S3Profile:
    """
    Storage service connection profile.

    Every field is optional; unset values fall through to the default
    boto3 credential chain and region resolution.
    """
    endpoint: Optional[str] = None
    region: Optional[str] = None
    access_key: Optional[str] = None
    secret_key: Optional[str] = None
    verify_ssl: bool = True

    @classmethod
    def from_env(cls) -> 'S3Profile':
        """Create profile from S3_* environment variables."""
        return cls(
            endpoint=os.getenv('S3_ENDPOINT') or None,
            region=os.getenv('S3_REGION') or os.getenv('AWS_REGION') or None,
            access_key=os.getenv('S3_ACCESS_KEY') or None,
            secret_key=os.getenv('S3_SECRET_KEY') or None,
            verify_ssl=_env_bool('S3_VERIFY_SSL', True),
        )

    def validate(self) -> List[str]:
        """Return a list of configuration errors."""
        errors = []
        if bool(self.access_key) != bool(self.secret_key):
            errors.append("S3_ACCESS_KEY and S3_SECRET_KEY must be set together")
        return errors


@dataclass
class ResizerConfig:
    """
    Pipeline configuration.

    Attributes:
        destination_bucket: Bucket receiving the resized variants
        dimensions: Ordered target dimensions, one variant each
        distribution_id: CDN distribution to invalidate
        invalidation_path: Path pattern invalidated after each run
        invalidate_cache: If False, the invalidation stage is skipped
        mime_content_type: If True, upload with 'image/jpeg' style content
            types instead of the bare format string
        jpeg_quality: Quality used when encoding JPEG variants
        max_workers: Upper bound on parallel variant tasks
        s3: Storage connection profile
    """
    destination_bucket: str
    dimensions: Tuple[Dimension, ...] = field(
        default_factory=lambda: parse_dimensions(DEFAULT_DIMENSIONS)
    )
    distribution_id: Optional[str] = None
    invalidation_path: str = DEFAULT_INVALIDATION_PATH
    invalidate_cache: bool = True
    mime_content_type: bool = False
    jpeg_quality: int = 85
    max_workers: int = 4
    s3: S3Profile = field(default_factory=S3Profile)

    @classmethod
    def from_env(cls) -> 'ResizerConfig':
        """Create configuration from RESIZER_* environment variables."""
        return cls(
            destination_bucket=os.getenv('RESIZER_DESTINATION_BUCKET', ''),
            dimensions=parse_dimensions(
                os.getenv('RESIZER_DIMENSIONS', DEFAULT_DIMENSIONS)
            ),
            distribution_id=os.getenv('RESIZER_DISTRIBUTION_ID') or None,
            invalidation_path=os.getenv(
                'RESIZER_INVALIDATION_PATH', DEFAULT_INVALIDATION_PATH
            ),
            invalidate_cache=_env_bool('RESIZER_INVALIDATE_CACHE', True),
            mime_content_type=_env_bool('RESIZER_MIME_CONTENT_TYPE', False),
            jpeg_quality=int(os.getenv('RESIZER_JPEG_QUALITY', '85')),
            max_workers=int(os.getenv('RESIZER_MAX_WORKERS', '4')),
            s3=S3Profile.from_env(),
        )

    def validate(self) -> List[str]:
        """
        Validate configuration.

        Returns:
            List of error messages (empty if valid)
        """
        errors = []

        if not self.destination_bucket:
            errors.append("RESIZER_DESTINATION_BUCKET is required")
        if not self.dimensions:
            errors.append("At least one dimension is required")
        for dimension in self.dimensions:
            if dimension.width <= 0 or dimension.height <= 0:
                errors.append(f"Dimension {dimension} must be positive")
        if self.invalidate_cache and not self.distribution_id:
            errors.append(
                "RESIZER_DISTRIBUTION_ID is required when cache invalidation is enabled"
            )
        if not 1 <= self.jpeg_quality <= 95:
            errors.append("RESIZER_JPEG_QUALITY must be between 1 and 95")
        if self.max_workers < 1:
            errors.append("RESIZER_MAX_WORKERS must be at least 1")

        errors.extend(self.s3.validate())
        return errors
