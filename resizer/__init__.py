"""
Event-triggered image resizing for S3.

On each object-created notification the pipeline:
    1. Validates the event and derives the destination prefix
    2. Downloads the original
    3. Deletes existing variants under the destination prefix
    4. Renders and uploads one variant per configured dimension
    5. Invalidates the CDN cache path
"""

__version__ = "1.0.0"

from .config import Dimension, S3Profile, ResizerConfig, parse_dimensions
from .event import SourceObject, PipelineContext, read_event, resolve
from .outcome import Status, StageOutcome
from .s3_client import S3Client
from .cdn_client import InvalidationClient
from .variant_generator import VariantGenerator
from .fanout import FanOut, TaskResult
from .report import InvocationReport, VariantResult
from .pipeline import Pipeline

__all__ = [
    "Dimension",
    "S3Profile",
    "ResizerConfig",
    "parse_dimensions",
    "SourceObject",
    "PipelineContext",
    "read_event",
    "resolve",
    "Status",
    "StageOutcome",
    "S3Client",
    "InvalidationClient",
    "VariantGenerator",
    "FanOut",
    "TaskResult",
    "InvocationReport",
    "VariantResult",
    "Pipeline",
]
