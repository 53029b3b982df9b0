"""
Platform entry point for object-created notifications.

The pipeline and its clients are built on the first invocation and reused
by later invocations in the same process.
"""

import logging
import os
from functools import lru_cache
from typing import Optional

from .cdn_client import InvalidationClient
from .config import ResizerConfig
from .exceptions import ConfigError
from .pipeline import Pipeline
from .s3_client import S3Client
from .variant_generator import VariantGenerator

RESPONSE = {'status': 'processed'}


def log_level(name: Optional[str]) -> int:
    """Resolve a level name, falling back to INFO for unknown names."""
    level = logging.getLevelName((name or 'INFO').strip().upper())
    if isinstance(level, int):
        return level
    return logging.INFO


logger = logging.getLogger('resizer')
logger.setLevel(log_level(os.getenv('RESIZER_LOG_LEVEL')))


def build_pipeline(config: ResizerConfig, logger: Optional[logging.Logger] = None) -> Pipeline:
    """
    Construct a pipeline and its clients from configuration.

    Raises:
        ConfigError: The configuration is invalid
    """
    logger = logger or logging.getLogger('resizer')

    errors = config.validate()
    if errors:
        for error in errors:
            logger.error(error)
        raise ConfigError("Resizer configuration invalid")

    storage = S3Client(config.s3, logger)
    generator = VariantGenerator(quality=config.jpeg_quality, logger=logger)

    invalidator = None
    if config.invalidate_cache:
        invalidator = InvalidationClient(config.distribution_id, config.s3, logger)

    return Pipeline(config, storage, generator, invalidator, logger)


@lru_cache(maxsize=1)
def get_pipeline() -> Pipeline:
    """Process-wide pipeline, built from the environment on first use."""
    return build_pipeline(ResizerConfig.from_env(), logger)


def lambda_handler(event, context):
    """
    Handle one notification.

    Always acknowledges the event: failures are logged and never reported
    back to the platform, so the platform does not retry.
    """
    try:
        get_pipeline().run(event)
    except Exception as e:
        logger.exception(f"Unhandled error while processing event: {e}")

    return dict(RESPONSE)
