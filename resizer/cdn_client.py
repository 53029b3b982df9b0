"""
InvalidationClient - CloudFront cache invalidation.
"""

import logging
import time
from typing import List, Optional

import boto3

from .config import S3Profile


class InvalidationClient:
    """
    Issues cache invalidations for one CloudFront distribution.
    """

    def __init__(
        self,
        distribution_id: str,
        profile: Optional[S3Profile] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize invalidation client.

        Args:
            distribution_id: CloudFront distribution identifier
            profile: Credentials to reuse (endpoint is ignored, CloudFront
                is always the AWS service)
            logger: Optional logger instance
        """
        self.distribution_id = distribution_id
        self.logger = logger or logging.getLogger(__name__)
        profile = profile or S3Profile()

        self._client = boto3.client(
            'cloudfront',
            aws_access_key_id=profile.access_key,
            aws_secret_access_key=profile.secret_key,
        )

    @property
    def client(self):
        """Return the underlying boto3 client."""
        return self._client

    @staticmethod
    def caller_reference() -> str:
        """Uniqueness token for one request, milliseconds since the epoch."""
        return str(int(time.time() * 1000))

    def create_invalidation(self, paths: List[str]) -> dict:
        """
        Invalidate the given path patterns.

        Args:
            paths: Path patterns such as '/images/*'

        Returns:
            Dict with 'id' and 'status' of the created invalidation
        """
        response = self._client.create_invalidation(
            DistributionId=self.distribution_id,
            InvalidationBatch={
                'CallerReference': self.caller_reference(),
                'Paths': {
                    'Quantity': len(paths),
                    'Items': list(paths),
                },
            }
        )
        invalidation = response.get('Invalidation', {})
        return {
            'id': invalidation.get('Id'),
            'status': invalidation.get('Status'),
        }
