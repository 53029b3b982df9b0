"""
S3Client - S3 operations for fetching originals and writing variants.
"""

import logging
from typing import Iterable, List, Optional

import boto3
from botocore.config import Config

from .config import S3Profile
from .exceptions import StorageError


class S3Client:
    """
    Wrapper for the storage operations the pipeline consumes.

    Constructed once per process and passed to the pipeline; bucket names
    are given per call because originals and variants live in different
    buckets.
    """

    # delete_objects accepts at most this many keys per request
    DELETE_BATCH_SIZE = 1000

    def __init__(self, profile: Optional[S3Profile] = None, logger: Optional[logging.Logger] = None):
        """
        Initialize S3 client.

        Args:
            profile: Connection profile (default: boto3 credential chain)
            logger: Optional logger instance
        """
        self.profile = profile or S3Profile()
        self.logger = logger or logging.getLogger(__name__)

        config_kwargs = {'signature_version': 's3v4'}
        if self.profile.endpoint:
            config_kwargs['s3'] = {'addressing_style': 'path'}

        self._client = boto3.client(
            's3',
            endpoint_url=self.profile.endpoint,
            aws_access_key_id=self.profile.access_key,
            aws_secret_access_key=self.profile.secret_key,
            region_name=self.profile.region,
            config=Config(**config_kwargs),
            verify=self.profile.verify_ssl
        )

    @property
    def client(self):
        """Return the underlying boto3 client."""
        return self._client

    def download_object(self, bucket: str, key: str) -> bytes:
        """Download an object into memory."""
        response = self._client.get_object(Bucket=bucket, Key=key)
        return response['Body'].read()

    def list_keys(self, bucket: str, prefix: str) -> List[str]:
        """
        List every key under a prefix.

        Args:
            bucket: Bucket name
            prefix: Key prefix

        Returns:
            Keys in listing order
        """
        paginator = self._client.get_paginator('list_objects_v2')
        page_iterator = paginator.paginate(Bucket=bucket, Prefix=prefix)

        keys = []
        for page in page_iterator:
            for obj in page.get('Contents', []):
                keys.append(obj['Key'])
        return keys

    def delete_objects(self, bucket: str, keys: Iterable[str]) -> int:
        """
        Delete keys in batch requests.

        Returns:
            Number of keys deleted

        Raises:
            StorageError: The service reported per-key errors
        """
        keys = list(keys)
        deleted = 0

        for start in range(0, len(keys), self.DELETE_BATCH_SIZE):
            batch = keys[start:start + self.DELETE_BATCH_SIZE]
            response = self._client.delete_objects(
                Bucket=bucket,
                Delete={
                    'Objects': [{'Key': key} for key in batch],
                    'Quiet': True,
                }
            )
            errors = response.get('Errors', [])
            if errors:
                first = errors[0]
                raise StorageError(
                    f"{len(errors)} object(s) not deleted from {bucket}, "
                    f"first: {first.get('Key')} ({first.get('Code')})"
                )
            deleted += len(batch)

        return deleted

    def upload_object(
        self,
        bucket: str,
        key: str,
        data: bytes,
        content_type: str = 'application/octet-stream'
    ) -> None:
        """Upload an object."""
        self._client.put_object(
            Bucket=bucket,
            Key=key,
            Body=data,
            ContentType=content_type
        )
