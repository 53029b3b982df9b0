"""
Pytest fixtures for resizer tests.
"""

import io
import threading

import pytest
from botocore.exceptions import ClientError


class FakeStorage:
    """In-memory stand-in for S3Client that records every call."""

    def __init__(self):
        self.objects = {}
        self.deleted = []
        self.calls = []
        self._lock = threading.Lock()

    def put(self, bucket, key, data=b'', content_type='application/octet-stream'):
        self.objects[(bucket, key)] = {'Body': data, 'ContentType': content_type}

    def keys(self, bucket):
        return sorted(key for (b, key) in self.objects if b == bucket)

    def download_object(self, bucket, key):
        self.calls.append(('download_object', bucket, key))
        try:
            return self.objects[(bucket, key)]['Body']
        except KeyError:
            raise ClientError(
                {'Error': {'Code': 'NoSuchKey', 'Message': 'Not Found'}},
                'GetObject'
            )

    def list_keys(self, bucket, prefix):
        self.calls.append(('list_keys', bucket, prefix))
        return [key for key in self.keys(bucket) if key.startswith(prefix)]

    def delete_objects(self, bucket, keys):
        self.calls.append(('delete_objects', bucket, list(keys)))
        for key in keys:
            self.objects.pop((bucket, key), None)
            self.deleted.append(key)
        return len(keys)

    def upload_object(self, bucket, key, data, content_type='application/octet-stream'):
        with self._lock:
            self.calls.append(('upload_object', bucket, key))
            self.put(bucket, key, data, content_type)


@pytest.fixture
def resizer_config():
    """Fixture providing a pipeline configuration."""
    from resizer.config import ResizerConfig, parse_dimensions

    return ResizerConfig(
        destination_bucket='resized-bucket',
        dimensions=parse_dimensions('100x100,200x200'),
        distribution_id='EDFDVBD6EXAMPLE',
        invalidation_path='/dev/imageserver/custom*',
    )


@pytest.fixture
def fake_storage():
    """Fixture providing an in-memory storage client."""
    return FakeStorage()


@pytest.fixture
def mock_invalidator():
    """Fixture providing a mock invalidation client."""
    from unittest.mock import MagicMock
    from resizer.cdn_client import InvalidationClient

    mock = MagicMock(spec=InvalidationClient)
    mock.create_invalidation.return_value = {'id': 'I2J0I21PCUYOIK', 'status': 'InProgress'}
    return mock


@pytest.fixture
def mock_boto3_client(mocker):
    """Fixture providing a mocked boto3 client."""
    mock_client = mocker.MagicMock()
    mocker.patch('boto3.client', return_value=mock_client)
    return mock_client


@pytest.fixture
def sample_image_bytes():
    """Fixture providing sample JPEG image bytes."""
    from PIL import Image

    img = Image.new('RGB', (300, 150), color='red')
    buffer = io.BytesIO()
    img.save(buffer, format='JPEG')
    return buffer.getvalue()


@pytest.fixture
def sample_png_bytes():
    """Fixture providing sample PNG image bytes."""
    from PIL import Image

    img = Image.new('RGBA', (120, 80), color=(255, 0, 0, 128))
    buffer = io.BytesIO()
    img.save(buffer, format='PNG')
    return buffer.getvalue()


@pytest.fixture
def make_s3_event():
    """Fixture providing a factory for object-created notifications."""
    def _make(bucket='uploads-bucket', key='photos/cat.jpg'):
        return {
            'Records': [
                {
                    'eventSource': 'aws:s3',
                    'eventName': 'ObjectCreated:Put',
                    's3': {
                        'bucket': {'name': bucket},
                        'object': {'key': key, 'size': 1024},
                    },
                }
            ]
        }
    return _make


@pytest.fixture
def logger():
    """Fixture providing a logger."""
    import logging
    return logging.getLogger('test')


@pytest.fixture
def truncated_ihdr_png():
    """Fixture providing a PNG whose IHDR chunk is too short."""
    import struct
    import zlib

    body = struct.pack('>I', 64)
    chunk = struct.pack('>I', len(body)) + b'IHDR' + body
    crc = struct.pack('>I', zlib.crc32(b'IHDR' + body) & 0xffffffff)
    return b'\x89PNG\r\n\x1a\n' + chunk + crc


@pytest.fixture
def broken_chunk_png(sample_png_bytes):
    """Fixture providing a PNG with a garbled chunk header after IHDR."""
    # signature (8) + IHDR length/type/data/crc (25)
    return sample_png_bytes[:33] + b'\x00\x00\x00\x05\x02@\x00\x01' + sample_png_bytes[41:]
