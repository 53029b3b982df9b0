"""Tests for the platform entry point."""

import importlib
import logging

import pytest
from botocore.exceptions import ClientError

from resizer import handler
from resizer.config import ResizerConfig
from resizer.exceptions import ConfigError
from resizer.pipeline import Pipeline


class TestBuildPipeline:
    """Tests for build_pipeline."""

    def test_builds_clients(self, resizer_config, mock_boto3_client):
        """Test a valid configuration yields a wired pipeline."""
        pipeline = handler.build_pipeline(resizer_config)

        assert isinstance(pipeline, Pipeline)
        assert pipeline.invalidator is not None
        assert pipeline.generator.quality == resizer_config.jpeg_quality

    def test_no_invalidator_when_disabled(self, resizer_config, mock_boto3_client):
        """Test invalidation can be turned off."""
        resizer_config.invalidate_cache = False

        pipeline = handler.build_pipeline(resizer_config)

        assert pipeline.invalidator is None

    def test_invalid_config(self, mock_boto3_client):
        """Test invalid configuration raises ConfigError."""
        with pytest.raises(ConfigError):
            handler.build_pipeline(ResizerConfig(destination_bucket=''))


class TestLambdaHandler:
    """Tests for lambda_handler."""

    @pytest.fixture
    def wired(self, mocker, resizer_config, fake_storage, mock_invalidator, sample_image_bytes):
        """Patch get_pipeline to use in-memory clients."""
        from resizer.variant_generator import VariantGenerator

        fake_storage.put('uploads-bucket', 'photos/cat.jpg', sample_image_bytes)
        pipeline = Pipeline(resizer_config, fake_storage, VariantGenerator(), mock_invalidator)
        mocker.patch.object(handler, 'get_pipeline', return_value=pipeline)
        return pipeline

    def test_success_acknowledged(self, wired, make_s3_event):
        """Test a successful run returns the fixed response."""
        result = handler.lambda_handler(make_s3_event(), None)

        assert result == {'status': 'processed'}
        assert wired.storage.keys('resized-bucket') == [
            'photos/cat/100x100.jpg',
            'photos/cat/200x200.jpg',
        ]

    def test_validation_failure_acknowledged(self, wired, make_s3_event):
        """Test a rejected event is still acknowledged."""
        result = handler.lambda_handler(make_s3_event(key='photos/cat.gif'), None)

        assert result == {'status': 'processed'}

    def test_invalidation_failure_acknowledged(self, wired, mock_invalidator, make_s3_event):
        """Test an invalidation error does not fail the invocation."""
        mock_invalidator.create_invalidation.side_effect = ClientError(
            {'Error': {'Code': 'TooManyInvalidationsInProgress', 'Message': 'slow down'}},
            'CreateInvalidation'
        )

        result = handler.lambda_handler(make_s3_event(), None)

        assert result == {'status': 'processed'}

    def test_unexpected_error_acknowledged(self, mocker, make_s3_event, caplog):
        """Test unexpected exceptions are logged and acknowledged."""
        broken = mocker.MagicMock()
        broken.run.side_effect = RuntimeError("unexpected")
        mocker.patch.object(handler, 'get_pipeline', return_value=broken)

        result = handler.lambda_handler(make_s3_event(), None)

        assert result == {'status': 'processed'}
        assert 'unexpected' in caplog.text

    def test_configuration_error_acknowledged(self, mocker, make_s3_event):
        """Test a broken environment is logged and acknowledged."""
        mocker.patch.object(handler, 'get_pipeline', side_effect=ConfigError("bad config"))

        assert handler.lambda_handler(make_s3_event(), None) == {'status': 'processed'}

    def test_response_is_not_shared(self, wired, make_s3_event):
        """Test callers cannot mutate the module response."""
        result = handler.lambda_handler(make_s3_event(), None)
        result['status'] = 'changed'

        assert handler.RESPONSE == {'status': 'processed'}


class TestGetPipeline:
    """Tests for get_pipeline."""

    def test_built_once(self, monkeypatch, mock_boto3_client):
        """Test the pipeline is constructed on first use and reused."""
        monkeypatch.setenv('RESIZER_DESTINATION_BUCKET', 'resized')
        monkeypatch.setenv('RESIZER_DISTRIBUTION_ID', 'E123')
        handler.get_pipeline.cache_clear()
        try:
            first = handler.get_pipeline()
            second = handler.get_pipeline()
        finally:
            handler.get_pipeline.cache_clear()

        assert first is second
        assert first.config.destination_bucket == 'resized'


class TestLogLevel:
    """Tests for log level resolution."""

    @pytest.mark.parametrize('name, expected', [
        ('debug', logging.DEBUG),
        (' WARNING ', logging.WARNING),
        (None, logging.INFO),
        ('', logging.INFO),
        ('verbose', logging.INFO),
    ])
    def test_log_level(self, name, expected):
        """Test known names resolve and unknown names fall back to INFO."""
        assert handler.log_level(name) == expected

    def test_unknown_level_at_import(self, monkeypatch):
        """Test an unknown RESIZER_LOG_LEVEL does not break module import."""
        monkeypatch.setenv('RESIZER_LOG_LEVEL', 'verbose')

        module = importlib.reload(handler)

        assert module.logger.level == logging.INFO
        assert callable(module.lambda_handler)
