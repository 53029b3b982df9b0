"""
Pipeline - Fetch, clean, resize, upload and invalidate for one event.
"""

import json
import logging
from typing import Optional

from botocore.exceptions import BotoCoreError, ClientError
from PIL import Image

from .cdn_client import InvalidationClient
from .config import Dimension, ResizerConfig
from .event import PipelineContext, read_event, resolve
from .exceptions import FetchError, ResizeError, ValidationError
from .fanout import FanOut
from .outcome import StageOutcome
from .report import InvocationReport, VariantResult
from .s3_client import S3Client
from .variant_generator import VariantGenerator


class Pipeline:
    """
    Processes object-created events into resized variants.

    Stages run strictly in order: validate, fetch, cleanup, transform,
    invalidate. Only validate and fetch can end an invocation early; every
    other stage records its failure and lets the pipeline complete.
    """

    def __init__(
        self,
        config: ResizerConfig,
        storage: S3Client,
        generator: VariantGenerator,
        invalidator: Optional[InvalidationClient] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize pipeline.

        Args:
            config: Pipeline configuration
            storage: Storage client for both buckets
            generator: Variant generator instance
            invalidator: Cache invalidation client (None disables the stage)
            logger: Optional logger instance
        """
        self.config = config
        self.storage = storage
        self.generator = generator
        self.invalidator = invalidator
        self.logger = logger or logging.getLogger(__name__)
        self.fanout = FanOut(config.max_workers, logger=self.logger)

    def run(self, event: dict) -> InvocationReport:
        """
        Run every stage for one notification.

        Args:
            event: Object-created notification

        Returns:
            InvocationReport describing each stage and variant
        """
        self.logger.info(f"Reading options from event: {json.dumps(event, default=str)}")

        report = InvocationReport(destination_bucket=self.config.destination_bucket)
        self._run_stages(event, report)
        report.finish()
        self._report_completion(report)
        return report

    def _run_stages(self, event: dict, report: InvocationReport) -> None:
        context = self._validate(event, report)
        if context is None:
            return

        image_data = self._fetch(context, report)
        if image_data is None:
            return

        self._cleanup(context, report)
        self._transform(context, image_data, report)
        self._invalidate(report)

    def _validate(self, event: dict, report: InvocationReport) -> Optional[PipelineContext]:
        try:
            source = read_event(event, logger=self.logger)
            report.source_bucket = source.bucket
            report.source_key = source.key
            context = resolve(
                source,
                self.config.destination_bucket,
                mime_content_type=self.config.mime_content_type,
            )
        except ValidationError as e:
            self.logger.error(f"Rejected event: {e}")
            report.add_stage(StageOutcome.failed_abort(e.stage, e))
            return None

        report.context = context
        report.add_stage(StageOutcome.ok(
            'validate', f"{context.image_type} -> {context.destination_prefix}"
        ))
        return context

    def _fetch(self, context: PipelineContext, report: InvocationReport) -> Optional[bytes]:
        self.logger.info(f"Downloading {context.source_bucket}/{context.source_key}")
        try:
            image_data = self.storage.download_object(context.source_bucket, context.source_key)
        except (ClientError, BotoCoreError) as e:
            error = FetchError(context.source_bucket, context.source_key, e)
            self.logger.error(str(error))
            report.add_stage(StageOutcome.failed_abort(error.stage, error))
            return None

        report.add_stage(StageOutcome.ok('fetch', f"{len(image_data)} bytes"))
        return image_data

    def _cleanup(self, context: PipelineContext, report: InvocationReport) -> StageOutcome:
        """Remove existing variants. Never stops the pipeline."""
        bucket = context.destination_bucket
        prefix = context.cleanup_prefix
        self.logger.info(f"Removing existing variants under {bucket}/{prefix}")

        try:
            keys = self.storage.list_keys(bucket, prefix)
            if not keys:
                self.logger.info("No existing variants")
                return report.add_stage(StageOutcome.skipped('cleanup', 'nothing to delete'))

            deleted = self.storage.delete_objects(bucket, keys)
        except Exception as e:
            self.logger.warning(f"Cleanup of {bucket}/{prefix} failed, continuing: {e}")
            return report.add_stage(StageOutcome.failed_continue('cleanup', e))

        self.logger.info(f"Deleted {deleted} existing variant(s)")
        return report.add_stage(StageOutcome.ok('cleanup', f"{deleted} deleted"))

    def _transform(
        self,
        context: PipelineContext,
        image_data: bytes,
        report: InvocationReport
    ) -> StageOutcome:
        """Render and upload one variant per dimension, then join."""
        dimensions = self.config.dimensions
        self.logger.info(f"Transforming into {len(dimensions)} variant(s)")

        try:
            img = self.generator.decode(image_data)
        except ResizeError as e:
            self.logger.error(f"Resize error for {context.source_key}: {e}")
            report.variants.extend(
                VariantResult(d, key=context.variant_key(d), error=str(e)) for d in dimensions
            )
            return report.add_stage(StageOutcome.failed_continue(e.stage, e))

        self.logger.debug(f"Original size {img.size[0]}x{img.size[1]}")

        def render_and_upload(dimension: Dimension) -> int:
            return self._render_variant(context, img, dimension)

        results = self.fanout.run(render_and_upload, dimensions)

        for result in results:
            key = context.variant_key(result.item)
            if result.ok:
                report.variants.append(VariantResult(result.item, key=key, size=result.value))
            else:
                self.logger.error(f"Variant {key} failed: {result.error}")
                report.variants.append(VariantResult(result.item, key=key, error=str(result.error)))

        detail = f"{report.variants_uploaded}/{len(dimensions)} uploaded"
        if report.variants_failed:
            error = ResizeError(f"{report.variants_failed} variant(s) failed")
            return report.add_stage(StageOutcome.failed_continue(error.stage, error, detail))
        return report.add_stage(StageOutcome.ok('transform', detail))

    def _render_variant(self, context: PipelineContext, img: Image.Image, dimension: Dimension) -> int:
        data = self.generator.render(img, dimension, context.image_type)
        key = context.variant_key(dimension)
        self.storage.upload_object(
            context.destination_bucket, key, data, context.content_type
        )
        self.logger.info(f"Uploaded {context.destination_bucket}/{key} ({len(data)} bytes)")
        return len(data)

    def _invalidate(self, report: InvocationReport) -> StageOutcome:
        """Invalidate the CDN path. Failures are recorded, never raised."""
        if self.invalidator is None or not self.config.invalidate_cache:
            return report.add_stage(StageOutcome.skipped('invalidate', 'disabled'))

        path = self.config.invalidation_path
        self.logger.info(f"Invalidating CDN cache for {path}")
        try:
            result = self.invalidator.create_invalidation([path])
        except (ClientError, BotoCoreError) as e:
            self.logger.error(f"Error while invalidating {path}: {e}")
            return report.add_stage(StageOutcome.failed_continue('invalidate', e))

        self.logger.info(f"Invalidation {result.get('id')} {result.get('status')}")
        return report.add_stage(StageOutcome.ok('invalidate', str(result.get('id'))))

    def _report_completion(self, report: InvocationReport) -> None:
        if report.succeeded:
            self.logger.info(report.summary())
        else:
            self.logger.error(report.summary())
