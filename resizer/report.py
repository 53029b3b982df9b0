"""
InvocationReport - What happened during one pipeline invocation.
"""

import time
from dataclasses import dataclass, field
from typing import List, Optional

from .config import Dimension
from .event import PipelineContext
from .outcome import StageOutcome


@dataclass
class VariantResult:
    """
    Result for one configured dimension.

    Attributes:
        dimension: Target dimension
        key: Destination key (None if the context was never resolved)
        size: Bytes uploaded
        error: Error message if rendering or uploading failed
    """
    dimension: Dimension
    key: Optional[str] = None
    size: int = 0
    error: Optional[str] = None

    @property
    def uploaded(self) -> bool:
        return self.error is None


@dataclass
class InvocationReport:
    """
    Outcome of one invocation.

    Attributes:
        source_bucket: Bucket from the event (None if the event was unreadable)
        source_key: Decoded key from the event
        destination_bucket: Configured destination bucket
        context: Derived pipeline context (None if validation failed)
        stages: Outcome of each stage that ran, in order
        variants: One result per attempted dimension
        start_time: Start timestamp
        end_time: End timestamp
    """
    source_bucket: Optional[str] = None
    source_key: Optional[str] = None
    destination_bucket: Optional[str] = None
    context: Optional[PipelineContext] = None
    stages: List[StageOutcome] = field(default_factory=list)
    variants: List[VariantResult] = field(default_factory=list)
    start_time: float = field(default_factory=time.time)
    end_time: Optional[float] = None

    def add_stage(self, outcome: StageOutcome) -> StageOutcome:
        self.stages.append(outcome)
        return outcome

    def stage(self, name: str) -> Optional[StageOutcome]:
        """Return the outcome of a stage by name, if it ran."""
        for outcome in self.stages:
            if outcome.stage == name:
                return outcome
        return None

    def finish(self) -> None:
        self.end_time = time.time()

    @property
    def elapsed_seconds(self) -> float:
        """Elapsed time in seconds."""
        return (self.end_time or time.time()) - self.start_time

    @property
    def aborted(self) -> bool:
        """True if a stage ended the invocation early."""
        return any(outcome.aborted for outcome in self.stages)

    @property
    def variants_uploaded(self) -> int:
        return sum(1 for v in self.variants if v.uploaded)

    @property
    def variants_failed(self) -> int:
        return sum(1 for v in self.variants if not v.uploaded)

    @property
    def succeeded(self) -> bool:
        """True if every stage and every variant completed without error."""
        return not any(outcome.failed for outcome in self.stages) and self.variants_failed == 0

    @property
    def errors(self) -> List[str]:
        """Every stage and variant error message."""
        messages = [f"{o.stage}: {o.error}" for o in self.stages if o.failed]
        messages.extend(
            f"variant {v.dimension}: {v.error}" for v in self.variants if not v.uploaded
        )
        return messages

    def summary(self) -> str:
        """One-line summary naming source and destination."""
        source = f"{self.source_bucket}/{self.source_key}"
        prefix = self.context.destination_prefix if self.context else ''
        destination = f"{self.destination_bucket}/{prefix}"

        if self.succeeded:
            return (
                f"Successfully resized {source} and uploaded to {destination} "
                f"({self.variants_uploaded} variants, {self.elapsed_seconds:.2f}s)"
            )
        return (
            f"Unable to resize {source} and upload to {destination} "
            f"due to an error: {'; '.join(self.errors)}"
        )

    def to_dict(self) -> dict:
        return {
            'source_bucket': self.source_bucket,
            'source_key': self.source_key,
            'destination_bucket': self.destination_bucket,
            'destination_prefix': self.context.destination_prefix if self.context else None,
            'succeeded': self.succeeded,
            'stages': [outcome.to_dict() for outcome in self.stages],
            'variants': [
                {
                    'dimension': v.dimension.label,
                    'key': v.key,
                    'size': v.size,
                    'error': v.error,
                }
                for v in self.variants
            ],
            'elapsed_seconds': round(self.elapsed_seconds, 3),
        }
