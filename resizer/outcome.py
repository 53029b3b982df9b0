"""
StageOutcome - Explicit result of one pipeline stage.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Status(str, Enum):
    """How a stage finished."""
    OK = 'ok'
    SKIPPED = 'skipped'
    FAILED_CONTINUE = 'failed_continue'
    FAILED_ABORT = 'failed_abort'


@dataclass
class StageOutcome:
    """
    Result of a single pipeline stage.

    A FAILED_CONTINUE stage lets the pipeline move on, a FAILED_ABORT stage
    ends the invocation.

    Attributes:
        stage: Stage name (e.g. 'fetch', 'cleanup')
        status: How the stage finished
        detail: Short human-readable description
        error: Error message when the stage failed
    """
    stage: str
    status: Status
    detail: str = ''
    error: Optional[str] = None

    @classmethod
    def ok(cls, stage: str, detail: str = '') -> 'StageOutcome':
        return cls(stage, Status.OK, detail)

    @classmethod
    def skipped(cls, stage: str, detail: str = '') -> 'StageOutcome':
        return cls(stage, Status.SKIPPED, detail)

    @classmethod
    def failed_continue(cls, stage: str, error: Exception, detail: str = '') -> 'StageOutcome':
        return cls(stage, Status.FAILED_CONTINUE, detail, str(error))

    @classmethod
    def failed_abort(cls, stage: str, error: Exception, detail: str = '') -> 'StageOutcome':
        return cls(stage, Status.FAILED_ABORT, detail, str(error))

    @property
    def failed(self) -> bool:
        return self.status in (Status.FAILED_CONTINUE, Status.FAILED_ABORT)

    @property
    def aborted(self) -> bool:
        return self.status is Status.FAILED_ABORT

    def to_dict(self) -> dict:
        return {
            'stage': self.stage,
            'status': self.status.value,
            'detail': self.detail,
            'error': self.error,
        }
