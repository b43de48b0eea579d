"""
Job records and their state machine.

A JobRecord is an immutable snapshot. Transitions return a new record, so the
store can swap records whole and readers never observe a state without its
matching result or error.
"""

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from .errors import InvalidTransition


class JobState(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES


TERMINAL_STATES = frozenset({JobState.COMPLETED, JobState.FAILED})


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class JobRecord:
    id: str
    state: JobState = JobState.PENDING
    result: Optional[str] = None
    error: Optional[str] = None
    created_at: str = ""
    started_at: Optional[str] = None
    finished_at: Optional[str] = None

    @classmethod
    def new(cls, job_id: str) -> "JobRecord":
        return cls(id=job_id, created_at=_utcnow())

    def start(self) -> "JobRecord":
        self._require(JobState.PENDING, JobState.PROCESSING)
        return replace(self, state=JobState.PROCESSING, started_at=_utcnow())

    def complete(self, result: str) -> "JobRecord":
        self._require(JobState.PROCESSING, JobState.COMPLETED)
        return replace(self, state=JobState.COMPLETED, result=result, finished_at=_utcnow())

    def fail(self, error: str) -> "JobRecord":
        self._require(JobState.PROCESSING, JobState.FAILED)
        return replace(self, state=JobState.FAILED, error=error, finished_at=_utcnow())

    def _require(self, expected: JobState, target: JobState) -> None:
        if self.state is not expected:
            raise InvalidTransition(self.id, self.state.value, target.value)

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "state": self.state.value,
            "result": self.result,
            "error": self.error,
            "created_at": self.created_at,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
        }
