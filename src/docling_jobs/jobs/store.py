import logging
import threading
from collections import Counter
from typing import Callable

from .errors import DuplicateJobId, JobNotFound
from .records import JobRecord, JobState

logger = logging.getLogger(__name__)

Mutation = Callable[[JobRecord], JobRecord]


class JobStore:
    """In-memory registry of jobs keyed by id.

    Every read and write goes through one lock. Records are immutable, so
    `get` hands out the stored object itself as a consistent snapshot.
    """

    def __init__(self) -> None:
        self._jobs: dict[str, JobRecord] = {}
        self._lock = threading.Lock()

    def create(self, job_id: str) -> JobRecord:
        record = JobRecord.new(job_id)
        with self._lock:
            if job_id in self._jobs:
                raise DuplicateJobId(job_id)
            self._jobs[job_id] = record
        logger.debug("Created job %s", job_id)
        return record

    def get(self, job_id: str) -> JobRecord:
        with self._lock:
            try:
                return self._jobs[job_id]
            except KeyError:
                raise JobNotFound(job_id) from None

    def update(self, job_id: str, mutation: Mutation) -> JobRecord:
        """Apply `mutation` to the current record and store its return value.

        If the mutation raises, the stored record is left untouched.
        """
        with self._lock:
            try:
                current = self._jobs[job_id]
            except KeyError:
                raise JobNotFound(job_id) from None
            updated = mutation(current)
            if updated.id != job_id:
                raise ValueError("mutation must not change the job id")
            self._jobs[job_id] = updated
        logger.debug("Job %s: %s -> %s", job_id, current.state.value, updated.state.value)
        return updated

    def counts(self) -> dict[str, int]:
        with self._lock:
            tally = Counter(r.state for r in self._jobs.values())
        return {state.value: tally.get(state, 0) for state in JobState}

    def __contains__(self, job_id: object) -> bool:
        with self._lock:
            return job_id in self._jobs

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)
