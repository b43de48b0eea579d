"""
Domain layer for document conversion jobs.
Provides the job state machine, a thread-safe in-memory job store, the
conversion worker and a service that queues jobs onto a bounded worker pool,
so front-ends (HTTP or others) can use the same core logic.
"""

from .errors import (
    DuplicateJobId,
    InvalidTransition,
    JobFailed,
    JobNotFound,
    JobServiceError,
    QueueFull,
    StillProcessing,
)
from .interfaces import ConversionFailed, ConversionOutcome, ConversionRequest, Converted, ConverterGateway, PageRange
from .records import JobRecord, JobState
from .service import JobService
from .store import JobStore
from .worker import ConversionWorker
