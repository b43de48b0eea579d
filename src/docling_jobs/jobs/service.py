import asyncio
import logging
import uuid
from typing import Optional

from .errors import JobFailed, QueueFull, StillProcessing
from .interfaces import ConversionRequest, ConverterGateway
from .records import JobRecord, JobState
from .store import JobStore
from .worker import ConversionWorker

logger = logging.getLogger(__name__)


class JobService:
    """Core domain service orchestrating conversion jobs.

    This service is framework-agnostic. Submissions are recorded in the job
    store and queued; a fixed number of worker tasks drain the queue, so at
    most `workers` conversions run at once and at most `max_queued` wait.
    """

    def __init__(
        self,
        converter: ConverterGateway,
        *,
        store: Optional[JobStore] = None,
        workers: int = 4,
        max_queued: int = 0,
        job_timeout_sec: Optional[float] = None,
    ) -> None:
        if workers < 1:
            raise ValueError("workers must be >= 1")
        self._store = store if store is not None else JobStore()
        self._worker = ConversionWorker(self._store, converter, timeout_sec=job_timeout_sec)
        self._workers = workers
        self._max_queued = max_queued
        self._queue: Optional[asyncio.Queue[tuple[str, ConversionRequest]]] = None
        self._tasks: list[asyncio.Task] = []

    @property
    def store(self) -> JobStore:
        return self._store

    @property
    def queue(self) -> asyncio.Queue[tuple[str, ConversionRequest]]:
        # Created lazily so the queue binds to the running event loop.
        if self._queue is None:
            self._queue = asyncio.Queue(maxsize=self._max_queued)
        return self._queue

    @property
    def running(self) -> bool:
        return any(not t.done() for t in self._tasks)

    async def start(self) -> None:
        queue = self.queue
        for i in range(self._workers):
            task = asyncio.create_task(self._worker_loop(f"worker-{i+1}", queue))
            self._tasks.append(task)
        logger.info("Started %d conversion workers", self._workers)

    async def stop(self) -> None:
        for t in self._tasks:
            t.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()
        logger.info("Stopped conversion workers")

    async def submit(self, request: ConversionRequest) -> JobRecord:
        """Record a new pending job and queue it for conversion.

        The job is in the store before this returns, so it can be queried
        straight away. Raises QueueFull when the backlog limit is reached.
        """
        queue = self.queue
        if queue.full():
            raise QueueFull(self._max_queued)
        job_id = str(uuid.uuid4())
        job = self._store.create(job_id)
        queue.put_nowait((job_id, request))
        logger.info("Accepted job %s for %s", job_id, request.source)
        return job

    def get_status(self, job_id: str) -> JobRecord:
        return self._store.get(job_id)

    def get_result(self, job_id: str) -> str:
        """Return the converted text of a completed job.

        Raises JobNotFound for an unknown id, JobFailed with the captured error
        for a failed job and StillProcessing while the job has not finished.
        """
        job = self._store.get(job_id)
        if job.state is JobState.COMPLETED:
            return job.result or ""
        if job.state is JobState.FAILED:
            raise JobFailed(job_id, job.error or "")
        raise StillProcessing(job_id, job.state.value)

    def stats(self) -> dict[str, object]:
        return {
            "jobs": self._store.counts(),
            "queued": self.queue.qsize(),
            "workers": self._workers,
        }

    async def _worker_loop(self, name: str, queue: asyncio.Queue[tuple[str, ConversionRequest]]) -> None:
        while True:
            job_id, request = await queue.get()
            try:
                logger.debug("%s picked up job %s", name, job_id)
                await self._worker.run(job_id, request)
            except Exception:
                # Store-level errors only; conversion errors are handled by the worker.
                logger.exception("%s could not process job %s", name, job_id)
            finally:
                queue.task_done()
