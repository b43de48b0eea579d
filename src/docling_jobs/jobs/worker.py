import asyncio
import logging
from typing import Optional

from .errors import describe_exception
from .interfaces import ConversionFailed, ConversionOutcome, ConversionRequest, Converted, ConverterGateway
from .records import JobRecord
from .store import JobStore

logger = logging.getLogger(__name__)


class ConversionWorker:
    """Runs a single job through the converter and records the outcome.

    A started job always ends in `completed` or `failed`: anything the
    converter raises is turned into the job's error text, and any error in
    the worker's own handling fails the job as a last resort.
    """

    def __init__(
        self,
        store: JobStore,
        converter: ConverterGateway,
        *,
        timeout_sec: Optional[float] = None,
    ) -> None:
        self._store = store
        self._converter = converter
        self._timeout = timeout_sec if timeout_sec else None

    async def run(self, job_id: str, request: ConversionRequest) -> None:
        self._store.update(job_id, lambda job: job.start())
        logger.info("Job %s processing source=%s page_range=%s", job_id, request.source, request.page_range)
        try:
            await self._process(job_id, request)
        except Exception as e:
            logger.exception("Worker error on job %s", job_id)
            message = describe_exception(e)
            self._store.update(job_id, lambda job: _fail_unfinished(job, message))

    async def _process(self, job_id: str, request: ConversionRequest) -> None:
        call = asyncio.ensure_future(self._call_converter(request))
        done, _ = await asyncio.wait({call}, timeout=self._timeout)
        if not done:
            self._finish(job_id, ConversionFailed(f"conversion timed out after {self._timeout:g} seconds"))
            # The converter thread cannot be interrupted; hold this worker slot until it returns.
            await asyncio.wait({call})
            if not call.cancelled() and call.exception() is not None:
                logger.debug("Late converter error on timed out job %s: %s", job_id, call.exception())
            return
        self._finish(job_id, self._outcome(job_id, call))

    def _call_converter(self, request: ConversionRequest):
        if request.page_range is not None:
            return asyncio.to_thread(self._converter.convert, request.source, request.page_range)
        return asyncio.to_thread(self._converter.convert, request.source)

    def _outcome(self, job_id: str, call: "asyncio.Future[object]") -> ConversionOutcome:
        try:
            outcome = call.result()
        except Exception as e:
            logger.exception("Converter raised for job %s", job_id)
            return ConversionFailed(describe_exception(e))
        if not isinstance(outcome, (Converted, ConversionFailed)):
            return ConversionFailed(f"converter returned unexpected {type(outcome).__name__}")
        return outcome

    def _finish(self, job_id: str, outcome: ConversionOutcome) -> None:
        if isinstance(outcome, Converted):
            self._store.update(job_id, lambda job: job.complete(outcome.text))
            logger.info("Job %s completed (%d chars)", job_id, len(outcome.text))
        else:
            self._store.update(job_id, lambda job: job.fail(outcome.message))
            logger.warning("Job %s failed: %s", job_id, outcome.message)


def _fail_unfinished(job: JobRecord, message: str) -> JobRecord:
    if job.state.is_terminal:
        return job
    return job.fail(message)
