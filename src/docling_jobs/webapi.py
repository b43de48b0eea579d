import logging
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from .config import Settings, load_settings
from .jobs import DuplicateJobId, JobFailed, JobNotFound, JobService, QueueFull, StillProcessing
from .jobs.adapters import DoclingConverter
from .logging_config import configure_logging
from .schemas import JobResultResponse, JobStatusResponse, SubmitJobRequest, SubmitJobResponse

logger = logging.getLogger(__name__)

ROOT_MESSAGE = "Docling job service is running."


def _not_found(job_id: str) -> HTTPException:
    return HTTPException(status_code=404, detail={"code": "not_found", "message": f"job {job_id} not found"})


def get_service(request: Request) -> JobService:
    service = getattr(request.app.state, "service", None)
    if service is None:
        raise HTTPException(status_code=503, detail={"code": "not_ready", "message": "service not started"})
    return service


def create_app(service: Optional[JobService] = None, settings: Optional[Settings] = None) -> FastAPI:
    """Build the FastAPI application.

    When `service` is omitted, a JobService backed by docling is created at
    startup from `settings` (or the environment).
    """
    settings = settings or load_settings()
    app = FastAPI(
        title="Docling Job Service",
        version=settings.version,
        description=(
            "Asynchronous document conversion: submit a source, poll the job, "
            "fetch the Markdown result."
        ),
    )

    @app.on_event("startup")
    async def _startup() -> None:
        svc = service
        if svc is None:
            svc = JobService(
                DoclingConverter(),
                workers=settings.workers,
                max_queued=settings.max_queued_jobs,
                job_timeout_sec=settings.job_timeout_sec,
            )
        app.state.service = svc
        await svc.start()

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        svc = getattr(app.state, "service", None)
        if svc is not None:
            await svc.stop()

    @app.get("/")
    def read_root() -> dict[str, str]:
        return {"message": ROOT_MESSAGE}

    @app.get("/health")
    def health(svc: JobService = Depends(get_service)) -> dict[str, object]:
        """Basic health check endpoint with job counts per state."""
        return {"status": "ok", "message": ROOT_MESSAGE, **svc.stats()}

    @app.post("/jobs", status_code=status.HTTP_202_ACCEPTED, response_model=SubmitJobResponse)
    async def submit_job(body: SubmitJobRequest, svc: JobService = Depends(get_service)) -> JSONResponse:
        """Submit a document for conversion.

        Returns 202 Accepted with the new job id in `pending` state; the job
        can be queried immediately.
        """
        try:
            job = await svc.submit(body.to_request())
        except QueueFull as e:
            raise HTTPException(status_code=503, detail={"code": "queue_full", "message": str(e)})
        except DuplicateJobId as e:
            logger.error("Job id collision: %s", e)
            raise HTTPException(status_code=500, detail={"code": "internal_error", "message": "job id collision"})

        content = SubmitJobResponse(
            id=job.id,
            state=job.state.value,
            links={
                "self": f"/jobs/{job.id}",
                "result": f"/jobs/{job.id}/result",
            },
        )
        headers = {"Location": f"/jobs/{job.id}"}
        return JSONResponse(status_code=status.HTTP_202_ACCEPTED, content=content.model_dump(), headers=headers)

    @app.get("/jobs/{job_id}", response_model=JobStatusResponse)
    async def get_job_status(job_id: str, svc: JobService = Depends(get_service)) -> JobStatusResponse:
        try:
            job = svc.get_status(job_id)
        except JobNotFound:
            raise _not_found(job_id)
        return JobStatusResponse.from_record(job)

    @app.get("/jobs/{job_id}/result", response_model=JobResultResponse)
    async def get_job_result(job_id: str, svc: JobService = Depends(get_service)):
        """Get the Markdown of a completed job.

        202 while the job is pending or processing, 500 with the captured error
        when it failed.
        """
        try:
            result = svc.get_result(job_id)
        except JobNotFound:
            raise _not_found(job_id)
        except StillProcessing as e:
            return JSONResponse(
                status_code=status.HTTP_202_ACCEPTED,
                content={"code": "still_processing", "state": e.state, "message": "job is still being processed"},
                headers={"Retry-After": "2"},
            )
        except JobFailed as e:
            raise HTTPException(
                status_code=500,
                detail={"code": "job_failed", "message": f"job failed: {e.error}", "error": e.error},
            )
        return JobResultResponse(id=job_id, result=result)

    return app


def build_app() -> FastAPI:
    settings = load_settings()
    configure_logging(settings.log_level)
    return create_app(settings=settings)


def run() -> None:
    """Run a development ASGI server using uvicorn.

    Exposes the app at host:port (default 0.0.0.0:8080). Set PORT env var to override.
    """
    import uvicorn

    settings = load_settings()
    uvicorn.run("docling_jobs.webapi:build_app", factory=True, host=settings.host, port=settings.port, reload=settings.reload)


if __name__ == "__main__":
    run()
