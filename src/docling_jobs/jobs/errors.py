class JobServiceError(Exception):
    """Base class for job lifecycle errors."""


class JobNotFound(JobServiceError):
    def __init__(self, job_id: str) -> None:
        super().__init__(f"job {job_id} not found")
        self.job_id = job_id


class DuplicateJobId(JobServiceError):
    def __init__(self, job_id: str) -> None:
        super().__init__(f"job {job_id} already exists")
        self.job_id = job_id


class InvalidTransition(JobServiceError):
    def __init__(self, job_id: str, current: str, target: str) -> None:
        super().__init__(f"job {job_id} cannot move from {current} to {target}")
        self.job_id = job_id
        self.current = current
        self.target = target


class StillProcessing(JobServiceError):
    """Not a failure: the job has no result yet and the caller should retry later."""

    def __init__(self, job_id: str, state: str) -> None:
        super().__init__(f"job {job_id} is still {state}")
        self.job_id = job_id
        self.state = state


class JobFailed(JobServiceError):
    def __init__(self, job_id: str, error: str) -> None:
        super().__init__(f"job {job_id} failed: {error}")
        self.job_id = job_id
        self.error = error


class QueueFull(JobServiceError):
    def __init__(self, limit: int) -> None:
        super().__init__(f"job queue is full ({limit} jobs waiting)")
        self.limit = limit


def describe_exception(exc: BaseException) -> str:
    """Human-readable text for an exception, falling back to its class name."""
    try:
        text = str(exc)
    except Exception:
        text = ""
    return text or type(exc).__name__
