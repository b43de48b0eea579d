import os
from dataclasses import dataclass

from . import __version__


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    workers: int = 4
    job_timeout_sec: int = 1800
    max_queued_jobs: int = 1000
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8080
    reload: bool = True
    version: str = __version__


def load_settings() -> Settings:
    """Read service settings from the environment. Bad integers raise ValueError."""
    settings = Settings(
        workers=int(os.getenv("WORKERS", "4")),
        job_timeout_sec=int(os.getenv("JOB_TIMEOUT_SEC", "1800")),
        max_queued_jobs=int(os.getenv("MAX_QUEUED_JOBS", "1000")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8080")),
        # Enable reload in dev unless explicitly disabled
        reload=_env_bool("RELOAD", "true"),
        version=os.getenv("DOC_SERVICE_VERSION", __version__),
    )
    if settings.workers < 1:
        raise ValueError("WORKERS must be >= 1")
    if settings.job_timeout_sec < 0 or settings.max_queued_jobs < 0:
        raise ValueError("JOB_TIMEOUT_SEC and MAX_QUEUED_JOBS must not be negative")
    return settings
