import logging
import sys


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once for the service process."""
    # Remove any existing handlers to avoid duplicates
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root_logger.setLevel(level)
    root_logger.addHandler(handler)

    # docling and its model stack are chatty at INFO
    for name in ("docling", "urllib3", "httpx", "PIL"):
        logging.getLogger(name).setLevel(logging.WARNING)
