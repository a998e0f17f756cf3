import logging
import sys

LOG_FORMAT = "%(levelname)s - %(asctime)s - %(name)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger once for the whole process."""
    logging.basicConfig(
        level=logging.getLevelName(level.upper()),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,  # Override any existing configuration
    )

    # Quiet the libraries that log every request or statement
    for noisy in ("httpx", "httpcore", "passlib", "sqlalchemy.engine", "aiosqlite"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get a module logger.

    Records propagate to the root handler installed by configure_logging,
    so no handler is attached here.

    Args:
        name: The name of the logger (e.g., __name__)
    """
    return logging.getLogger(name)
