# ==============================================================================
# Logging Setup
# ==============================================================================
"""Process-wide logging configuration shared by the CLI and the HTTP server."""

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger once; later calls only adjust the level."""
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    logging.basicConfig(level=numeric_level, format=LOG_FORMAT)
    logging.getLogger().setLevel(numeric_level)

    # Keep request logs readable
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
