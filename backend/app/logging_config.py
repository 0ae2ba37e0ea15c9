import logging
import sys
from typing import Optional, Union


def setup_logging(level: Optional[Union[int, str]] = None) -> None:
    """Configure the root logger for the API process and Celery workers."""
    if level is None:
        from app.config import get_settings
        level = get_settings().log_level
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))
    root = logging.getLogger()
    root.setLevel(level)
    if root.handlers:
        root.handlers.clear()
    root.addHandler(handler)

    # Reduce noise from third-party libs
    for name in ("uvicorn.access", "httpx", "httpcore", "openai", "chromadb"):
        logging.getLogger(name).setLevel(logging.WARNING)
