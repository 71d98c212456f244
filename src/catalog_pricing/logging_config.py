"""
Logging setup for the catalog pricing package.
"""
import logging
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure root logging once for scripts, the API and the UI.

    Args:
        level: Level name (e.g. "INFO"); defaults to the configured settings level
    """
    if level is None:
        from .config.settings import get_settings
        level = get_settings().log_level

    numeric_level = getattr(logging, str(level).upper(), logging.INFO)
    logging.basicConfig(level=numeric_level, format=LOG_FORMAT)
    logging.getLogger("catalog_pricing").setLevel(numeric_level)
