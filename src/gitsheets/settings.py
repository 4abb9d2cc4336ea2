"""Application-wide settings and environment loading."""

import logging
import os
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

from .config import SheetsConfig

logger = logging.getLogger(__name__)

load_dotenv()
logger.debug("Environment variables loaded from .env if present")

_ENV_FIELDS = {
    "GITSHEETS_ROOT": "root",
    "GITSHEETS_SNAPSHOTS_DIR": "snapshots_dir",
    "GITSHEETS_DIFFS_DIR": "diffs_dir",
    "GITSHEETS_CSV_DELIMITER": "csv_delimiter",
    "GITSHEETS_CSV_ENCODING": "csv_encoding",
    "GITSHEETS_DIFF_FORMAT": "diff_format",
    "GITSHEETS_MATCH_MODE": "match_mode",
}


@lru_cache(maxsize=1)
def load_config() -> SheetsConfig:
    """Build the workspace configuration from GITSHEETS_* environment variables."""
    values = {}
    for env_name, field_name in _ENV_FIELDS.items():
        value = os.getenv(env_name)
        if value:
            values[field_name] = Path(value) if field_name == "root" else value

    if values:
        logger.debug("Configuration overrides from environment", extra={"fields": sorted(values)})
    return SheetsConfig(**values)
