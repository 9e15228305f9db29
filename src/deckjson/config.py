"""Environment-driven defaults.

All env-driven settings live here. CLI flags override them per run.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

from deckjson.core.extract.options import ExtractionOptions

logger = logging.getLogger(__name__)


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_float(name: str, default: Optional[float], lo: float = 0.0, hi: float = 86_400.0) -> Optional[float]:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return max(lo, min(hi, float(raw)))
    except (TypeError, ValueError):
        return default


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
LOG_LEVEL: str = os.environ.get("DECKJSON_LOG_LEVEL", "INFO").strip().upper() or "INFO"

# ---------------------------------------------------------------------------
# Extraction toggles
# ---------------------------------------------------------------------------
INCLUDE_ASSETS: bool = _env_bool("DECKJSON_INCLUDE_ASSETS", default=True)
INCLUDE_METADATA: bool = _env_bool("DECKJSON_INCLUDE_METADATA")
INCLUDE_ANIMATIONS: bool = _env_bool("DECKJSON_INCLUDE_ANIMATIONS")
INCLUDE_COMMENTS: bool = _env_bool("DECKJSON_INCLUDE_COMMENTS")
EXTRACT_IMAGES: bool = _env_bool("DECKJSON_EXTRACT_IMAGES")

# ---------------------------------------------------------------------------
# Limits
# ---------------------------------------------------------------------------
# 0 or unset means no deadline
TIMEOUT_SECONDS: Optional[float] = _env_float("DECKJSON_TIMEOUT_SECONDS", default=None)


def default_options() -> ExtractionOptions:
    return ExtractionOptions(
        include_assets=INCLUDE_ASSETS,
        include_metadata=INCLUDE_METADATA,
        include_animations=INCLUDE_ANIMATIONS,
        include_comments=INCLUDE_COMMENTS,
        extract_images=EXTRACT_IMAGES,
    )


def log_level() -> int:
    level = logging.getLevelName(LOG_LEVEL)
    return level if isinstance(level, int) else logging.INFO


def log_startup_config() -> None:
    """Log one line summarising active configuration."""
    logger.info(
        "deckjson config: LOG_LEVEL=%s INCLUDE_ASSETS=%s INCLUDE_METADATA=%s "
        "INCLUDE_ANIMATIONS=%s INCLUDE_COMMENTS=%s EXTRACT_IMAGES=%s TIMEOUT_SECONDS=%s",
        LOG_LEVEL,
        INCLUDE_ASSETS,
        INCLUDE_METADATA,
        INCLUDE_ANIMATIONS,
        INCLUDE_COMMENTS,
        EXTRACT_IMAGES,
        TIMEOUT_SECONDS,
    )
