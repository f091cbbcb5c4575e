"""
Settings parsing with migration from the legacy format.

Version 2 (current):
    {"version": 2, "level": 7, "stack_ceiling": 6}

Version 1 (legacy):
    {"level": 7, "threshold": "6"}
    {"difficulty": "hard", "threshold": "8"}

All defaulting and clamping happens here and nowhere else.
"""

import logging
from typing import Any, Mapping, Optional

from .models import Settings
from .tempo import clamp_level


logger = logging.getLogger(__name__)

SETTINGS_VERSION = 2
DEFAULT_LEVEL = 1
DEFAULT_CEILING = 6
MIN_CEILING = 5
MAX_CEILING = 10

# Legacy difficulty names and the level that plays like them
LEGACY_DIFFICULTY_LEVELS = {
    "easy": 1,     # 1 tile / 10s
    "medium": 4,   # 1 tile / 7s
    "hard": 12,    # 2 tiles / 5s
    "insane": 19,  # 3 tiles / 4s
}


def _to_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def _parse_ceiling(value: Any) -> int:
    ceiling = _to_int(value)
    if ceiling is None or not MIN_CEILING <= ceiling <= MAX_CEILING:
        return DEFAULT_CEILING
    return ceiling


def _parse_level(raw: Mapping) -> int:
    level = _to_int(raw.get("level"))
    if level is None:
        difficulty = str(raw.get("difficulty") or "").strip().lower()
        level = LEGACY_DIFFICULTY_LEVELS.get(difficulty, DEFAULT_LEVEL)
        if difficulty:
            logger.info("Migrated legacy difficulty '%s' to level %d", difficulty, level)
    return clamp_level(level)


def parse_settings(raw: Optional[Mapping]) -> Settings:
    """
    Turn a stored settings mapping into typed, clamped Settings.

    Args:
        raw: Mapping in the current or legacy format (or None)

    Returns:
        Settings in the current format
    """
    if not isinstance(raw, Mapping):
        return Settings(level=DEFAULT_LEVEL, stack_ceiling=DEFAULT_CEILING)

    version = _to_int(raw.get("version")) or 1
    if version >= SETTINGS_VERSION:
        ceiling = _parse_ceiling(raw.get("stack_ceiling"))
    else:
        ceiling = _parse_ceiling(raw.get("threshold", raw.get("stack_ceiling")))

    return Settings(level=_parse_level(raw), stack_ceiling=ceiling)
