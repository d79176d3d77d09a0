"""
Runtime configuration for daydream-framesaver.

Values are read from the environment on every call so a host can change them
between builds:
- FRAMESAVER_STEP_PRIORITY: build-step priority of the frame saver (default 20)
- FRAMESAVER_ID_BASE: first id of the reserved sink id range (default 50000)
"""

import logging
import os

logger = logging.getLogger(__name__)

# Default build-step priority; runs after the generation steps (< 20) create
# the decode nodes and before finalization
DEFAULT_STEP_PRIORITY = 20

# Default base of the reserved sink id range
DEFAULT_ID_BASE = 50000

STEP_PRIORITY_ENV_VAR = "FRAMESAVER_STEP_PRIORITY"
ID_BASE_ENV_VAR = "FRAMESAVER_ID_BASE"


def _get_int_env(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning(
            f"Invalid integer for {name}: {value!r}, using default {default}"
        )
        return default


def get_step_priority() -> int:
    """
    Get the build-step priority the frame saver registers itself with.

    Priority order:
    1. FRAMESAVER_STEP_PRIORITY environment variable
    2. Default: 20

    Returns:
        int: Build-step priority
    """
    return _get_int_env(STEP_PRIORITY_ENV_VAR, DEFAULT_STEP_PRIORITY)


def get_id_base() -> int:
    """
    Get the base of the reserved numeric id range used for sink nodes.

    Priority order:
    1. FRAMESAVER_ID_BASE environment variable
    2. Default: 50000

    Returns:
        int: First id of the reserved range (negative values fall back to default)
    """
    id_base = _get_int_env(ID_BASE_ENV_VAR, DEFAULT_ID_BASE)
    if id_base < 0:
        logger.warning(
            f"{ID_BASE_ENV_VAR} must be non-negative, using default {DEFAULT_ID_BASE}"
        )
        return DEFAULT_ID_BASE
    return id_base
