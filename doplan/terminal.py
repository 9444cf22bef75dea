"""Terminal capability checks."""

from __future__ import annotations

import os
import stat
import sys

ENV_DISABLE_ANIMATION = "DOPLAN_NO_ANIMATION"
ENV_FORCE_ANIMATION = "DOPLAN_FORCE_ANIMATION"

_TRUTHY = ("1", "true")


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").lower() in _TRUTHY


def animations_enabled() -> bool:
    """Return True when CLI animations should run.

    The force variable wins over the disable variable; otherwise animations
    run only when standard output is a character device (a terminal).
    """
    if _env_flag(ENV_FORCE_ANIMATION):
        return True
    if _env_flag(ENV_DISABLE_ANIMATION):
        return False
    try:
        mode = os.fstat(sys.stdout.fileno()).st_mode
    except (OSError, ValueError, AttributeError):
        return False
    return stat.S_ISCHR(mode)