"""
Package version and the HTTP User-Agent built from it.
"""

from __future__ import annotations

import platform
from typing import Optional

# Bump this when publishing
__version__ = "0.3.0"

PRODUCT = "cita-sdk-python"


def user_agent(extra: Optional[str] = None) -> str:
    """
    `cita-sdk-python/<version> python/<x.y.z>`, with `extra` appended when
    given (e.g. an application name).
    """
    ua = f"{PRODUCT}/{__version__} python/{platform.python_version()}"
    return f"{ua} {extra}" if extra else ua


__all__ = ["__version__", "PRODUCT", "user_agent"]
