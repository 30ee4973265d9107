# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Common utilities used across the application.
# =============================================================================

import math
import os
import time
from typing import Any
from urllib.parse import unquote, urlparse


# =============================================================================
# Metric Values
# =============================================================================

def parse_int_value(value: Any) -> int:
    """
    Coerce a stored metric value to an integer for aggregation.

    Integers are kept, floats and numeric strings are truncated toward zero.
    Anything else (None, booleans, non-numeric text, NaN) counts as 0.

    Example:
        parse_int_value(5)       # 5
        parse_int_value("12")    # 12
        parse_int_value("3.9")   # 3
        parse_int_value("n/a")   # 0
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return 0 if math.isnan(value) or math.isinf(value) else int(value)
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            return 0
        return 0 if math.isnan(number) or math.isinf(number) else int(number)
    return 0


# =============================================================================
# Storage Keys
# =============================================================================

def build_storage_key(filename: str | None, now_ms: int | None = None) -> str:
    """
    Build a collision-resistant storage key: {currentTimeMillis}-{filename}.

    Directory components of the client-supplied filename are dropped.
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    base = os.path.basename((filename or "").replace("\\", "/")) or "image"
    return f"{now_ms}-{base}"


def storage_key_from_url(url: str | None) -> str | None:
    """
    Recover the storage key from a public URL (its trailing path segment).

    Example:
        storage_key_from_url(".../public/initiative-images/1700000000000-tree.png?")
        # "1700000000000-tree.png"
    """
    if not url:
        return None
    path = urlparse(url).path
    key = unquote(path.rstrip("/").rsplit("/", 1)[-1])
    return key or None
