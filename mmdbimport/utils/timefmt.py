# mmdbimport/utils/timefmt.py

from __future__ import annotations

import time
from typing import Optional

import pandas as pd

RFC3339 = "%Y-%m-%dT%H:%M:%SZ"


def format_epoch(epoch: int) -> str:
    """
    Render Unix seconds as an RFC 3339 UTC timestamp.

    >>> format_epoch(0)
    '1970-01-01T00:00:00Z'
    """
    return pd.Timestamp(int(epoch), unit="s", tz="UTC").strftime(RFC3339)


def epoch_age(epoch: int, now: Optional[float] = None) -> int:
    """Whole seconds elapsed since `epoch` (negative if it lies in the future)."""
    now = time.time() if now is None else now
    return int(now - int(epoch))
