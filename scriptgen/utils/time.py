from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional


def utc_timestamp(now: Optional[datetime] = None) -> str:
    moment = now if now is not None else datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).strftime("%Y%m%d-%H%M%S")
