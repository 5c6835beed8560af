from __future__ import annotations

import time

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)
