"""Internal state holder for stop signals."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class State:
    """Internal state for single-fire stop signals."""

    fired: bool = False
    reason: Optional[str] = None


__all__ = ["State"]
