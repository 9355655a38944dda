"""Stop signal implementation parts."""

from .state import State
from .stop_signal import StopSignal

__all__ = ["State", "StopSignal"]
