"""Windows PDH counter provider (ctypes binding to ``pdh.dll``)."""

from .client import PdhCounterProvider

__all__ = ["PdhCounterProvider"]
