"""Stop-signal primitives (public API facade).

Notes
-----
- ``StopSignal`` is the single-fire broadcast a counter set's sampling loop
  waits on between ticks.
- Raising it twice is guarded inside the signal: only the first ``fire``
  takes effect.
"""

from .cancellation_parts.stop_signal import StopSignal

__all__ = ["StopSignal"]
