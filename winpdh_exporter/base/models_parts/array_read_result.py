"""Tagged result of one formatted-array read.

A wildcard counter expands to an unknown number of instances, so reads use a
growable-buffer probe: the provider either returns the items, or reports the
capacity it needs, or reports that no data (or another error) occurred.
Encoding those outcomes as a tagged value keeps the retry loop in the engine
a plain ``while`` over :attr:`ArrayReadResult.status`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple, Sequence, Tuple


class FormattedItem(NamedTuple):
    """One ``(instance, value)`` pair returned for a counter."""

    instance: str
    value: float


class ReadStatus(str, Enum):
    """Outcome tags for :class:`ArrayReadResult`."""

    OK = "ok"
    MORE_DATA = "more_data"
    NO_DATA = "no_data"
    ERROR = "error"


@dataclass(frozen=True)
class ArrayReadResult:
    """Result of ``read_formatted_array``.

    Attributes:
        status: Which outcome occurred.
        items: Instance/value pairs (``OK`` only).
        required: Capacity the provider asked for (``MORE_DATA`` only).
        code: Native status code behind ``NO_DATA``/``ERROR``.
    """

    status: ReadStatus
    items: Tuple[FormattedItem, ...] = ()
    required: int = 0
    code: int = 0

    @classmethod
    def ok(cls, items: Sequence[FormattedItem]) -> "ArrayReadResult":
        return cls(ReadStatus.OK, items=tuple(items))

    @classmethod
    def more_data(cls, required: int) -> "ArrayReadResult":
        return cls(ReadStatus.MORE_DATA, required=required)

    @classmethod
    def no_data(cls, code: int = 0) -> "ArrayReadResult":
        return cls(ReadStatus.NO_DATA, code=code)

    @classmethod
    def error(cls, code: int) -> "ArrayReadResult":
        return cls(ReadStatus.ERROR, code=code)


__all__ = ["FormattedItem", "ReadStatus", "ArrayReadResult"]
