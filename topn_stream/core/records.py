"""Record types shared by the selectors, the histogram and the reporter."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List

from .errors import ConfigurationError

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


@dataclass(frozen=True)
class Record:
    key: str
    value: int

    def __post_init__(self) -> None:
        if not isinstance(self.key, str) or not self.key:
            raise ValueError(f"record key must be a non-empty string, got {self.key!r}")


@dataclass(frozen=True)
class SampleSlot:
    """A reservoir entry: the record plus its zero-based position in the stream."""

    record: Record
    arrival_index: int


@dataclass
class Bucket:
    """One histogram segment; indices up to and including ``upper_bound`` land here."""

    upper_bound: int
    count: int = 0


class SortOrder(str, Enum):
    DESC = "desc"
    ASC = "asc"

    @classmethod
    def parse(cls, value: "str | SortOrder") -> "SortOrder":
        if isinstance(value, SortOrder):
            return value
        aliases = {
            "desc": cls.DESC,
            "descending": cls.DESC,
            "0": cls.DESC,
            "asc": cls.ASC,
            "ascending": cls.ASC,
            "1": cls.ASC,
        }
        try:
            return aliases[str(value).strip().lower()]
        except KeyError:
            raise ConfigurationError(f"unknown sort order: {value!r}") from None

    @property
    def descending(self) -> bool:
        return self is SortOrder.DESC


def _value(r: Record) -> int:
    return r.value


def sort_records(records: List[Record], order: SortOrder) -> None:
    """Order ``records`` in place by value. Ties keep no guaranteed order."""
    records.sort(key=_value, reverse=order.descending)


__all__ = [
    "INT64_MIN",
    "INT64_MAX",
    "Record",
    "SampleSlot",
    "Bucket",
    "SortOrder",
    "sort_records",
]
