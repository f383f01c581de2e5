"""Counting how often each call appears in the stacks of a report."""

from __future__ import annotations

from collections import defaultdict
from typing import Protocol

from umdhkit.model import Report


class Serializer(Protocol):
    """Converts one data object to and from its text form."""

    def to_string(self) -> str:
        """Return the text form of the object."""

    def from_string(self, text: str) -> None:
        """Fill the object from its text form."""


class SerializerFactory(Protocol):
    """Gives the serializer bound to a data object."""

    def get(self, data_object: object) -> Serializer:
        """Return a serializer for ``data_object``."""


CallsByCount = list[tuple[int, str]]


class HotPathCalculator:
    """Sums the allocation growth of every call found in a report's stacks."""

    def __init__(self, serializer_factory: SerializerFactory) -> None:
        if serializer_factory is None:
            raise ValueError("a serializer factory is required")
        self._serializer_factory = serializer_factory

    def calculate_calls_count(self, report: Report) -> CallsByCount:
        """Return (count, call) pairs ordered by count, then by call text.

        Each frame adds its entry's growth in allocation count to the call it
        serializes to; a call seen twice in one stack is counted twice.
        """
        totals: defaultdict[str, int] = defaultdict(int)
        for entry in report.log_entries:
            for frame in entry.stack_trace:
                call = self._serializer_factory.get(frame).to_string()
                totals[call] += entry.count_diff
        return sorted((count, call) for call, count in totals.items())