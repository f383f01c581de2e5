"""Report sorters and a factory to build them by type identifier."""

from __future__ import annotations

from enum import Enum
from typing import Callable, Union

from umdhkit.model import Report


class SorterType(str, Enum):
    """Type identifiers of the report sorters."""

    DEFAULT = ""
    BY_ALLOCATION_COUNT = "0a33e609-283e-4462-a086-2e678908c515"
    BY_ALLOCATED_BYTES = "3d3ab7bb-4f8f-4db3-a9ff-36e067fb37ef"


class DefaultSorter:
    """Leaves the order of the log entries as it is."""

    def sort(self, report: Report) -> Report:
        """Return ``report`` unchanged."""
        return report


class ByAllocatedBytesSorter:
    """Orders log entries by bytes allocated, largest growth first."""

    def sort(self, report: Report) -> Report:
        """Sort the entries of ``report`` in place and return it."""
        report.log_entries = sorted(
            report.log_entries, key=lambda entry: entry.bytes_diff, reverse=True
        )
        return report


class ByAllocationCountSorter:
    """Orders log entries by allocations made, largest growth first."""

    def sort(self, report: Report) -> Report:
        """Sort the entries of ``report`` in place and return it."""
        report.log_entries = sorted(
            report.log_entries, key=lambda entry: entry.count_diff, reverse=True
        )
        return report


ReportSorter = Union[DefaultSorter, ByAllocatedBytesSorter, ByAllocationCountSorter]


class SorterFactory:
    """Builds sorters by type identifier; unknown identifiers give the default."""

    _makers: dict[str, Callable[[], ReportSorter]] = {
        SorterType.DEFAULT.value: DefaultSorter,
        SorterType.BY_ALLOCATION_COUNT.value: ByAllocationCountSorter,
        SorterType.BY_ALLOCATED_BYTES.value: ByAllocatedBytesSorter,
    }

    def get(self, type_id: Union[str, SorterType]) -> ReportSorter:
        """Return a new sorter of the given type."""
        key = type_id.value if isinstance(type_id, SorterType) else type_id
        maker = self._makers.get(key, self._makers[SorterType.DEFAULT.value])
        return maker()