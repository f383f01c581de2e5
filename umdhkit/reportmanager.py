"""Loading a report, filtering and sorting it, and presenting the result."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Protocol

from umdhkit.filters import ReportFilter
from umdhkit.hotpath import CallsByCount, HotPathCalculator, SerializerFactory
from umdhkit.model import Report

ProgressNotifier = Callable[[int], None]
ReportManagerObserver = Callable[[], None]
ReportLoader = Callable[[str], Report]


class _Sorter(Protocol):
    def sort(self, report: Report) -> Report: ...


@dataclass
class StackFrameDisplayData:
    """Title and text of one log entry as shown in a list."""

    title: str
    body: str


def _no_progress(_: int) -> None:
    return None


class ReportManager:
    """Holds one source report and the filter and sorter applied to it.

    The source report is read once per path; a working copy is made again
    whenever the path, the filter or the sorter changes.
    """

    def __init__(
        self,
        report_loader: Optional[ReportLoader],
        serializer_factory: SerializerFactory,
        hot_path_calculator: Optional[HotPathCalculator] = None,
    ) -> None:
        if serializer_factory is None:
            raise ValueError("a serializer factory is required")
        self._serializer_factory = serializer_factory
        self._load = report_loader if report_loader is not None else self._read_report_file
        self._hot_path = (
            hot_path_calculator
            if hot_path_calculator is not None
            else HotPathCalculator(serializer_factory)
        )
        self._path = ""
        self._source: Optional[Report] = None
        self._report: Optional[Report] = None
        self._filter: Optional[ReportFilter] = None
        self._sorter: Optional[_Sorter] = None
        self._observer: Optional[ReportManagerObserver] = None
        self._path_changed = False
        self._filter_changed = False
        self._sorter_changed = False
        self._allocations_count = 0
        self._allocated_bytes = 0
        self._unique_stacks_count = 0

    @property
    def source_report(self) -> str:
        """Path of the report being analysed."""
        return self._path

    @property
    def unique_stacks_count(self) -> int:
        """Number of log entries left after the last change was processed."""
        return self._unique_stacks_count

    @property
    def allocations_count(self) -> int:
        """Sum of the positive growths in allocation count."""
        return self._allocations_count

    @property
    def allocated_bytes(self) -> int:
        """Sum of the positive growths in allocated bytes."""
        return self._allocated_bytes

    def set_source_report(self, path: str) -> None:
        """Choose the report file; the observer is told if it changed."""
        path = str(path)
        if path == self._path:
            return
        self._path = path
        self._path_changed = True
        self._notify()

    def set_filter(self, report_filter: Optional[ReportFilter]) -> None:
        """Replace the filter and tell the observer."""
        self._filter_changed = True
        self._filter = report_filter
        self._notify()

    def set_sorter(self, sorter: Optional[_Sorter]) -> None:
        """Replace the sorter and tell the observer."""
        self._sorter_changed = True
        self._sorter = sorter
        self._notify()

    def set_update_notifier(self, observer: Optional[ReportManagerObserver]) -> None:
        """Register the callable run after the path, filter or sorter changes."""
        self._observer = observer

    def processed_report(self, progress: Optional[ProgressNotifier] = None) -> str:
        """Return the processed report as text."""
        progress = progress or _no_progress
        report = self._process(progress)
        text = self._serializer_factory.get(report).to_string()
        progress(100)
        return text

    def processed_report_list(
        self, progress: Optional[ProgressNotifier] = None
    ) -> list[StackFrameDisplayData]:
        """Return one title and text per log entry of the processed report."""
        progress = progress or _no_progress
        report = self._process(progress)
        progress(95)
        result = [
            StackFrameDisplayData(
                title=(
                    f"Allocated bytes: {entry.bytes_diff}; "
                    f"Allocation count: {entry.count_diff}"
                ),
                body=self._serializer_factory.get(entry).to_string(),
            )
            for entry in report.log_entries
        ]
        progress(100)
        return result

    def calculate_calls_count(
        self, progress: Optional[ProgressNotifier] = None
    ) -> CallsByCount:
        """Return (count, call) pairs of the processed report.

        Nothing is counted until the report has been processed once.
        """
        if self._report is None:
            return []
        progress = progress or _no_progress
        report = self._process(progress)
        result = self._hot_path.calculate_calls_count(report)
        progress(100)
        return result

    def _notify(self) -> None:
        if self._observer is not None:
            self._observer()

    def _read_report_file(self, path: str) -> Report:
        report = Report()
        text = Path(path).read_text(encoding="utf-8")
        self._serializer_factory.get(report).from_string(text)
        return report

    def _process(self, progress: ProgressNotifier) -> Report:
        progress(1)
        need_post_processing = (
            self._path_changed or self._filter_changed or self._sorter_changed
        )
        self._reload_if_needed()
        self._path_changed = self._filter_changed = self._sorter_changed = False
        progress(25)
        if self._report is None:
            raise RuntimeError("no source report has been set")
        if self._filter is not None:
            self._report = self._filter.apply(self._report)
        progress(50)
        if self._sorter is not None:
            self._report = self._sorter.sort(self._report)
        progress(75)
        if need_post_processing:
            self._post_process(self._report)
        progress(90)
        return self._report

    def _reload_if_needed(self) -> None:
        if not self._path:
            return
        if self._path_changed:
            self._source = self._load(self._path)
        if self._path_changed or self._filter_changed or self._sorter_changed:
            self._report = self._source.clone()

    def _post_process(self, report: Report) -> None:
        report.loaded_modules = []
        report.total_increase = None
        self._unique_stacks_count = len(report.log_entries)
        self._allocated_bytes = sum(
            entry.bytes_diff for entry in report.log_entries if entry.bytes_diff > 0
        )
        self._allocations_count = sum(
            entry.count_diff for entry in report.log_entries if entry.count_diff > 0
        )