"""Report filters: predicates over log entries and a factory to build them."""

from __future__ import annotations

import sys
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, Optional, Union

from umdhkit.model import LogEntry, Report

LogEntryFilter = Callable[[LogEntry], bool]

SYSTEM_MODULES_FILE = "systemModulesToHide.txt"
UNKNOWN_FUNCTION = "???"


class FilterType(str, Enum):
    """Type identifiers of the report filters."""

    DEFAULT = ""
    WITH_SYMBOLS = "d8b01d39-33cb-40eb-b778-290cfd6eda30"
    WITH_SOURCES = "feccc0a0-313f-4c13-8910-36d8ed2c3cce"
    WITH_PATTERN = "02850d2b-200e-439c-bfcb-5be2f98c0a04"
    WITHOUT_PATTERN = "84abcb2a-9c74-451f-a037-75d5a9e79fe5"
    HIDE_SYSTEM = "08796ccf-fc93-4fe6-bf7c-80245a7b66fb"
    LEAKED_BYTES = "22951827-4071-4b6f-94d8-b3572e4b8695"
    LEAKED_N_TIMES = "2ab70445-3981-4c36-abb6-b58bea83374f"
    WITHOUT_SYSTEM_MODULES = "79b80a21-077f-4dfd-a318-0fe35efc359a"


def split_by_lines(raw: str) -> list[str]:
    """Split text into lines; a trailing newline does not start another line."""
    if not raw:
        return []
    lines = raw.split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines


def read_system_module_list(directory: Union[str, Path]) -> list[str]:
    """Read the names of system modules to hide from the list in ``directory``.

    A missing or unreadable list gives no modules.
    """
    path = Path(directory) / SYSTEM_MODULES_FILE
    try:
        content = path.read_text(encoding="utf-8")
    except OSError:
        return []
    return split_by_lines(content)


def _default_system_module_list() -> list[str]:
    program = sys.argv[0] if sys.argv and sys.argv[0] else ""
    if not program:
        return []
    return read_system_module_list(Path(program).resolve().parent)


class ReportFilter:
    """Keeps the log entries that pass every one of its predicates."""

    def __init__(self) -> None:
        self.log_entry_filters: list[LogEntryFilter] = []

    def apply(self, report: Report) -> Report:
        """Drop from ``report`` the entries some predicate rejects; return it."""
        report.log_entries = [
            entry
            for entry in report.log_entries
            if all(predicate(entry) for predicate in self.log_entry_filters)
        ]
        return report


class LeakedMoreThanBytesFilter(ReportFilter):
    """Keeps entries whose byte count grew by at least a limit."""

    def set_bytes(self, limit: int) -> None:
        """Keep only entries that grew by ``limit`` bytes or more."""

        def predicate(entry: LogEntry) -> bool:
            return entry.new_bytes >= entry.old_bytes and entry.bytes_diff >= limit

        self.log_entry_filters = [predicate]


class LeakedMoreThanCountFilter(ReportFilter):
    """Keeps entries whose allocation count grew by at least a limit."""

    def set_count(self, limit: int) -> None:
        """Keep only entries that grew by ``limit`` allocations or more."""

        def predicate(entry: LogEntry) -> bool:
            return entry.new_count >= entry.old_count and entry.count_diff >= limit

        self.log_entry_filters = [predicate]


def _frame_has(frame, pattern: str) -> bool:
    return pattern in frame.function or pattern in frame.module or pattern in frame.source


class WithPatternFilter(ReportFilter):
    """Keeps entries whose stack mentions every one of the patterns."""

    def set_pattern(self, patterns: Iterable[str]) -> None:
        """Require each pattern in a function, module or source of some frame."""
        wanted = list(patterns)

        def predicate(entry: LogEntry) -> bool:
            return all(
                any(_frame_has(frame, pattern) for frame in entry.stack_trace)
                for pattern in wanted
            )

        self.log_entry_filters = [predicate]


class WithoutPatternFilter(ReportFilter):
    """Drops entries whose stack mentions any of the patterns."""

    def set_bad_pattern(self, patterns: Iterable[str]) -> None:
        """Reject entries with a pattern in a function, module or source."""
        unwanted = list(patterns)

        def predicate(entry: LogEntry) -> bool:
            return not any(
                _frame_has(frame, pattern)
                for frame in entry.stack_trace
                for pattern in unwanted
            )

        self.log_entry_filters = [predicate]


class WithSourcesFilter(ReportFilter):
    """Keeps entries with at least one frame that names its source file."""

    def __init__(self) -> None:
        super().__init__()
        self.log_entry_filters = [
            lambda entry: any(frame.source for frame in entry.stack_trace)
        ]


class WithSymbolsFilter(ReportFilter):
    """Keeps entries with at least one frame whose function is resolved."""

    def __init__(self) -> None:
        super().__init__()
        self.log_entry_filters = [
            lambda entry: any(
                frame.function and frame.function != UNKNOWN_FUNCTION
                for frame in entry.stack_trace
            )
        ]


class WithoutSystemModulesFilter(ReportFilter):
    """Removes frames of system modules and drops entries left without frames."""

    def __init__(self, modules: Optional[Iterable[str]] = None) -> None:
        super().__init__()
        ignored = list(_default_system_module_list() if modules is None else modules)

        def predicate(entry: LogEntry) -> bool:
            kept = [
                frame
                for frame in entry.stack_trace
                if not any(name in frame.module for name in ignored)
            ]
            if not kept:
                return False
            entry.stack_trace = kept
            return True

        self.modules = ignored
        self.log_entry_filters = [predicate]


class FilterFactory:
    """Builds filters by type identifier; unknown identifiers give the default."""

    def __init__(self, system_modules: Optional[Iterable[str]] = None) -> None:
        self._system_modules = None if system_modules is None else list(system_modules)
        self._makers: dict[str, Callable[[], ReportFilter]] = {
            FilterType.DEFAULT.value: ReportFilter,
            FilterType.WITHOUT_PATTERN.value: WithoutPatternFilter,
            FilterType.WITH_SYMBOLS.value: WithSymbolsFilter,
            FilterType.WITH_SOURCES.value: WithSourcesFilter,
            FilterType.WITH_PATTERN.value: WithPatternFilter,
            FilterType.LEAKED_BYTES.value: LeakedMoreThanBytesFilter,
            FilterType.LEAKED_N_TIMES.value: LeakedMoreThanCountFilter,
            FilterType.WITHOUT_SYSTEM_MODULES.value: lambda: WithoutSystemModulesFilter(
                self._system_modules
            ),
        }

    def get(self, type_id: Union[str, FilterType]) -> ReportFilter:
        """Return a new filter of the given type."""
        key = type_id.value if isinstance(type_id, FilterType) else type_id
        maker = self._makers.get(key, self._makers[FilterType.DEFAULT.value])
        return maker()