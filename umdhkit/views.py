"""Presentation helpers: filter composition from options and report summaries."""

from __future__ import annotations

from dataclasses import dataclass

from umdhkit.filters import (
    FilterFactory,
    FilterType,
    LeakedMoreThanBytesFilter,
    LeakedMoreThanCountFilter,
    ReportFilter,
    WithoutPatternFilter,
    WithPatternFilter,
)
from umdhkit.hotpath import CallsByCount
from umdhkit.reportmanager import ReportManager


@dataclass
class FilterOptions:
    """Which filters are switched on, and their parameters."""

    with_symbols: bool = True
    with_sources: bool = True
    hide_system: bool = True
    leaked_bytes: bool = True
    leaked_kbytes: int = 0
    leaked_times: bool = True
    leaked_times_count: int = 0
    with_pattern: bool = False
    with_pattern_text: str = ""
    without_pattern: bool = False
    without_pattern_text: str = ""


def parse_patterns(text: str) -> list[str]:
    """Split comma-separated patterns and strip the spaces around each."""
    return [part.strip() for part in text.split(",")]


def build_filter(filter_factory: FilterFactory, options: FilterOptions) -> ReportFilter:
    """Combine the predicates of every enabled filter into one default filter."""
    combined = filter_factory.get(FilterType.DEFAULT)
    predicates = list(combined.log_entry_filters)

    if options.with_symbols:
        predicates += filter_factory.get(FilterType.WITH_SYMBOLS).log_entry_filters
    if options.with_sources:
        predicates += filter_factory.get(FilterType.WITH_SOURCES).log_entry_filters
    if options.hide_system:
        predicates += filter_factory.get(FilterType.WITHOUT_SYSTEM_MODULES).log_entry_filters
    if options.leaked_bytes:
        bytes_filter = filter_factory.get(FilterType.LEAKED_BYTES)
        assert isinstance(bytes_filter, LeakedMoreThanBytesFilter)
        bytes_filter.set_bytes(options.leaked_kbytes * 1000)
        predicates += bytes_filter.log_entry_filters
    if options.leaked_times:
        count_filter = filter_factory.get(FilterType.LEAKED_N_TIMES)
        assert isinstance(count_filter, LeakedMoreThanCountFilter)
        count_filter.set_count(options.leaked_times_count)
        predicates += count_filter.log_entry_filters
    if options.with_pattern and options.with_pattern_text:
        pattern_filter = filter_factory.get(FilterType.WITH_PATTERN)
        assert isinstance(pattern_filter, WithPatternFilter)
        pattern_filter.set_pattern(parse_patterns(options.with_pattern_text))
        predicates += pattern_filter.log_entry_filters
    if options.without_pattern and options.without_pattern_text:
        bad_filter = filter_factory.get(FilterType.WITHOUT_PATTERN)
        assert isinstance(bad_filter, WithoutPatternFilter)
        bad_filter.set_bad_pattern(parse_patterns(options.without_pattern_text))
        predicates += bad_filter.log_entry_filters

    combined.log_entry_filters = predicates
    return combined


def calls_count_text(calls_count: CallsByCount) -> str:
    """Render calls by count, largest first, a blank line between counts."""
    lines: list[str] = []
    previous = 0
    first = True
    for count, call in reversed(calls_count):
        if previous != count:
            previous = count
            if first:
                first = False
            else:
                lines.append("\n")
        lines.append(f"Calls count: {count};\t{call}\n")
    return "".join(lines)


def summary_lines(manager: ReportManager) -> list[str]:
    """Return the three summary lines shown for a processed report."""
    return [
        f"Unique stacks count: {manager.unique_stacks_count}",
        f"Allocation events: {manager.allocations_count}",
        f"Bytes allocated: {manager.allocated_bytes}",
    ]