import pytest

from umdhkit.filters import (
    FilterFactory,
    FilterType,
    LeakedMoreThanBytesFilter,
    LeakedMoreThanCountFilter,
    ReportFilter,
    WithoutPatternFilter,
    WithoutSystemModulesFilter,
    WithPatternFilter,
    WithSourcesFilter,
    WithSymbolsFilter,
    read_system_module_list,
    split_by_lines,
)
from umdhkit.model import LogEntry, Report, StackTraceFrame


def _entry(trace_id, frames=(), new_count=0, old_count=0, new_bytes=0, old_bytes=0):
    return LogEntry(
        trace_id=trace_id,
        new_count=new_count,
        old_count=old_count,
        new_bytes=new_bytes,
        old_bytes=old_bytes,
        stack_trace=list(frames),
    )


def _ids(report):
    return [entry.trace_id for entry in report.log_entries]


def test_split_by_lines_basic():
    assert split_by_lines("a\nb\nc") == ["a", "b", "c"]
    assert split_by_lines("a\nb\n") == ["a", "b"]


def test_split_by_lines_empty():
    assert split_by_lines("") == []
    assert split_by_lines("\n") == [""]


def test_read_system_module_list(tmp_path):
    (tmp_path / "systemModulesToHide.txt").write_text("ntdll\nkernel32\n", encoding="utf-8")
    assert read_system_module_list(tmp_path) == ["ntdll", "kernel32"]


def test_read_system_module_list_missing(tmp_path):
    assert read_system_module_list(tmp_path) == []


def test_default_filter_keeps_everything():
    report = Report(log_entries=[_entry("a"), _entry("b")])
    assert _ids(ReportFilter().apply(report)) == ["a", "b"]


def test_all_predicates_must_pass():
    flt = ReportFilter()
    flt.log_entry_filters = [lambda e: e.trace_id != "a", lambda e: e.trace_id != "c"]
    report = Report(log_entries=[_entry("a"), _entry("b"), _entry("c")])
    assert _ids(flt.apply(report)) == ["b"]


def test_leaked_bytes_filter():
    flt = LeakedMoreThanBytesFilter()
    flt.set_bytes(100)
    report = Report(
        log_entries=[
            _entry("grew", new_bytes=300, old_bytes=100),
            _entry("small", new_bytes=150, old_bytes=100),
            _entry("shrank", new_bytes=0, old_bytes=500),
            _entry("exact", new_bytes=100, old_bytes=0),
        ]
    )
    assert _ids(flt.apply(report)) == ["grew", "exact"]


def test_leaked_count_filter():
    flt = LeakedMoreThanCountFilter()
    flt.set_count(2)
    report = Report(
        log_entries=[
            _entry("a", new_count=5, old_count=1),
            _entry("b", new_count=2, old_count=1),
            _entry("c", new_count=0, old_count=3),
        ]
    )
    assert _ids(flt.apply(report)) == ["a"]


def test_leaked_filter_without_limit_keeps_all():
    report = Report(log_entries=[_entry("a", new_bytes=0, old_bytes=10)])
    assert _ids(LeakedMoreThanBytesFilter().apply(report)) == ["a"]


def test_with_pattern_requires_every_pattern():
    flt = WithPatternFilter()
    flt.set_pattern(["alloc", "app"])
    report = Report(
        log_entries=[
            _entry("both", [StackTraceFrame(module="app.exe", function="do_alloc")]),
            _entry("split", [StackTraceFrame(function="malloc"), StackTraceFrame(source="c:/app/x.cpp")]),
            _entry("one", [StackTraceFrame(function="malloc")]),
        ]
    )
    assert _ids(flt.apply(report)) == ["both", "split"]


def test_without_pattern_drops_matches():
    flt = WithoutPatternFilter()
    flt.set_bad_pattern(["boost"])
    report = Report(
        log_entries=[
            _entry("bad", [StackTraceFrame(source="boost/x.hpp")]),
            _entry("good", [StackTraceFrame(function="main")]),
            _entry("empty"),
        ]
    )
    assert _ids(flt.apply(report)) == ["good", "empty"]


def test_with_sources_filter():
    report = Report(
        log_entries=[
            _entry("src", [StackTraceFrame(), StackTraceFrame(source="a.cpp")]),
            _entry("nosrc", [StackTraceFrame(function="f")]),
        ]
    )
    assert _ids(WithSourcesFilter().apply(report)) == ["src"]


def test_with_symbols_filter():
    report = Report(
        log_entries=[
            _entry("unknown", [StackTraceFrame(function="???"), StackTraceFrame()]),
            _entry("known", [StackTraceFrame(function="???"), StackTraceFrame(function="main")]),
        ]
    )
    assert _ids(WithSymbolsFilter().apply(report)) == ["known"]


def test_without_system_modules_strips_frames():
    flt = WithoutSystemModulesFilter(["ntdll"])
    report = Report(
        log_entries=[
            _entry("mixed", [StackTraceFrame(module="ntdll"), StackTraceFrame(module="app")]),
            _entry("system", [StackTraceFrame(module="ntdll")]),
        ]
    )
    result = flt.apply(report)
    assert _ids(result) == ["mixed"]
    assert [frame.module for frame in result.log_entries[0].stack_trace] == ["app"]


@pytest.mark.parametrize(
    "type_id, cls",
    [
        (FilterType.WITH_SYMBOLS, WithSymbolsFilter),
        (FilterType.WITH_SOURCES, WithSourcesFilter),
        (FilterType.WITH_PATTERN, WithPatternFilter),
        (FilterType.WITHOUT_PATTERN, WithoutPatternFilter),
        (FilterType.LEAKED_BYTES, LeakedMoreThanBytesFilter),
        (FilterType.LEAKED_N_TIMES, LeakedMoreThanCountFilter),
        (FilterType.WITHOUT_SYSTEM_MODULES, WithoutSystemModulesFilter),
    ],
)
def test_factory_builds_by_type(type_id, cls):
    factory = FilterFactory(system_modules=[])
    assert type(factory.get(type_id)) is cls
    assert type(factory.get(type_id.value)) is cls


def test_factory_unknown_gives_default():
    factory = FilterFactory(system_modules=[])
    assert type(factory.get("no-such-filter")) is ReportFilter
    assert type(factory.get(FilterType.HIDE_SYSTEM)) is ReportFilter
    assert factory.get(FilterType.DEFAULT).log_entry_filters == []


def test_factory_returns_fresh_filters():
    factory = FilterFactory(system_modules=[])
    first = factory.get(FilterType.LEAKED_BYTES)
    first.set_bytes(10)
    second = factory.get(FilterType.LEAKED_BYTES)
    assert second.log_entry_filters == []
    assert len(first.log_entry_filters) == 1


def test_factory_passes_system_modules():
    factory = FilterFactory(system_modules=["kernel"])
    flt = factory.get(FilterType.WITHOUT_SYSTEM_MODULES)
    report = Report(log_entries=[_entry("k", [StackTraceFrame(module="kernel32")])])
    assert _ids(flt.apply(report)) == []


def test_filter_type_value_pinned():
    assert FilterType("22951827-4071-4b6f-94d8-b3572e4b8695") is FilterType.LEAKED_BYTES