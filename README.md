# umdhkit

Tools for working with the Windows user-mode dump heap utility (`umdh.exe`):
take heap snapshots of a running program, compare two snapshots into a
report, and narrow a report down to the allocations that matter.

## Installation

```
pip install umdhkit
```

Taking snapshots needs `umdh.exe` (and, for stack tracing, `gflags.exe`) from
the Debugging Tools for Windows. The filtering, sorting and counting code is
plain Python and works on any platform.

## Command line

```
umdhkit --help
```

There are three subcommands. Each accepts these common options:

- `--umdh PATH` – path to `umdh.exe` (defaults to the Windows Kits 10 x64
  location);
- `--target NAME` – name of the target program;
- `--pid PID` – process id of the target; when given it is used instead of
  the program name;
- `--folder DIR` – folder in which snapshot and report files are named;
- `--symbol-path VALUE` – sets `_NT_SYMBOL_PATH` for the run; an empty value
  removes the variable.

```
umdhkit snapshot first --target app.exe
umdhkit snapshot second --target app.exe
umdhkit report OLD_SNAPSHOT NEW_SNAPSHOT --target app.exe
umdhkit gflags --target app.exe --enable
```

- `snapshot {first,second}` takes a heap snapshot. Unless `--output` is
  given, the file is named `first_snapshot_…` or `second_snapshot_…` from the
  target program name and the current time (`%d_%m_%Y_%H_%M_%S`), inside
  `--folder` when set. The path is printed.
- `report OLD NEW` compares two existing snapshots into a report named
  `report_…` the same way (or `--output`), and prints its path.
- `gflags --enable | --disable` runs `gflags.exe` (`--gflags PATH`) with
  `-i <target> +ust` or `-ust` to switch user-mode stack trace collection.

`snapshot` and `report` stop with an error when `umdh.exe` or the folder does
not exist; `report` also checks that both snapshots exist. The exit status is
1 when a program cannot be started.

## Library

- `umdhkit.model` holds the data: `Report`, `LogEntry`, `StackTraceFrame`,
  `LoadedModule`, `TotalIncrease`, `Settings` and the `ObjectType`
  identifiers. `Report`, `LogEntry` and `StackTraceFrame` have `clone()`;
  `LogEntry` has `bytes_diff` and `count_diff`. `Settings` calls the callable
  given to `set_update_notifier` whenever one of its fields is assigned.
- `umdhkit.filters` keeps or drops log entries; every filter is used through
  `apply(report)`. `FilterFactory().get(type_id)` returns a new filter for a
  `FilterType`, and the plain `ReportFilter` for an unknown identifier.
  - `LeakedMoreThanBytesFilter.set_bytes(limit)` and
    `LeakedMoreThanCountFilter.set_count(limit)` keep entries that grew by at
    least the limit;
  - `WithPatternFilter.set_pattern(patterns)` keeps entries in which every
    pattern appears in some frame's function, module or source;
  - `WithoutPatternFilter.set_bad_pattern(patterns)` drops entries in which
    any pattern appears;
  - `WithSymbolsFilter` keeps entries with a resolved function name (not empty
    and not `???`); `WithSourcesFilter` keeps entries with a source file;
  - `WithoutSystemModulesFilter(modules)` removes frames of the listed modules
    and drops entries left with no frames. Without a list it reads
    `systemModulesToHide.txt` next to the running program;
    `read_system_module_list(directory)` reads that file from any directory.
- `umdhkit.sorters`: `SorterFactory().get(type_id)` returns a
  `DefaultSorter`, `ByAllocatedBytesSorter` or `ByAllocationCountSorter`,
  each used through `sort(report)`; the last two put the largest growth first.
- `umdhkit.hotpath.HotPathCalculator(serializer_factory)` sums, for every call
  text a frame serializes to, the allocation-count growth of the entries it
  appears in, returning `(count, call)` pairs in ascending order.
- `umdhkit.reportmanager.ReportManager(report_loader, serializer_factory)`
  loads a report from the path given to `set_source_report`, applies the
  filter and sorter set with `set_filter` / `set_sorter`, and offers
  `processed_report`, `processed_report_list` (a list of
  `StackFrameDisplayData`) and `calculate_calls_count`. Each takes an optional
  progress callback receiving percentages up to 100. After processing,
  `unique_stacks_count`, `allocations_count` and `allocated_bytes` hold the
  summary figures.
- `umdhkit.umdh`: `Umdh(settings, executer)` builds the UMDH command lines for
  `create_snapshot(path)` and `create_report(report_path, old_snapshot,
  new_snapshot)`; `CommandExecuter.execute(path_to_app, args)` runs a program
  and returns its exit code.
- `umdhkit.views` combines user choices into one filter (`FilterOptions`,
  `parse_patterns`, `build_filter`) and formats results (`calls_count_text`,
  `summary_lines`).

Keeping entries that leaked at least 10 000 bytes and mention `MyModule`:

```python
from umdhkit.filters import LeakedMoreThanBytesFilter, WithPatternFilter

leaks = LeakedMoreThanBytesFilter()
leaks.set_bytes(10_000)

mine = WithPatternFilter()
mine.set_pattern(["MyModule"])

report = mine.apply(leaks.apply(report))
```

The same through options:

```python
from umdhkit.filters import FilterFactory
from umdhkit.views import FilterOptions, build_filter

options = FilterOptions(leaked_kbytes=10, with_pattern=True, with_pattern_text="MyModule")
report = build_filter(FilterFactory(system_modules=[]), options).apply(report)
```

## What the package does not do

- It does not parse or write the text of a UMDH report. `ReportManager` and
  `HotPathCalculator` need a serializer factory from the caller (an object
  whose `get(obj)` returns something with `to_string()` and `from_string()`),
  and `ReportManager` reads files only through it or through the
  `report_loader` it is given.
- The command line takes snapshots and creates reports but does not analyse
  them; there is no graphical interface.

## Running the tests

```
pip install -e ".[test]"
pytest
```