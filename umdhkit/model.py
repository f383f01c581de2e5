"""Data objects of a UMDH report: frames, log entries, modules and settings."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Callable, ClassVar, Optional


class ObjectType(str, Enum):
    """Type identifiers of the data objects."""

    DEFAULT = ""
    REPORT = "442a8ca0-5250-439e-9dd3-41b9a44122c1"
    LOG_ENTRY = "b5c0226f-d71a-4006-b807-42906faab8b3"
    SETTINGS = "bdd3c743-a2f5-42fa-9f07-70f67c0ad836"
    STACK_FRAME = "ec519858-38bc-4acb-8f73-b4be8beb68c7"
    LOADED_MODULE = "a4972cf0-ceab-48f6-ba96-dc2317c250ee"
    TOTAL_INCREASE = "8c97e10d-4411-432e-8962-a4c048a226db"


@dataclass
class StackTraceFrame:
    """One frame of an allocation stack trace."""

    object_type: ClassVar[ObjectType] = ObjectType.STACK_FRAME

    module: str = ""
    function: str = ""
    offset: int = 0
    source: str = ""
    source_line: int = 0
    unknown_address: str = ""

    def clone(self) -> StackTraceFrame:
        """Return an independent copy of this frame."""
        return copy.copy(self)


@dataclass
class LogEntry:
    """Allocation counts and bytes of one unique stack, before and after."""

    object_type: ClassVar[ObjectType] = ObjectType.LOG_ENTRY

    trace_id: str = ""
    new_count: int = 0
    old_count: int = 0
    new_bytes: int = 0
    old_bytes: int = 0
    stack_trace: list[StackTraceFrame] = field(default_factory=list)

    @property
    def bytes_diff(self) -> int:
        """Bytes allocated between the two snapshots (may be negative)."""
        return self.new_bytes - self.old_bytes

    @property
    def count_diff(self) -> int:
        """Allocations made between the two snapshots (may be negative)."""
        return self.new_count - self.old_count

    def clone(self) -> LogEntry:
        """Return a deep copy of this entry, frames included."""
        return LogEntry(
            trace_id=self.trace_id,
            new_count=self.new_count,
            old_count=self.old_count,
            new_bytes=self.new_bytes,
            old_bytes=self.old_bytes,
            stack_trace=[frame.clone() for frame in self.stack_trace],
        )


@dataclass
class LoadedModule:
    """A module loaded in the target process."""

    object_type: ClassVar[ObjectType] = ObjectType.LOADED_MODULE

    module_name: str = ""
    addr_begin: int = 0
    addr_end: int = 0
    is_symbols_loaded: bool = False
    symbols_path: str = ""


@dataclass
class TotalIncrease:
    """Total heap growth between the two snapshots."""

    object_type: ClassVar[ObjectType] = ObjectType.TOTAL_INCREASE

    requested: int = 0
    overhead: int = 0


@dataclass
class Report:
    """A UMDH comparison report."""

    object_type: ClassVar[ObjectType] = ObjectType.REPORT

    loaded_modules: list[LoadedModule] = field(default_factory=list)
    log_entries: list[LogEntry] = field(default_factory=list)
    total_increase: Optional[TotalIncrease] = None

    def clone(self) -> Report:
        """Return a deep copy of the report."""
        return Report(
            loaded_modules=[copy.copy(module) for module in self.loaded_modules],
            log_entries=[entry.clone() for entry in self.log_entries],
            total_increase=copy.copy(self.total_increase),
        )


SettingsObserver = Callable[[], None]


@dataclass
class Settings:
    """User settings; an observer is told whenever one of them is assigned."""

    object_type: ClassVar[ObjectType] = ObjectType.SETTINGS

    umdh_path: str = ""
    nt_symbol_path: str = ""
    folder_for_snapshots: str = ""
    target_program: str = ""
    pid: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "_observer", None)

    def __setattr__(self, name: str, value: object) -> None:
        object.__setattr__(self, name, value)
        if name in _SETTINGS_FIELDS:
            observer = getattr(self, "_observer", None)
            if observer is not None:
                observer()

    def set_update_notifier(self, observer: Optional[SettingsObserver]) -> None:
        """Register the callable run after each change of a setting."""
        object.__setattr__(self, "_observer", observer)


_SETTINGS_FIELDS = frozenset(f.name for f in fields(Settings))