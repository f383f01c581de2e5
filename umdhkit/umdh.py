"""Running UMDH and other helper programs."""

from __future__ import annotations

import os
import shlex
import subprocess
from typing import Protocol, Union

from umdhkit.model import Settings


class Executer(Protocol):
    """Anything that can start a program with an argument string."""

    def execute(self, path_to_app: str, args: str) -> object: ...


def _wrap(text: str) -> str:
    return f'"{text}"'


class CommandExecuter:
    """Starts a program with a Windows-style argument string and waits for it."""

    def execute(self, path_to_app: str, args: str) -> int:
        """Run ``path_to_app`` with ``args`` and return its exit code.

        Raises OSError when the program cannot be started.
        """
        command: Union[str, list[str]]
        if os.name == "nt":
            command = f"{_wrap(path_to_app)} {args}"
            flags = getattr(subprocess, "CREATE_NEW_CONSOLE", 0)
        else:
            command = [path_to_app, *shlex.split(args)]
            flags = 0
        completed = subprocess.run(command, creationflags=flags, check=False)
        return completed.returncode


class Umdh:
    """Builds UMDH command lines from the settings and runs them."""

    def __init__(self, settings: Settings, executer: Executer) -> None:
        if settings is None:
            raise ValueError("settings are required")
        if executer is None:
            raise ValueError("a command executer is required")
        self._settings = settings
        self._executer = executer

    def create_snapshot(self, path_to_snapshot: str) -> None:
        """Take a heap snapshot of the target process into ``path_to_snapshot``.

        The process is chosen by PID when one is set, else by program name.
        Nothing is run for an empty path.
        """
        if not path_to_snapshot:
            return
        settings = self._settings
        if not settings.pid:
            command = f'-pn:"{settings.target_program}" -f:{_wrap(path_to_snapshot)}'
        else:
            command = f"-p:{settings.pid} -f:{_wrap(path_to_snapshot)}"
        self._executer.execute(settings.umdh_path, command)

    def create_report(self, report_path: str, old_snapshot: str, new_snapshot: str) -> None:
        """Compare two snapshots into ``report_path``; nothing runs if a path is empty."""
        if not report_path or not old_snapshot or not new_snapshot:
            return
        self._executer.execute(
            self._settings.umdh_path,
            f"{_wrap(old_snapshot)} {_wrap(new_snapshot)} -f:{report_path}",
        )