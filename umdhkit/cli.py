"""Command-line front end: take heap snapshots, compare them, toggle gflags."""

from __future__ import annotations

import argparse
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

from umdhkit.model import Settings
from umdhkit.umdh import CommandExecuter, Umdh

DEFAULT_UMDH_PATH = "C:/Program Files (x86)/Windows Kits/10/Debuggers/x64/umdh.exe"
DEFAULT_GFLAGS_PATH = "C:\\Program Files (x86)\\Windows Kits\\10\\Debuggers\\x64\\gflags.exe"
SYMBOL_PATH_VARIABLE = "_NT_SYMBOL_PATH"

_SNAPSHOT_TAGS = {"first": "first_snapshot", "second": "second_snapshot"}


def build_name(settings: Settings, tag: str, now: Optional[datetime] = None) -> str:
    """Build an output file name from the target program, a tag and a time stamp.

    The name is placed in the snapshot folder when one is set. As in the
    original naming scheme, the part taken from the program keeps its leading
    path separator, and a program name without an extension loses its last
    character.
    """
    target = settings.target_program

    extension_pos = target.rfind(".")
    if extension_pos == -1:
        extension_pos = len(target) - 1

    delimiter_pos = max(target.rfind("\\"), target.rfind("/"))
    if delimiter_pos == -1:
        delimiter_pos = 0

    if extension_pos >= delimiter_pos:
        program_part = target[delimiter_pos:extension_pos]
    else:
        program_part = target[delimiter_pos:]

    stamp = (now or datetime.now()).strftime("%d_%m_%Y_%H_%M_%S")
    folder = settings.folder_for_snapshots
    prefix = f"{folder}/" if folder else ""
    return f"{prefix}{tag}_{program_part}_{stamp}.txt"


def gflags_arguments(target_program: str, enable: bool) -> str:
    """Return the gflags arguments that switch stack tracing on or off."""
    flag = "+ust" if enable else "-ust"
    return f"-i {target_program} {flag}"


def _build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--umdh", default=DEFAULT_UMDH_PATH, help="path to umdh.exe")
    common.add_argument("--target", default="", help="name of the target program")
    common.add_argument("--pid", default="", help="process id of the target")
    common.add_argument("--folder", default="", help="folder for snapshots and reports")
    common.add_argument(
        "--symbol-path",
        default=None,
        help="value for _NT_SYMBOL_PATH; an empty value removes it",
    )

    parser = argparse.ArgumentParser(
        prog="umdhkit", description="Drive UMDH to find heap growth."
    )
    commands = parser.add_subparsers(dest="command", required=True)

    snapshot = commands.add_parser(
        "snapshot", parents=[common], help="take a heap snapshot of the target"
    )
    snapshot.add_argument("which", choices=sorted(_SNAPSHOT_TAGS), help="snapshot slot")
    snapshot.add_argument("--output", default=None, help="explicit snapshot path")

    report = commands.add_parser(
        "report", parents=[common], help="compare two snapshots into a report"
    )
    report.add_argument("old", help="first snapshot")
    report.add_argument("new", help="second snapshot")
    report.add_argument("--output", default=None, help="explicit report path")

    gflags = commands.add_parser(
        "gflags", parents=[common], help="switch user-mode stack tracing"
    )
    gflags.add_argument("--gflags", default=DEFAULT_GFLAGS_PATH, help="path to gflags.exe")
    switch = gflags.add_mutually_exclusive_group(required=True)
    switch.add_argument("--enable", dest="enable", action="store_true")
    switch.add_argument("--disable", dest="enable", action="store_false")

    return parser


def _apply_symbol_path(value: Optional[str]) -> None:
    if value is None:
        return
    if value:
        os.environ[SYMBOL_PATH_VARIABLE] = value
    else:
        os.environ.pop(SYMBOL_PATH_VARIABLE, None)


def _is_file(path: str) -> bool:
    return bool(path) and Path(path).is_file()


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the command line; return the exit status."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    _apply_symbol_path(args.symbol_path)
    settings = Settings(
        umdh_path=args.umdh,
        nt_symbol_path=args.symbol_path or "",
        folder_for_snapshots=args.folder,
        target_program=args.target,
        pid=args.pid,
    )
    executer = CommandExecuter()

    try:
        if args.command == "gflags":
            if not settings.target_program:
                parser.error("gflags needs --target")
            executer.execute(args.gflags, gflags_arguments(settings.target_program, args.enable))
            return 0

        if not _is_file(settings.umdh_path):
            parser.error(f"UMDH executable not found: {settings.umdh_path}")
        if settings.folder_for_snapshots and not Path(settings.folder_for_snapshots).is_dir():
            parser.error(f"folder does not exist: {settings.folder_for_snapshots}")

        umdh = Umdh(settings, executer)

        if args.command == "snapshot":
            if not settings.target_program and not settings.pid:
                parser.error("snapshot needs --target or --pid")
            path = args.output or build_name(settings, _SNAPSHOT_TAGS[args.which])
            umdh.create_snapshot(path)
            print(path)
            return 0

        for snapshot_path in (args.old, args.new):
            if not _is_file(snapshot_path):
                parser.error(f"snapshot not found: {snapshot_path}")
        path = args.output or build_name(settings, "report")
        umdh.create_report(path, args.old, args.new)
        print(path)
        return 0
    except OSError as error:
        print(f"umdhkit: {error}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())