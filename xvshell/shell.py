"""Shell built-ins: the strace command and the cd line check."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, TextIO, Tuple

from .syscalls import Process, TraceFlag, syscall_index

_USAGE = "Usage: strace on|off"


class StraceUsageError(ValueError):
    """Raised for a malformed strace command."""


@dataclass(frozen=True)
class StraceAction:
    """What one strace command asks for.

    *command* is one of "run", "-e", "-s", "-f", "on" or "off".
    """

    command: str
    syscall_number: int = 0
    words: Tuple[str, ...] = ()


def parse_strace(argv: Sequence[str]) -> Optional[StraceAction]:
    """Interpret *argv* as an strace command; None if it is an ordinary command."""
    if not argv or argv[0] != "strace":
        return None
    if len(argv) < 2:
        raise StraceUsageError("1st " + _USAGE)
    sub = argv[1]
    if sub == "strace":
        return None
    if sub == "run":
        return StraceAction("run", words=tuple(argv[2:]))
    if sub == "-e":
        if len(argv) < 3:
            raise StraceUsageError("Provide valid syscall after flag")
        call = syscall_index(argv[2])
        return StraceAction("-e", syscall_number=-1 if call is None else int(call))
    if sub in ("-s", "-f", "on", "off"):
        return StraceAction(sub)
    raise StraceUsageError(_USAGE)


def apply_strace(action: Optional[StraceAction], proc: Process, out: TextIO) -> None:
    """Apply *action* to *proc*; None stands for an ordinary command."""
    if action is None:
        proc.set_print_on_shell(True)
        return
    command = action.command
    if command == "run":
        proc.set_print_on_shell(True)
        proc.settrace(True)
        out.write(" ".join(action.words) + "\n")
        proc.settrace(False)
    elif command == "-e":
        proc.setflag(TraceFlag.EXACT, action.syscall_number)
    elif command == "-s":
        proc.setflag(TraceFlag.SUCCESS, 0)
    elif command == "-f":
        proc.setflag(TraceFlag.FAILURE, 0)
    elif command in ("on", "off"):
        proc.set_print_on_shell(False)
        proc.settrace(command == "on")
    else:
        raise StraceUsageError(_USAGE)


def cd_target(line: str) -> Optional[str]:
    """The directory of a "cd" line with its final character dropped, else None."""
    if not line.startswith("cd "):
        return None
    return line[:-1][3:]