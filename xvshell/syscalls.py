"""System call numbers, per-process tracing state and the traced dispatcher."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from enum import IntEnum
from typing import Callable, Mapping, Optional


class Syscall(IntEnum):
    """System call numbers."""

    FORK = 1
    EXIT = 2
    WAIT = 3
    PIPE = 4
    READ = 5
    KILL = 6
    EXEC = 7
    FSTAT = 8
    CHDIR = 9
    DUP = 10
    GETPID = 11
    SBRK = 12
    SLEEP = 13
    UPTIME = 14
    OPEN = 15
    WRITE = 16
    MKNOD = 17
    UNLINK = 18
    LINK = 19
    MKDIR = 20
    CLOSE = 21
    SETTRACE = 22
    SETFLAG = 23
    PRINTONSHELL = 24
    TRACERUN = 25


class TraceFlag(IntEnum):
    """Filter applied to trace output."""

    NONE = 0
    EXACT = 1  # -e: only one named system call
    SUCCESS = 2  # -s: only calls that returned >= 0
    FAILURE = 3  # -f: report calls as failed


class UnknownSyscall(LookupError):
    """Raised for a number or name that is not a known system call."""

    def __init__(self, number: int) -> None:
        super().__init__(f"unknown sys call {number}")
        self.number = number


def syscall_index(name: str) -> Optional[Syscall]:
    """Return the system call with this name, or None if there is none."""
    try:
        return Syscall[name.upper()] if name == name.lower() else None
    except KeyError:
        return None


def syscall_name(number: int) -> str:
    """Return the name of system call *number*."""
    try:
        return Syscall(number).name.lower()
    except ValueError:
        raise UnknownSyscall(number) from None


@dataclass
class Process:
    """The tracing-related state of one process."""

    pid: int
    name: str
    trace: bool = False
    flag: int = TraceFlag.NONE
    syscall_number: int = 0
    print_on_shell: bool = False

    def settrace(self, enable) -> None:
        """Turn system call tracing on or off."""
        self.trace = bool(enable)

    def setflag(self, flag: int, syscall_number: int) -> None:
        """Set the trace filter and the system call it refers to."""
        self.flag = flag
        self.syscall_number = syscall_number

    def set_print_on_shell(self, enable) -> None:
        """Choose whether trace lines are written to the console."""
        self.print_on_shell = bool(enable)


Handler = Callable[[Process], int]


class SyscallDispatcher:
    """Runs system call handlers and writes trace lines for traced processes."""

    def __init__(
        self,
        handlers: Mapping[int, Handler],
        console: Optional[Callable[[str], object]] = None,
    ) -> None:
        self._handlers = {Syscall(number): handler for number, handler in handlers.items()}
        self._console = console if console is not None else sys.stdout.write

    def _trace(self, proc: Process, call: Syscall, ret: int) -> None:
        self._console(
            f"TRACE pid: {proc.pid} | command: {proc.name} | "
            f"syscall: {call.name.lower()} | return: {ret}\n"
        )

    def dispatch(self, proc: Process, number: int) -> int:
        """Run system call *number* for *proc* and return its result."""
        try:
            call = Syscall(number)
        except ValueError:
            self._console(f"{proc.pid} {proc.name}: unknown sys call {number}\n")
            return -1
        handler = self._handlers.get(call)
        if handler is None:
            raise UnknownSyscall(number)

        if not proc.trace:
            return handler(proc)

        if call is Syscall.EXIT:
            if proc.print_on_shell and proc.flag not in (TraceFlag.EXACT, TraceFlag.FAILURE):
                self._console(
                    f"TRACE pid: {proc.pid} | command: {proc.name} | "
                    f"syscall: {call.name.lower()} \n"
                )
            if proc.name == "echo" and proc.flag > 0:
                proc.flag = TraceFlag.NONE

        ret = handler(proc)

        quiet = (Syscall.PRINTONSHELL, Syscall.EXIT)
        if proc.flag in (TraceFlag.EXACT, TraceFlag.SUCCESS, TraceFlag.FAILURE):
            if proc.flag == TraceFlag.EXACT and proc.syscall_number == call:
                if proc.print_on_shell and call not in quiet:
                    self._trace(proc, call, ret)
            elif proc.flag == TraceFlag.SUCCESS and ret >= 0:
                if proc.print_on_shell and call not in quiet:
                    self._trace(proc, call, ret)
            elif proc.flag == TraceFlag.FAILURE:
                if proc.print_on_shell and call not in (Syscall.PRINTONSHELL, Syscall.WRITE):
                    self._trace(proc, call, -1)
        elif proc.print_on_shell and call not in quiet:
            self._trace(proc, call, ret)
        return ret