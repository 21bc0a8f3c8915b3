import pytest

from xvshell.syscalls import (
    Process,
    Syscall,
    SyscallDispatcher,
    TraceFlag,
    UnknownSyscall,
    syscall_index,
    syscall_name,
)


def make_dispatcher(returns=None):
    lines = []
    returns = returns or {}
    handlers = {call: (lambda proc, c=call: returns.get(c, 0)) for call in Syscall}
    handlers[Syscall.GETPID] = lambda proc: returns.get(Syscall.GETPID, proc.pid)
    return SyscallDispatcher(handlers, lines.append), lines


@pytest.mark.parametrize(
    "name, number",
    [("fork", 1), ("exit", 2), ("write", 16), ("close", 21), ("settrace", 22), ("tracerun", 25)],
)
def test_syscall_numbers_fixed(name, number):
    assert syscall_index(name) == number
    assert syscall_name(number) == name


def test_index_and_name_round_trip():
    for call in Syscall:
        name = syscall_name(call)
        assert syscall_index(name) == call


def test_index_of_unknown_name():
    assert syscall_index("frobnicate") is None
    assert syscall_index("FORK") is None


def test_name_of_unknown_number():
    with pytest.raises(UnknownSyscall):
        syscall_name(0)
    with pytest.raises(UnknownSyscall):
        syscall_name(99)


def test_process_setters():
    proc = Process(pid=4, name="sh")
    proc.settrace(1)
    proc.setflag(TraceFlag.EXACT, Syscall.WRITE)
    proc.set_print_on_shell(1)
    assert proc.trace is True
    assert proc.flag == TraceFlag.EXACT
    assert proc.syscall_number == Syscall.WRITE
    assert proc.print_on_shell is True


def test_untraced_dispatch_returns_handler_value():
    dispatcher, lines = make_dispatcher()
    proc = Process(pid=7, name="ls")
    assert dispatcher.dispatch(proc, Syscall.GETPID) == 7
    assert lines == []


def test_unknown_number_reports_and_returns_minus_one():
    dispatcher, lines = make_dispatcher()
    proc = Process(pid=3, name="sh")
    assert dispatcher.dispatch(proc, 42) == -1
    assert lines == ["3 sh: unknown sys call 42\n"]


def test_traced_call_is_printed():
    dispatcher, lines = make_dispatcher()
    proc = Process(pid=3, name="ls", trace=True, print_on_shell=True)
    dispatcher.dispatch(proc, Syscall.GETPID)
    assert lines == ["TRACE pid: 3 | command: ls | syscall: getpid | return: 3\n"]


def test_traced_without_print_on_shell_is_silent():
    dispatcher, lines = make_dispatcher()
    proc = Process(pid=3, name="ls", trace=True)
    dispatcher.dispatch(proc, Syscall.GETPID)
    assert lines == []


def test_exit_prints_line_without_return():
    dispatcher, lines = make_dispatcher()
    proc = Process(pid=5, name="cat", trace=True, print_on_shell=True)
    dispatcher.dispatch(proc, Syscall.EXIT)
    assert lines == ["TRACE pid: 5 | command: cat | syscall: exit \n"]


def test_exact_flag_only_matching_call():
    dispatcher, lines = make_dispatcher()
    proc = Process(pid=5, name="cat", trace=True, print_on_shell=True)
    proc.setflag(TraceFlag.EXACT, Syscall.READ)
    dispatcher.dispatch(proc, Syscall.GETPID)
    dispatcher.dispatch(proc, Syscall.READ)
    assert len(lines) == 1
    assert "syscall: read |" in lines[0]


def test_success_flag_skips_failures():
    dispatcher, lines = make_dispatcher({Syscall.OPEN: -1, Syscall.READ: 10})
    proc = Process(pid=5, name="cat", trace=True, print_on_shell=True)
    proc.setflag(TraceFlag.SUCCESS, 0)
    assert dispatcher.dispatch(proc, Syscall.OPEN) == -1
    dispatcher.dispatch(proc, Syscall.READ)
    assert lines == ["TRACE pid: 5 | command: cat | syscall: read | return: 10\n"]


def test_failure_flag_reports_minus_one_and_skips_write():
    dispatcher, lines = make_dispatcher({Syscall.READ: 10})
    proc = Process(pid=5, name="cat", trace=True, print_on_shell=True)
    proc.setflag(TraceFlag.FAILURE, 0)
    assert dispatcher.dispatch(proc, Syscall.READ) == 10
    dispatcher.dispatch(proc, Syscall.WRITE)
    assert lines == ["TRACE pid: 5 | command: cat | syscall: read | return: -1\n"]


def test_echo_exit_resets_flag():
    dispatcher, lines = make_dispatcher()
    proc = Process(pid=6, name="echo", trace=True, print_on_shell=True)
    proc.setflag(TraceFlag.SUCCESS, 0)
    dispatcher.dispatch(proc, Syscall.EXIT)
    assert proc.flag == TraceFlag.NONE
    assert lines == ["TRACE pid: 6 | command: echo | syscall: exit \n"]


def test_printonshell_never_traced():
    dispatcher, lines = make_dispatcher()
    proc = Process(pid=6, name="sh", trace=True, print_on_shell=True)
    dispatcher.dispatch(proc, Syscall.PRINTONSHELL)
    assert lines == []


def test_missing_handler_raises():
    dispatcher = SyscallDispatcher({Syscall.FORK: lambda proc: 0}, lambda text: None)
    with pytest.raises(UnknownSyscall):
        dispatcher.dispatch(Process(pid=1, name="init"), Syscall.WAIT)