# xvshell

Pieces of a small x86 teaching kernel and its user programs, modelled in
plain Python so they can be explored and tested without an emulator.

## What is inside

- `xvshell.syscalls`: system-call numbers (`Syscall`), the trace filters
  (`TraceFlag`), lookup helpers `syscall_index` (returns `None` for an
  unknown name) and `syscall_name` (raises `UnknownSyscall` for an unknown
  number), a `Process` holding a process's tracing state (`settrace`,
  `setflag`, `set_print_on_shell`), and a `SyscallDispatcher`.
  `SyscallDispatcher.dispatch` runs the handler for a call number and, when
  the process is traced, writes `TRACE` lines to its console callable.
  The output follows the process's filter: all calls, one named call
  (`TraceFlag.EXACT`), successful calls (`TraceFlag.SUCCESS`) or calls
  reported as failed (`TraceFlag.FAILURE`). An unknown call number is
  reported on the console and gives `-1`. A known number with no handler
  raises `UnknownSyscall`.
- `xvshell.mmu`: the memory-layout and paging constants, address arithmetic
  (`pdx`, `ptx`, `pgaddr`, `pg_round_up`, `pg_round_down`, `pte_addr`,
  `pte_flags`, `v2p`, `p2v`), and segment and gate descriptors
  (`make_segment`, `make_segment16`, `make_gate`). `SegmentDescriptor.pack`
  and `GateDescriptor.pack` give the 8-byte form, and `asm_segment` gives
  the bytes of a boot-time segment entry.
- `xvshell.cstring`: C string routines over NUL-terminated bytes: `cstr`,
  `strlen`, `strcmp`, `strncmp`, `memcmp`, `strncpy`, `safestrcpy`, `atoi`.
- `xvshell.parser`: the shell grammar. `tokens` yields `(kind, text)`
  pairs. `parse_command` builds a tree of `ExecCmd`, `RedirCmd`, `PipeCmd`,
  `ListCmd` and `BackCmd`. Bad input raises `ShellSyntaxError`, whose
  `leftover` holds any unparsed text.
- `xvshell.shell`: the `strace` built-in. `parse_strace` turns an argument
  list into a `StraceAction`, returns `None` for an ordinary command, and
  raises `StraceUsageError` for a malformed one. `apply_strace` applies an
  action to a `Process`. `cd_target` extracts the directory from a
  `cd ...\n` line.
- `xvshell.wc`: line, word and byte counting. `count` works on bytes and
  returns `Counts`. `wc` reads a binary stream and returns the report line.
- `xvshell.umalloc`: a first-fit free-list `Allocator` over a simulated
  heap, with `sbrk`, `malloc` and `free`. Addresses are plain integers.
  Running past the heap limit raises `MemoryError`.
- `xvshell.vm`: two-level page tables. `PageDirectory` works over a
  simulated `PhysicalMemory` and provides `walk`, `map_pages`, `init_uvm`,
  `alloc_uvm`, `dealloc_uvm`, `clear_pteu`, `copy`, `uva2ka`, `copyout`
  and `free`. Running out of pages raises `OutOfMemory`.
- `xvshell.elf`: `ElfHeader` and `ProgramHeader`, which pack to their
  on-disk form, with `parse_elf_header` and `parse_program_header`. Bad
  data raises `ElfFormatError`.

## Install

    pip install .

## Counting words

    xvshell-wc notes.txt other.txt

This prints `lines words bytes name` for each file. With no file names it
reads standard input. If a file cannot be opened, it prints
`wc: cannot open NAME` and stops with exit status 1.

## Examples

Parse a command line:

    from xvshell.parser import parse_command

    tree = parse_command("cat < in.txt | wc > out.txt; echo done &")

Trace system calls:

    from xvshell.syscalls import Process, Syscall, SyscallDispatcher

    proc = Process(pid=3, name="echo")
    proc.settrace(True)
    proc.set_print_on_shell(True)
    lines = []
    dispatcher = SyscallDispatcher({Syscall.GETPID: lambda p: p.pid}, lines.append)
    dispatcher.dispatch(proc, Syscall.GETPID)
    # lines == ["TRACE pid: 3 | command: echo | syscall: getpid | return: 3\n"]

Map and copy user memory:

    from xvshell.vm import PhysicalMemory, PageDirectory

    memory = PhysicalMemory(64)
    pgdir = PageDirectory(memory)
    size = pgdir.alloc_uvm(0, 8192)
    pgdir.copyout(100, b"hello")

## What it does not do

The package models pieces of a kernel and its user programs. It does not
run them:

- There is no interactive shell. Command lines can be parsed into trees,
  but nothing forks, executes, pipes or redirects them.
- There is no kernel, scheduler, file system or program loader. ELF headers
  can be parsed, but nothing loads a program into a `PageDirectory`.
- The only command is `xvshell-wc`.

## Tests

    pip install .[test]
    pytest