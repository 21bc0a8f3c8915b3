"""Tokenizer and recursive-descent parser for shell command lines."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional, Tuple, Union

WHITESPACE = " \t\r\n\v"
SYMBOLS = "<|>&;()"
MAXARGS = 10

O_RDONLY = 0x000
O_WRONLY = 0x001
O_RDWR = 0x002
O_CREATE = 0x200

WORD = "word"


class ShellSyntaxError(ValueError):
    """Raised when a command line cannot be parsed."""

    def __init__(self, message: str, leftover: Optional[str] = None) -> None:
        super().__init__(message)
        self.leftover = leftover


@dataclass
class ExecCmd:
    """A program and its arguments."""

    argv: list[str] = field(default_factory=list)


@dataclass
class RedirCmd:
    """A command with one file descriptor redirected to a file."""

    cmd: "Command"
    file: str
    mode: int
    fd: int


@dataclass
class PipeCmd:
    """Two commands joined by a pipe."""

    left: "Command"
    right: "Command"


@dataclass
class ListCmd:
    """Two commands run one after the other."""

    left: "Command"
    right: "Command"


@dataclass
class BackCmd:
    """A command run in the background."""

    cmd: "Command"


Command = Union[ExecCmd, RedirCmd, PipeCmd, ListCmd, BackCmd]


class _Scanner:
    def __init__(self, line: str) -> None:
        end = line.find("\0")
        self._text = line if end < 0 else line[:end]
        self._pos = 0

    def _skip(self) -> None:
        while self._pos < len(self._text) and self._text[self._pos] in WHITESPACE:
            self._pos += 1

    @property
    def rest(self) -> str:
        return self._text[self._pos:]

    def at_end(self) -> bool:
        self._skip()
        return self._pos >= len(self._text)

    def peek(self, toks: str) -> bool:
        self._skip()
        return self._pos < len(self._text) and self._text[self._pos] in toks

    def next(self) -> Tuple[str, str]:
        self._skip()
        text, start = self._text, self._pos
        if start >= len(text):
            return "", ""
        c = text[start]
        if c in "|();&<":
            self._pos += 1
            kind = c
        elif c == ">":
            self._pos += 1
            if text.startswith(">", self._pos):
                self._pos += 1
                kind = ">>"
            else:
                kind = ">"
        else:
            kind = WORD
            while (
                self._pos < len(text)
                and text[self._pos] not in WHITESPACE
                and text[self._pos] not in SYMBOLS
            ):
                self._pos += 1
        token = text[start:self._pos]
        self._skip()
        return kind, token


def tokens(line: str) -> Iterator[Tuple[str, str]]:
    """Yield (kind, text) pairs; kind is "word" or the operator itself."""
    scanner = _Scanner(line)
    while True:
        kind, text = scanner.next()
        if not kind:
            return
        yield kind, text


def _parse_line(s: _Scanner) -> Command:
    cmd = _parse_pipe(s)
    while s.peek("&"):
        s.next()
        cmd = BackCmd(cmd)
    if s.peek(";"):
        s.next()
        cmd = ListCmd(cmd, _parse_line(s))
    return cmd


def _parse_pipe(s: _Scanner) -> Command:
    cmd = _parse_exec(s)
    if s.peek("|"):
        s.next()
        cmd = PipeCmd(cmd, _parse_pipe(s))
    return cmd


def _parse_redirs(cmd: Command, s: _Scanner) -> Command:
    while s.peek("<>"):
        kind, _ = s.next()
        file_kind, name = s.next()
        if file_kind != WORD:
            raise ShellSyntaxError("missing file for redirection")
        if kind == "<":
            cmd = RedirCmd(cmd, name, O_RDONLY, 0)
        else:
            # ">>" opens the file exactly like ">".
            cmd = RedirCmd(cmd, name, O_WRONLY | O_CREATE, 1)
    return cmd


def _parse_block(s: _Scanner) -> Command:
    if not s.peek("("):
        raise ShellSyntaxError("parseblock")
    s.next()
    cmd = _parse_line(s)
    if not s.peek(")"):
        raise ShellSyntaxError("syntax - missing )")
    s.next()
    return _parse_redirs(cmd, s)


def _parse_exec(s: _Scanner) -> Command:
    if s.peek("("):
        return _parse_block(s)
    node = ExecCmd()
    cmd = _parse_redirs(node, s)
    while not s.peek("|)&;"):
        kind, text = s.next()
        if not kind:
            break
        if kind != WORD:
            raise ShellSyntaxError("syntax")
        node.argv.append(text)
        if len(node.argv) >= MAXARGS:
            raise ShellSyntaxError("too many args")
        cmd = _parse_redirs(cmd, s)
    return cmd


def parse_command(line: str) -> Command:
    """Parse one command line into a command tree."""
    scanner = _Scanner(line)
    cmd = _parse_line(scanner)
    if not scanner.at_end():
        raise ShellSyntaxError("syntax", leftover=scanner.rest)
    return cmd