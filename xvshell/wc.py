"""Count lines, words and bytes."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from functools import partial
from typing import BinaryIO, Optional, Sequence

# A NUL byte separates words too.
SEPARATORS = frozenset(b" \r\t\n\v\0")
_CHUNK = 512


@dataclass(frozen=True)
class Counts:
    """Line, word and byte counts."""

    lines: int = 0
    words: int = 0
    chars: int = 0


class _Counter:
    def __init__(self) -> None:
        self.lines = 0
        self.words = 0
        self.chars = 0
        self._in_word = False

    def feed(self, chunk: bytes) -> None:
        self.chars += len(chunk)
        self.lines += chunk.count(b"\n")
        for byte in chunk:
            if byte in SEPARATORS:
                self._in_word = False
            elif not self._in_word:
                self.words += 1
                self._in_word = True

    @property
    def counts(self) -> Counts:
        return Counts(self.lines, self.words, self.chars)


def count(data: bytes) -> Counts:
    """Counts for a complete byte string."""
    counter = _Counter()
    counter.feed(bytes(data))
    return counter.counts


def wc(stream: BinaryIO, name: str) -> str:
    """Read *stream* to its end and return its report line."""
    counter = _Counter()
    for chunk in iter(partial(stream.read, _CHUNK), b""):
        counter.feed(chunk)
    c = counter.counts
    return f"{c.lines} {c.words} {c.chars} {name}\n"


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Report counts for each named file, or for standard input."""
    if argv is None:
        argv = sys.argv[1:]
    out = sys.stdout
    try:
        if not argv:
            out.write(wc(sys.stdin.buffer, ""))
            return 0
        for name in argv:
            try:
                stream = open(name, "rb")
            except OSError:
                out.write(f"wc: cannot open {name}\n")
                return 1
            with stream:
                out.write(wc(stream, name))
    except OSError:
        out.write("wc: read error\n")
        return 1
    return 0