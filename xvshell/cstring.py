"""NUL-terminated byte-string helpers."""

from __future__ import annotations

from typing import Union

Text = Union[bytes, bytearray, memoryview, str]


def _as_bytes(s: Text) -> bytes:
    if isinstance(s, str):
        return s.encode("utf-8")
    return bytes(s)


def cstr(buf: Text) -> bytes:
    """The bytes before the first NUL (or all of them)."""
    data = _as_bytes(buf)
    end = data.find(b"\0")
    return data if end < 0 else data[:end]


def strlen(s: Text) -> int:
    """Length of the string up to its NUL terminator."""
    return len(cstr(s))


def strncmp(p: Text, q: Text, n: int) -> int:
    """Compare at most *n* bytes; negative, zero or positive like C."""
    a, b = cstr(p), cstr(q)
    for i in range(max(n, 0)):
        ca = a[i] if i < len(a) else 0
        cb = b[i] if i < len(b) else 0
        if ca != cb or ca == 0:
            return ca - cb
    return 0


def strcmp(p: Text, q: Text) -> int:
    """Compare two strings; negative, zero or positive like C."""
    a, b = cstr(p), cstr(q)
    return strncmp(a, b, max(len(a), len(b)) + 1)


def memcmp(a: Text, b: Text, n: int) -> int:
    """Compare the first *n* bytes of two buffers."""
    x, y = _as_bytes(a), _as_bytes(b)
    if n > len(x) or n > len(y):
        raise ValueError("memcmp: length exceeds buffer")
    for cx, cy in zip(x[:n], y[:n]):
        if cx != cy:
            return cx - cy
    return 0


def strncpy(src: Text, n: int) -> bytes:
    """An *n*-byte field holding *src*, zero padded and not always terminated."""
    if n <= 0:
        return b""
    return cstr(src)[:n].ljust(n, b"\0")


def safestrcpy(src: Text, n: int) -> bytes:
    """Copy at most n-1 bytes of *src* and always add a NUL terminator."""
    if n <= 0:
        return b""
    return cstr(src)[: n - 1] + b"\0"


def atoi(s: Text) -> int:
    """Value of the leading decimal digits; 0 if there are none."""
    value = 0
    for c in cstr(s):
        if not 0x30 <= c <= 0x39:
            break
        value = value * 10 + (c - 0x30)
    return value