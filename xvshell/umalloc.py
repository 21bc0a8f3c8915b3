"""A first-fit free-list allocator over a simulated growable heap."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Set

from .mmu import KERNBASE

HEADER_SIZE = 8
_MIN_UNITS = 4096
_BASE = 0
_HEAP_START = 0x1000


@dataclass
class _Header:
    ptr: int
    size: int  # in header-sized units, header included


class Allocator:
    """Allocates blocks of a simulated heap; addresses are plain integers."""

    def __init__(self, heap_limit: Optional[int] = None) -> None:
        if heap_limit is not None and heap_limit < 0:
            raise ValueError("heap_limit must not be negative")
        self._start = _HEAP_START
        self._brk = _HEAP_START
        self._limit = KERNBASE if heap_limit is None else min(KERNBASE, _HEAP_START + heap_limit)
        self._headers: Dict[int, _Header] = {}
        self._freep: Optional[int] = None
        self._in_use: Set[int] = set()

    def sbrk(self, n: int) -> int:
        """Move the break by *n* bytes and return the old break."""
        old = self._brk
        new = old + n
        if new > self._limit:
            raise MemoryError("sbrk: heap limit reached")
        if new < self._start:
            raise ValueError("sbrk: break below start of heap")
        self._brk = new
        return old

    def _release(self, bp: int) -> None:
        h = self._headers
        p = self._freep
        while not (p < bp < h[p].ptr):
            if p >= h[p].ptr and (bp > p or bp < h[p].ptr):
                break
            p = h[p].ptr
        block = h[bp]
        nxt = h[p].ptr
        if bp + block.size * HEADER_SIZE == nxt:
            block.size += h[nxt].size
            block.ptr = h[nxt].ptr
            del h[nxt]
        else:
            block.ptr = nxt
        prev = h[p]
        if p + prev.size * HEADER_SIZE == bp:
            prev.size += block.size
            prev.ptr = block.ptr
            del h[bp]
        else:
            prev.ptr = bp
        self._freep = p

    def free(self, address: int) -> None:
        """Return a block obtained from malloc."""
        bp = address - HEADER_SIZE
        if bp not in self._in_use:
            raise ValueError(f"free: {address:#x} is not an allocated block")
        self._in_use.remove(bp)
        self._release(bp)

    def _morecore(self, nunits: int) -> int:
        nunits = max(nunits, _MIN_UNITS)
        address = self.sbrk(nunits * HEADER_SIZE)
        self._headers[address] = _Header(0, nunits)
        self._release(address)
        return self._freep

    def malloc(self, nbytes: int) -> int:
        """Allocate *nbytes* and return the block's address."""
        if nbytes < 0:
            raise ValueError("malloc: negative size")
        nunits = (nbytes + HEADER_SIZE - 1) // HEADER_SIZE + 1
        h = self._headers
        if self._freep is None:
            h[_BASE] = _Header(_BASE, 0)
            self._freep = _BASE
        prevp = self._freep
        p = h[prevp].ptr
        while True:
            block = h[p]
            if block.size >= nunits:
                if block.size == nunits:
                    h[prevp].ptr = block.ptr
                else:
                    block.size -= nunits
                    p += block.size * HEADER_SIZE
                    h[p] = _Header(0, nunits)
                self._freep = prevp
                self._in_use.add(p)
                return p + HEADER_SIZE
            if p == self._freep:
                try:
                    p = self._morecore(nunits)
                except MemoryError:
                    raise MemoryError(f"malloc: cannot allocate {nbytes} bytes") from None
            prevp = p
            p = h[p].ptr