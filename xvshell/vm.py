"""Two-level x86 page tables for user address spaces over simulated physical memory."""

from __future__ import annotations

from typing import Dict, Iterator, List, Optional, Tuple

from .mmu import (
    KERNBASE,
    NPDENTRIES,
    PGSIZE,
    PTE_P,
    PTE_U,
    PTE_W,
    pdx,
    pg_round_down,
    pg_round_up,
    pgaddr,
    pte_addr,
    pte_flags,
    ptx,
)

_ENTRY = 4


class OutOfMemory(MemoryError):
    """Raised when no physical page is left."""


class PhysicalMemory:
    """A pool of page frames addressed by physical address.

    Frames start at PGSIZE, so a physical address of 0 never names a page.
    """

    def __init__(self, pages: int) -> None:
        if pages < 0:
            raise ValueError("pages must not be negative")
        # Popping from the end hands out the lowest address first.
        self._free: List[int] = list(range(pages * PGSIZE, 0, -PGSIZE))
        self._frames: Dict[int, bytearray] = {}

    @property
    def available(self) -> int:
        """Number of free pages."""
        return len(self._free)

    def kalloc(self) -> int:
        """Allocate one page and return its physical address."""
        if not self._free:
            raise OutOfMemory("out of physical pages")
        pa = self._free.pop()
        self._frames[pa] = bytearray(PGSIZE)
        return pa

    def kfree(self, pa: int) -> None:
        """Return the page at *pa* to the pool; its contents are lost."""
        if pa % PGSIZE or pa not in self._frames:
            raise ValueError(f"kfree: {pa:#x} is not an allocated page")
        del self._frames[pa]
        self._free.append(pa)

    def _spans(self, pa: int, n: int) -> Iterator[Tuple[bytearray, int, int]]:
        spans = []
        while n > 0:
            base = pg_round_down(pa)
            frame = self._frames.get(base)
            if frame is None:
                raise ValueError(f"page {base:#x} is not allocated")
            offset = pa - base
            k = min(n, PGSIZE - offset)
            spans.append((frame, offset, k))
            pa += k
            n -= k
        return iter(spans)

    def read(self, pa: int, n: int) -> bytes:
        """Read *n* bytes starting at physical address *pa*."""
        if n < 0:
            raise ValueError("read: negative length")
        return b"".join(bytes(frame[off:off + k]) for frame, off, k in self._spans(pa, n))

    def write(self, pa: int, data: bytes) -> None:
        """Write *data* starting at physical address *pa*."""
        data = bytes(data)
        pos = 0
        for frame, off, k in self._spans(pa, len(data)):
            frame[off:off + k] = data[pos:pos + k]
            pos += k


class PageDirectory:
    """The user half of one process's page table."""

    def __init__(self, memory: PhysicalMemory) -> None:
        self.memory = memory
        self.pa: Optional[int] = memory.kalloc()

    def _root(self) -> int:
        if self.pa is None:
            raise ValueError("freevm: no pgdir")
        return self.pa

    def _load(self, addr: int) -> int:
        return int.from_bytes(self.memory.read(addr, _ENTRY), "little")

    def _store(self, addr: int, value: int) -> None:
        self.memory.write(addr, value.to_bytes(_ENTRY, "little"))

    def walk(self, va: int, alloc: bool = False) -> Optional[int]:
        """Physical address of the PTE for *va*.

        Returns None when the page table is missing and *alloc* is false;
        creates the page table when *alloc* is true.
        """
        pde_at = self._root() + _ENTRY * pdx(va)
        pde = self._load(pde_at)
        if pde & PTE_P:
            pgtab = pte_addr(pde)
        else:
            if not alloc:
                return None
            pgtab = self.memory.kalloc()
            # Permissions here are generous; the PTEs restrict them further.
            self._store(pde_at, pgtab | PTE_P | PTE_W | PTE_U)
        return pgtab + _ENTRY * ptx(va)

    def map_pages(self, va: int, size: int, pa: int, perm: int) -> None:
        """Map the pages covering [va, va+size) to physical pages from *pa*."""
        a = pg_round_down(va)
        last = pg_round_down(va + size - 1)
        while True:
            pte_at = self.walk(a, True)
            if self._load(pte_at) & PTE_P:
                raise ValueError(f"remap of {a:#x}")
            self._store(pte_at, pa | perm | PTE_P)
            if a == last:
                break
            a += PGSIZE
            pa += PGSIZE

    def init_uvm(self, code: bytes) -> None:
        """Load *code*, smaller than a page, at virtual address 0."""
        code = bytes(code)
        if len(code) >= PGSIZE:
            raise ValueError("inituvm: more than a page")
        mem = self.memory.kalloc()
        self.map_pages(0, PGSIZE, mem, PTE_W | PTE_U)
        self.memory.write(mem, code)

    def alloc_uvm(self, oldsz: int, newsz: int) -> int:
        """Grow the user space from *oldsz* to *newsz* bytes; return the new size."""
        if newsz >= KERNBASE:
            raise ValueError("allocuvm: size reaches kernel space")
        if newsz < oldsz:
            return oldsz
        for a in range(pg_round_up(oldsz), newsz, PGSIZE):
            try:
                mem = self.memory.kalloc()
            except OutOfMemory:
                self.dealloc_uvm(newsz, oldsz)
                raise OutOfMemory("allocuvm out of memory") from None
            try:
                self.map_pages(a, PGSIZE, mem, PTE_W | PTE_U)
            except OutOfMemory:
                self.dealloc_uvm(newsz, oldsz)
                self.memory.kfree(mem)
                raise OutOfMemory("allocuvm out of memory (2)") from None
        return newsz

    def dealloc_uvm(self, oldsz: int, newsz: int) -> int:
        """Shrink the user space from *oldsz* to *newsz* bytes; return the new size."""
        if newsz >= oldsz:
            return oldsz
        a = pg_round_up(newsz)
        while a < oldsz:
            pte_at = self.walk(a, False)
            if pte_at is None:
                # Skip to the start of the next page directory entry.
                a = pgaddr(pdx(a) + 1, 0, 0) - PGSIZE
            else:
                pte = self._load(pte_at)
                if pte & PTE_P:
                    pa = pte_addr(pte)
                    if pa == 0:
                        raise RuntimeError("kfree")
                    self.memory.kfree(pa)
                    self._store(pte_at, 0)
            a += PGSIZE
        return newsz

    def clear_pteu(self, uva: int) -> None:
        """Make the page at *uva* inaccessible to user code."""
        pte_at = self.walk(uva, False)
        if pte_at is None:
            raise ValueError("clearpteu")
        self._store(pte_at, self._load(pte_at) & ~PTE_U & 0xFFFFFFFF)

    def copy(self, sz: int) -> "PageDirectory":
        """A new page directory holding a copy of the first *sz* bytes."""
        child = PageDirectory(self.memory)
        for i in range(0, sz, PGSIZE):
            pte_at = self.walk(i, False)
            if pte_at is None:
                child.free()
                raise RuntimeError("copyuvm: pte should exist")
            pte = self._load(pte_at)
            if not pte & PTE_P:
                child.free()
                raise RuntimeError("copyuvm: page not present")
            pa, flags = pte_addr(pte), pte_flags(pte)
            try:
                mem = self.memory.kalloc()
            except OutOfMemory:
                child.free()
                raise
            self.memory.write(mem, self.memory.read(pa, PGSIZE))
            try:
                child.map_pages(i, PGSIZE, mem, flags)
            except OutOfMemory:
                self.memory.kfree(mem)
                child.free()
                raise
        return child

    def uva2ka(self, uva: int) -> Optional[int]:
        """Physical address of the user page at *uva*, or None if it is not one."""
        pte_at = self.walk(uva, False)
        if pte_at is None:
            return None
        pte = self._load(pte_at)
        if not pte & PTE_P or not pte & PTE_U:
            return None
        return pte_addr(pte)

    def copyout(self, va: int, data: bytes) -> None:
        """Copy *data* to user virtual address *va*."""
        buf = bytes(data)
        while buf:
            va0 = pg_round_down(va)
            pa0 = self.uva2ka(va0)
            if pa0 is None:
                raise ValueError(f"copyout: {va0:#x} is not a user page")
            n = min(PGSIZE - (va - va0), len(buf))
            self.memory.write(pa0 + (va - va0), buf[:n])
            buf = buf[n:]
            va = va0 + PGSIZE

    def free(self) -> None:
        """Free every user page, every page table and the directory itself."""
        root = self._root()
        self.dealloc_uvm(KERNBASE, 0)
        for i in range(NPDENTRIES):
            pde = self._load(root + _ENTRY * i)
            if pde & PTE_P:
                self.memory.kfree(pte_addr(pde))
        self.memory.kfree(root)
        self.pa = None