"""x86 paging arithmetic, memory layout and segment/gate descriptors."""

from __future__ import annotations

import struct
from dataclasses import dataclass

_U32 = 0xFFFFFFFF

# Memory layout
EXTMEM = 0x100000
PHYSTOP = 0xE000000
DEVSPACE = 0xFE000000
KERNBASE = 0x80000000
KERNLINK = KERNBASE + EXTMEM

# Eflags and control registers
FL_IF = 0x00000200
CR0_PE = 0x00000001
CR0_WP = 0x00010000
CR0_PG = 0x80000000
CR4_PSE = 0x00000010

# Segment selectors
SEG_KCODE = 1
SEG_KDATA = 2
SEG_UCODE = 3
SEG_UDATA = 4
SEG_TSS = 5
NSEGS = 6

DPL_USER = 0x3

# Application segment type bits
STA_X = 0x8
STA_W = 0x2
STA_R = 0x2

# System segment type bits
STS_T32A = 0x9
STS_IG32 = 0xE
STS_TG32 = 0xF

# Paging
NPDENTRIES = 1024
NPTENTRIES = 1024
PGSIZE = 4096
PTXSHIFT = 12
PDXSHIFT = 22

PTE_P = 0x001
PTE_W = 0x002
PTE_U = 0x004
PTE_PS = 0x080


def pdx(va: int) -> int:
    """Page directory index of a virtual address."""
    return ((va & _U32) >> PDXSHIFT) & 0x3FF


def ptx(va: int) -> int:
    """Page table index of a virtual address."""
    return ((va & _U32) >> PTXSHIFT) & 0x3FF


def pgaddr(d: int, t: int, o: int) -> int:
    """Build a virtual address from directory index, table index and offset."""
    return ((d << PDXSHIFT) | (t << PTXSHIFT) | o) & _U32


def pg_round_up(sz: int) -> int:
    """Round up to a page boundary."""
    return (sz + PGSIZE - 1) & ~(PGSIZE - 1) & _U32


def pg_round_down(a: int) -> int:
    """Round down to a page boundary."""
    return a & ~(PGSIZE - 1) & _U32


def pte_addr(pte: int) -> int:
    """Physical address held in a page table entry."""
    return pte & ~0xFFF & _U32


def pte_flags(pte: int) -> int:
    """Flag bits of a page table entry."""
    return pte & 0xFFF


def v2p(a: int) -> int:
    """Kernel virtual address to physical address."""
    return (a - KERNBASE) & _U32


def p2v(a: int) -> int:
    """Physical address to kernel virtual address."""
    return (a + KERNBASE) & _U32


@dataclass(frozen=True)
class SegmentDescriptor:
    """An 8-byte x86 segment descriptor."""

    lim_15_0: int
    base_15_0: int
    base_23_16: int
    type: int
    s: int
    dpl: int
    p: int
    lim_19_16: int
    avl: int
    rsv1: int
    db: int
    g: int
    base_31_24: int

    def pack(self) -> bytes:
        """Encode as the CPU expects it in the GDT."""
        low = (self.lim_15_0 & 0xFFFF) | (self.base_15_0 & 0xFFFF) << 16
        high = (
            (self.base_23_16 & 0xFF)
            | (self.type & 0xF) << 8
            | (self.s & 0x1) << 12
            | (self.dpl & 0x3) << 13
            | (self.p & 0x1) << 15
            | (self.lim_19_16 & 0xF) << 16
            | (self.avl & 0x1) << 20
            | (self.rsv1 & 0x1) << 21
            | (self.db & 0x1) << 22
            | (self.g & 0x1) << 23
            | (self.base_31_24 & 0xFF) << 24
        )
        return struct.pack("<II", low, high)


def make_segment(seg_type: int, base: int, limit: int, dpl: int) -> SegmentDescriptor:
    """A normal 32-bit segment with 4 KiB granularity."""
    base &= _U32
    limit &= _U32
    return SegmentDescriptor(
        (limit >> 12) & 0xFFFF, base & 0xFFFF, (base >> 16) & 0xFF,
        seg_type & 0xF, 1, dpl & 0x3, 1, (limit >> 28) & 0xF,
        0, 0, 1, 1, (base >> 24) & 0xFF,
    )


def make_segment16(seg_type: int, base: int, limit: int, dpl: int) -> SegmentDescriptor:
    """A byte-granular segment, as used for the task state segment."""
    base &= _U32
    limit &= _U32
    return SegmentDescriptor(
        limit & 0xFFFF, base & 0xFFFF, (base >> 16) & 0xFF,
        seg_type & 0xF, 1, dpl & 0x3, 1, (limit >> 16) & 0xF,
        0, 0, 1, 0, (base >> 24) & 0xFF,
    )


def asm_segment(seg_type: int, base: int, limit: int) -> bytes:
    """The bytes the boot-time segment macro emits."""
    base &= _U32
    limit &= _U32
    return struct.pack(
        "<HHBBBB",
        (limit >> 12) & 0xFFFF,
        base & 0xFFFF,
        (base >> 16) & 0xFF,
        0x90 | seg_type,
        0xC0 | ((limit >> 28) & 0xF),
        (base >> 24) & 0xFF,
    )


@dataclass(frozen=True)
class GateDescriptor:
    """An 8-byte interrupt or trap gate."""

    off_15_0: int
    cs: int
    args: int
    rsv1: int
    type: int
    s: int
    dpl: int
    p: int
    off_31_16: int

    def pack(self) -> bytes:
        """Encode as the CPU expects it in the IDT."""
        low = (self.off_15_0 & 0xFFFF) | (self.cs & 0xFFFF) << 16
        high = (
            (self.args & 0x1F)
            | (self.rsv1 & 0x7) << 5
            | (self.type & 0xF) << 8
            | (self.s & 0x1) << 12
            | (self.dpl & 0x3) << 13
            | (self.p & 0x1) << 15
            | (self.off_31_16 & 0xFFFF) << 16
        )
        return struct.pack("<II", low, high)


def make_gate(istrap: bool, selector: int, offset: int, dpl: int) -> GateDescriptor:
    """An interrupt gate, or a trap gate when *istrap* is true."""
    offset &= _U32
    return GateDescriptor(
        offset & 0xFFFF, selector & 0xFFFF, 0, 0,
        STS_TG32 if istrap else STS_IG32, 0, dpl & 0x3, 1, offset >> 16,
    )