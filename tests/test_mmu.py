import struct

import pytest

from xvshell.mmu import (
    DPL_USER,
    KERNBASE,
    PGSIZE,
    SEG_KCODE,
    STA_R,
    STA_W,
    STA_X,
    STS_IG32,
    STS_T32A,
    STS_TG32,
    asm_segment,
    make_gate,
    make_segment,
    make_segment16,
    p2v,
    pdx,
    pg_round_down,
    pg_round_up,
    pgaddr,
    pte_addr,
    pte_flags,
    ptx,
    v2p,
)


@pytest.mark.parametrize("va", [0, 0x1234, 0x00401ABC, 0x80100000, 0xFFFFFFFF])
def test_address_split_round_trip(va):
    assert pgaddr(pdx(va), ptx(va), va & 0xFFF) == va
    assert 0 <= pdx(va) < 1024
    assert 0 <= ptx(va) < 1024


def test_rounding():
    assert pg_round_up(0) == 0
    assert pg_round_up(1) == PGSIZE
    assert pg_round_up(PGSIZE) == PGSIZE
    assert pg_round_down(PGSIZE + 1) == PGSIZE
    assert pg_round_down(PGSIZE - 1) == 0


@pytest.mark.parametrize("value", [0, 1, 4095, 0x12345678])
def test_round_invariants(value):
    up = pg_round_up(value)
    down = pg_round_down(value)
    assert up % PGSIZE == 0 and down % PGSIZE == 0
    assert down <= value <= up


def test_pte_parts_recombine():
    pte = 0x00ABC000 | 0x007
    assert pte_addr(pte) | pte_flags(pte) == pte
    assert pte_flags(pte) == 0x007


def test_kernel_address_translation():
    assert p2v(0) == KERNBASE
    assert v2p(KERNBASE) == 0
    assert v2p(p2v(0x100000)) == 0x100000


def test_flat_kernel_code_segment_bytes():
    seg = make_segment(STA_X | STA_R, 0, 0xFFFFFFFF, 0)
    assert seg.pack() == bytes.fromhex("ffff0000009acf00")


@pytest.mark.parametrize("seg_type", [STA_X | STA_R, STA_W])
@pytest.mark.parametrize("base,limit", [(0, 0xFFFFFFFF), (0x12345678, 0x0FFFF000)])
def test_asm_macro_matches_descriptor(seg_type, base, limit):
    assert asm_segment(seg_type, base, limit) == make_segment(seg_type, base, limit, 0).pack()


def test_user_segment_dpl():
    seg = make_segment(STA_W, 0, 0xFFFFFFFF, DPL_USER)
    assert seg.dpl == DPL_USER
    assert (seg.pack()[5] >> 5) & 0x3 == DPL_USER


def test_segment16_fields():
    base, limit = 0x80112340, 103
    seg = make_segment16(STS_T32A, base, limit, 0)
    assert seg.g == 0
    assert seg.lim_15_0 == limit
    low, high = struct.unpack("<II", seg.pack())
    assert low >> 16 == base & 0xFFFF
    assert high >> 24 == base >> 24


def test_trap_and_interrupt_gates():
    offset = 0x80105A3C
    trap = make_gate(True, SEG_KCODE << 3, offset, DPL_USER)
    intr = make_gate(False, SEG_KCODE << 3, offset, 0)
    assert trap.type == STS_TG32
    assert intr.type == STS_IG32
    assert (trap.off_31_16 << 16) | trap.off_15_0 == offset
    off_low, cs, _, off_high = struct.unpack("<HHHH", trap.pack())
    assert (off_high << 16) | off_low == offset
    assert cs == SEG_KCODE << 3