import pytest

from xvshell.umalloc import HEADER_SIZE, Allocator

CHUNK = 4096 * HEADER_SIZE


def test_blocks_are_aligned_and_disjoint():
    heap = Allocator()
    sizes = [1, 10, 100, 1000, 0]
    blocks = sorted((heap.malloc(n), n) for n in sizes)
    for address, _ in blocks:
        assert address % HEADER_SIZE == 0
    for (a, n), (b, _) in zip(blocks, blocks[1:]):
        assert a + n <= b - HEADER_SIZE


def test_free_then_malloc_reuses_block():
    heap = Allocator()
    a = heap.malloc(100)
    heap.free(a)
    assert heap.malloc(100) == a


def test_freed_blocks_coalesce():
    heap = Allocator(heap_limit=CHUNK)
    a = heap.malloc(100)
    b = heap.malloc(200)
    heap.free(a)
    heap.free(b)
    brk = heap.sbrk(0)
    whole = heap.malloc(CHUNK - HEADER_SIZE)
    assert heap.sbrk(0) == brk
    assert whole - HEADER_SIZE == brk - CHUNK


def test_heap_grows_when_needed():
    heap = Allocator()
    heap.malloc(10)
    brk = heap.sbrk(0)
    heap.malloc(CHUNK)
    assert heap.sbrk(0) > brk


def test_out_of_memory():
    heap = Allocator(heap_limit=1000)
    with pytest.raises(MemoryError):
        heap.malloc(10)


def test_free_unknown_and_double_free():
    heap = Allocator()
    a = heap.malloc(16)
    with pytest.raises(ValueError):
        heap.free(a + HEADER_SIZE)
    heap.free(a)
    with pytest.raises(ValueError):
        heap.free(a)


def test_sbrk_moves_break():
    heap = Allocator(heap_limit=64)
    start = heap.sbrk(0)
    assert heap.sbrk(16) == start
    assert heap.sbrk(0) == start + 16
    with pytest.raises(MemoryError):
        heap.sbrk(64)
    assert heap.sbrk(0) == start + 16
    assert heap.sbrk(-16) == start + 16
    with pytest.raises(ValueError):
        heap.sbrk(-1)


def test_negative_size_rejected():
    with pytest.raises(ValueError):
        Allocator().malloc(-1)