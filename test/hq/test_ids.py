import pytest

from grafnote.hq.ids import IDAllocator, InvalidIDFormat


def test_allocate_after_max():
    assert IDAllocator(["1", "3", "5"]).allocate() == "6"


def test_allocate_from_empty():
    assert IDAllocator().allocate() == "1"


def test_allocations_strictly_increase():
    allocator = IDAllocator(["4", "10", "2"])
    issued = [int(allocator.allocate()) for _ in range(5)]
    assert issued == sorted(issued)
    assert len(set(issued)) == 5
    assert issued[0] == 11


def test_numeric_not_lexicographic():
    assert IDAllocator(["9", "10"]).allocate() == "11"


def test_non_numeric_id_blocks_allocation():
    allocator = IDAllocator(["1", "abc"])
    with pytest.raises(InvalidIDFormat):
        allocator.allocate()
    assert allocator.ids == frozenset({"1", "abc"})


def test_register_and_seed():
    allocator = IDAllocator()
    allocator.register("41")
    assert allocator.allocate() == "42"
    allocator.seed(["7"])
    assert len(allocator) == 1
    assert allocator.allocate() == "8"
