import pytest

from kubeutil.ring_buffer import RingGrowing


def test_growth():
    count = 10
    g = RingGrowing(1)
    for i in range(count):
        assert len(g) == i
        g.write_one(i)
    read = 0
    while len(g) > 0:
        assert g.read_one() == read
        read += 1
    assert read == count
    assert len(g) == 0
    assert g.capacity == 16


def test_empty():
    g = RingGrowing(1)
    with pytest.raises(IndexError):
        g.read_one()


def test_wraparound_keeps_order():
    g = RingGrowing(4)
    for i in range(3):
        g.write_one(i)
    assert g.read_one() == 0
    assert g.read_one() == 1
    for i in range(3, 9):
        g.write_one(i)
    assert [g.read_one() for _ in range(len(g))] == list(range(2, 9))
    assert g.capacity == 8


def test_none_items_are_stored():
    g = RingGrowing(2)
    g.write_one(None)
    assert len(g) == 1
    assert g.read_one() is None
    assert len(g) == 0


def test_invalid_size():
    with pytest.raises(ValueError):
        RingGrowing(0)