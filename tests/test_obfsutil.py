import itertools

import pytest

from ssrtools.obfsutil import XorShift128Plus, get_head_size


@pytest.mark.parametrize(
    "data, expected",
    [
        (b"\x01\x00\x00\x00\x00\x00\x00", 7),
        (b"\x04" + bytes(18), 19),
        (b"\x11\x00", 7),
        (b"\x03\x0bexample.com", 4 + 0x0B),
        (b"\x02\x00", 30),
        (b"\x01", 30),
        (b"", 30),
        (None, 30),
    ],
)
def test_get_head_size(data, expected):
    assert get_head_size(data, 30) == expected


def test_get_head_size_reads_length_as_signed_byte():
    assert get_head_size(b"\x03\x80", 30) == -124


def test_default_state():
    assert XorShift128Plus().state == (0x10000000, 0xFFFFFFFF)


def test_seed_zero_state():
    rng = XorShift128Plus()
    rng.seed(0)
    assert rng.state == (0x100000000, 1)


def test_next_output_is_sum_of_new_state():
    rng = XorShift128Plus()
    for _ in range(50):
        before = rng.state
        value = rng.next()
        after = rng.state
        assert after[0] == before[1]
        assert value == (after[0] + after[1]) & ((1 << 64) - 1)
        assert 0 <= value < 1 << 64


def test_same_seed_same_sequence():
    a, b = XorShift128Plus(), XorShift128Plus()
    a.seed(12345)
    b.seed(12345)
    assert list(itertools.islice(a, 20)) == list(itertools.islice(b, 20))


def test_seed_truncated_to_32_bits():
    a, b = XorShift128Plus(), XorShift128Plus()
    a.seed(7)
    b.seed((1 << 32) + 7)
    assert a.state == b.state
    assert a.next() == b.next()


def test_different_seeds_diverge():
    a, b = XorShift128Plus(), XorShift128Plus()
    a.seed(1)
    b.seed(2)
    assert list(itertools.islice(a, 5)) != list(itertools.islice(b, 5))