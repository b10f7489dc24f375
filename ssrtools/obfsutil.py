"""Helpers shared by the obfuscation plugins."""

from __future__ import annotations

from typing import Iterator, Optional, Tuple

__all__ = ["get_head_size", "XorShift128Plus"]

_MASK64 = (1 << 64) - 1


def get_head_size(data: Optional[bytes], default_size: int) -> int:
    """Size of the address header at the start of ``data``.

    The low three bits of the first byte give the address type: 1 (IPv4)
    is 7 bytes, 4 (IPv6) is 19, and 3 (domain name) is 4 plus the length
    byte, read as a signed byte. Anything else, or fewer than two bytes,
    gives ``default_size``.
    """
    if data is None or len(data) < 2:
        return default_size
    head_type = data[0] & 0x7
    if head_type == 1:
        return 7
    if head_type == 4:
        return 19
    if head_type == 3:
        length = data[1]
        if length >= 0x80:
            length -= 0x100
        return 4 + length
    return default_size


class XorShift128Plus:
    """The xorshift128+ pseudo-random generator."""

    def __init__(self, state: Tuple[int, int] = (0x10000000, 0xFFFFFFFF)) -> None:
        self.state = (state[0] & _MASK64, state[1] & _MASK64)

    def seed(self, seed: int) -> None:
        """Reset the state from a 32-bit seed, such as a timestamp."""
        seed &= 0xFFFFFFFF
        self.state = (seed | 0x100000000, ((seed << 32) | 0x1) & _MASK64)

    def next(self) -> int:
        """Advance the state and return the next 64-bit value."""
        x, y = self.state
        x ^= (x << 23) & _MASK64
        x ^= x >> 17
        x ^= y ^ (y >> 26)
        self.state = (y, x)
        return (x + y) & _MASK64

    def __iter__(self) -> Iterator[int]:
        while True:
            yield self.next()