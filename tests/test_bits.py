"""Tests for the leading-zero-bits predicate."""

import random

import pytest

from wow.services.bits import MASKS, has_leading_zero_bits


def leading_bits_are_zero(digest: bytes, bits: int) -> bool:
    """Integer-based reference: the top ``bits`` bits of the digest are zero."""
    if bits > len(digest) * 8:
        return False
    if bits == 0:
        return True
    n = (bits + 7) // 8
    value = int.from_bytes(digest[:n], "big")
    return value >> (n * 8 - bits) == 0


class TestMasks:
    def test_mask_has_top_k_bits_set(self):
        assert len(MASKS) == 9
        for k, mask in enumerate(MASKS):
            assert mask == (0xFF << (8 - k)) & 0xFF


class TestHasLeadingZeroBits:
    @pytest.mark.parametrize(
        "digest,bits,expected",
        [
            (b"", 0, True),
            (b"\x80", 0, True),
            (b"\x80", 1, False),
            (b"\x7f", 1, True),
            (b"\x00\x00\xff", 16, True),
            (b"\x00\x00\xff", 17, False),
            (b"\x00\x1f", 11, True),
            (b"\x00\x1f", 12, False),
            (b"\x00\x00\x00\x00", 32, True),
            (b"\x00\x00\x00\x01", 32, False),
            (b"\x00" * 32, 256, True),
        ],
    )
    def test_examples(self, digest, bits, expected):
        assert has_leading_zero_bits(digest, bits) is expected

    def test_not_enough_material(self):
        """Asking for more bits than the digest holds is always False."""
        assert has_leading_zero_bits(b"\x00", 9) is False
        assert has_leading_zero_bits(b"\x00" * 32, 257) is False
        assert has_leading_zero_bits(b"", 1) is False

    def test_negative_bits_rejected(self):
        with pytest.raises(ValueError):
            has_leading_zero_bits(b"\x00", -1)

    def test_matches_integer_reference(self):
        rng = random.Random(1234)
        for _ in range(2000):
            length = rng.randint(0, 5)
            # Bias towards leading zeros so both outcomes are exercised
            digest = bytes(rng.choice((0, 0, 1, 0x0F, 0x3C, 0x80, 0xFF)) for _ in range(length))
            bits = rng.randint(0, 48)
            assert has_leading_zero_bits(digest, bits) == leading_bits_are_zero(digest, bits)
