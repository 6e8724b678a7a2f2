"""Leading-zero-bit predicate shared by challenge validation and the solver."""

# MASKS[k] has the top k bits of a byte set
MASKS = (0x00, 0x80, 0xC0, 0xE0, 0xF0, 0xF8, 0xFC, 0xFE, 0xFF)


def has_leading_zero_bits(digest: bytes, bits: int) -> bool:
    """Return True if ``digest`` starts with at least ``bits`` zero bits."""
    if bits < 0:
        raise ValueError(f"bits must be non-negative, got {bits}")
    if len(digest) * 8 < bits:
        return False

    full_bytes, remaining_bits = divmod(bits, 8)

    for i in range(full_bytes):
        if digest[i] != 0:
            return False

    if remaining_bits:
        return digest[full_bytes] & MASKS[remaining_bits] == 0

    return True
