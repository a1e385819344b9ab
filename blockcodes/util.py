"""Utility functions for feeding messages through the codes and simulating a channel."""

from collections.abc import Iterable

import numpy as np

from blockcodes.channel_coding import as_bits

# Bits per character for fixed-width text blocks
CHAR_WIDTH = 8


def _codes_to_bits(codes: np.ndarray, width: int) -> np.ndarray:
    """Write every code as a big-endian block of ``width`` bits."""
    shifts = np.arange(width - 1, -1, -1)
    return ((np.asarray(codes, dtype=int)[:, np.newaxis] >> shifts) & 1).ravel()


def _bits_to_codes(bits: np.ndarray, width: int) -> np.ndarray:
    """Read ``width``-bit big-endian blocks back into integer codes."""
    bits = as_bits(bits, name="bits")
    if len(bits) % width != 0:
        msg = f"Bit count {len(bits)} is not a multiple of the block width {width}"
        raise ValueError(msg)
    weights = 1 << np.arange(width - 1, -1, -1)
    return bits.reshape(-1, width) @ weights


def bytes_to_bits(data: bytes) -> np.ndarray:
    """Convert raw bytes to a bit array, most significant bit first."""
    return _codes_to_bits(np.frombuffer(data, dtype=np.uint8), CHAR_WIDTH)


def bits_to_bytes(bits: np.ndarray) -> bytes:
    """Convert a whole number of bytes' worth of bits back to raw bytes."""
    return bytes(_bits_to_codes(bits, CHAR_WIDTH).tolist())


def text_to_bits(text: str) -> np.ndarray:
    """Convert a UTF-8 string to a bit array."""
    return bytes_to_bits(text.encode("utf-8"))


def bits_to_text(bits: np.ndarray) -> str:
    """Convert a bit array back to a UTF-8 string; invalid UTF-8 raises."""
    return bits_to_bytes(bits).decode("utf-8")


def ascii_to_bits(text: str, width: int = CHAR_WIDTH) -> np.ndarray:
    """Encode each character's code point as a fixed-width big-endian block."""
    codes = [ord(char) for char in text]
    for char, code in zip(text, codes):
        if code >= 2**width:
            msg = f"Character {char!r} does not fit in {width} bits"
            raise ValueError(msg)
    return _codes_to_bits(np.array(codes, dtype=int), width)


def bits_to_ascii(bits: np.ndarray, width: int = CHAR_WIDTH) -> str:
    """Inverse of :func:`ascii_to_bits`."""
    return "".join(chr(int(code)) for code in _bits_to_codes(bits, width))


def flip_bits(word: np.ndarray, positions: Iterable[int]) -> np.ndarray:
    """Return a copy of ``word`` with the given positions inverted."""
    flipped = as_bits(word)
    for pos in positions:
        if not 0 <= pos < len(flipped):
            msg = f"Position {pos} outside word of length {len(flipped)}"
            raise ValueError(msg)
        flipped[pos] ^= 1
    return flipped


def flip_burst(word: np.ndarray, start: int, length: int) -> np.ndarray:
    """Invert ``length`` consecutive bits starting at ``start``."""
    return flip_bits(word, range(start, start + length))


def random_error_positions(length: int, count: int, rng: np.random.Generator) -> np.ndarray:
    """Draw ``count`` distinct bit positions in a word of ``length`` bits."""
    if count > length:
        msg = f"Cannot place {count} errors in {length} bits"
        raise ValueError(msg)
    return np.sort(rng.choice(length, size=count, replace=False))
