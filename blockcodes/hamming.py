"""Hamming code: check-matrix construction, systematic encoding and single-error correction."""

import logging
from dataclasses import dataclass

import numpy as np

from blockcodes.channel_coding import DecodeOutcome, DecodeResult, as_bits, frozen

logger = logging.getLogger(__name__)

# Two redundant bits is the smallest Hamming code, (3, 1)
MIN_REDUNDANT_BITS = 2


def max_message_length(r: int) -> int:
    """Largest number of information bits ``r`` redundant bits can protect."""
    return 2**r - r - 1


@dataclass(frozen=True)
class HammingConfig:
    """Dimensions of a Hamming code.

    k is the information length and r the number of redundant bits; the
    codeword length n is derived.
    """

    k: int
    r: int

    def __post_init__(self) -> None:
        """Reject dimensions that cannot give distinct non-zero check columns."""
        if self.k < 1:
            msg = f"Information length must be positive, got k={self.k}"
            raise ValueError(msg)
        if self.r < MIN_REDUNDANT_BITS:
            msg = f"Need at least {MIN_REDUNDANT_BITS} redundant bits, got r={self.r}"
            raise ValueError(msg)
        if self.k > max_message_length(self.r):
            msg = f"k={self.k} exceeds the {max_message_length(self.r)} information bits r={self.r} can protect"
            raise ValueError(msg)

    @property
    def n(self) -> int:
        """Codeword length."""
        return self.k + self.r

    @classmethod
    def for_message_length(cls, k: int) -> "HammingConfig":
        """Smallest Hamming code carrying ``k`` information bits."""
        r = MIN_REDUNDANT_BITS
        while max_message_length(r) < k:
            r += 1
        return cls(k=k, r=r)


def _data_positions(k: int) -> np.ndarray:
    """First ``k`` 1-indexed positions that are not powers of two (3, 5, 6, 7, 9, ...)."""
    positions = []
    p = 3
    while len(positions) < k:
        if p & (p - 1):
            positions.append(p)
        p += 1
    return np.array(positions, dtype=int)


def build_check_matrix(k: int, r: int) -> np.ndarray:
    """Build the r x (k + r) check matrix.

    Power-of-two positions are reserved for the redundant bits; redundant bit
    i covers data position p when bit i of p is set. The redundant bits' own
    columns form the identity.
    """
    config = HammingConfig(k, r)
    matrix = np.zeros((r, config.n), dtype=int)
    positions = _data_positions(k)
    matrix[:, :k] = (positions[np.newaxis, :] >> np.arange(r)[:, np.newaxis]) & 1
    matrix[:, k:] = np.eye(r, dtype=int)
    return matrix


def _check_dimensions(check_matrix: np.ndarray) -> tuple[int, int]:
    """Return (k, r) for a check matrix."""
    r, n = check_matrix.shape
    return n - r, r


def calculate_redundancy(check_matrix: np.ndarray, message: np.ndarray) -> np.ndarray:
    """Redundant bits for ``message``: row i XORs the information bits it covers."""
    k, _ = _check_dimensions(check_matrix)
    message = as_bits(message, length=k, name="message")
    return (check_matrix[:, :k] @ message) % 2


def encode(check_matrix: np.ndarray, message: np.ndarray) -> np.ndarray:
    """Append the redundant bits to ``message``."""
    redundancy = calculate_redundancy(check_matrix, message)
    return np.concatenate([as_bits(message), redundancy])


def split(check_matrix: np.ndarray, codeword: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Split a codeword into information and redundant bits."""
    k, r = _check_dimensions(check_matrix)
    codeword = as_bits(codeword, length=k + r, name="codeword")
    return codeword[:k], codeword[k:]


def syndrome(check_matrix: np.ndarray, codeword: np.ndarray) -> np.ndarray:
    """Received redundancy XOR the redundancy recomputed from the received information bits."""
    information, redundancy = split(check_matrix, codeword)
    return redundancy ^ calculate_redundancy(check_matrix, information)


def recovery_vector(check_matrix: np.ndarray, syndrome_bits: np.ndarray) -> np.ndarray:
    """Error pattern with a 1 at the first column equal to the syndrome.

    An all-zero vector is returned when the syndrome is zero or matches no
    column.
    """
    r, n = check_matrix.shape
    syndrome_bits = as_bits(syndrome_bits, length=r, name="syndrome")
    recovery = np.zeros(n, dtype=int)
    if not syndrome_bits.any():
        return recovery
    matches = np.flatnonzero(np.all(check_matrix == syndrome_bits[:, np.newaxis], axis=0))
    if len(matches) > 0:
        recovery[matches[0]] = 1
    return recovery


def recover(codeword: np.ndarray, recovery: np.ndarray) -> np.ndarray:
    """Apply an error pattern to a received codeword."""
    codeword = as_bits(codeword, name="codeword")
    recovery = as_bits(recovery, length=len(codeword), name="recovery")
    return codeword ^ recovery


def decode(check_matrix: np.ndarray, codeword: np.ndarray) -> DecodeResult:
    """Correct at most one bit error in ``codeword``.

    Two or more errors may produce a syndrome equal to some other column, in
    which case the wrong bit is flipped and CORRECTED is still reported.
    """
    k, _ = _check_dimensions(check_matrix)
    syndrome_bits = syndrome(check_matrix, codeword)
    recovery = recovery_vector(check_matrix, syndrome_bits)
    corrected = recover(codeword, recovery)

    if not syndrome_bits.any():
        outcome = DecodeOutcome.NO_ERROR_DETECTED
    elif recovery.any():
        outcome = DecodeOutcome.CORRECTED
    else:
        outcome = DecodeOutcome.UNCORRECTABLE_PATTERN
    logger.debug("Hamming syndrome %s -> %s", syndrome_bits.tolist(), outcome.name)

    return DecodeResult(
        message=corrected[:k],
        codeword=corrected,
        syndrome=syndrome_bits,
        recovery=recovery,
        outcome=outcome,
    )


class HammingCode:
    """Hamming code with a check matrix built once and shared read-only."""

    def __init__(self, config: HammingConfig) -> None:
        """Build the check matrix for ``config``."""
        self.config = config
        self.message_length = config.k
        self.block_length = config.n
        self.check_matrix = frozen(build_check_matrix(config.k, config.r))

    def encode(self, message: np.ndarray) -> np.ndarray:
        """Encode a k-bit message into an n-bit codeword."""
        return encode(self.check_matrix, message)

    def syndrome(self, codeword: np.ndarray) -> np.ndarray:
        """Syndrome of a received codeword."""
        return syndrome(self.check_matrix, codeword)

    def decode(self, codeword: np.ndarray) -> DecodeResult:
        """Correct a single bit error and return the information bits."""
        return decode(self.check_matrix, codeword)
