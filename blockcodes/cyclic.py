"""Cyclic (polynomial) code with systematic encoding by polynomial division.

Source: https://en.wikipedia.org/wiki/Cyclic_code#Encoding
"""

import logging
from dataclasses import dataclass

import numpy as np

from blockcodes import gf2
from blockcodes.channel_coding import DecodeOutcome, DecodeResult, as_bits, frozen

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CyclicConfig:
    """Dimensions and generator polynomial of a cyclic code.

    The generator is given highest degree first and must have degree n - k.
    """

    k: int
    n: int
    generator: tuple[int, ...]

    def __post_init__(self) -> None:
        """Validate the dimensions against the generator polynomial."""
        if not 0 < self.k < self.n:
            msg = f"Need 0 < k < n, got k={self.k}, n={self.n}"
            raise ValueError(msg)
        if len(self.generator) != self.r + 1:
            msg = f"Generator length {len(self.generator)} != n - k + 1 = {self.r + 1}"
            raise ValueError(msg)
        gf2.validate_divisor(np.array(self.generator))

    @property
    def r(self) -> int:
        """Number of redundant bits."""
        return self.n - self.k


def encode(message: np.ndarray, n: int, generator: np.ndarray) -> np.ndarray:
    """Append the remainder of message * x^(n-k) divided by the generator."""
    message = as_bits(message, name="message")
    k = len(message)
    r = n - k
    generator = gf2.validate_divisor(generator)
    if len(generator) != r + 1:
        msg = f"Generator length {len(generator)} != n - k + 1 = {r + 1}"
        raise ValueError(msg)

    dividend = np.concatenate([message, np.zeros(r, dtype=int)])
    rest = gf2.trim_leading_zeros(gf2.poly_mod(dividend, generator))
    redundancy = np.zeros(r, dtype=int)
    redundancy[r - len(rest) :] = rest
    return np.concatenate([message, redundancy])


def build_generating_matrix(k: int, n: int, generator: np.ndarray) -> np.ndarray:
    """Build the k x n generating matrix in systematic form.

    Row i starts as the generator shifted right by i positions; the rows are
    then XOR-combined until the first k columns form the identity. Row i is
    the codeword of the i-th unit message.
    """
    generator = gf2.validate_divisor(generator)
    if len(generator) != n - k + 1:
        msg = f"Generator length {len(generator)} != n - k + 1 = {n - k + 1}"
        raise ValueError(msg)
    matrix = np.zeros((k, n), dtype=int)
    for i in range(k):
        matrix[i, i : i + len(generator)] = generator
    return gf2.reduce_to_systematic(matrix)


def calculate_syndrome(codeword: np.ndarray, generator: np.ndarray) -> np.ndarray:
    """Remainder of the received codeword divided by the generator."""
    generator = gf2.validate_divisor(generator)
    r = len(generator) - 1
    return gf2.poly_mod(codeword, generator)[-r:]


def recovery_vector(generating_matrix: np.ndarray, syndrome_bits: np.ndarray, k: int) -> np.ndarray:
    """Error pattern for a syndrome, all-zero when no single error explains it.

    A row whose redundant part equals the syndrome points at the information
    bit of that row. A weight-one syndrome that matches no row points at the
    redundant bit in the same position.
    """
    n = generating_matrix.shape[1]
    syndrome_bits = as_bits(syndrome_bits, length=n - k, name="syndrome")
    recovery = np.zeros(n, dtype=int)
    if not syndrome_bits.any():
        return recovery

    matches = np.flatnonzero(np.all(generating_matrix[:, k:] == syndrome_bits[np.newaxis, :], axis=1))
    if len(matches) > 0:
        recovery[matches[0]] = 1
    elif syndrome_bits.sum() == 1:
        recovery[k:] = syndrome_bits
    return recovery


def recover_message(codeword: np.ndarray, recovery: np.ndarray) -> np.ndarray:
    """XOR the error pattern into the received codeword."""
    codeword = as_bits(codeword, name="codeword")
    return codeword ^ as_bits(recovery, length=len(codeword), name="recovery")


class CyclicCode:
    """Cyclic code owning its generator polynomial and generating matrix."""

    def __init__(self, config: CyclicConfig) -> None:
        """Build the generating matrix for ``config``."""
        self.config = config
        self.message_length = config.k
        self.block_length = config.n
        self.generator = frozen(np.array(config.generator, dtype=int))
        self.generating_matrix = frozen(build_generating_matrix(config.k, config.n, self.generator))

    def encode(self, message: np.ndarray) -> np.ndarray:
        """Encode a k-bit message into an n-bit codeword."""
        message = as_bits(message, length=self.message_length, name="message")
        return encode(message, self.block_length, self.generator)

    def syndrome(self, codeword: np.ndarray) -> np.ndarray:
        """Syndrome of a received codeword."""
        codeword = as_bits(codeword, length=self.block_length, name="codeword")
        return calculate_syndrome(codeword, self.generator)

    def decode(self, codeword: np.ndarray) -> DecodeResult:
        """Correct at most one bit error and return the information bits."""
        syndrome_bits = self.syndrome(codeword)
        recovery = recovery_vector(self.generating_matrix, syndrome_bits, self.message_length)
        corrected = recover_message(codeword, recovery)

        if not syndrome_bits.any():
            outcome = DecodeOutcome.NO_ERROR_DETECTED
        elif recovery.any():
            outcome = DecodeOutcome.CORRECTED
        else:
            outcome = DecodeOutcome.UNCORRECTABLE_PATTERN
        logger.debug("Cyclic syndrome %s -> %s", syndrome_bits.tolist(), outcome.name)

        return DecodeResult(
            message=corrected[: self.message_length],
            codeword=corrected,
            syndrome=syndrome_bits,
            recovery=recovery,
            outcome=outcome,
        )
