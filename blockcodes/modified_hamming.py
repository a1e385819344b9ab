"""Extended (modified) Hamming code with double-error detection."""

import logging

import numpy as np

from blockcodes import hamming
from blockcodes.channel_coding import DecodeOutcome, DecodeResult, as_bits, frozen
from blockcodes.hamming import HammingConfig

logger = logging.getLogger(__name__)


def extend_check_matrix(check_matrix: np.ndarray) -> np.ndarray:
    """Append an overall-parity row and column to a Hamming check matrix.

    The new row holds the column sums (mod 2) of all rows plus a row of ones,
    so the extra redundant bit is the parity of the information bits and the
    original redundant bits together.
    """
    r, n = check_matrix.shape
    extended = np.zeros((r + 1, n + 1), dtype=int)
    extended[:r, :n] = check_matrix
    extended[r, :] = 1
    extended[r, :] = extended.sum(axis=0) % 2
    return extended


class ModifiedHammingCode:
    """Hamming code with one extra parity bit, n = k + r + 1.

    Single errors are corrected; double errors are reported as
    UNCORRECTABLE_PATTERN instead of being miscorrected.
    """

    def __init__(self, config: HammingConfig) -> None:
        """Build the extended check matrix for the base Hamming ``config``."""
        self.config = config
        self.message_length = config.k
        self.block_length = config.n + 1
        self.check_matrix = frozen(extend_check_matrix(hamming.build_check_matrix(config.k, config.r)))

    def encode(self, message: np.ndarray) -> np.ndarray:
        """Encode a k-bit message into a (k + r + 1)-bit codeword."""
        return hamming.encode(self.check_matrix, message)

    def syndrome(self, codeword: np.ndarray) -> np.ndarray:
        """Syndrome over all r + 1 redundant bits."""
        return hamming.syndrome(self.check_matrix, codeword)

    def decode(self, codeword: np.ndarray) -> DecodeResult:
        """Correct one error or flag two.

        An odd overall parity means an odd number of errors and the syndrome
        is looked up as in plain Hamming decoding. An even parity with a
        non-zero syndrome means two errors, which are left untouched.
        """
        codeword = as_bits(codeword, length=self.block_length, name="codeword")
        syndrome_bits = self.syndrome(codeword)
        parity_odd = bool(codeword.sum() % 2)

        if parity_odd:
            recovery = hamming.recovery_vector(self.check_matrix, syndrome_bits)
            outcome = DecodeOutcome.CORRECTED if recovery.any() else DecodeOutcome.UNCORRECTABLE_PATTERN
        else:
            recovery = np.zeros(self.block_length, dtype=int)
            if syndrome_bits.any():
                outcome = DecodeOutcome.UNCORRECTABLE_PATTERN
            else:
                outcome = DecodeOutcome.NO_ERROR_DETECTED
        logger.debug(
            "Extended Hamming syndrome %s, parity %s -> %s",
            syndrome_bits.tolist(),
            "odd" if parity_odd else "even",
            outcome.name,
        )

        corrected = hamming.recover(codeword, recovery)
        return DecodeResult(
            message=corrected[: self.message_length],
            codeword=corrected,
            syndrome=syndrome_bits,
            recovery=recovery,
            outcome=outcome,
        )
