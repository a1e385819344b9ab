"""Block interleaving of Hamming codewords to survive burst errors.

The message is cut into k-bit blocks, each block is Hamming encoded into a
row of a (num_blocks x n) matrix, and the matrix is sent column by column.
A burst of up to num_blocks consecutive errors on the channel then hits
every codeword at most once.
"""

import logging
from dataclasses import dataclass

import numpy as np

from blockcodes.channel_coding import DecodeOutcome, DecodeResult, as_bits
from blockcodes.hamming import HammingCode, HammingConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InterleavedDecodeResult:
    """Recovered message and the decode result of every row."""

    message: np.ndarray
    rows: list[DecodeResult]

    @property
    def outcome(self) -> DecodeOutcome:
        """Worst outcome over all rows."""
        if not self.rows:
            return DecodeOutcome.NO_ERROR_DETECTED
        return max((row.outcome for row in self.rows), key=lambda outcome: outcome.severity)

    @property
    def corrected_rows(self) -> list[int]:
        """Indices of the rows in which a bit was flipped."""
        return [i for i, row in enumerate(self.rows) if row.outcome == DecodeOutcome.CORRECTED]


def split_blocks(message: np.ndarray, k: int) -> np.ndarray:
    """Cut ``message`` into ceil(len / k) rows of k bits, zero-padding the last row."""
    message = as_bits(message, name="message")
    num_blocks = -(-len(message) // k)
    padded = np.zeros(num_blocks * k, dtype=int)
    padded[: len(message)] = message
    return padded.reshape(num_blocks, k)


def interleave(matrix: np.ndarray) -> np.ndarray:
    """Read a codeword matrix column by column.

    Output position i * num_blocks + j holds matrix[j][i].
    """
    return np.asarray(matrix).T.ravel()


def deinterleave(sequence: np.ndarray, n: int) -> np.ndarray:
    """Invert :func:`interleave` for codewords of length ``n``."""
    sequence = as_bits(sequence, name="sequence")
    if len(sequence) % n != 0:
        msg = f"Sequence length {len(sequence)} is not a multiple of the codeword length {n}"
        raise ValueError(msg)
    return sequence.reshape(n, -1).T.copy()


def join_blocks(matrix: np.ndarray) -> np.ndarray:
    """Concatenate the rows of ``matrix``."""
    return np.asarray(matrix).ravel()


class BlockInterleaver:
    """Hamming coding with block interleaving."""

    def __init__(self, config: HammingConfig) -> None:
        """Create the per-row Hamming code."""
        self.config = config
        self.code = HammingCode(config)

    def encode_blocks(self, blocks: np.ndarray) -> np.ndarray:
        """Hamming-encode every row of ``blocks``."""
        if len(blocks) == 0:
            return np.zeros((0, self.config.n), dtype=int)
        return np.stack([self.code.encode(block) for block in blocks])

    def decode_blocks(self, matrix: np.ndarray) -> list[DecodeResult]:
        """Hamming-decode every row of a deinterleaved matrix."""
        return [self.code.decode(row) for row in matrix]

    def encode(self, message: np.ndarray) -> np.ndarray:
        """Encode and interleave ``message``."""
        blocks = split_blocks(message, self.config.k)
        return interleave(self.encode_blocks(blocks))

    def decode(self, sequence: np.ndarray, message_length: int | None = None) -> InterleavedDecodeResult:
        """Deinterleave, decode every row and reassemble the message.

        ``message_length`` trims the zero padding added to the last block.
        More than one error landing in the same row is miscorrected by the
        Hamming decoder without notice; choosing enough blocks for the
        expected burst length is up to the caller.
        """
        matrix = deinterleave(sequence, self.config.n)
        rows = self.decode_blocks(matrix)
        if rows:
            message = join_blocks([row.message for row in rows])
        else:
            message = np.zeros(0, dtype=int)
        if message_length is not None:
            if not 0 <= message_length <= len(message):
                msg = f"message_length {message_length} outside 0..{len(message)} decoded bits"
                raise ValueError(msg)
            message = message[:message_length]

        result = InterleavedDecodeResult(message=message, rows=rows)
        logger.debug(
            "Deinterleaved %d rows, corrected %s -> %s",
            len(rows),
            result.corrected_rows,
            result.outcome.name,
        )
        return result
