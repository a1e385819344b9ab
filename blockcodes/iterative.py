"""Iterative (two-dimensional parity) code.

The message fills a rows x columns grid row-major. An extra column holds the
row parities, an extra row the column parities, and the corner the parity of
every other cell in the grid.
"""

import logging
from dataclasses import dataclass

import numpy as np

from blockcodes.channel_coding import DecodeOutcome, DecodeResult, as_bits, frozen

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IterativeConfig:
    """Grid dimensions of an iterative code."""

    rows: int
    columns: int

    def __post_init__(self) -> None:
        """Reject empty grids."""
        if self.rows < 1 or self.columns < 1:
            msg = f"Grid must be at least 1x1, got {self.rows}x{self.columns}"
            raise ValueError(msg)

    @property
    def message_length(self) -> int:
        """Number of data cells."""
        return self.rows * self.columns

    @property
    def redundancy_length(self) -> int:
        """Row parities, column parities and the corner."""
        return self.rows + self.columns + 1

    @property
    def block_length(self) -> int:
        """Length of the transmitted sequence."""
        return self.message_length + self.redundancy_length


def _total_parity(grid: np.ndarray) -> int:
    """Parity of every cell except the bottom-right corner."""
    return int((grid.sum() - grid[-1, -1]) % 2)


def build_matrix(message: np.ndarray, rows: int, columns: int) -> np.ndarray:
    """Place ``message`` in a grid and fill in the row, column and corner parities."""
    config = IterativeConfig(rows, columns)
    data = as_bits(message, length=config.message_length, name="message").reshape(rows, columns)
    grid = np.zeros((rows + 1, columns + 1), dtype=int)
    grid[:rows, :columns] = data
    grid[:rows, columns] = data.sum(axis=1) % 2
    grid[rows, :columns] = data.sum(axis=0) % 2
    grid[rows, columns] = _total_parity(grid)
    return grid


def redundancy_from_matrix(grid: np.ndarray) -> np.ndarray:
    """Row parities, then column parities, then the corner."""
    return np.concatenate([grid[:-1, -1], grid[-1, :-1], grid[-1, -1:]])


def matrix_to_sequence(grid: np.ndarray) -> np.ndarray:
    """Unroll a parity grid into its transmission order."""
    return np.concatenate([grid[:-1, :-1].ravel(), redundancy_from_matrix(grid)])


def sequence_to_matrix(sequence: np.ndarray, rows: int, columns: int) -> np.ndarray:
    """Rebuild a parity grid from a received sequence."""
    config = IterativeConfig(rows, columns)
    sequence = as_bits(sequence, length=config.block_length, name="sequence")
    data_end = config.message_length
    grid = np.zeros((rows + 1, columns + 1), dtype=int)
    grid[:rows, :columns] = sequence[:data_end].reshape(rows, columns)
    grid[:rows, columns] = sequence[data_end : data_end + rows]
    grid[rows, :columns] = sequence[data_end + rows : data_end + rows + columns]
    grid[rows, columns] = sequence[-1]
    return grid


def calculate_redundancy(message: np.ndarray, rows: int, columns: int) -> np.ndarray:
    """Redundant bits a sender would attach to ``message``."""
    return redundancy_from_matrix(build_matrix(message, rows, columns))


def get_syndrome(sequence: np.ndarray, rows: int, columns: int) -> np.ndarray:
    """Compare received parities with those recomputed from the received data.

    The first ``rows`` elements flag rows, the next ``columns`` flag columns.
    The last element compares the parity of the whole received grid
    (corner excluded) with the recomputed corner and is 1 when the parity
    bits disagree among themselves.
    """
    grid = sequence_to_matrix(sequence, rows, columns)
    received = redundancy_from_matrix(grid)
    calculated = calculate_redundancy(grid[:rows, :columns].ravel(), rows, columns)
    syndrome_bits = received ^ calculated
    syndrome_bits[-1] = _total_parity(grid) ^ calculated[-1]
    return syndrome_bits


def recovery_vector(syndrome_bits: np.ndarray, rows: int, columns: int) -> np.ndarray | None:
    """Data error pattern, or None when retransmission must be requested.

    Every cell whose row and column are both flagged is marked, so a single
    data error yields exactly one cell.
    """
    config = IterativeConfig(rows, columns)
    syndrome_bits = as_bits(syndrome_bits, length=config.redundancy_length, name="syndrome")
    if syndrome_bits[-1] == 1:
        return None
    return np.outer(syndrome_bits[:rows], syndrome_bits[rows : rows + columns]).ravel()


def recover_message(message: np.ndarray, recovery: np.ndarray) -> np.ndarray:
    """XOR the data error pattern into the received data cells."""
    message = as_bits(message, name="message")
    return message ^ as_bits(recovery, length=len(message), name="recovery")


class IterativeCode:
    """Two-dimensional parity code for a fixed grid size."""

    def __init__(self, config: IterativeConfig) -> None:
        """Store the grid dimensions."""
        self.config = config
        self.message_length = config.message_length
        self.block_length = config.block_length

    def build_matrix(self, message: np.ndarray) -> np.ndarray:
        """Parity grid for ``message``."""
        return frozen(build_matrix(message, self.config.rows, self.config.columns))

    def encode(self, message: np.ndarray) -> np.ndarray:
        """Encode a message into its transmitted sequence."""
        return matrix_to_sequence(self.build_matrix(message))

    def syndrome(self, sequence: np.ndarray) -> np.ndarray:
        """Syndrome of a received sequence."""
        return get_syndrome(sequence, self.config.rows, self.config.columns)

    def decode(self, sequence: np.ndarray) -> DecodeResult:
        """Correct a single data error or ask for retransmission.

        Two errors in the same row or column leave nothing or the wrong cells
        corrected; this is inherent to two-dimensional parity.
        """
        sequence = as_bits(sequence, length=self.block_length, name="sequence")
        syndrome_bits = self.syndrome(sequence)
        data = sequence[: self.message_length]
        data_recovery = recovery_vector(syndrome_bits, self.config.rows, self.config.columns)

        if data_recovery is None:
            data_recovery = np.zeros(self.message_length, dtype=int)
            outcome = DecodeOutcome.REQUEST_RETRANSMISSION
        elif not syndrome_bits.any():
            outcome = DecodeOutcome.NO_ERROR_DETECTED
        elif data_recovery.any():
            outcome = DecodeOutcome.CORRECTED
        else:
            outcome = DecodeOutcome.UNCORRECTABLE_PATTERN
        logger.debug("Iterative syndrome %s -> %s", syndrome_bits.tolist(), outcome.name)

        recovery = np.concatenate([data_recovery, np.zeros(self.config.redundancy_length, dtype=int)])
        corrected = recover_message(sequence, recovery)
        return DecodeResult(
            message=corrected[: self.message_length],
            codeword=corrected,
            syndrome=syndrome_bits,
            recovery=recovery,
            outcome=outcome,
        )
