"""Tests for the iterative (two-dimensional parity) code."""

import numpy as np
import pytest
from hypothesis import given
from hypothesis import strategies as st

from blockcodes.channel_coding import DecodeOutcome
from blockcodes.iterative import (
    IterativeCode,
    IterativeConfig,
    build_matrix,
    get_syndrome,
    matrix_to_sequence,
    recovery_vector,
    sequence_to_matrix,
)
from blockcodes.util import flip_bits

MESSAGE = np.array([1, 0, 1, 1, 1, 1])
EXPECTED_GRID = np.array(
    [
        [1, 0, 1, 0],
        [1, 1, 1, 1],
        [0, 1, 0, 1],
    ],
)
SEQUENCE = np.array([1, 0, 1, 1, 1, 1, 0, 1, 0, 1, 0, 1])


@pytest.fixture
def iterative() -> IterativeCode:
    """Create a 2 x 3 iterative code."""
    return IterativeCode(IterativeConfig(rows=2, columns=3))


class TestIterativeConfig:
    """Tests for grid dimensions."""

    def test_lengths(self) -> None:
        """Message, redundancy and block lengths follow from the grid."""
        config = IterativeConfig(rows=2, columns=3)
        np.testing.assert_equal(config.message_length, 6)
        np.testing.assert_equal(config.redundancy_length, 6)
        np.testing.assert_equal(config.block_length, 12)

    @pytest.mark.parametrize(("rows", "columns"), [(0, 3), (2, 0), (-1, 1)])
    def test_empty_grid(self, rows: int, columns: int) -> None:
        """Grids without cells should be rejected."""
        with pytest.raises(ValueError, match="Grid"):
            IterativeConfig(rows, columns)


class TestIterativeEncoding:
    """Tests for grid construction and serialization."""

    def test_known_grid(self) -> None:
        """Parities and corner should match the hand-derived grid."""
        np.testing.assert_array_equal(build_matrix(MESSAGE, 2, 3), EXPECTED_GRID)

    def test_known_sequence(self, iterative: IterativeCode) -> None:
        """Data row-major, then row parities, column parities and the corner."""
        np.testing.assert_array_equal(iterative.encode(MESSAGE), SEQUENCE)

    def test_sequence_round_trip(self) -> None:
        """Unrolling and rebuilding a grid should be lossless."""
        grid = build_matrix(MESSAGE, 2, 3)
        np.testing.assert_array_equal(sequence_to_matrix(matrix_to_sequence(grid), 2, 3), grid)

    def test_wrong_message_length(self, iterative: IterativeCode) -> None:
        """A message that does not fill the grid should be rejected."""
        with pytest.raises(ValueError, match="length"):
            iterative.encode(MESSAGE[:5])

    def test_grid_read_only(self, iterative: IterativeCode) -> None:
        """Grids handed out by the code must not be writable."""
        grid = iterative.build_matrix(MESSAGE)
        with pytest.raises(ValueError):
            grid[0, 0] = 0


class TestIterativeDecoding:
    """Tests for syndrome evaluation and recovery."""

    def test_clean_sequence(self, iterative: IterativeCode) -> None:
        """An undamaged sequence should give a zero syndrome."""
        result = iterative.decode(SEQUENCE)
        np.testing.assert_array_equal(result.syndrome, np.zeros(6))
        np.testing.assert_array_equal(result.message, MESSAGE)
        np.testing.assert_equal(result.outcome, DecodeOutcome.NO_ERROR_DETECTED)

    @pytest.mark.parametrize("position", range(6))
    def test_single_data_error_corrected(self, iterative: IterativeCode, position: int) -> None:
        """A flipped data cell is found where its row and column cross."""
        result = iterative.decode(flip_bits(SEQUENCE, [position]))
        expected_recovery = np.zeros(12, dtype=int)
        expected_recovery[position] = 1
        np.testing.assert_array_equal(result.recovery, expected_recovery)
        np.testing.assert_array_equal(result.message, MESSAGE)
        np.testing.assert_equal(result.outcome, DecodeOutcome.CORRECTED)

    def test_data_error_syndrome(self) -> None:
        """A data error flags its row and column but not the corner."""
        syndrome_bits = get_syndrome(flip_bits(SEQUENCE, [4]), 2, 3)
        np.testing.assert_array_equal(syndrome_bits, [0, 1, 0, 1, 0, 0])

    @pytest.mark.parametrize("position", [6, 7, 8, 9, 10])
    def test_parity_error_requests_retransmission(self, iterative: IterativeCode, position: int) -> None:
        """An error in a row or column parity makes the corner disagree."""
        received = flip_bits(SEQUENCE, [position])
        result = iterative.decode(received)
        np.testing.assert_equal(result.syndrome[-1], 1)
        np.testing.assert_equal(result.outcome, DecodeOutcome.REQUEST_RETRANSMISSION)
        np.testing.assert_array_equal(result.codeword, received)
        np.testing.assert_array_equal(result.message, MESSAGE)

    def test_corner_error_not_detected(self, iterative: IterativeCode) -> None:
        """The corner is excluded from its own check."""
        result = iterative.decode(flip_bits(SEQUENCE, [11]))
        np.testing.assert_equal(result.outcome, DecodeOutcome.NO_ERROR_DETECTED)
        np.testing.assert_array_equal(result.message, MESSAGE)

    def test_recovery_vector_none_on_corner(self) -> None:
        """A set corner syndrome bit means no recovery is possible."""
        if recovery_vector(np.array([1, 0, 0, 0, 0, 1]), 2, 3) is not None:
            pytest.fail("Expected no recovery vector when the corner is flagged")

    def test_errors_in_same_row(self, iterative: IterativeCode) -> None:
        """Two errors in one row cancel the row flag and nothing is corrected."""
        received = flip_bits(SEQUENCE, [0, 1])
        result = iterative.decode(received)
        np.testing.assert_equal(result.outcome, DecodeOutcome.UNCORRECTABLE_PATTERN)
        np.testing.assert_array_equal(result.codeword, received)

    def test_diagonal_errors_flip_four_cells(self, iterative: IterativeCode) -> None:
        """Two errors in different rows and columns flag a 2 x 2 block."""
        result = iterative.decode(flip_bits(SEQUENCE, [0, 4]))
        np.testing.assert_equal(result.recovery[:6].sum(), 4)
        np.testing.assert_equal(result.outcome, DecodeOutcome.CORRECTED)
        if np.array_equal(result.message, MESSAGE):
            pytest.fail("Diagonal errors unexpectedly recovered the message")

    @given(data=st.data())
    def test_single_data_error_any_grid(self, data: st.DataObject) -> None:
        """Any single data error in any grid should be corrected."""
        rows = data.draw(st.integers(1, 6))
        columns = data.draw(st.integers(1, 6))
        code = IterativeCode(IterativeConfig(rows, columns))
        message = np.array(data.draw(st.lists(st.integers(0, 1), min_size=rows * columns, max_size=rows * columns)))
        position = data.draw(st.integers(0, rows * columns - 1))
        result = code.decode(flip_bits(code.encode(message), [position]))
        np.testing.assert_array_equal(result.message, message)
        np.testing.assert_equal(result.outcome, DecodeOutcome.CORRECTED)
