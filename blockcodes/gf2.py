"""Row and polynomial arithmetic over GF(2).

Polynomials are bit vectors with index 0 holding the highest-degree
coefficient, so ``[1, 0, 1, 1]`` is x^3 + x + 1.
"""

import numba
import numpy as np

from blockcodes.channel_coding import as_bits

# A divisor of degree 0 would never reduce the remainder
MIN_DIVISOR_LENGTH = 2


def row_sum(target: np.ndarray, source: np.ndarray) -> None:
    """XOR ``source`` into ``target`` in place."""
    if target.shape != source.shape:
        msg = f"Cannot add rows of length {target.shape[-1]} and {source.shape[-1]}"
        raise ValueError(msg)
    target ^= source


def swap_rows(matrix: np.ndarray, i: int, j: int) -> None:
    """Swap rows ``i`` and ``j`` of ``matrix`` in place."""
    matrix[[i, j]] = matrix[[j, i]]


def sort_rows(matrix: np.ndarray) -> np.ndarray:
    """Return a copy of ``matrix`` with rows in lexicographic order."""
    matrix = np.asarray(matrix)
    if matrix.shape[0] == 0:
        return matrix.copy()
    order = np.lexsort(matrix.T[::-1])
    return matrix[order]


def reduce_to_systematic(matrix: np.ndarray) -> np.ndarray:
    """Clear the entries right of the diagonal in the leading square block.

    Row i absorbs every later row j whose leading position it still covers.
    Works for row-shifted generator layouts, where row j starts with a 1 at
    column j and is zero before it.
    """
    reduced = np.array(matrix, dtype=int)
    num_rows = reduced.shape[0]
    for i in range(num_rows):
        for j in range(i + 1, num_rows):
            if reduced[i, j] == 1:
                row_sum(reduced[i], reduced[j])
    return reduced


def poly_offset(poly: np.ndarray) -> int:
    """Index of the leading 1, or the last index for the zero polynomial."""
    ones = np.flatnonzero(poly)
    if len(ones) == 0:
        return len(poly) - 1
    return int(ones[0])


def poly_degree(poly: np.ndarray) -> int:
    """Degree of ``poly``; the zero polynomial has degree 0."""
    ones = np.flatnonzero(poly)
    if len(ones) == 0:
        return 0
    return len(poly) - 1 - int(ones[0])


def trim_leading_zeros(poly: np.ndarray) -> np.ndarray:
    """Drop leading zero coefficients, keeping ``[0]`` for the zero polynomial."""
    ones = np.flatnonzero(poly)
    if len(ones) == 0:
        return np.zeros(1, dtype=int)
    return np.array(poly[ones[0] :], dtype=int)


@numba.njit(cache=True)
def _reduce_remainder(rest: np.ndarray, divisor: np.ndarray) -> None:
    """JIT-compiled XOR-shift long division, leaving the remainder in ``rest``."""
    length = rest.shape[0]
    width = divisor.shape[0]
    lead = 0
    # Degree of the remainder is length - 1 - lead, divisor degree is width - 1.
    while lead <= length - width:
        if rest[lead] == 1:
            for i in range(width):
                rest[lead + i] ^= divisor[i]
        lead += 1


def validate_divisor(divisor: np.ndarray) -> np.ndarray:
    """Check that ``divisor`` is a usable generator polynomial."""
    divisor = as_bits(divisor, name="divisor")
    if divisor.shape[0] < MIN_DIVISOR_LENGTH:
        msg = f"Divisor must have degree >= 1, got {divisor.tolist()}"
        raise ValueError(msg)
    if divisor[0] != 1:
        msg = f"Divisor must have a leading 1, got {divisor.tolist()}"
        raise ValueError(msg)
    return divisor


def poly_mod(dividend: np.ndarray, divisor: np.ndarray) -> np.ndarray:
    """Remainder of ``dividend`` divided by ``divisor`` modulo 2.

    The result keeps the dividend's length, so the remainder sits in its
    last ``len(divisor) - 1`` positions.
    """
    divisor = validate_divisor(divisor)
    rest = np.ascontiguousarray(as_bits(dividend, name="dividend"), dtype=np.int64)
    _reduce_remainder(rest, np.ascontiguousarray(divisor, dtype=np.int64))
    return rest.astype(int)
