"""Channel coding enums and helpers shared by every block code."""

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

import numpy as np


class DecodeOutcome(Enum):
    """Possible results of a decode attempt."""

    CORRECTED = 0
    NO_ERROR_DETECTED = 1
    REQUEST_RETRANSMISSION = 2
    UNCORRECTABLE_PATTERN = 3

    @property
    def is_success(self) -> bool:
        """Return True if the decoded message can be trusted by the caller."""
        return self in (DecodeOutcome.CORRECTED, DecodeOutcome.NO_ERROR_DETECTED)

    @property
    def severity(self) -> int:
        """Rank used when several codewords are summarised into one outcome."""
        ranks = {
            DecodeOutcome.NO_ERROR_DETECTED: 0,
            DecodeOutcome.CORRECTED: 1,
            DecodeOutcome.REQUEST_RETRANSMISSION: 2,
            DecodeOutcome.UNCORRECTABLE_PATTERN: 3,
        }
        return ranks[self]


@dataclass(frozen=True)
class DecodeResult:
    """Recovered word together with the decoder's intermediate state.

    ``codeword`` is the received word after the recovery vector was applied,
    ``message`` its information part.
    """

    message: np.ndarray
    codeword: np.ndarray
    syndrome: np.ndarray
    recovery: np.ndarray
    outcome: DecodeOutcome


def as_bits(values: Sequence[int] | np.ndarray, length: int | None = None, name: str = "word") -> np.ndarray:
    """Return ``values`` as a fresh 1-D integer bit array, validating shape and content.

    The binary check runs before the integer cast so soft values such as 0.9
    are rejected instead of truncated.
    """
    raw = np.asarray(values)
    if raw.ndim != 1:
        msg = f"{name} must be one-dimensional, got shape {raw.shape}"
        raise ValueError(msg)
    if length is not None and raw.shape[0] != length:
        msg = f"{name} length {raw.shape[0]} != expected {length}"
        raise ValueError(msg)
    if not np.isin(raw, (0, 1)).all():
        msg = f"{name} must be binary"
        raise ValueError(msg)
    return raw.astype(int)


def frozen(array: np.ndarray) -> np.ndarray:
    """Mark ``array`` read-only and return it."""
    array.setflags(write=False)
    return array
