"""
Overlay passes that restore what was stripped from the target before compression.

The passes run in a fixed order: special characters, then unknown-base (N) runs, then
lowercase. Both insertion passes store positions in the coordinates of their own output,
and lowercase ranges are defined over the final sequence.
"""
from typing import Final

import numpy as np

from hirgclib import BoundsError
from hirgclib.containers.metadata import Metadata, RangeList, SpecialChars
from hirgclib.core.alphabet import Alphabet
from hirgclib.utils import get_logger


# Constants ------------------------------------------------------------------------------------------------------------
_LOGGER = get_logger('overlay')
UNKNOWN_BASE: Final = ord('N')
_LOWER_TABLE = np.arange(256, dtype=np.uint8)
_LOWER_TABLE[ord('A'):ord('Z') + 1] += 32


# Classes --------------------------------------------------------------------------------------------------------------
class OverlayPipeline:
    """
    Turns a raw code sequence into the final ASCII target using the header metadata.

    Args:
        metadata: The parsed header of the compressed target.

    Examples:
        >>> pipeline = OverlayPipeline(metadata)
        >>> final = pipeline.apply(raw_codes)
        >>> final.tobytes()[:10]
        b'NNACGTacgt'
    """
    __slots__ = ('metadata',)

    def __init__(self, metadata: Metadata):
        self.metadata = metadata

    def apply(self, raw: np.ndarray) -> np.ndarray:
        """
        Decodes the raw base codes and runs the three passes in order.

        Args:
            raw: ``uint8`` base codes from the reconstruction engine.

        Returns:
            A ``uint8`` array of ASCII characters.

        Raises:
            BoundsError: If an overlay position lies beyond the sequence.
        """
        seq = Alphabet.DNA.decode_array(raw)
        seq = insert_special_chars(seq, self.metadata.special_chars)
        seq = insert_n_ranges(seq, self.metadata.n_ranges)
        apply_lowercase(seq, self.metadata.lowercase)
        return seq


# Functions ------------------------------------------------------------------------------------------------------------
def insert_special_chars(seq: np.ndarray, special: SpecialChars) -> np.ndarray:
    """
    Inserts special characters at their recorded positions.

    Positions are in the coordinates of the returned sequence, so the plan is a mask over
    the output that is filled once.

    Args:
        seq: ASCII ``uint8`` sequence.
        special: The parsed special-character line.

    Returns:
        A new array, or ``seq`` itself when there is nothing to insert.

    Raises:
        BoundsError: If a position lies beyond the growing sequence.
    """
    if not special: return seq
    size = len(seq) + len(special)
    positions = special.positions
    if positions[-1] >= size:
        raise BoundsError(f'Special character position {positions[-1]} exceeds sequence length {size}')
    inserted = np.zeros(size, dtype=bool)
    inserted[positions] = True
    _LOGGER.debug('Inserting %d special characters (%r)', len(special), special.dictionary)
    return _materialize(seq, inserted, special.characters)


def insert_n_ranges(seq: np.ndarray, ranges: RangeList, marker: int = UNKNOWN_BASE) -> np.ndarray:
    """
    Inserts runs of unknown bases.

    Args:
        seq: ASCII ``uint8`` sequence.
        ranges: The N-range list.
        marker: ASCII code inserted for each unknown base.

    Returns:
        A new array, or ``seq`` itself when there is nothing to insert.

    Raises:
        BoundsError: If a run starts beyond the growing sequence.
    """
    if not ranges: return seq
    inserted = ranges.mask(len(seq) + ranges.total_length)
    _LOGGER.debug('Inserting %d unknown-base runs (%d bases)', len(ranges), ranges.total_length)
    return _materialize(seq, inserted, np.uint8(marker))


def apply_lowercase(seq: np.ndarray, ranges: RangeList) -> np.ndarray:
    """
    Lowercases the given ranges in place.

    Returns:
        ``seq``, for chaining.

    Raises:
        BoundsError: If a range ends beyond the sequence.
    """
    if not ranges: return seq
    mask = ranges.mask(len(seq))
    seq[mask] = _LOWER_TABLE[seq[mask]]
    _LOGGER.debug('Lowercased %d ranges (%d bases)', len(ranges), ranges.total_length)
    return seq


def _materialize(seq: np.ndarray, inserted: np.ndarray, payload) -> np.ndarray:
    """Builds the output from a mask of inserted positions and the payload that fills them."""
    out = np.empty(len(inserted), dtype=np.uint8)
    out[inserted] = payload
    out[~inserted] = seq
    return out
