"""Read-only store for the cleaned reference sequence."""
from typing import Union

import numpy as np

from hirgclib import BoundsError
from hirgclib.core.alphabet import Alphabet


# Classes --------------------------------------------------------------------------------------------------------------
class ReferenceStore:
    """
    Immutable reference sequence, stored as ``uint8`` base codes (A=0, C=1, G=2, T=3).

    Create it with ``ReferenceStore.from_text`` so that case folding and filtering to
    ``ACGT`` always happen the same way.

    Args:
        data: Encoded base codes. The array is made read-only.

    Examples:
        >>> ref = ReferenceStore.from_text(b'acgtNNac')
        >>> len(ref), bytes(ref)
        (6, b'ACGTAC')
    """
    __slots__ = ('_data',)
    ALPHABET = Alphabet.DNA

    def __init__(self, data: np.ndarray):
        self._data = data
        self._data.flags.writeable = False

    @classmethod
    def from_text(cls, text: Union[bytes, str], max_length: int = None) -> 'ReferenceStore':
        """
        Builds a reference from raw sequence text (no header lines).

        Args:
            text: Sequence text; characters outside ACGT (any case) are dropped.
            max_length: Optional upper bound on the cleaned length.

        Raises:
            BoundsError: If the cleaned reference is longer than ``max_length``.
        """
        data = cls.ALPHABET.encode(text)
        if max_length is not None and len(data) > max_length:
            raise BoundsError(f'Reference holds {len(data)} bases, more than the maximum of {max_length}')
        return cls(data)

    @property
    def encoded(self) -> np.ndarray:
        """Returns the read-only code array (zero-copy)."""
        return self._data

    def __len__(self): return self._data.shape[0]
    def __bytes__(self) -> bytes: return self.ALPHABET.decode(self._data)
    def __repr__(self):
        if len(self) <= 14: return f"ReferenceStore({bytes(self).decode('ascii')})"
        head = self.ALPHABET.decode(self._data[:7]).decode('ascii')
        tail = self.ALPHABET.decode(self._data[-7:]).decode('ascii')
        return f"ReferenceStore({head}...{tail}, {len(self)} bases)"

    def fetch(self, start: int, length: int) -> np.ndarray:
        """
        Returns a view of ``length`` codes starting at ``start``.

        Raises:
            BoundsError: If the range is not inside the reference.
        """
        if length < 0 or start < 0 or start + length > len(self):
            raise BoundsError(f'Reference range [{start}, {start + length}) is outside [0, {len(self)})')
        return self._data[start:start + length]
