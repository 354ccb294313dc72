"""
Module for representing the ASCII alphabets used by reference-based compression
"""
from typing import Final, ClassVar, Union

import numpy as np


# Exceptions and Warnings ----------------------------------------------------------------------------------------------
class AlphabetError(Exception):
    """Raised when an alphabet is invalid or text contains symbols outside the alphabet."""


# Classes --------------------------------------------------------------------------------------------------------------
class Alphabet:
    """
    A class to represent an alphabet of ASCII symbols.

    Symbols are encoded as their index in the alphabet, so ``Alphabet(b'ACGT')``
    maps A->0, C->1, G->2, T->3. Lookup is case-insensitive.

    Examples:
        >>> Alphabet.DNA.encode(b'acgtN')
        array([0, 1, 2, 3], dtype=uint8)
        >>> Alphabet.DNA.decode(np.array([3, 2, 1, 0], dtype=np.uint8))
        b'TGCA'
    """
    __slots__ = ('_data', '_lookup_table', '_trans_table', '_delete_bytes', '_decode_table')
    DTYPE: Final = np.uint8
    INVALID: Final = np.iinfo(DTYPE).max
    MAX_LEN: Final = INVALID + 1
    ENCODING: Final = 'ascii'

    DNA: ClassVar['Alphabet']
    CODES: ClassVar['Alphabet']

    def __init__(self, symbols: bytes):
        """
        Initializes an Alphabet.

        Args:
            symbols: The symbols in the alphabet as bytes, in code order.

        Raises:
            AlphabetError: If symbols are not ASCII, too long or contain duplicates.
        """
        if not symbols.isascii(): raise AlphabetError('Alphabet symbols must be a valid ASCII string')
        if len(symbols) >= self.MAX_LEN:
            raise AlphabetError(f'Alphabet size must be below {self.MAX_LEN} symbols ({self.DTYPE})')
        if len(set(symbols.upper())) != len(symbols): raise AlphabetError('Alphabet contains duplicate symbols')

        self._data: np.ndarray = np.frombuffer(symbols, dtype=self.DTYPE)

        # Build Lookup Table (both cases map to the same index)
        self._lookup_table = np.full(self.MAX_LEN, self.INVALID, dtype=self.DTYPE)
        indices = np.arange(len(symbols), dtype=self.DTYPE)
        self._lookup_table[np.frombuffer(symbols.upper(), dtype=self.DTYPE)] = indices
        self._lookup_table[np.frombuffer(symbols.lower(), dtype=self.DTYPE)] = indices

        # Build Translation Tables
        self._trans_table = self._lookup_table.tobytes()
        self._delete_bytes = np.where(self._lookup_table == self.INVALID)[0].astype(self.DTYPE).tobytes()

        # Build Decode Table
        decode_map = np.zeros(self.MAX_LEN, dtype=self.DTYPE)
        decode_map[:len(self._data)] = self._data
        self._decode_table = decode_map.tobytes()

    def __len__(self): return len(self._data)
    def __iter__(self): return iter(self._data)
    def __getitem__(self, item): return self._data[item]
    def __repr__(self): return f"Alphabet({self._data.tobytes()!r})"

    def __contains__(self, item):
        if isinstance(item, (int, np.integer)): return 0 <= item < self.MAX_LEN and self._lookup_table[item] != self.INVALID
        if isinstance(item, (str, bytes)):
            if len(item) != 1: return False
            val = ord(item) if isinstance(item, str) else item[0]
            return val < self.MAX_LEN and self._lookup_table[val] != self.INVALID
        return False

    def __eq__(self, other):
        if self is other: return True
        if not isinstance(other, Alphabet): return False
        return np.array_equal(self._data, other._data)

    def __hash__(self): return hash(self._data.tobytes())

    def encode(self, text: Union[bytes, str], strict: bool = False) -> np.ndarray:
        """
        Encodes text to an array of symbol indices.

        Symbols outside the alphabet are dropped, unless ``strict`` is set.

        Args:
            text: The text to encode.
            strict: Raise instead of dropping unknown symbols.

        Returns:
            A ``uint8`` numpy array of indices.

        Raises:
            AlphabetError: If ``strict`` and the text holds a symbol outside the alphabet.
        """
        if isinstance(text, str): text = text.encode(self.ENCODING)
        translated = text.translate(self._trans_table, delete=self._delete_bytes)
        if strict and len(translated) != len(text):
            bad = text.translate(None, delete=self._data.tobytes() + self._data.tobytes().lower())
            raise AlphabetError(f'Unexpected symbol {bad[:1]!r}, expected one of {self._data.tobytes()!r}')
        return np.frombuffer(translated, dtype=self.DTYPE)

    def decode(self, encoded: np.ndarray) -> bytes:
        """Decodes an array of indices back to bytes.

        Args:
            encoded: The numpy array of indices.

        Returns:
            The decoded bytes string.
        """
        if encoded.dtype != self.DTYPE: encoded = encoded.astype(self.DTYPE, copy=False)
        return encoded.tobytes().translate(self._decode_table)

    def decode_array(self, encoded: np.ndarray) -> np.ndarray:
        """Decodes an array of indices to a writable array of ASCII codes."""
        return np.frombuffer(self.decode(encoded), dtype=self.DTYPE).copy()


# Constants ------------------------------------------------------------------------------------------------------------
Alphabet.DNA = Alphabet(b'ACGT')
Alphabet.CODES = Alphabet(b'0123')
