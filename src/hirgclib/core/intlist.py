"""
Parsers for the space-delimited integer lists and digit strings found in compressed target files.

Every list in the file uses the same minimal format: ASCII digits accumulate into the
current integer, a single space flushes it, and the end of the line flushes the last one.
There is no quoting or escaping. Signed fields allow one leading ``-`` per field.
"""
from typing import Final

import numpy as np

from hirgclib import FormatError


# Constants ------------------------------------------------------------------------------------------------------------
DELIMITER: Final = b' '
MINUS: Final = b'-'
INT_DTYPE: Final = np.int64
_MAX_DIGITS: Final = 18  # Fits in int64


# Functions ------------------------------------------------------------------------------------------------------------
def strip_eol(line: bytes) -> bytes:
    """Removes a trailing ``\\n`` or ``\\r\\n``."""
    if line.endswith(b'\n'): line = line[:-1]
    if line.endswith(b'\r'): line = line[:-1]
    return line


def parse_ints(line: bytes, signed: bool = False) -> np.ndarray:
    """
    Parses a space-delimited list of integers.

    A single trailing delimiter is tolerated and does not produce a value.

    Args:
        line: The raw line, with or without its line ending.
        signed: Allow a single leading ``-`` on each field.

    Returns:
        An ``int64`` numpy array of values, in order.

    Raises:
        FormatError: If the line is empty, holds an empty field, or a non-digit character.

    Examples:
        >>> parse_ints(b'3 10 0 2')
        array([ 3, 10,  0,  2])
        >>> parse_ints(b'-5 12', signed=True)
        array([-5, 12])
    """
    line = strip_eol(line)
    if not line: raise FormatError('Expected a delimited integer list, got an empty line')
    fields = line.split(DELIMITER)
    if len(fields) > 1 and not fields[-1]: fields.pop()
    values = []
    for n, field in enumerate(fields, 1):
        digits = field[1:] if signed and field.startswith(MINUS) else field
        if not digits:
            raise FormatError(f'Empty field {n} in integer list {_preview(line)}')
        if not digits.isdigit():
            raise FormatError(f'Field {n} ({_preview(field)}) is not a{" signed" if signed else "n unsigned"} integer')
        if len(digits) > _MAX_DIGITS:
            raise FormatError(f'Field {n} ({_preview(field)}) is too large')
        values.append(int(field))
    return np.array(values, dtype=INT_DTYPE)


def parse_digits(text: bytes) -> np.ndarray:
    """
    Parses a fixed-width list with one decimal digit per value.

    Args:
        text: The digit string; may be empty.

    Returns:
        A ``uint8`` numpy array of the digit values.

    Raises:
        FormatError: If a character is not a decimal digit.

    Examples:
        >>> parse_digits(b'0120')
        array([0, 1, 2, 0], dtype=uint8)
    """
    text = strip_eol(text)
    if text and not text.isdigit(): raise FormatError(f'Expected one digit per value, got {_preview(text)}')
    return np.frombuffer(text, dtype=np.uint8) - np.uint8(48)


def _preview(text: bytes, width: int = 32) -> str:
    s = text.decode('ascii', errors='replace')
    return repr(s if len(s) <= width else f'{s[:width]}...')
