"""
Containers for the header metadata of a compressed target.

The metadata describes everything the edit script does not: how the output is wrapped
into lines, which ranges are lowercase, where runs of unknown bases and special characters
were removed, and where replay starts in the reference.
"""
from typing import Iterator, Sequence, Final

import numpy as np

from hirgclib import FormatError, BoundsError
from hirgclib.core.intlist import parse_ints, parse_digits, strip_eol, DELIMITER


# Classes --------------------------------------------------------------------------------------------------------------
class LineLayout:
    """
    Run-length encoded line widths of the original target file.

    Each ``(line_length, repeat_count)`` pair stands for ``repeat_count`` consecutive lines of
    ``line_length`` characters.

    Examples:
        >>> layout = LineLayout.parse(b'4 60 3 17 1')
        >>> list(layout), layout.total
        ([(60, 3), (17, 1)], 197)
    """
    __slots__ = ('_lengths', '_repeats')

    def __init__(self, lengths: np.ndarray, repeats: np.ndarray):
        self._lengths = np.asarray(lengths, dtype=np.int64)
        self._repeats = np.asarray(repeats, dtype=np.int64)

    def __len__(self): return len(self._lengths)
    def __iter__(self) -> Iterator[tuple[int, int]]: return zip(self._lengths.tolist(), self._repeats.tolist())
    def __repr__(self): return f"LineLayout({list(self)})"
    def __eq__(self, other):
        if not isinstance(other, LineLayout): return False
        return np.array_equal(self._lengths, other._lengths) and np.array_equal(self._repeats, other._repeats)

    @property
    def total(self) -> int:
        """Number of sequence characters covered by the layout."""
        return int(np.dot(self._lengths, self._repeats))

    @property
    def n_lines(self) -> int:
        """Number of physical lines described by the layout."""
        return int(self._repeats.sum())

    @classmethod
    def parse(cls, line: bytes) -> 'LineLayout':
        """
        Parses the line-layout list.

        The list is normally prefixed with the number of integers that follow; an
        un-prefixed list (always of even length) is accepted as plain pairs.

        Raises:
            FormatError: If the list is malformed.
        """
        values = parse_ints(line)
        if len(values) % 2:
            if values[0] != len(values) - 1:
                raise FormatError(f'Line layout declares {values[0]} values but holds {len(values) - 1}')
            values = values[1:]
        return cls(values[0::2], values[1::2])

    def blocks(self) -> Iterator[tuple[int, int, int]]:
        """Yields ``(start, line_length, repeat_count)`` for every run of equal-width lines."""
        start = 0
        for length, repeat in self:
            yield start, length, repeat
            start += length * repeat


class RangeList:
    """
    Cumulatively encoded ranges (lowercase runs or unknown-base runs).

    Each range is stored as ``(start_delta, length)``, where ``start_delta`` is relative
    to the end of the previous range. On the wire the list is prefixed with the number of
    ranges.

    Examples:
        >>> ranges = RangeList.parse(b'2 2 3 1 4')
        >>> ranges.starts, ranges.ends
        (array([2, 6]), array([ 5, 10]))
    """
    __slots__ = ('_deltas', '_lengths')

    def __init__(self, deltas: np.ndarray, lengths: np.ndarray):
        self._deltas = np.asarray(deltas, dtype=np.int64)
        self._lengths = np.asarray(lengths, dtype=np.int64)

    def __len__(self): return len(self._deltas)
    def __bool__(self): return len(self._deltas) > 0
    def __iter__(self) -> Iterator[tuple[int, int]]: return zip(self._deltas.tolist(), self._lengths.tolist())
    def __repr__(self): return f"RangeList({list(self)})"
    def __eq__(self, other):
        if not isinstance(other, RangeList): return False
        return np.array_equal(self._deltas, other._deltas) and np.array_equal(self._lengths, other._lengths)

    @classmethod
    def empty(cls) -> 'RangeList': return cls(np.empty(0, dtype=np.int64), np.empty(0, dtype=np.int64))

    @classmethod
    def parse(cls, line: bytes) -> 'RangeList':
        """
        Parses ``count d1 l1 d2 l2 ...``.

        Raises:
            FormatError: If the list is malformed or its length disagrees with the count.
        """
        values = parse_ints(line)
        count = int(values[0])
        if len(values) != 1 + 2 * count:
            raise FormatError(f'Range list declares {count} ranges but holds {len(values) - 1} values')
        return cls(values[1::2], values[2::2])

    @property
    def deltas(self) -> np.ndarray: return self._deltas
    @property
    def lengths(self) -> np.ndarray: return self._lengths
    @property
    def total_length(self) -> int: return int(self._lengths.sum())

    @property
    def starts(self) -> np.ndarray:
        """Absolute start of every range."""
        return np.cumsum(self._deltas) + np.cumsum(self._lengths) - self._lengths

    @property
    def ends(self) -> np.ndarray:
        """Absolute (exclusive) end of every range."""
        return np.cumsum(self._deltas) + np.cumsum(self._lengths)

    def mask(self, size: int) -> np.ndarray:
        """
        Returns a boolean mask of length ``size`` that is ``True`` inside the ranges.

        Raises:
            BoundsError: If a range ends beyond ``size``.
        """
        mask_delta = np.zeros(size + 1, dtype=np.int64)
        if not self: return mask_delta[:-1].astype(bool)
        starts, ends = self.starts, self.ends
        if ends[-1] > size: raise BoundsError(f'Range ending at {ends[-1]} exceeds sequence length {size}')
        np.add.at(mask_delta, starts, 1)
        np.add.at(mask_delta, ends, -1)
        return np.cumsum(mask_delta[:-1]) > 0


class SpecialChars:
    """
    Non-ACGT, non-N characters removed from the target before compression.

    Stores the cumulative gaps between occurrences, the dictionary of distinct characters
    and, per occurrence, the index of its character in the dictionary.

    Examples:
        >>> special = SpecialChars.parse(b'2 3 0 2 17 24 01')
        >>> special.positions, special.characters.tobytes()
        (array([3, 4]), b'RY')
    """
    __slots__ = ('_gaps', '_dictionary', '_order')
    BASE_CHAR: Final = ord('A')

    def __init__(self, gaps: np.ndarray, dictionary: bytes, order: np.ndarray):
        self._gaps = np.asarray(gaps, dtype=np.int64)
        self._dictionary = dictionary
        self._order = np.asarray(order, dtype=np.uint8)

    def __len__(self): return len(self._gaps)
    def __bool__(self): return len(self._gaps) > 0
    def __repr__(self): return f"SpecialChars({len(self)} occurrences of {self._dictionary!r})"
    def __eq__(self, other):
        if not isinstance(other, SpecialChars): return False
        return (self._dictionary == other._dictionary and np.array_equal(self._gaps, other._gaps) and
                np.array_equal(self._order, other._order))

    @classmethod
    def empty(cls) -> 'SpecialChars': return cls(np.empty(0, dtype=np.int64), b'', np.empty(0, dtype=np.uint8))

    @classmethod
    def parse(cls, line: bytes) -> 'SpecialChars':
        """
        Parses the special-character line.

        The line holds an integer list (count, ``count`` gaps, dictionary size, that many
        ``char - 'A'`` values) immediately followed, after the last space, by one digit per
        occurrence indexing the dictionary.

        Raises:
            FormatError: If the line is malformed or inconsistent.
        """
        line = strip_eol(line)
        boundary = line.rfind(DELIMITER)
        if boundary == -1: head, order_digits = line, b''
        else: head, order_digits = line[:boundary], line[boundary + 1:]
        values = parse_ints(head)
        count = int(values[0])
        if count == 0: return cls.empty()
        if len(values) < count + 2:
            raise FormatError(f'Special character list declares {count} positions but holds {len(values) - 1} values')
        n_unique = int(values[count + 1])
        if len(values) != count + 2 + n_unique:
            raise FormatError(f'Special character list declares {n_unique} distinct characters '
                              f'but holds {len(values) - count - 2}')
        encoded = values[count + 2:] + cls.BASE_CHAR
        if np.any(encoded > 126): raise FormatError('Special character dictionary holds a non-ASCII character')
        order = parse_digits(order_digits)
        if len(order) != count:
            raise FormatError(f'Special character order lists {len(order)} occurrences, expected {count}')
        if len(order) and order.max() >= n_unique:
            raise FormatError(f'Special character order refers to entry {order.max()} of {n_unique}')
        return cls(values[1:count + 1], encoded.astype(np.uint8).tobytes(), order)

    @property
    def gaps(self) -> np.ndarray: return self._gaps
    @property
    def dictionary(self) -> bytes: return self._dictionary
    @property
    def order(self) -> np.ndarray: return self._order

    @property
    def positions(self) -> np.ndarray:
        """Absolute position of every occurrence in the final sequence."""
        return np.cumsum(self._gaps) + np.arange(len(self._gaps), dtype=np.int64)

    @property
    def characters(self) -> np.ndarray:
        """ASCII code of every occurrence, in position order."""
        return np.frombuffer(self._dictionary, dtype=np.uint8)[self._order]


class Metadata:
    """
    Parsed header of a compressed target file.

    Attributes:
        header: The opaque first line, echoed verbatim to the output.
        line_layout: Output line wrapping.
        lowercase: Ranges to lowercase in the final sequence.
        n_ranges: Runs of unknown bases to insert.
        special_chars: Other characters to insert.
        initial_offset: Reference position where replay starts.
        initial_run_length: Extra length of the first copy beyond the anchor.
    """
    __slots__ = ('header', 'line_layout', 'lowercase', 'n_ranges', 'special_chars', 'initial_offset',
                 'initial_run_length')
    N_LINES: Final = 7

    def __init__(self, header: bytes, line_layout: LineLayout, lowercase: RangeList = None,
                 n_ranges: RangeList = None, special_chars: SpecialChars = None, initial_offset: int = 0,
                 initial_run_length: int = 0):
        self.header = header
        self.line_layout = line_layout
        self.lowercase = lowercase if lowercase is not None else RangeList.empty()
        self.n_ranges = n_ranges if n_ranges is not None else RangeList.empty()
        self.special_chars = special_chars if special_chars is not None else SpecialChars.empty()
        self.initial_offset = int(initial_offset)
        self.initial_run_length = int(initial_run_length)

    def __repr__(self):
        return (f"Metadata({self.header!r}, lines={self.line_layout.n_lines}, lowercase={len(self.lowercase)}, "
                f"n_ranges={len(self.n_ranges)}, special_chars={len(self.special_chars)}, "
                f"start={self.initial_offset}+{self.initial_run_length})")

    @classmethod
    def parse(cls, lines: Sequence[bytes]) -> 'Metadata':
        """
        Parses the seven header lines of a compressed target.

        Args:
            lines: The first seven raw lines of the file.

        Raises:
            FormatError: If a line is missing or malformed; the error carries the line number.
        """
        if len(lines) < cls.N_LINES:
            raise FormatError(f'Expected {cls.N_LINES} header lines, got {len(lines)}', line_number=len(lines) + 1)
        header, separator, layout, lowercase, n_ranges, special, start = lines[:cls.N_LINES]
        if strip_eol(separator):
            raise FormatError('Expected a blank line after the header', line_number=2)
        parsers = (
            (3, LineLayout.parse, layout),
            (4, RangeList.parse, lowercase),
            (5, RangeList.parse, n_ranges),
            (6, SpecialChars.parse, special),
            (7, _parse_start, start)
        )
        parsed = []
        for line_number, parser, line in parsers:
            try: parsed.append(parser(line))
            except FormatError as e: raise e.locate(line_number=line_number) from None
        line_layout, lowercase, n_ranges, special_chars, (offset, run_length) = parsed
        return cls(strip_eol(header), line_layout, lowercase, n_ranges, special_chars, offset, run_length)


# Functions ------------------------------------------------------------------------------------------------------------
def _parse_start(line: bytes) -> tuple[int, int]:
    values = parse_ints(line, signed=True)
    if len(values) != 2:
        raise FormatError(f'Expected 2 integers (initial offset, initial run length), got {len(values)}')
    return int(values[0]), int(values[1])
