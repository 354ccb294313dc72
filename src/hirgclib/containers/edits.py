"""Containers for the edit script of a compressed target: mismatch records and their columnar batch."""
from typing import Iterable, Iterator, Union

import numpy as np

from hirgclib import FormatError
from hirgclib.containers import Batchable, RaggedBatch
from hirgclib.core.alphabet import Alphabet
from hirgclib.core.intlist import parse_ints, strip_eol
from hirgclib.utils import KMER_LENGTH


# Classes --------------------------------------------------------------------------------------------------------------
class Mismatch(Batchable):
    """
    A point where the target diverges from a straight copy of the reference.

    Replaying a mismatch appends ``bases`` to the target, moves the reference cursor
    by ``offset_from_prev`` and then copies ``continue_for + K`` reference bases.

    Args:
        bases: ``uint8`` base codes of the literal run (0..3, possibly empty).
        offset_from_prev: Signed jump applied to the reference cursor.
        continue_for: Signed extra run length added to the anchor length K.

    Examples:
        >>> m = Mismatch(np.array([0, 3], dtype=np.uint8), -4, 12)
        >>> m.copy_length()
        32
        >>> bytes(m)
        b'AT'
    """
    __slots__ = ('bases', 'offset_from_prev', 'continue_for')

    def __init__(self, bases: Union[np.ndarray, Iterable[int]], offset_from_prev: int, continue_for: int):
        self.bases = np.asarray(bases, dtype=np.uint8)
        self.offset_from_prev = int(offset_from_prev)
        self.continue_for = int(continue_for)

    @property
    def batch(self) -> type['EditScript']: return EditScript
    def __len__(self): return len(self.bases)
    def __bytes__(self): return Alphabet.DNA.decode(self.bases)
    def __repr__(self):
        return f"Mismatch({bytes(self).decode('ascii')!r}, {self.offset_from_prev}, {self.continue_for})"

    def __eq__(self, other):
        if not isinstance(other, Mismatch): return False
        return (self.offset_from_prev == other.offset_from_prev and self.continue_for == other.continue_for and
                np.array_equal(self.bases, other.bases))

    def copy_length(self, kmer_length: int = KMER_LENGTH) -> int:
        """Returns the number of reference bases copied after the literal run."""
        return self.continue_for + kmer_length

    @classmethod
    def parse(cls, bases_line: bytes, offsets_line: bytes) -> 'Mismatch':
        """
        Parses one pair of edit-script lines.

        Args:
            bases_line: One base-code digit per character (may be empty).
            offsets_line: ``[-]offset [-]continue_for``.

        Raises:
            FormatError: If either line is malformed.
        """
        return cls(parse_base_codes(bases_line), *parse_offsets(offsets_line))


class EditScript(RaggedBatch):
    """
    Ordered, columnar batch of ``Mismatch`` records.

    Literal bases of all records live in one flat ``uint8`` array, sliced by CSR
    offsets; jumps and run lengths live in parallel ``int64`` arrays. Order is
    replay order.

    Args:
        bases: Flat ``uint8`` array of the literal base codes of every record.
        offsets: CSR offsets into *bases* (size *N* + 1).
        offsets_from_prev: ``int64`` reference cursor jumps.
        continue_fors: ``int64`` extra run lengths.

    Examples:
        >>> script = EditScript.build([Mismatch([0], 0, 0), Mismatch([], 5, 2)])
        >>> len(script), script.literal_length
        (2, 1)
    """
    __slots__ = ('_bases', '_offsets_from_prev', '_continue_fors')

    def __init__(self, bases: np.ndarray, offsets: np.ndarray, offsets_from_prev: np.ndarray,
                 continue_fors: np.ndarray):
        super().__init__(offsets)
        self._bases = bases
        self._offsets_from_prev = offsets_from_prev
        self._continue_fors = continue_fors

    @property
    def bases(self) -> np.ndarray: return self._bases
    @property
    def offsets_from_prev(self) -> np.ndarray: return self._offsets_from_prev
    @property
    def continue_fors(self) -> np.ndarray: return self._continue_fors
    @property
    def literal_length(self) -> int:
        """Total number of literal bases across all records."""
        return len(self._bases)

    def copy_lengths(self, kmer_length: int = KMER_LENGTH) -> np.ndarray:
        """Returns the number of reference bases each record copies."""
        return self._continue_fors + kmer_length

    def __getitem__(self, item: int) -> Mismatch:
        if not isinstance(item, (int, np.integer)): raise TypeError(f"EditScript indices must be integers, not {type(item)}")
        if item < 0: item += self._length
        if not 0 <= item < self._length: raise IndexError(f"Record {item} out of range for {self._length} records")
        return Mismatch(self._bases[self._offsets[item]:self._offsets[item + 1]],
                        self._offsets_from_prev[item], self._continue_fors[item])

    def __repr__(self): return f"EditScript({self._length} records, {self.literal_length} literal bases)"

    @classmethod
    def empty(cls) -> 'EditScript':
        return cls(np.empty(0, dtype=np.uint8), np.zeros(1, dtype=np.int64),
                   np.empty(0, dtype=np.int64), np.empty(0, dtype=np.int64))

    @classmethod
    def build(cls, records: Iterable[Mismatch]) -> 'EditScript':
        """Constructs an EditScript from Mismatch objects, preserving order."""
        mismatches = list(records)
        if not mismatches: return cls.empty()
        lengths = np.array([len(m.bases) for m in mismatches], dtype=np.int64)
        return cls(
            np.concatenate([m.bases for m in mismatches]).astype(np.uint8, copy=False),
            cls.offsets_from_lengths(lengths),
            np.array([m.offset_from_prev for m in mismatches], dtype=np.int64),
            np.array([m.continue_for for m in mismatches], dtype=np.int64)
        )

    @classmethod
    def parse(cls, lines: Iterable[bytes], first_line_number: int = 1) -> 'EditScript':
        """
        Parses the edit-script body: pairs of base-code and offset lines.

        The script ends when the lines run out between two pairs. An empty base-code
        line is an empty literal run, not the end of the script.

        Args:
            lines: Raw lines (line endings optional).
            first_line_number: Line number of the first line, used in error messages.

        Returns:
            A new ``EditScript``.

        Raises:
            FormatError: If a line is malformed or the last line has no partner.
        """
        line_iter = iter(lines)
        line_number = first_line_number
        codes, lengths, jumps, runs = [], [], [], []
        for bases_line in line_iter:
            try:
                bases_line = strip_eol(bases_line)
                _check_base_codes(bases_line)
            except FormatError as e: raise e.locate(line_number=line_number) from None
            try: offsets_line = next(line_iter)
            except StopIteration:
                raise FormatError('Unpaired mismatch line at end of edit script', line_number=line_number) from None
            try: jump, run = parse_offsets(offsets_line)
            except FormatError as e: raise e.locate(line_number=line_number + 1) from None
            codes.append(bases_line)
            lengths.append(len(bases_line))
            jumps.append(jump)
            runs.append(run)
            line_number += 2

        if not lengths: return cls.empty()
        return cls(
            Alphabet.CODES.encode(b''.join(codes)),
            cls.offsets_from_lengths(np.array(lengths, dtype=np.int64)),
            np.array(jumps, dtype=np.int64),
            np.array(runs, dtype=np.int64)
        )


# Functions ------------------------------------------------------------------------------------------------------------
def _check_base_codes(line: bytes):
    if bad := line.translate(None, delete=b'0123'):
        raise FormatError(f'Expected base codes 0-3, got {bad[:1]!r}')


def parse_base_codes(line: bytes) -> np.ndarray:
    """Parses a line of base-code digits (0..3) into a ``uint8`` array."""
    line = strip_eol(line)
    _check_base_codes(line)
    return Alphabet.CODES.encode(line)


def parse_offsets(line: bytes) -> tuple[int, int]:
    """Parses ``[-]offset [-]continue_for``; each field carries its own sign."""
    values = parse_ints(line, signed=True)
    if len(values) != 2: raise FormatError(f'Expected 2 signed integers (offset, run length), got {len(values)}')
    return int(values[0]), int(values[1])
