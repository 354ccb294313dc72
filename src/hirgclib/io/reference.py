"""Reader for reference sequence files (FASTA-like text, optionally compressed)."""
from pathlib import Path
from typing import Union, BinaryIO

from hirgclib.containers.reference import ReferenceStore
from hirgclib.io import BaseReader
from hirgclib.utils import get_logger


# Constants ------------------------------------------------------------------------------------------------------------
_LOGGER = get_logger('io')


# Classes --------------------------------------------------------------------------------------------------------------
class ReferenceReader(BaseReader):
    """
    Reader for reference sequences.

    Lines starting with ``>`` are headers and are skipped; every other character is
    upper-cased and kept only if it is one of ``ACGT``. Multiple records are concatenated.

    Examples:
        >>> with ReferenceReader("reference.fa") as reader:
        ...     reference = reader.read()
    """
    __slots__ = ('_max_length',)
    HEADER_PREFIX = b'>'

    def __init__(self, file: Union[str, Path, BinaryIO], max_length: int = None):
        """
        Initializes the ReferenceReader.

        Args:
            file: File path, '-' or a binary file object.
            max_length: Optional upper bound on the cleaned reference length.
        """
        super().__init__(file)
        self._max_length = max_length

    def read(self) -> ReferenceStore:
        """
        Reads and cleans the whole reference.

        Raises:
            HirgcIOError: If the file cannot be read.
            BoundsError: If the reference is longer than the configured maximum.
        """
        with self._opened() as handle:
            parts = [line for line in handle if not line.startswith(self.HEADER_PREFIX)]
            reference = ReferenceStore.from_text(b''.join(parts), max_length=self._max_length)
        _LOGGER.debug('Read %d reference bases from %s', len(reference), self.name)
        return reference
