"""Reader for compressed target files: a seven-line metadata header followed by the edit script."""
from itertools import islice

from hirgclib.containers.edits import EditScript
from hirgclib.containers.metadata import Metadata
from hirgclib.io import BaseReader
from hirgclib.utils import get_logger


# Constants ------------------------------------------------------------------------------------------------------------
_LOGGER = get_logger('io')


# Classes --------------------------------------------------------------------------------------------------------------
class CompressedReader(BaseReader):
    """
    Reader for reference-compressed target files.

    The whole file is parsed before anything is replayed, so a malformed line anywhere is
    reported before reconstruction starts.

    Examples:
        >>> with CompressedReader("target.hirgc") as reader:
        ...     metadata, script = reader.read()
    """
    __slots__ = ()

    def read(self) -> tuple[Metadata, EditScript]:
        """
        Parses the header and the edit script.

        Returns:
            A ``(Metadata, EditScript)`` tuple.

        Raises:
            FormatError: If a line is missing or malformed (labelled with file and line).
            HirgcIOError: If the file cannot be read.
        """
        with self._opened() as handle:
            lines = iter(handle)
            metadata = Metadata.parse(list(islice(lines, Metadata.N_LINES)))
            script = EditScript.parse(lines, first_line_number=Metadata.N_LINES + 1)
        _LOGGER.debug('Parsed %r and %r from %s', metadata, script, self.name)
        return metadata, script

    def read_metadata(self) -> Metadata:
        """Parses only the header lines."""
        with self._opened() as handle:
            return Metadata.parse(list(islice(handle, Metadata.N_LINES)))
