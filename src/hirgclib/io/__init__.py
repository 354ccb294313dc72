"""
Module for reading reference and compressed target files and writing reconstructed targets.
"""
import lzma
import sys
import zlib
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Union, BinaryIO, Generator

from hirgclib import FormatError, BoundsError, HirgcIOError
from hirgclib.io.open import Xopen


# Classes --------------------------------------------------------------------------------------------------------------
class BaseReader(ABC):
    """
    Abstract base class for file readers.

    Readers can be used as context managers, or ``read()`` can be called directly, in
    which case the file is opened and closed around the call. Parse errors are labelled
    with the file name; I/O and decompression errors are raised as ``HirgcIOError``.
    """
    __slots__ = ('_xopen', '_handle')

    def __init__(self, file: Union[str, Path, BinaryIO]):
        """
        Initializes the reader.

        Args:
            file: File path, '-' for stdin, or an open binary file object.
        """
        self._xopen = Xopen(file, mode='rb')
        self._handle = None

    @property
    def name(self) -> str: return self._xopen.name

    def __enter__(self):
        self._handle = self._xopen.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb): self.close()

    def close(self):
        """Closes the reader."""
        self._xopen.close()
        self._handle = None

    @contextmanager
    def _opened(self) -> Generator[BinaryIO, None, None]:
        """Yields the open handle, opening the file for the duration if needed, and labels errors."""
        close_on_exit = self._handle is None
        if close_on_exit: self.__enter__()
        try: yield self._handle
        except FormatError as e: raise e.locate(filename=self.name) from None
        except BoundsError as e: raise BoundsError(f'{self.name}: {e}') from None
        except HirgcIOError: raise
        except _read_errors() as e: raise HirgcIOError(self.name, str(e) or type(e).__name__) from e
        finally:
            if close_on_exit: self.close()

    @abstractmethod
    def read(self): ...


class BaseWriter(ABC):
    """Abstract base class for file writers."""
    _CHUNK_SIZE = 1 << 20
    __slots__ = ('_xopen', '_handle')

    def __init__(self, file: Union[str, Path, BinaryIO]):
        """
        Initializes the writer.

        Args:
            file: File path, '-' for stdout, or an open binary file object. A ``.gz``,
                ``.bz2``, ``.xz`` or ``.zst`` suffix compresses the output.
        """
        self._xopen = Xopen(file, mode='wb')
        self._handle = None

    @property
    def name(self) -> str: return self._xopen.name

    def __enter__(self):
        self._handle = self._xopen.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb): self.close()

    def close(self):
        """Flushes and closes the writer."""
        if self._handle is not None: self._handle.flush()
        self._xopen.close()
        self._handle = None


# Functions ------------------------------------------------------------------------------------------------------------
def _read_errors() -> tuple[type[BaseException], ...]:
    """Exceptions raised by a missing, truncated or corrupt input, including the optional zstandard codec."""
    errors = (OSError, EOFError, lzma.LZMAError, zlib.error)
    if (zstd := sys.modules.get('zstandard')) is not None: errors += (zstd.ZstdError,)
    return errors
