from io import IOBase
from typing import Union, BinaryIO, Optional
from pathlib import Path
from sys import stdout, stdin
from importlib import import_module

from hirgclib import HirgcIOError


# Classes --------------------------------------------------------------------------------------------------------------
class Xopen:
    """
    Handles the Physical Layer: Compression and File System.

    Reading sniffs gzip, bzip2, xz and zstandard magic numbers; writing picks the codec
    from the file extension. ``'-'`` means stdin or stdout. Failures to open are raised as
    ``HirgcIOError`` labelled with the file name.

    Examples:
        >>> with Xopen("reference.fa.gz", "rb") as f:
        ...     content = f.read()
    """
    _MAGIC = {
        b'\x1f\x8b': 'gzip',
        b'\x42\x5a': 'bz2',
        b'\xfd7zXZ\x00': 'lzma',
        b'\x28\xb5\x2f\xfd': 'zstandard'
    }
    _EXT_TO_PKG = {'gz': 'gzip', 'bz2': 'bz2', 'xz': 'lzma', 'zst': 'zstandard'}
    _MIN_N_BYTES = max(len(i) for i in _MAGIC.keys())
    _OPEN_FUNCS = {}

    def __init__(self, file: Union[str, Path, BinaryIO], mode: str = 'rb'):
        """
        Initializes the Xopen context manager.

        Args:
            file: File path (str or Path), '-' or an existing binary file object.
            mode: 'rb' or 'wb'.
        """
        if mode not in {'rb', 'wb'}: raise ValueError(f"Unsupported mode {mode!r}, expected 'rb' or 'wb'")
        self.file = file
        self.mode = mode
        self._handle: Optional[BinaryIO] = None
        self._to_close: list = []

    @property
    def name(self) -> str:
        """A printable name for the file, used to label errors."""
        if isinstance(self.file, IOBase): return getattr(self.file, 'name', '<stream>')
        if str(self.file) == '-': return '<stdin>' if self.mode == 'rb' else '<stdout>'
        return str(self.file)

    def __enter__(self) -> BinaryIO:
        """
        Opens the file and returns the file handle.

        Raises:
            HirgcIOError: If the file is missing or cannot be opened.
        """
        try: self._handle = self._open()
        except HirgcIOError:
            self.close()
            raise
        except OSError as e:
            self.close()
            raise HirgcIOError(self.name, e.strerror or str(e)) from e
        return self._handle

    def __exit__(self, exc_type, exc_val, exc_tb): self.close()

    def close(self):
        """Closes every handle opened by this instance, innermost first."""
        while self._to_close: self._to_close.pop().close()

    def _get_opener(self, pkg_name: str):
        """
        Retrieves the open function for a compression package, importing it if necessary.

        Raises:
            HirgcIOError: If the module cannot be imported.
        """
        if pkg_name not in self._OPEN_FUNCS:
            try: self._OPEN_FUNCS[pkg_name] = import_module(pkg_name).open
            except ImportError:
                raise HirgcIOError(self.name, f"compression module '{pkg_name}' is not installed") from None
        return self._OPEN_FUNCS[pkg_name]

    def _open(self) -> BinaryIO:
        if isinstance(self.file, IOBase): raw_stream = self.file
        elif str(self.file) == '-': raw_stream = stdin.buffer if self.mode == 'rb' else stdout.buffer
        else:
            path = Path(self.file).expanduser()
            if self.mode == 'wb':
                ext = path.suffix.lower().lstrip('.')
                handle = self._get_opener(pkg)(path, mode='wb') if (pkg := self._EXT_TO_PKG.get(ext)) else open(path, 'wb')
                self._to_close.append(handle)
                return handle
            raw_stream = open(path, mode='rb')
            self._to_close.append(raw_stream)

        if self.mode == 'wb': return raw_stream

        # Sniff compression without consuming the stream
        if hasattr(raw_stream, 'peek'): start = raw_stream.peek(self._MIN_N_BYTES)[:self._MIN_N_BYTES]
        elif raw_stream.seekable():
            start = raw_stream.read(self._MIN_N_BYTES)
            raw_stream.seek(-len(start), 1)
        else: start = b''

        for magic, pkg in self._MAGIC.items():
            if start.startswith(magic):
                handle = self._get_opener(pkg)(raw_stream, mode='rb')
                self._to_close.append(handle)
                return handle
        return raw_stream
