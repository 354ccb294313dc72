"""
Top-level module, including exceptions, resource and optional dependency management.
"""
from functools import cached_property, lru_cache
from importlib import import_module
from importlib.metadata import version, PackageNotFoundError
from pathlib import Path
import os
from typing import Callable


# Exceptions -----------------------------------------------------------------------------------------------------------
class HirgcError(Exception):
    """Base class for all errors raised while decompressing a target."""


class FormatError(HirgcError, ValueError):
    """
    Raised when a line of the compressed file is absent or malformed.

    Attributes:
        filename: The offending file, if known.
        line_number: The 1-based line number, if known.
    """
    def __init__(self, message: str, filename: str = None, line_number: int = None):
        self.reason = message
        self.filename = filename
        self.line_number = line_number
        super().__init__(self._label())

    def _label(self) -> str:
        if self.filename is None and self.line_number is None: return self.reason
        if self.line_number is None: return f'{self.filename}: {self.reason}'
        return f'{self.filename or "<stream>"}:{self.line_number}: {self.reason}'

    def locate(self, filename: str = None, line_number: int = None) -> 'FormatError':
        """Returns a copy of this error labelled with the file and line it came from."""
        return FormatError(self.reason, filename if filename is not None else self.filename,
                           line_number if line_number is not None else self.line_number)


class BoundsError(HirgcError, IndexError):
    """Raised when a reference or output index falls out of range."""


class HirgcIOError(HirgcError, OSError):
    """Raised when an input file is missing or unreadable, labelled with the file name."""
    def __init__(self, filename: str, reason: str):
        super().__init__(f'{filename}: {reason}')
        self.filename = filename
        self.reason = reason

    def __str__(self): return f'{self.filename}: {self.reason}'


# Classes --------------------------------------------------------------------------------------------------------------
class Resources:
    """
    Manages global settings and optional dependencies.

    Attributes:
        package (str): The package name.
    """
    MAX_SEQ_LENGTH_ENV = 'HIRGCLIB_MAX_SEQ_LENGTH'
    DEFAULT_MAX_SEQ_LENGTH = 1 << 28

    def __init__(self) -> None:
        self.package = Path(__file__).parent.name

    @cached_property
    def version(self) -> str:
        """Returns the installed package version, or '0+unknown' for a source checkout."""
        try: return version(self.package)
        except PackageNotFoundError: return '0+unknown'

    @cached_property
    def max_seq_length(self) -> int:
        """Maximum length of a reference or reconstructed target, in bases."""
        if (value := os.environ.get(self.MAX_SEQ_LENGTH_ENV)) is None: return self.DEFAULT_MAX_SEQ_LENGTH
        try: value = int(value)
        except ValueError: raise ValueError(f'{self.MAX_SEQ_LENGTH_ENV} must be an integer, got {value!r}') from None
        if value <= 0: raise ValueError(f'{self.MAX_SEQ_LENGTH_ENV} must be positive, got {value}')
        return value

    @staticmethod
    @lru_cache(maxsize=None)
    def has_module(module_name: str) -> bool:
        """Checks if a python package is installed."""
        try:
            import_module(module_name)
            return True
        except ImportError: return False


# Decorators -----------------------------------------------------------------------------------------------------------
def jit(signature_or_function=None, **options) -> Callable:
    """
    Conditional Numba JIT decorator.

    If 'numba' is installed (checked via RESOURCES), this applies `numba.jit`
    with the provided arguments. Otherwise, it returns the original function unmodified,
    ignoring any compilation options.

    Examples:
        >>> @jit  # Bare usage
        ... def func(): ...

        >>> @jit(nopython=True, cache=True)  # Configured usage
        ... def func(): ...
    """
    if not RESOURCES.has_module('numba'):
        if callable(signature_or_function): return signature_or_function
        def passthrough(func: Callable) -> Callable: return func
        return passthrough
    from numba import jit as real_jit
    if callable(signature_or_function): return real_jit(signature_or_function)
    return real_jit(signature_or_function, **options)


# Constants ------------------------------------------------------------------------------------------------------------
RESOURCES = Resources()
