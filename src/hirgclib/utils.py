"""
Module containing configuration and logging helpers.
"""
import logging
from argparse import Namespace
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Final, Union

from hirgclib import RESOURCES


# Constants ------------------------------------------------------------------------------------------------------------
_LOGGER_NAME: Final = 'hirgclib'
KMER_LENGTH: Final = 20
DEFAULT_OUTPUT: Final = 'reconstructed_sequence.txt'


# Classes --------------------------------------------------------------------------------------------------------------
@dataclass
class Config:
    """
    Config parent class that can conveniently set attributes from CLI args
    """

    @classmethod
    def from_args(cls, args: Namespace):
        """
        Sets attributes of the class from a Namespace object (e.g. from argparse). Arguments left
        at ``None`` fall back to the field default.

        Parameters
        ----------
        args : :class:`argparse.Namespace`
            :class:`argparse.Namespace` object containing attributes to set

        Returns
        -------
        cls
            Class instance with attributes set from args

        """
        return cls(**{f.name: value for f in fields(cls) if (value := getattr(args, f.name, None)) is not None})


@dataclass
class DecompressConfig(Config):
    """
    Settings for a single decompression run.

    Attributes:
        reference: Path to the reference sequence file ('-' for stdin).
        target: Path to the compressed target file.
        output: Path to write the reconstructed sequence to ('-' for stdout).
        kmer_length: Anchor length appended to every reference copy by the compressor.
        max_seq_length: Upper bound on reference and target lengths.
    """
    reference: Union[str, Path] = None
    target: Union[str, Path] = None
    output: Union[str, Path] = DEFAULT_OUTPUT
    kmer_length: int = KMER_LENGTH
    max_seq_length: int = field(default_factory=lambda: RESOURCES.max_seq_length)

    def __post_init__(self):
        if self.kmer_length < 0: raise ValueError(f'kmer_length must be non-negative, got {self.kmer_length}')
        if self.max_seq_length <= 0: raise ValueError(f'max_seq_length must be positive, got {self.max_seq_length}')


# Functions ------------------------------------------------------------------------------------------------------------
def get_logger(component: str = None) -> logging.Logger:
    """Returns the package logger, or a child logger for a component, with a single stream handler."""
    name = f'{_LOGGER_NAME}.{component}' if component else _LOGGER_NAME
    logger = logging.getLogger(name)
    root = logging.getLogger(_LOGGER_NAME)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(
            fmt='%(asctime)s | %(name)s | %(levelname)s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S',
        ))
        root.addHandler(handler)
        root.setLevel(logging.INFO)
    return logger


def set_verbosity(verbose: int = 0, quiet: bool = False):
    """Sets the package log level from CLI flags."""
    level = logging.WARNING if quiet else (logging.DEBUG if verbose else logging.INFO)
    get_logger().setLevel(level)
