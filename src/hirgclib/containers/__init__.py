"""
Containers for the records of a compressed target. A record type that appears many times per file pairs with a
columnar batch that holds all of its records in flat numpy arrays.
"""
from abc import ABC, abstractmethod
from typing import Iterable

import numpy as np


# Classes --------------------------------------------------------------------------------------------------------------
class Batchable(ABC):
    """A single record that knows the batch type its records are collected into."""
    __slots__ = ()
    @property
    @abstractmethod
    def batch(self) -> type['Batch']: ...


class Batch(ABC):
    """
    Ordered, column-wise collection of records.

    Subclasses index to a single record and iterate in file order.
    """
    __slots__ = ()
    @abstractmethod
    def __len__(self) -> int: ...
    @abstractmethod
    def __getitem__(self, item): ...
    @classmethod
    @abstractmethod
    def empty(cls) -> 'Batch': ...
    @classmethod
    @abstractmethod
    def build(cls, records: Iterable[Batchable]) -> 'Batch': ...
    def __iter__(self):
        for i in range(len(self)): yield self[i]
    def __bool__(self): return len(self) > 0


class RaggedBatch(Batch):
    """
    Batch whose records each own a variable-length slice of one flat array.

    Record ``i`` spans ``offsets[i]:offsets[i + 1]`` of the flat data held by the subclass.

    Args:
        offsets: ``int64`` CSR offsets (size *N* + 1, starting at 0).
    """
    __slots__ = ('_offsets', '_length')
    def __init__(self, offsets: np.ndarray):
        self._offsets = offsets
        self._length = len(offsets) - 1

    @property
    def offsets(self) -> np.ndarray: return self._offsets
    @property
    def lengths(self) -> np.ndarray:
        """Length of every record's slice."""
        return np.diff(self._offsets)

    def __len__(self) -> int: return self._length

    @staticmethod
    def offsets_from_lengths(lengths: np.ndarray) -> np.ndarray:
        """Builds CSR offsets from per-record lengths."""
        offsets = np.zeros(len(lengths) + 1, dtype=np.int64)
        np.cumsum(lengths, out=offsets[1:])
        return offsets
