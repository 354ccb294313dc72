"""Writer for reconstructed targets, re-wrapped to their original line layout."""
from typing import Union

import numpy as np

from hirgclib import BoundsError
from hirgclib.containers.metadata import LineLayout
from hirgclib.io import BaseWriter


# Classes --------------------------------------------------------------------------------------------------------------
class TargetWriter(BaseWriter):
    """
    Writes the header line, a blank line, then the sequence wrapped by the line layout.

    Examples:
        >>> with TargetWriter("reconstructed_sequence.txt") as w:
        ...     w.write(metadata.header, final, metadata.line_layout)
    """
    __slots__ = ()
    NEWLINE = ord('\n')

    def write(self, header: bytes, seq: Union[np.ndarray, bytes], layout: LineLayout):
        """
        Writes one reconstructed target.

        Args:
            header: The header line, without line ending.
            seq: The final sequence as ASCII ``uint8`` array or bytes.
            layout: The original line layout.

        Raises:
            BoundsError: If the layout does not cover the sequence exactly.
        """
        if isinstance(seq, (bytes, bytearray)): seq = np.frombuffer(seq, dtype=np.uint8)
        self.check(layout, len(seq))
        self._handle.write(header + b'\n\n')
        for start, length, repeat in layout.blocks():
            rows_per_chunk = max(1, self._CHUNK_SIZE // (length + 1))
            for row in range(0, repeat, rows_per_chunk):
                n_rows = min(rows_per_chunk, repeat - row)
                block_start = start + row * length
                block = np.empty((n_rows, length + 1), dtype=np.uint8)
                block[:, :length] = seq[block_start:block_start + n_rows * length].reshape(n_rows, length)
                block[:, length] = self.NEWLINE
                self._handle.write(block.tobytes())

    @staticmethod
    def check(layout: LineLayout, length: int):
        """
        Checks that a layout covers a sequence of ``length`` characters exactly.

        Raises:
            BoundsError: If it does not.
        """
        if layout.total != length:
            raise BoundsError(f'Line layout covers {layout.total} characters but the sequence has {length}')
