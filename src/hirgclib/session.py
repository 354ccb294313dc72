"""
A single decompression run: load the reference, parse the compressed target, replay, overlay and write.
"""
from contextlib import contextmanager
from pathlib import Path
from typing import Union, BinaryIO

import numpy as np

from hirgclib import BoundsError
from hirgclib.containers.edits import EditScript
from hirgclib.containers.metadata import Metadata
from hirgclib.containers.reference import ReferenceStore
from hirgclib.engines.overlay import OverlayPipeline
from hirgclib.engines.reconstruct import ReconstructionEngine
from hirgclib.io.compressed import CompressedReader
from hirgclib.io.reference import ReferenceReader
from hirgclib.io.writer import TargetWriter
from hirgclib.utils import DecompressConfig, KMER_LENGTH, DEFAULT_OUTPUT, get_logger


# Constants ------------------------------------------------------------------------------------------------------------
_LOGGER = get_logger('session')


# Classes --------------------------------------------------------------------------------------------------------------
class ReconstructionSession:
    """
    Owns every piece of state needed to rebuild one target.

    The reference, metadata and edit script are fixed at construction; ``run`` produces
    the final sequence and caches it.

    Args:
        reference: The cleaned reference.
        metadata: The parsed header of the compressed target.
        script: The parsed edit script.
        kmer_length: Anchor length K added to every reference copy.
        max_length: Optional upper bound on the target length.
        target_name: Name of the compressed target, used to label errors.

    Examples:
        >>> session = ReconstructionSession.from_files("reference.fa", "target.hirgc")
        >>> session.write("reconstructed_sequence.txt")
    """
    __slots__ = ('reference', 'metadata', 'script', 'kmer_length', 'max_length', 'target_name', '_final')

    def __init__(self, reference: ReferenceStore, metadata: Metadata, script: EditScript,
                 kmer_length: int = KMER_LENGTH, max_length: int = None, target_name: str = '<stream>'):
        self.reference = reference
        self.metadata = metadata
        self.script = script
        self.kmer_length = kmer_length
        self.max_length = max_length
        self.target_name = target_name
        self._final = None

    def __repr__(self):
        return f"ReconstructionSession({self.reference!r}, {self.metadata!r}, {self.script!r})"

    @classmethod
    def from_config(cls, config: DecompressConfig) -> 'ReconstructionSession':
        """
        Loads the reference and parses the compressed target named in a config.

        Raises:
            HirgcIOError: If a file cannot be read.
            FormatError: If the compressed target is malformed.
            BoundsError: If the reference exceeds the maximum length.
        """
        reference = ReferenceReader(config.reference, max_length=config.max_seq_length).read()
        _LOGGER.info('Loaded reference %s: %d bases', config.reference, len(reference))
        target = CompressedReader(config.target)
        metadata, script = target.read()
        _LOGGER.info('Parsed %s: %d mismatches, %d lines, %d N-runs, %d lowercase runs, %d special characters',
                     config.target, len(script), metadata.line_layout.n_lines, len(metadata.n_ranges),
                     len(metadata.lowercase), len(metadata.special_chars))
        return cls(reference, metadata, script, config.kmer_length, config.max_seq_length, target.name)

    @classmethod
    def from_files(cls, reference: Union[str, Path, BinaryIO], target: Union[str, Path, BinaryIO],
                   **kwargs) -> 'ReconstructionSession':
        """Shortcut for ``from_config(DecompressConfig(reference, target, **kwargs))``."""
        return cls.from_config(DecompressConfig(reference=reference, target=target, **kwargs))

    def reconstruct(self) -> np.ndarray:
        """Replays the edit script and returns the raw target as base codes."""
        with self._labelled(): return self._replay()

    def run(self) -> np.ndarray:
        """
        Produces the final sequence as an ASCII ``uint8`` array.

        Raises:
            BoundsError: If the edit script or an overlay reaches outside its sequence, labelled
                with the target name.
        """
        if self._final is None:
            with self._labelled(): self._final = OverlayPipeline(self.metadata).apply(self._replay())
            _LOGGER.info('Final target: %d characters', len(self._final))
        return self._final

    def write(self, output: Union[str, Path, BinaryIO] = DEFAULT_OUTPUT):
        """
        Writes the final sequence, wrapped by the original line layout.

        The sequence is fully built before the output is opened, so a failed run never
        leaves a partial file behind.
        """
        final = self.run()
        with self._labelled(): TargetWriter.check(self.metadata.line_layout, len(final))
        with TargetWriter(output) as writer:
            writer.write(self.metadata.header, final, self.metadata.line_layout)
        _LOGGER.info('Wrote %s', writer.name)

    def _replay(self) -> np.ndarray:
        engine = ReconstructionEngine(self.reference, self.kmer_length, self.max_length)
        raw = engine.reconstruct(self.script, self.metadata.initial_offset, self.metadata.initial_run_length)
        _LOGGER.info('Reconstructed %d bases (reference cursor ends at %d)', len(raw), engine.ref_cursor)
        return raw

    @contextmanager
    def _labelled(self):
        """Prefixes bounds errors with the target name."""
        try: yield
        except BoundsError as e: raise BoundsError(f'{self.target_name}: {e}') from None


# Functions ------------------------------------------------------------------------------------------------------------
def decompress(reference: Union[str, Path, BinaryIO], target: Union[str, Path, BinaryIO],
               output: Union[str, Path, BinaryIO] = DEFAULT_OUTPUT, **kwargs) -> ReconstructionSession:
    """
    Rebuilds a target from its reference and compressed file, and writes it.

    Args:
        reference: The reference sequence file.
        target: The compressed target file.
        output: Where to write the reconstructed target.
        **kwargs: Passed to ``DecompressConfig`` (``kmer_length``, ``max_seq_length``).

    Returns:
        The finished session.
    """
    session = ReconstructionSession.from_files(reference, target, **kwargs)
    session.write(output)
    return session
