"""Replay of an edit script against the reference to rebuild the raw (ACGT-only) target."""
import numpy as np

from hirgclib import BoundsError, jit
from hirgclib.containers.edits import EditScript
from hirgclib.containers.reference import ReferenceStore
from hirgclib.utils import KMER_LENGTH, get_logger


# Constants ------------------------------------------------------------------------------------------------------------
_LOGGER = get_logger('reconstruct')


# Classes --------------------------------------------------------------------------------------------------------------
class ReplayPlan:
    """
    Where every reference copy of a replay starts and how long it is.

    Copy 0 is the initial run; copy ``i + 1`` follows the literal run of record ``i``.
    The plan is computed from the cursor arithmetic alone, so it can be checked against the
    reference before a single base is copied.

    Attributes:
        copy_starts: ``int64`` reference start of each copy.
        copy_lengths: ``int64`` length of each copy.
        output_length: Length of the raw target.
    """
    __slots__ = ('copy_starts', 'copy_lengths', 'output_length')

    def __init__(self, copy_starts: np.ndarray, copy_lengths: np.ndarray, output_length: int):
        self.copy_starts = copy_starts
        self.copy_lengths = copy_lengths
        self.output_length = output_length

    def __len__(self): return len(self.copy_starts)

    @property
    def final_cursor(self) -> int:
        """Reference cursor after the last copy."""
        return int(self.copy_starts[-1] + self.copy_lengths[-1])

    @classmethod
    def build(cls, script: EditScript, initial_offset: int, initial_run_length: int,
              kmer_length: int = KMER_LENGTH) -> 'ReplayPlan':
        """
        Computes the copy ranges of a replay.

        The cursor starts at ``initial_offset``. Each copy advances it by its length, and
        each record moves it by ``offset_from_prev`` before its copy. Literal runs never
        move it.
        """
        copy_lengths = np.empty(len(script) + 1, dtype=np.int64)
        copy_lengths[0] = initial_run_length + kmer_length
        copy_lengths[1:] = script.copy_lengths(kmer_length)
        steps = np.empty(len(script) + 1, dtype=np.int64)
        steps[0] = initial_offset
        steps[1:] = script.offsets_from_prev
        # start_i = offset_0 + sum_{j<i}(length_j) + sum_{j<=i}(jump_j)
        copy_starts = np.cumsum(steps) + np.cumsum(copy_lengths) - copy_lengths
        output_length = int(copy_lengths.sum()) + script.literal_length
        return cls(copy_starts, copy_lengths, output_length)

    def check(self, reference_length: int, max_length: int = None):
        """
        Checks every copy against the reference bounds.

        Raises:
            BoundsError: On a negative copy length, a copy outside the reference, or an
                output longer than ``max_length``.
        """
        if (bad := np.flatnonzero(self.copy_lengths < 0)).size:
            i = int(bad[0])
            raise BoundsError(f'{_describe(i)} has a negative copy length ({self.copy_lengths[i]})')
        ends = self.copy_starts + self.copy_lengths
        if (bad := np.flatnonzero((self.copy_starts < 0) | (ends > reference_length))).size:
            i = int(bad[0])
            raise BoundsError(f'{_describe(i)} copies reference range [{self.copy_starts[i]}, {ends[i]}), '
                              f'outside the reference [0, {reference_length})')
        if max_length is not None and self.output_length > max_length:
            raise BoundsError(f'Target would hold {self.output_length} bases, more than the maximum of {max_length}')


class ReconstructionEngine:
    """
    Rebuilds the raw target sequence from a reference and an edit script.

    The engine owns the only cursor into the reference. The output is append-only: it is
    allocated once at its final length and filled left to right.

    Args:
        reference: The cleaned reference.
        kmer_length: Anchor length K added to every copy.
        max_length: Optional upper bound on the output length.

    Examples:
        >>> engine = ReconstructionEngine(ReferenceStore.from_text(b'ACGT' * 6))
        >>> raw = engine.reconstruct(EditScript.build([Mismatch([0], -20, -16)]), 0, 0)
        >>> Alphabet.DNA.decode(raw)
        b'ACGTACGTACGTACGTACGTAACGT'
    """
    __slots__ = ('reference', 'kmer_length', 'max_length', 'ref_cursor')

    def __init__(self, reference: ReferenceStore, kmer_length: int = KMER_LENGTH, max_length: int = None):
        self.reference = reference
        self.kmer_length = kmer_length
        self.max_length = max_length
        self.ref_cursor = None

    def plan(self, script: EditScript, initial_offset: int, initial_run_length: int) -> ReplayPlan:
        """Builds and bounds-checks the replay plan without copying anything."""
        plan = ReplayPlan.build(script, initial_offset, initial_run_length, self.kmer_length)
        plan.check(len(self.reference), self.max_length)
        return plan

    def reconstruct(self, script: EditScript, initial_offset: int, initial_run_length: int) -> np.ndarray:
        """
        Replays the script and returns the raw target as ``uint8`` base codes.

        Args:
            script: The edit script, in replay order.
            initial_offset: Reference position of the first copy.
            initial_run_length: Extra length of the first copy beyond the anchor.

        Returns:
            A ``uint8`` array of base codes.

        Raises:
            BoundsError: If any copy falls outside the reference.
        """
        plan = self.plan(script, initial_offset, initial_run_length)
        _LOGGER.debug('Replaying %d mismatches: %d copies, %d literal bases, %d output bases',
                      len(script), len(plan), script.literal_length, plan.output_length)
        out = np.empty(plan.output_length, dtype=np.uint8)
        written = _replay_kernel(self.reference.encoded, script.bases, script.offsets,
                                 plan.copy_starts, plan.copy_lengths, out)
        if written != plan.output_length:
            raise BoundsError(f'Replay wrote {written} bases, expected {plan.output_length}')
        self.ref_cursor = plan.final_cursor
        return out


# Functions ------------------------------------------------------------------------------------------------------------
def _describe(copy_index: int) -> str:
    return 'initial run' if copy_index == 0 else f'mismatch {copy_index - 1}'


# Kernels --------------------------------------------------------------------------------------------------------------
@jit(nopython=True, cache=True, nogil=True)
def _replay_kernel(ref, literals, literal_offsets, copy_starts, copy_lengths, out):
    """
    Fills ``out`` with the initial copy, then each literal run followed by its copy.
    Returns the number of bases written.
    """
    pos = 0
    n = copy_lengths[0]
    out[pos:pos + n] = ref[copy_starts[0]:copy_starts[0] + n]
    pos += n
    for i in range(len(literal_offsets) - 1):
        lit_start = literal_offsets[i]
        lit_end = literal_offsets[i + 1]
        n = lit_end - lit_start
        out[pos:pos + n] = literals[lit_start:lit_end]
        pos += n
        n = copy_lengths[i + 1]
        start = copy_starts[i + 1]
        out[pos:pos + n] = ref[start:start + n]
        pos += n
    return pos
