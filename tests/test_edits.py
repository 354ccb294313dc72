import numpy as np
import pytest
from hirgclib import FormatError
from hirgclib.containers import RaggedBatch
from hirgclib.containers.edits import Mismatch, EditScript, parse_offsets, parse_base_codes


class TestMismatch:
    def test_parse(self):
        m = Mismatch.parse(b'0123\n', b'-4 12\n')
        np.testing.assert_array_equal(m.bases, [0, 1, 2, 3])
        assert m.offset_from_prev == -4
        assert m.continue_for == 12
        assert m.copy_length() == 32
        assert m.copy_length(kmer_length=0) == 12
        assert bytes(m) == b'ACGT'

    def test_parse_empty_literal_run(self):
        m = Mismatch.parse(b'\n', b'0 0\n')
        assert len(m) == 0
        assert m.copy_length() == 20

    def test_parse_invalid_base_code(self):
        with pytest.raises(FormatError, match="base codes 0-3"):
            Mismatch.parse(b'04', b'0 0')

    def test_equality(self):
        assert Mismatch([1, 2], 3, 4) == Mismatch(np.array([1, 2], dtype=np.uint8), 3, 4)
        assert Mismatch([1, 2], 3, 4) != Mismatch([1, 2], 3, 5)
        assert Mismatch([1], 3, 4) != Mismatch([1, 2], 3, 4)

    def test_batch(self):
        assert Mismatch([], 0, 0).batch is EditScript


class TestLineParsers:
    def test_offsets(self):
        assert parse_offsets(b'17 3\n') == (17, 3)

    def test_offsets_sign_per_field(self):
        assert parse_offsets(b'5 -3') == (5, -3)
        assert parse_offsets(b'-5 3') == (-5, 3)
        assert parse_offsets(b'-5 -3') == (-5, -3)

    def test_offsets_wrong_count(self):
        with pytest.raises(FormatError, match="Expected 2 signed integers"):
            parse_offsets(b'1 2 3')
        with pytest.raises(FormatError, match="Expected 2 signed integers"):
            parse_offsets(b'1')

    def test_offsets_empty(self):
        with pytest.raises(FormatError, match="empty line"):
            parse_offsets(b'\n')

    def test_base_codes(self):
        np.testing.assert_array_equal(parse_base_codes(b'3300\r\n'), [3, 3, 0, 0])


class TestEditScript:
    def test_parse(self):
        script = EditScript.parse([b'0\n', b'0 0\n', b'\n', b'-3 1\n', b'213\n', b'7 -2\n'])
        assert len(script) == 3
        assert script.literal_length == 4
        np.testing.assert_array_equal(script.offsets, [0, 1, 1, 4])
        np.testing.assert_array_equal(script.offsets_from_prev, [0, -3, 7])
        np.testing.assert_array_equal(script.continue_fors, [0, 1, -2])
        np.testing.assert_array_equal(script.copy_lengths(), [20, 21, 18])
        assert script[1] == Mismatch([], -3, 1)
        assert script[2] == Mismatch([2, 1, 3], 7, -2)
        assert script[-1] == script[2]

    def test_parse_empty(self):
        script = EditScript.parse([])
        assert len(script) == 0
        assert not script
        assert script.literal_length == 0

    def test_empty_line_is_not_end_of_script(self):
        script = EditScript.parse([b'\n', b'0 0\n'])
        assert len(script) == 1
        assert len(script[0]) == 0

    def test_unpaired_trailing_line(self):
        with pytest.raises(FormatError, match="Unpaired") as e:
            EditScript.parse([b'0\n', b'0 0\n', b'1\n'], first_line_number=8)
        assert e.value.line_number == 10

    def test_unpaired_trailing_empty_line(self):
        with pytest.raises(FormatError, match="Unpaired"):
            EditScript.parse([b'0\n', b'0 0\n', b'\n'])

    def test_malformed_offsets_are_located(self):
        with pytest.raises(FormatError) as e:
            EditScript.parse([b'0\n', b'0 0\n', b'1\n', b'x y\n'], first_line_number=8)
        assert e.value.line_number == 11

    def test_malformed_bases_are_located(self):
        with pytest.raises(FormatError) as e:
            EditScript.parse([b'0\n', b'0 0\n', b'9\n', b'0 0\n'], first_line_number=8)
        assert e.value.line_number == 10

    def test_build_and_iterate(self):
        mismatches = [Mismatch([0], 0, 0), Mismatch([], 5, 2), Mismatch([3, 3], -1, 0)]
        script = EditScript.build(mismatches)
        assert len(script) == 3
        assert list(script) == mismatches
        assert script.literal_length == 3
        np.testing.assert_array_equal(script.lengths, [1, 0, 2])

    def test_build_empty(self):
        assert len(EditScript.build([])) == 0

    def test_index_errors(self):
        script = EditScript.build([Mismatch([0], 0, 0)])
        with pytest.raises(IndexError):
            script[1]
        with pytest.raises(TypeError):
            script[0:1]

    def test_offsets_from_lengths(self):
        offsets = RaggedBatch.offsets_from_lengths(np.array([2, 0, 3]))
        assert offsets.dtype == np.int64
        np.testing.assert_array_equal(offsets, [0, 2, 2, 5])
        np.testing.assert_array_equal(RaggedBatch.offsets_from_lengths(np.array([], dtype=np.int64)), [0])
