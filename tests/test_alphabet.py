import numpy as np
import pytest
from hirgclib.core.alphabet import Alphabet, AlphabetError

class TestAlphabetInit:
    def test_valid_init(self):
        alpha = Alphabet(b'ACGT')
        assert len(alpha) == 4
        assert b'A' in alpha
        assert b'a' in alpha
        assert b'N' not in alpha

    def test_init_invalid_ascii(self):
        with pytest.raises(AlphabetError, match="valid ASCII"):
            Alphabet(b'ACG\xff')

    def test_init_duplicates(self):
        with pytest.raises(AlphabetError, match="duplicate"):
            Alphabet(b'AACGT')

    def test_init_duplicates_case_insensitive(self):
        with pytest.raises(AlphabetError, match="duplicate"):
            Alphabet(b'ACGTa')


class TestAlphabetEncoding:
    def test_encode_decode_roundtrip(self):
        alpha = Alphabet.DNA
        encoded = alpha.encode(b'ACGT')
        np.testing.assert_array_equal(encoded, [0, 1, 2, 3])
        assert alpha.decode(encoded) == b'ACGT'

    def test_encode_str(self):
        np.testing.assert_array_equal(Alphabet.DNA.encode('GATTACA'), [2, 0, 3, 3, 0, 1, 0])

    def test_encode_drops_invalid_chars(self):
        # N, newlines and IUPAC codes are removed, not mapped
        encoded = Alphabet.DNA.encode(b'ACNGT\nRY')
        np.testing.assert_array_equal(encoded, [0, 1, 2, 3])

    def test_encode_mixed_case(self):
        np.testing.assert_array_equal(Alphabet.DNA.encode(b'aCgT'), [0, 1, 2, 3])

    def test_encode_strict(self):
        with pytest.raises(AlphabetError, match="Unexpected symbol b'N'"):
            Alphabet.DNA.encode(b'ACNGT', strict=True)

    def test_decode_array_is_writable(self):
        decoded = Alphabet.DNA.decode_array(np.array([3, 2, 1, 0], dtype=np.uint8))
        assert decoded.tobytes() == b'TGCA'
        decoded[0] = ord('N')
        assert decoded.tobytes() == b'NGCA'


class TestStandardAlphabets:
    def test_dna_codes(self):
        # Codes follow the order the compressor uses for mismatched bases
        assert Alphabet.DNA.decode(np.arange(4, dtype=np.uint8)) == b'ACGT'

    def test_digit_codes(self):
        np.testing.assert_array_equal(Alphabet.CODES.encode(b'3210'), [3, 2, 1, 0])
        assert b'4' not in Alphabet.CODES

    def test_containment(self):
        dna = Alphabet.DNA
        assert b'A' in dna
        assert 'A' in dna
        assert 65 in dna  # ord('A')
        assert b'Z' not in dna
        assert b'AC' not in dna
