import bz2
import gzip
import lzma
from io import BytesIO

import numpy as np
import pytest
from hirgclib import FormatError, BoundsError, HirgcIOError
from hirgclib.containers.metadata import LineLayout
from hirgclib.io.compressed import CompressedReader
from hirgclib.io.open import Xopen
from hirgclib.io.reference import ReferenceReader
from hirgclib.io.writer import TargetWriter

from conftest import REFERENCE, REFERENCE_TEXT, COMPRESSED_TEXT, HEADER


class TestXopen:
    @pytest.mark.parametrize('compress', [gzip.compress, bz2.compress, lzma.compress])
    def test_sniffs_compression(self, tmp_path, compress):
        path = tmp_path / 'reference.fa'
        path.write_bytes(compress(REFERENCE_TEXT))
        with Xopen(path) as f:
            assert f.read() == REFERENCE_TEXT

    def test_plain(self, reference_file):
        with Xopen(reference_file) as f:
            assert f.read() == REFERENCE_TEXT

    def test_stream(self):
        with Xopen(BytesIO(gzip.compress(b'ACGT\n'))) as f:
            assert f.read() == b'ACGT\n'

    def test_missing_file(self, tmp_path):
        path = tmp_path / 'missing.fa'
        with pytest.raises(HirgcIOError, match="missing.fa") as e:
            with Xopen(path):
                pass
        assert e.value.filename == str(path)

    def test_write_compressed(self, tmp_path):
        path = tmp_path / 'out.txt.gz'
        with Xopen(path, 'wb') as f:
            f.write(b'ACGT\n')
        assert gzip.decompress(path.read_bytes()) == b'ACGT\n'

    def test_names(self):
        assert Xopen('-').name == '<stdin>'
        assert Xopen('-', 'wb').name == '<stdout>'
        assert Xopen(BytesIO()).name == '<stream>'

    def test_bad_mode(self):
        with pytest.raises(ValueError):
            Xopen('x', 'r')


class TestReferenceReader:
    def test_read(self, reference_file):
        reference = ReferenceReader(reference_file).read()
        assert bytes(reference) == REFERENCE

    def test_read_gzipped(self, gzipped_reference_file):
        assert bytes(ReferenceReader(gzipped_reference_file).read()) == REFERENCE

    def test_read_stream(self):
        assert bytes(ReferenceReader(BytesIO(b'>a\nac\n>b\ngt')).read()) == b'ACGT'

    def test_crlf(self):
        assert bytes(ReferenceReader(BytesIO(b'>a\r\nAC\r\nGT\r\n')).read()) == b'ACGT'

    def test_context_manager(self, reference_file):
        with ReferenceReader(reference_file) as reader:
            assert len(reader.read()) == 40

    def test_max_length(self, reference_file):
        with pytest.raises(BoundsError, match="reference.fa: Reference holds 40 bases"):
            ReferenceReader(reference_file, max_length=39).read()

    def test_missing_file(self, tmp_path):
        with pytest.raises(HirgcIOError):
            ReferenceReader(tmp_path / 'missing.fa').read()

    def test_corrupt_gzip(self, tmp_path):
        path = tmp_path / 'broken.fa.gz'
        path.write_bytes(gzip.compress(REFERENCE_TEXT)[:20])
        with pytest.raises(HirgcIOError, match="broken.fa.gz"):
            ReferenceReader(path).read()

    def test_corrupt_xz(self, tmp_path):
        path = tmp_path / 'broken.fa.xz'
        path.write_bytes(b'\xfd7zXZ\x00' + bytes(64))
        with pytest.raises(HirgcIOError, match="broken.fa.xz: ") as e:
            ReferenceReader(path).read()
        assert isinstance(e.value.__cause__, lzma.LZMAError)

    def test_corrupt_bzip2(self, tmp_path):
        path = tmp_path / 'broken.fa.bz2'
        path.write_bytes(b'BZh9' + bytes(64))
        with pytest.raises(HirgcIOError, match="broken.fa.bz2: "):
            ReferenceReader(path).read()

    def test_corrupt_compressed_target(self, tmp_path):
        path = tmp_path / 'target.hirgc.xz'
        path.write_bytes(lzma.compress(COMPRESSED_TEXT)[:-12] + bytes(12))
        with pytest.raises(HirgcIOError, match="target.hirgc.xz: "):
            CompressedReader(path).read()


class TestCompressedReader:
    def test_read(self, compressed_file):
        metadata, script = CompressedReader(compressed_file).read()
        assert metadata.header == HEADER
        assert metadata.line_layout.total == 56
        assert len(script) == 2
        assert script.literal_length == 1
        np.testing.assert_array_equal(script.offsets_from_prev, [-10, -30])
        np.testing.assert_array_equal(script.continue_fors, [0, -10])

    def test_read_metadata(self, compressed_file):
        metadata = CompressedReader(compressed_file).read_metadata()
        assert (metadata.initial_offset, metadata.initial_run_length) == (0, 0)

    def test_header_only(self):
        metadata, script = CompressedReader(BytesIO(b''.join(COMPRESSED_TEXT.splitlines(True)[:7]))).read()
        assert len(script) == 0
        assert metadata.special_chars.dictionary == b'RY'

    def test_errors_are_labelled(self, tmp_path):
        lines = COMPRESSED_TEXT.splitlines(True)
        lines[8] = b'-10 zero\n'
        path = tmp_path / 'bad.hirgc'
        path.write_bytes(b''.join(lines))
        with pytest.raises(FormatError) as e:
            CompressedReader(path).read()
        assert e.value.filename == str(path)
        assert e.value.line_number == 9
        assert str(e.value).startswith(f'{path}:9: ')

    def test_truncated_header(self):
        with pytest.raises(FormatError, match="<stream>:4: Expected 7 header lines, got 3"):
            CompressedReader(BytesIO(b'>x\n\n2 4 1\n')).read()

    def test_unpaired_line(self):
        with pytest.raises(FormatError, match="Unpaired") as e:
            CompressedReader(BytesIO(COMPRESSED_TEXT + b'0\n')).read()
        assert e.value.line_number == 12


class TestTargetWriter:
    def test_write(self):
        out = BytesIO()
        with TargetWriter(out) as writer:
            writer.write(b'>x y', b'ACGTACGTAC', LineLayout.parse(b'4 4 2 2 1'))
        assert out.getvalue() == b'>x y\n\nACGT\nACGT\nAC\n'

    def test_write_array(self):
        out = BytesIO()
        with TargetWriter(out) as writer:
            writer.write(b'>x', np.frombuffer(b'ACGTA', dtype=np.uint8), LineLayout.parse(b'2 5 1'))
        assert out.getvalue() == b'>x\n\nACGTA\n'

    def test_zero_length_lines(self):
        out = BytesIO()
        with TargetWriter(out) as writer:
            writer.write(b'>x', b'ACG', LineLayout.parse(b'4 3 1 0 2'))
        assert out.getvalue() == b'>x\n\nACG\n\n\n'

    def test_many_lines_are_chunked(self, monkeypatch):
        monkeypatch.setattr(TargetWriter, '_CHUNK_SIZE', 10)
        seq = b'ACGT' * 25
        out = BytesIO()
        with TargetWriter(out) as writer:
            writer.write(b'>x', seq, LineLayout.parse(b'2 4 25'))
        assert out.getvalue() == b'>x\n\n' + b'ACGT\n' * 25

    def test_empty_sequence(self):
        out = BytesIO()
        with TargetWriter(out) as writer:
            writer.write(b'>x', b'', LineLayout.parse(b'0'))
        assert out.getvalue() == b'>x\n\n'

    def test_layout_mismatch(self):
        out = BytesIO()
        with pytest.raises(BoundsError, match="covers 8 characters but the sequence has 10"):
            with TargetWriter(out) as writer:
                writer.write(b'>x', b'ACGTACGTAC', LineLayout.parse(b'2 4 2'))
        assert out.getvalue() == b''

    def test_write_gzipped(self, tmp_path):
        path = tmp_path / 'out.txt.gz'
        with TargetWriter(path) as writer:
            writer.write(b'>x', b'ACGT', LineLayout.parse(b'2 4 1'))
        assert gzip.decompress(path.read_bytes()) == b'>x\n\nACGT\n'
