import gzip

import pytest

R1, R2, R3, R4 = b'AACCGGTTAC', b'GATTACAGGC', b'TTGACCATGA', b'CGCGATATCC'
REFERENCE = R1 + R2 + R3 + R4

REFERENCE_TEXT = b'>ref desc\nAACCGGTTAC\ngattacaggc\nTTGANCCATGA\n\nCGCGATATCC\n'

HEADER = b'>chrTest sample target'
COMPRESSED_TEXT = (
    HEADER + b'\n'
    b'\n'
    b'4 25 2 6 1\n'          # two lines of 25, one of 6
    b'1 0 4\n'               # lowercase [0, 4)
    b'1 10 3\n'              # NNN at 10
    b'2 5 0 2 17 24 01\n'    # R at 5, Y at 6
    b'0 0\n'                 # copy reference [0, 20)
    b'3\n'
    b'-10 0\n'               # T, then copy [10, 30)
    b'\n'
    b'-30 -10\n'             # copy [0, 10)
)

RAW = R1 + R2 + b'T' + R2 + R3 + R1
FINAL = b'aacc' + b'GRYGTT' + b'NNN' + b'AC' + R2 + b'T' + R2 + R3 + R1
OUTPUT = HEADER + b'\n\n' + FINAL[:25] + b'\n' + FINAL[25:50] + b'\n' + FINAL[50:] + b'\n'


@pytest.fixture
def reference_file(tmp_path):
    path = tmp_path / 'reference.fa'
    path.write_bytes(REFERENCE_TEXT)
    return path


@pytest.fixture
def gzipped_reference_file(tmp_path):
    path = tmp_path / 'reference.fa.gz'
    path.write_bytes(gzip.compress(REFERENCE_TEXT))
    return path


@pytest.fixture
def compressed_file(tmp_path):
    path = tmp_path / 'target.hirgc'
    path.write_bytes(COMPRESSED_TEXT)
    return path
