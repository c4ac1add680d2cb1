import io

import pytest

from giraffe.errors import CodecError
from giraffe.io.points import read_query_points
from giraffe.models import QueryPoint


def test_read_points():
    text = "chr1\t10\n# comment\n\nchr1\t55\textra\nchr2\t0\n"
    points = list(read_query_points(io.StringIO(text)))
    assert points == [QueryPoint("chr1", 10), QueryPoint("chr1", 55), QueryPoint("chr2", 0)]


def test_duplicates_kept():
    points = list(read_query_points(io.StringIO("chr1\t5\nchr1\t5\n")))
    assert points == [QueryPoint("chr1", 5), QueryPoint("chr1", 5)]


def test_small_chunks():
    text = "".join(f"chr1\t{i}\n" for i in range(10))
    points = list(read_query_points(io.StringIO(text), chunksize=3))
    assert [p.coordinate for p in points] == list(range(10))


def test_empty_input():
    assert list(read_query_points(io.StringIO(""))) == []


def test_read_from_path(tmp_path):
    path = tmp_path / "q.tsv"
    path.write_text("chrM\t16000\n")
    assert list(read_query_points(path)) == [QueryPoint("chrM", 16000)]


@pytest.mark.parametrize("text", ["chr1\t-5\n", "chr1\t1.5\n", "chr1\tabc\n", "chr1\t10\nchr1\t\n"])
def test_bad_coordinates(text):
    with pytest.raises(CodecError):
        list(read_query_points(io.StringIO(text)))


def test_single_column():
    with pytest.raises(CodecError):
        list(read_query_points(io.StringIO("chr1\nchr2\n")))


def test_hash_inside_line_is_not_a_comment():
    with pytest.raises(CodecError):
        list(read_query_points(io.StringIO("chr1\t10#junk\n")))


def test_comment_lines_between_rows():
    text = "#header\nchr1\t1\n# note\nchr1\t2\n"
    assert [p.coordinate for p in read_query_points(io.StringIO(text), chunksize=1)] == [1, 2]


def test_coordinate_too_large():
    with pytest.raises(CodecError):
        list(read_query_points(io.StringIO("chr1\t99999999999999999999\n")))
    assert list(read_query_points(io.StringIO(f"chr1\t{2**63 - 1}\n"))) == [QueryPoint("chr1", 2**63 - 1)]


def test_invalid_utf8(tmp_path):
    path = tmp_path / "q.tsv"
    path.write_bytes(b"chr1\t10\n\xff\xfe\t5\n")
    with pytest.raises(CodecError):
        list(read_query_points(path))
