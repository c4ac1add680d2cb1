import logging

import pytest

from giraffe.cli import main

from conftest import GFF


@pytest.fixture()
def store(tmp_path):
    gff = tmp_path / "anno.gff3"
    gff.write_text(GFF)
    db = tmp_path / "anno.db"
    main(["build", "-i", str(gff), "-o", str(db)])
    return db


def test_build_and_query(tmp_path, store):
    points = tmp_path / "points.tsv"
    points.write_text("chr1\t10\nchr1\t55\nchr1\t200\nchr2\t15\n")
    out = tmp_path / "hits.gff3"
    main(["query", "-d", str(store), "-i", str(points), "-o", str(out)])

    lines = out.read_text().splitlines()
    assert lines[0] == "##gff-version 3"
    assert lines[1] == "chr1\tensembl\tgene\t1\t100\t.\t+\t.\tID=geneA;Name=geneA;query_hits=10 55"
    assert lines[2] == "chr1\tensembl\texon\t50\t60\t3.5\t-\t0\tID=exon1;Parent=geneA,geneB;query_hits=55"
    assert lines[3] == "chr2\t.\tregion\t10\t20\t7\t.\t.\tquery_hits=15"
    assert len(lines) == 4


def test_query_options(tmp_path, store):
    points = tmp_path / "points.tsv"
    points.write_text("chr2\t12\n")
    out = tmp_path / "hits.gff3"
    main(["query", "-d", str(store), "-i", str(points), "-o", str(out),
          "--no-provenance", "--frame-placeholder", "", "--threads", "2"])
    assert out.read_text().splitlines()[1] == "chr2\t.\tregion\t10\t20\t7\t.\t\t."


def test_zero_matches_is_success(tmp_path, store):
    points = tmp_path / "points.tsv"
    points.write_text("chr7\t1\n")
    out = tmp_path / "hits.gff3"
    main(["query", "-d", str(store), "-i", str(points), "-o", str(out)])
    assert out.read_text() == "##gff-version 3\n"


def test_build_failure_exits_nonzero(tmp_path, store):
    bad = tmp_path / "bad.gff3"
    bad.write_text("chr1\tsrc\tgene\t10\t5\t.\t+\t.\tID=x\n")
    with pytest.raises(SystemExit) as exc:
        main(["build", "-i", str(bad), "-o", str(store)])
    assert exc.value.code == 1

    points = tmp_path / "points.tsv"
    points.write_text("chr1\t10\n")
    out = tmp_path / "hits.gff3"
    main(["query", "-d", str(store), "-i", str(points), "-o", str(out)])
    assert "geneA" in out.read_text()


def test_query_missing_store_exits_nonzero(tmp_path):
    points = tmp_path / "points.tsv"
    points.write_text("chr1\t10\n")
    with pytest.raises(SystemExit) as exc:
        main(["query", "-d", str(tmp_path / "nope.db"), "-i", str(points), "-o", str(tmp_path / "o.gff3")])
    assert exc.value.code == 1


def test_oversized_query_coordinate_exits_nonzero(tmp_path, store):
    points = tmp_path / "points.tsv"
    points.write_text("chr1\t99999999999999999999\n")
    with pytest.raises(SystemExit) as exc:
        main(["query", "-d", str(store), "-i", str(points), "-o", str(tmp_path / "o.gff3")])
    assert exc.value.code == 1


def test_provenance_key_collision_warns(tmp_path, caplog):
    gff = tmp_path / "anno.gff3"
    gff.write_text("chr1\tsrc\tgene\t1\t100\t.\t+\t.\tID=g;query_hits=old\n")
    db = tmp_path / "anno.db"
    main(["build", "-i", str(gff), "-o", str(db)])
    points = tmp_path / "points.tsv"
    points.write_text("chr1\t5\n")
    out = tmp_path / "hits.gff3"

    with caplog.at_level(logging.WARNING, logger="giraffe"):
        main(["query", "-d", str(db), "-i", str(points), "-o", str(out)])
    assert any("query_hits" in r.getMessage() for r in caplog.records if r.levelno == logging.WARNING)
    assert out.read_text().splitlines()[1].endswith("ID=g;query_hits=old,5")

    caplog.clear()
    with caplog.at_level(logging.WARNING, logger="giraffe"):
        main(["query", "-d", str(db), "-i", str(points), "-o", str(out), "--provenance-key", "hits"])
    assert not [r for r in caplog.records if r.levelno == logging.WARNING]
    assert out.read_text().splitlines()[1].endswith("ID=g;query_hits=old;hits=5")
