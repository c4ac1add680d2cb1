import pytest

from giraffe.models import AnnotationEntry
from giraffe.store.handle import StoreHandle
from giraffe.store.records import RecordStore


@pytest.fixture()
def handle():
    with StoreHandle() as h:
        yield h


@pytest.fixture()
def records(handle):
    return RecordStore(handle)


def entry(seqname, start, end, name, **kw):
    attrs = kw.pop("attributes", [("Name", name)])
    return AnnotationEntry(
        seqname=seqname,
        source=kw.pop("source", "test"),
        feature_type=kw.pop("feature_type", "gene"),
        start=start,
        end=end,
        attributes=attrs,
        **kw,
    )


GFF = (
    "##gff-version 3\n"
    "# a comment\n"
    "chr1\tensembl\tgene\t1\t100\t.\t+\t.\tID=geneA;Name=geneA\n"
    "chr1\tensembl\texon\t50\t60\t3.5\t-\t0\tID=exon1;Parent=geneA,geneB\n"
    "\n"
    "chr2\t.\tregion\t10\t20\t7\t.\t.\t.\n"
)
