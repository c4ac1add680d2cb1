import random

import pytest

from giraffe.errors import IndexNotReady, IndexSealed
from giraffe.index.interval_index import IntervalIndex


def _sealed(intervals):
    index = IntervalIndex()
    for seqname, s, e, rid in intervals:
        index.insert(seqname, s, e, rid)
    index.finalize()
    return index


def test_stab_closed_bounds():
    index = _sealed([("chr1", 10, 20, 1)])
    assert index.stab("chr1", 9) == []
    assert index.stab("chr1", 10) == [1]
    assert index.stab("chr1", 20) == [1]
    assert index.stab("chr1", 21) == []


def test_stab_matches_brute_force():
    rng = random.Random(7)
    intervals = []
    for rid in range(1, 301):
        seqname = rng.choice(["chr1", "chr2"])
        s = rng.randint(0, 500)
        e = s + rng.choice([0, 1, 5, 40, 300])
        intervals.append((seqname, s, e, rid))
    index = _sealed(intervals)

    for seqname in ("chr1", "chr2"):
        coords = list(range(-5, 900, 3))
        batch = index.stab_many(seqname, coords)
        for c, got in zip(coords, batch):
            expected = {rid for sq, s, e, rid in intervals if sq == seqname and s <= c <= e}
            single = index.stab(seqname, c)
            assert len(single) == len(set(single))
            assert set(single) == expected
            assert single == got


def test_long_interval_not_pruned():
    # a long early interval keeps the running max of ends high
    index = _sealed([("chr1", 1, 1000, 1), ("chr1", 2, 3, 2), ("chr1", 4, 5, 3), ("chr1", 900, 950, 4)])
    assert sorted(index.stab("chr1", 920)) == [1, 4]
    assert index.stab("chr1", 6) == [1]


def test_result_order_is_deterministic():
    intervals = [("chr1", 5, 50, 3), ("chr1", 1, 100, 1), ("chr1", 5, 20, 2)]
    a = _sealed(intervals).stab("chr1", 10)
    b = _sealed(list(reversed(intervals))).stab("chr1", 10)
    assert a == b == [1, 2, 3]


def test_unknown_seqname_is_empty():
    index = _sealed([("chr1", 1, 10, 1)])
    assert index.stab("chr2", 5) == []
    assert index.stab_many("chr2", [1, 2]) == [[], []]


def test_insert_after_finalize():
    index = _sealed([("chr1", 1, 10, 1)])
    with pytest.raises(IndexSealed):
        index.insert("chr1", 2, 3, 2)
    with pytest.raises(IndexSealed):
        index.finalize()


def test_query_before_finalize():
    index = IntervalIndex()
    index.insert("chr1", 1, 10, 1)
    with pytest.raises(IndexNotReady):
        index.stab("chr1", 5)


def test_save_and_load(handle, records):
    ids = [records.create("chr1", "s", "gene", s, e) for s, e in [(1, 100), (50, 60)]]
    ids.append(records.create("chrX", "s", "gene", 7, 7))
    index = IntervalIndex()
    index.insert("chr1", 1, 100, ids[0])
    index.insert("chr1", 50, 60, ids[1])
    index.insert("chrX", 7, 7, ids[2])
    index.finalize()
    assert index.save(handle) == 3

    loaded = IntervalIndex.load(handle)
    assert loaded.sealed
    assert len(loaded) == 3
    assert sorted(loaded.seqnames()) == ["chr1", "chrX"]
    assert loaded.stab("chr1", 55) == [ids[0], ids[1]]
    assert loaded.stab("chrX", 7) == [ids[2]]


def test_load_empty_store(handle):
    index = IntervalIndex.load(handle)
    assert index.sealed and len(index) == 0
    assert index.stab("chr1", 1) == []
