import pytest

from app.models.content_progress import ProgressStatus
from app.services import batching
from app.services.progress_reader import ProgressIndex, batch_load, load_by_modules


def test_batch_load_restricts_to_requested_pairs(db, seed):
    rows = batch_load(db, [seed.i1, seed.i2], [seed.s1, seed.s2, seed.s4])

    pairs = {(r.student_id, r.content_id) for r in rows}
    assert pairs == {(seed.s1, seed.i1), (seed.s1, seed.i2), (seed.s2, seed.i2)}


def test_batch_load_with_empty_inputs_reads_nothing(db, seed):
    assert batch_load(db, [], [seed.s1]) == []
    assert batch_load(db, [seed.i1], []) == []


@pytest.mark.parametrize("size", [1, 2])
def test_batching_does_not_change_results(db, seed, monkeypatch, size):
    expected = batch_load(db, [seed.i1, seed.i2, seed.i_calc], [seed.s1, seed.s2])

    monkeypatch.setattr(batching, "PROGRESS_BATCH_SIZE", size)
    rows = batch_load(db, [seed.i1, seed.i2, seed.i_calc], [seed.s1, seed.s2])

    assert sorted(rows, key=lambda r: (r.student_id, r.content_id)) == sorted(
        expected, key=lambda r: (r.student_id, r.content_id)
    )
    assert len(rows) == 4


def test_timestamps_come_back_in_utc(db, seed):
    (row,) = batch_load(db, [seed.i_calc], [seed.s1])

    assert row.status == ProgressStatus.IN_PROGRESS
    assert row.completed_at is None
    assert row.last_accessed_at.tzinfo is not None
    assert row.last_accessed_at.utcoffset().total_seconds() == 0


def test_load_by_modules_includes_unpublished_rows(db, seed):
    rows = load_by_modules(db, [seed.m_vars], [seed.s2])

    # the hidden item row is read; the rollup is what drops it
    assert len(rows) == 2
    assert {r.module_id for r in rows} == {seed.m_vars}


def test_index_absent_pair_is_not_started(db, seed):
    index = ProgressIndex(batch_load(db, [seed.i1, seed.i2], [seed.s2, seed.s4]))

    assert index.status(seed.s2, seed.i2) == ProgressStatus.COMPLETED
    assert index.status(seed.s2, seed.i1) == ProgressStatus.NOT_STARTED
    assert index.status(seed.s4, seed.i1) == ProgressStatus.NOT_STARTED
    assert index.rows_for(seed.s4) == []
    assert index.completed_ids(seed.s2) == {seed.i2}
    assert index.pair_count() == 1
