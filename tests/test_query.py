import pytest

from jobcore import JobStore, Priority, ValidationError
from .fixtures import FakeClock, clock, settings, store_sqlite


def test_query_paging(store_sqlite: JobStore, clock: FakeClock):
    ids = []
    for _ in range(25):
        ids.append(store_sqlite.submit("EMAIL").id)
        clock.advance(seconds=1)

    first = store_sqlite.query()
    assert first.total == 25
    assert first.page == 0
    assert first.size == 20
    assert len(first) == 20
    assert first.total_pages == 2
    assert first.has_next
    # Newest first
    assert [j.id for j in first] == ids[::-1][:20]

    second = store_sqlite.query(page=1)
    assert [j.id for j in second] == ids[::-1][20:]
    assert not second.has_next

    assert len(store_sqlite.query(page=5)) == 0


def test_query_filters(store_sqlite: JobStore, clock: FakeClock):
    store_sqlite.submit("EMAIL", priority=Priority.HIGH, created_by="billing")
    store_sqlite.submit("EMAIL", priority=Priority.LOW)
    store_sqlite.submit("IMAGE_RESIZE", priority=Priority.HIGH)
    cancelled = store_sqlite.submit("FILE_PROCESSING")
    store_sqlite.cancel(cancelled.id)

    assert store_sqlite.query(job_type="EMAIL").total == 2
    assert store_sqlite.query(priority="HIGH").total == 2
    assert store_sqlite.query(job_type="EMAIL", priority=Priority.HIGH).total == 1
    assert store_sqlite.query(created_by="billing").total == 1
    assert store_sqlite.query(status="cancelled").total == 1
    assert store_sqlite.query(status="PENDING").total == 3


def test_query_sort(store_sqlite: JobStore, clock: FakeClock):
    for priority in ("NORMAL", "URGENT", "LOW"):
        store_sqlite.submit("EMAIL", priority=priority)
        clock.advance(seconds=1)

    page = store_sqlite.query(sort_by="priority", sort_dir="ASC")
    assert [j.priority_name for j in page] == ["LOW", "NORMAL", "URGENT"]

    page = store_sqlite.query(sort_by="created_at", sort_dir="asc")
    assert [j.priority_name for j in page] == ["NORMAL", "URGENT", "LOW"]


@pytest.mark.parametrize(
    "kwargs",
    [
        dict(size=0),
        dict(size=1001),
        dict(page=-1),
        dict(sort_by="payload"),
        dict(sort_dir="sideways"),
        dict(status="DONE"),
        dict(priority="CRITICAL"),
    ],
)
def test_query_invalid(store_sqlite: JobStore, kwargs):
    with pytest.raises(ValidationError):
        store_sqlite.query(**kwargs)


def test_query_max_size(store_sqlite: JobStore):
    store_sqlite.submit("EMAIL")
    assert store_sqlite.query(size=1000).size == 1000


def test_running(store_sqlite: JobStore, clock: FakeClock):
    for _ in range(3):
        store_sqlite.submit("EMAIL")
    first = store_sqlite.claim("worker-1")
    clock.advance(seconds=1)
    second = store_sqlite.claim("worker-2")

    running = store_sqlite.running()
    assert [j.id for j in running] == [second.id, first.id]
    assert len(store_sqlite.running(limit=1)) == 1


def test_statistics(store_sqlite: JobStore):
    store_sqlite.submit("EMAIL", priority=Priority.URGENT)
    store_sqlite.submit("EMAIL", priority=Priority.URGENT)
    processing = store_sqlite.submit("IMAGE_RESIZE", priority=Priority.HIGH)
    cancelled = store_sqlite.submit("FILE_PROCESSING", priority=Priority.LOW)
    store_sqlite.cancel(cancelled.id)
    store_sqlite.claim("worker-1", job_types=["IMAGE_RESIZE"])

    stats = store_sqlite.statistics()
    assert stats.total == 4
    assert stats.pending == 2
    assert stats.processing == 1
    assert stats.completed == 0
    assert stats.failed == 0
    assert stats.cancelled == 1
    assert stats.by_priority == {"URGENT": 2, "HIGH": 1, "NORMAL": 0, "LOW": 1}
    assert stats.by_type == {"EMAIL": 2, "IMAGE_RESIZE": 1, "FILE_PROCESSING": 1}
    assert store_sqlite.get(processing.id).status == store_sqlite.PROCESSING

    emails = store_sqlite.statistics("EMAIL")
    assert emails.total == 2
    assert emails.by_type == {"EMAIL": 2}


def test_statistics_empty(store_sqlite: JobStore):
    stats = store_sqlite.statistics()
    assert stats.total == 0
    assert stats.pending == 0
    assert stats.by_priority == {"URGENT": 0, "HIGH": 0, "NORMAL": 0, "LOW": 0}
    assert stats.to_dict()["by_type"] == {}


def test_count_and_job_types(store_sqlite: JobStore):
    store_sqlite.submit("EMAIL")
    store_sqlite.submit("EMAIL")
    cancelled = store_sqlite.submit("GENERIC_BATCH")
    store_sqlite.cancel(cancelled.id)

    assert store_sqlite.count() == 3
    assert store_sqlite.count("EMAIL") == 2
    assert store_sqlite.count(status=[store_sqlite.PENDING, store_sqlite.CANCELLED]) == 3
    assert store_sqlite.count("GENERIC_BATCH", store_sqlite.PENDING) == 0

    assert store_sqlite.job_types() == ["EMAIL", "GENERIC_BATCH"]
    assert store_sqlite.job_types(store_sqlite.PENDING) == ["EMAIL"]

    with pytest.raises(ValidationError):
        store_sqlite.count(status="DONE")
