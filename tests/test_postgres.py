import multiprocessing
import threading
from datetime import timedelta

from jobcore import JobStore, Priority
from .fixtures import settings, store_psycopg2


def claim_all_in_another_process(dsn: str, name: str, results) -> None:
    # Independent process, needs its own instance
    store = JobStore(dsn)
    while (job := store.claim(name, timedelta(minutes=1))) is not None:
        results.append(str(job.id))


def test_claim_order(store_psycopg2: JobStore):
    low = store_psycopg2.submit("EMAIL", priority=Priority.LOW)
    urgent = store_psycopg2.submit("EMAIL", priority=Priority.URGENT)

    assert store_psycopg2.claim("worker-1").id == urgent.id
    assert store_psycopg2.claim("worker-1").id == low.id
    assert store_psycopg2.claim("worker-1") is None


def test_claim_is_exclusive_across_threads(store_psycopg2: JobStore):
    for i in range(50):
        store_psycopg2.submit("EMAIL", {"n": i})

    claimed = []
    lock = threading.Lock()

    def worker(name: str) -> None:
        while (job := store_psycopg2.claim(name)) is not None:
            with lock:
                claimed.append(job.id)

    threads = [
        threading.Thread(target=worker, args=(f"worker-{i}",)) for i in range(8)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=60)

    assert len(claimed) == 50
    assert len(set(claimed)) == 50


def test_claim_is_exclusive_across_processes(
    store_psycopg2: JobStore, postgres_dsn_sync: str
):
    for i in range(30):
        store_psycopg2.submit("EMAIL", {"n": i})

    with multiprocessing.Manager() as manager:
        results = manager.list()
        processes = [
            multiprocessing.Process(
                target=claim_all_in_another_process,
                args=(postgres_dsn_sync, f"process-{i}", results),
            )
            for i in range(3)
        ]
        for p in processes:
            p.start()
        for p in processes:
            p.join(timeout=60)
        claimed = list(results)

    assert len(claimed) == 30
    assert len(set(claimed)) == 30


def test_statistics_and_cleanup(store_psycopg2: JobStore):
    job = store_psycopg2.submit("IMAGE_RESIZE", priority="HIGH")
    store_psycopg2.cancel(job.id)
    store_psycopg2.submit("EMAIL")

    stats = store_psycopg2.statistics()
    assert stats.total == 2
    assert stats.cancelled == 1
    assert stats.by_priority["HIGH"] == 1

    assert store_psycopg2.delete_terminal_before(
        store_psycopg2.now() + timedelta(seconds=1)
    ) == 1
