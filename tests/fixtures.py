import logging
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError

from jobcore import JobQueue, JobStore, QueueSettings


T0 = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """A clock that only moves when told to."""

    def __init__(self, start: datetime = T0) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, delta: timedelta | None = None, **kwargs) -> datetime:
        self.current += delta if delta is not None else timedelta(**kwargs)
        return self.current


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings() -> QueueSettings:
    return QueueSettings(
        database_url="sqlite:///:memory:",
        poll_min_interval=timedelta(milliseconds=10),
        poll_max_interval=timedelta(milliseconds=50),
    )


@pytest.fixture
def store_sqlite(clock, settings):
    logging.getLogger("jobcore").setLevel(logging.DEBUG)

    engine = create_engine("sqlite:///:memory:")
    instance = JobStore(engine, settings=settings, clock=clock)
    instance.create_all()
    return instance


@pytest.fixture
def store_sqlite_file(tmp_path, settings):
    """A store that can be shared by several threads."""
    logging.getLogger("jobcore").setLevel(logging.DEBUG)

    engine = create_engine(
        f"sqlite:///{tmp_path / 'jobs.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    instance = JobStore(engine, settings=settings)
    instance.create_all()
    yield instance
    engine.dispose()


@pytest.fixture
def store_psycopg2(postgres_dsn_sync, settings):
    logging.getLogger("jobcore").setLevel(logging.DEBUG)
    pytest.importorskip("psycopg2")

    instance = JobStore(postgres_dsn_sync, settings=settings)
    try:
        instance.create_all()
    except OperationalError as e:
        pytest.skip(f"PostgreSQL is not available: {e}")

    try:
        yield instance
    finally:
        instance.drop_all()
        instance.engine.dispose()


@pytest.fixture
def queue_sqlite(clock, settings):
    logging.getLogger("jobcore").setLevel(logging.DEBUG)

    engine = create_engine("sqlite:///:memory:")
    instance = JobQueue(engine, settings=settings, clock=clock)
    instance.create_all()
    return instance


@pytest.fixture
def queue_sqlite_file(tmp_path, settings):
    """A queue whose dispatchers and sweepers can run in threads."""
    logging.getLogger("jobcore").setLevel(logging.DEBUG)

    engine = create_engine(
        f"sqlite:///{tmp_path / 'queue.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    instance = JobQueue(engine, settings=settings)
    instance.create_all()
    yield instance
    engine.dispose()
