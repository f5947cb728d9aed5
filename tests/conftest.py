from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.orm import Session, sessionmaker

from casenotes.adapters.sqlalchemy import start_mappers
from casenotes.adapters.sqlalchemy.migrations import upgrade_head
from casenotes.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyCaseNoteUnitOfWork,
    shutdown,
    startup,
)
from tests.helpers.fakes import (
    FakeCaseNoteStore,
    RecordingPublisher,
    RecordingTelemetry,
    make_person_events,
)
from tests.helpers.notes import make_alert_sub_types, make_sub_type

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from casenotes.domain.events import PersonEventPublisher


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    start_mappers()
    upgrade_head(engine=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_session(sqlite_engine: Engine) -> Iterator[Session]:
    session_factory = sessionmaker(bind=sqlite_engine, future=True)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: Engine,
) -> Iterator[Callable[[], SqlAlchemyCaseNoteUnitOfWork]]:
    startup(engine=sqlite_engine, force=True)

    def factory() -> SqlAlchemyCaseNoteUnitOfWork:
        return SqlAlchemyCaseNoteUnitOfWork()

    try:
        yield factory
    finally:
        shutdown()


@pytest.fixture
def store() -> FakeCaseNoteStore:
    """Fake store seeded with the alert sub-types and one general, synced sub-type."""

    return FakeCaseNoteStore(sub_types=[*make_alert_sub_types(), make_sub_type("OSE")])


@pytest.fixture
def telemetry() -> RecordingTelemetry:
    return RecordingTelemetry()


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture
def person_events(
    publisher: RecordingPublisher, telemetry: RecordingTelemetry
) -> PersonEventPublisher:
    return make_person_events(publisher, telemetry)
