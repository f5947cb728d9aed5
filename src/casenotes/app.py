"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from functools import cache
from logging import getLogger
from typing import TYPE_CHECKING

from casenotes.adapters.alerts import AlertsApiClient
from casenotes.adapters.events import HttpTopicPublisher, HttpWorkQueue, LoggingTelemetry
from casenotes.adapters.prisons import PrisonApiClient, PrisonerSearchApiClient
from casenotes.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyCaseNoteUnitOfWork,
    is_started,
    startup,
)
from casenotes.adapters.users import ManageUsersClient
from casenotes.config import get_service_config
from casenotes.domain.alerts import (
    AlertCaseNoteHandler,
    AlertCaseNoteReconciliation,
    AlertCaseNoteVerification,
    ReconciliationEventGenerator,
)
from casenotes.domain.events import PersonEventPublisher
from casenotes.domain.identity import SystemUserCache
from casenotes.domain.listener import DomainEventListener
from casenotes.domain.merge import CaseNoteMerge
from casenotes.domain.ports.unit_of_work import CaseNoteUnitOfWork
from casenotes.domain.sync import CaseNoteSync

if TYPE_CHECKING:
    from collections.abc import Collection, Sequence
    from datetime import date
    from uuid import UUID

    from casenotes.domain.alerts import ReconciliationResult, VerificationResult
    from casenotes.domain.events import DomainEvent
    from casenotes.domain.model import Note
    from casenotes.domain.ports.clients import AlertClient
    from casenotes.domain.ports.events import DomainEventPublisher, Telemetry, WorkQueue
    from casenotes.domain.sync import (
        MigrateCaseNoteRequest,
        MigrationResult,
        MoveCaseNotesRequest,
        SyncCaseNoteRequest,
        SyncResult,
    )

UnitOfWorkFactory = Callable[[], CaseNoteUnitOfWork]

log = getLogger(__name__)


@cache
def system_user_cache() -> SystemUserCache:
    """Process-wide cache of the account that authors generated notes."""

    return SystemUserCache(ManageUsersClient())


def _unit_of_work_factory(override: UnitOfWorkFactory | None) -> UnitOfWorkFactory:
    if override is not None:
        return override
    if not is_started():
        startup()
    return SqlAlchemyCaseNoteUnitOfWork


def _person_events(
    telemetry: Telemetry, publisher: DomainEventPublisher | None = None
) -> PersonEventPublisher:
    service = get_service_config()
    if publisher is None and service.publish_person_events:
        publisher = HttpTopicPublisher()
    return PersonEventPublisher(
        publisher=publisher,
        telemetry=telemetry,
        base_url=service.base_url,
        enabled=service.publish_person_events,
    )


def build_reconciliation(
    *,
    alerts: AlertClient | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    telemetry: Telemetry | None = None,
    publisher: DomainEventPublisher | None = None,
) -> AlertCaseNoteReconciliation:
    effective_telemetry = telemetry or LoggingTelemetry()
    return AlertCaseNoteReconciliation(
        alerts=alerts or AlertsApiClient(),
        unit_of_work_factory=_unit_of_work_factory(unit_of_work_factory),
        telemetry=effective_telemetry,
        events=_person_events(effective_telemetry, publisher),
        system_user=system_user_cache(),
        action_missing_case_notes=get_service_config().action_missing_case_notes,
    )


def reconcile_alert_case_notes(
    person_identifier: str,
    from_date: date,
    to_date: date,
    *,
    alerts: AlertClient | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    telemetry: Telemetry | None = None,
) -> ReconciliationResult:
    """Compare a person's alerts with their alert case notes and backfill the gaps."""

    log.info(
        "Reconciling alert case notes for %s from %s to %s", person_identifier, from_date, to_date
    )
    result = build_reconciliation(
        alerts=alerts, unit_of_work_factory=unit_of_work_factory, telemetry=telemetry
    ).reconcile(person_identifier, from_date, to_date)
    log.info(
        "Finished reconciliation for %s: missing=%s, created=%s",
        person_identifier,
        len(result.missing),
        len(result.created),
    )
    return result


def verify_alert_case_notes(
    person_identifier: str,
    from_date: date,
    to_date: date,
    *,
    alerts: AlertClient | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    telemetry: Telemetry | None = None,
) -> VerificationResult:
    verification = AlertCaseNoteVerification(
        alerts=alerts or AlertsApiClient(),
        unit_of_work_factory=_unit_of_work_factory(unit_of_work_factory),
        telemetry=telemetry or LoggingTelemetry(),
        system_user=system_user_cache(),
        action_missing_case_notes=get_service_config().action_missing_case_notes,
    )
    return verification.verify(person_identifier, from_date, to_date)


def generate_reconciliation_events(
    from_date: date,
    to_date: date,
    *,
    alerts: AlertClient | None = None,
    queue: WorkQueue | None = None,
) -> int:
    generator = ReconciliationEventGenerator(
        alerts=alerts or AlertsApiClient(),
        queue=queue or HttpWorkQueue(),
    )
    return generator.generate(from_date, to_date)


def build_merge(
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    telemetry: Telemetry | None = None,
    publisher: DomainEventPublisher | None = None,
) -> CaseNoteMerge:
    return CaseNoteMerge(
        unit_of_work_factory=_unit_of_work_factory(unit_of_work_factory),
        events=_person_events(telemetry or LoggingTelemetry(), publisher),
    )


def merge_case_notes(
    noms_number: str,
    removed_noms_number: str,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[Note]:
    return build_merge(unit_of_work_factory=unit_of_work_factory).merge(
        noms_number, removed_noms_number
    )


def build_sync(
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    telemetry: Telemetry | None = None,
    publisher: DomainEventPublisher | None = None,
) -> CaseNoteSync:
    effective_telemetry = telemetry or LoggingTelemetry()
    return CaseNoteSync(
        unit_of_work_factory=_unit_of_work_factory(unit_of_work_factory),
        events=_person_events(effective_telemetry, publisher),
        telemetry=effective_telemetry,
    )


def migrate_case_notes(
    person_identifier: str,
    requests: Sequence[MigrateCaseNoteRequest],
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[MigrationResult]:
    results = build_sync(unit_of_work_factory=unit_of_work_factory).migrate_notes(
        person_identifier, requests
    )
    log.info("Migrated %s case notes for %s", len(results), person_identifier)
    return results


def sync_case_note(
    request: SyncCaseNoteRequest,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> SyncResult:
    return build_sync(unit_of_work_factory=unit_of_work_factory).sync_note(request)


def delete_case_note(
    case_note_id: UUID,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> None:
    build_sync(unit_of_work_factory=unit_of_work_factory).delete_case_note(case_note_id)


def move_case_notes(
    request: MoveCaseNotesRequest,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[Note]:
    return build_sync(unit_of_work_factory=unit_of_work_factory).move_case_notes(request)


def migration_results(
    legacy_ids: Collection[int],
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[MigrationResult]:
    return build_sync(unit_of_work_factory=unit_of_work_factory).migration_results(legacy_ids)


def build_listener(
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    telemetry: Telemetry | None = None,
) -> DomainEventListener:
    effective_telemetry = telemetry or LoggingTelemetry()
    factory = _unit_of_work_factory(unit_of_work_factory)
    events = _person_events(effective_telemetry)
    return DomainEventListener(
        merge=build_merge(unit_of_work_factory=factory, telemetry=effective_telemetry),
        reconciliation=build_reconciliation(
            unit_of_work_factory=factory, telemetry=effective_telemetry
        ),
        alert_handler=AlertCaseNoteHandler(
            alerts=AlertsApiClient(),
            prisoners=PrisonerSearchApiClient(),
            switches=PrisonApiClient(),
            users=ManageUsersClient(),
            unit_of_work_factory=factory,
            events=events,
        ),
    )


def handle_domain_event(event: DomainEvent) -> bool:
    """Dispatch one inbound domain event; returns whether its type was handled."""

    handled = build_listener().handle(event)
    log.info("Event %s %s", event.event_type, "handled" if handled else "ignored")
    return handled
