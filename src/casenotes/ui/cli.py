from __future__ import annotations

import argparse
import logging
import sys
from datetime import date, timedelta
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING
from uuid import UUID

from dotenv import load_dotenv
from pydantic import ValidationError

from casenotes.adapters.events import parse_notification
from casenotes.app import (
    delete_case_note,
    generate_reconciliation_events,
    handle_domain_event,
    merge_case_notes,
    migrate_case_notes,
    migration_results,
    move_case_notes,
    reconcile_alert_case_notes,
    sync_case_note,
    verify_alert_case_notes,
)
from casenotes.config import configure_logging
from casenotes.domain.errors import CaseNoteValidationError
from casenotes.domain.sync import MoveCaseNotesRequest
from casenotes.ui.schema import MIGRATE_REQUESTS, SyncCaseNotePayload

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _add_window(parser: argparse.ArgumentParser, *, required: bool) -> None:
    parser.add_argument(
        "--from",
        dest="from_date",
        type=str,
        required=required,
        help="ISO-8601 date marking the inclusive start of the window",
    )
    parser.add_argument(
        "--to",
        dest="to_date",
        type=str,
        required=required,
        help="ISO-8601 date marking the inclusive end of the window",
    )


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile and synchronise case notes")
    subparsers = parser.add_subparsers(dest="command", required=True)

    reconcile = subparsers.add_parser("reconcile", help="Backfill missing alert case notes")
    reconcile.add_argument("person_identifier", help="Prison number of the person")
    _add_window(reconcile, required=True)

    verify = subparsers.add_parser("verify", help="Verify alert case notes for a person")
    verify.add_argument("person_identifier", help="Prison number of the person")
    _add_window(verify, required=True)

    generate = subparsers.add_parser(
        "generate-reconciliation-events",
        help="Queue reconciliation for everyone with alert activity (defaults to yesterday-today)",
    )
    _add_window(generate, required=False)

    merge = subparsers.add_parser("merge", help="Move case notes from a merged prisoner record")
    merge.add_argument("--noms-number", required=True, help="Surviving prison number")
    merge.add_argument("--removed-noms-number", required=True, help="Retired prison number")

    migrate = subparsers.add_parser("migrate", help="Migrate legacy case notes for a person")
    migrate.add_argument("person_identifier", help="Prison number of the person")
    migrate.add_argument("--file", type=Path, required=True, help="JSON list of case notes")

    sync = subparsers.add_parser("sync", help="Create or replace one legacy case note")
    sync.add_argument("--file", type=Path, required=True, help="JSON case note")

    delete = subparsers.add_parser("delete", help="Delete a case note removed in NOMIS")
    delete.add_argument("case_note_id", help="Case note id")

    move = subparsers.add_parser("move", help="Move case notes between prison numbers")
    move.add_argument("--from", dest="from_person", required=True, help="Current prison number")
    move.add_argument("--to", dest="to_person", required=True, help="New prison number")
    move.add_argument("case_note_ids", nargs="+", help="Case note ids to move")

    results = subparsers.add_parser("migration-results", help="Show ids of migrated notes")
    results.add_argument("legacy_ids", nargs="+", type=int, help="Legacy case note ids")

    event = subparsers.add_parser("handle-event", help="Process one inbound notification")
    event.add_argument("--file", type=Path, required=True, help="Notification JSON")

    return parser.parse_args(list(argv))


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value.strip())
    except ValueError as exc:
        raise ValueError(f"Invalid ISO date: {value}") from exc


def _parse_uuid(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError as exc:
        raise ValueError(f"Invalid UUID: {value}") from exc


def _compute_window(
    args: argparse.Namespace,
    *,
    today: Callable[[], date] = date.today,
) -> tuple[date, date]:
    current = today()
    from_date = _parse_date(args.from_date) if args.from_date else current - timedelta(days=1)
    to_date = _parse_date(args.to_date) if args.to_date else current
    if from_date > to_date:
        raise ValueError("Window start must not be after its end")
    return from_date, to_date


def _run(args: argparse.Namespace) -> None:  # noqa: C901
    if args.command == "reconcile":
        from_date, to_date = _compute_window(args)
        reconcile_alert_case_notes(args.person_identifier, from_date, to_date)
    elif args.command == "verify":
        from_date, to_date = _compute_window(args)
        result = verify_alert_case_notes(args.person_identifier, from_date, to_date)
        log.info(
            "Verification finished: missing active=%s, missing inactive=%s, created=%s",
            len(result.missing_active),
            len(result.missing_inactive),
            len(result.created),
        )
    elif args.command == "generate-reconciliation-events":
        from_date, to_date = _compute_window(args)
        generate_reconciliation_events(from_date, to_date)
    elif args.command == "merge":
        merge_case_notes(args.noms_number, args.removed_noms_number)
    elif args.command == "migrate":
        payloads = MIGRATE_REQUESTS.validate_json(args.file.read_bytes())
        for result in migrate_case_notes(
            args.person_identifier, [payload.to_domain() for payload in payloads]
        ):
            log.info("Migrated legacy id %s as %s", result.legacy_id, result.id)
    elif args.command == "sync":
        payload = SyncCaseNotePayload.model_validate_json(args.file.read_bytes())
        result = sync_case_note(payload.to_sync_request())
        log.info("Synced legacy id %s as %s (%s)", result.legacy_id, result.id, result.action)
    elif args.command == "delete":
        delete_case_note(_parse_uuid(args.case_note_id))
    elif args.command == "move":
        move_case_notes(
            MoveCaseNotesRequest(
                from_person_identifier=args.from_person,
                to_person_identifier=args.to_person,
                case_note_ids=frozenset(_parse_uuid(value) for value in args.case_note_ids),
            )
        )
    elif args.command == "migration-results":
        for result in migration_results(args.legacy_ids):
            log.info("Legacy id %s -> %s", result.legacy_id, result.id)
    elif args.command == "handle-event":
        handle_domain_event(parse_notification(args.file.read_bytes()))
    else:
        raise ValueError(f"Unsupported command: {args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        if parsed_args.command in {"reconcile", "verify", "generate-reconciliation-events"}:
            _compute_window(parsed_args)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        _run(parsed_args)
    except (ValidationError, CaseNoteValidationError):
        log.exception("Request rejected")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
