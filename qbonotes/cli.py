"""qbonotes command line

Usage:
    qbonotes serve
    qbonotes login EMAIL
    qbonotes logout
    qbonotes auth-status
    qbonotes extract --url URL --html page.html
    qbonotes compose --url URL --html page.html [--api-url URL] [--note TEXT]
    qbonotes report [--date YYYY-MM-DD] [--csv PATH] [--send]
    qbonotes check-schedule ["0 9 * * 1-5"] [--timezone ZONE] [--count N]
"""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Callable, Sequence
from pathlib import Path

from dotenv import load_dotenv

from qbonotes.composer.auth import AuthService
from qbonotes.composer.client import NotesClient
from qbonotes.composer.composer import EDITABLE_FIELDS, NoteComposer
from qbonotes.config import DEFAULT_REPORT_SCHEDULE, DEFAULT_REPORT_TIMEZONE, load_settings
from qbonotes.observability.logging import get_logger
from qbonotes.scraper.classifier import is_transaction_page, should_offer_note
from qbonotes.scraper.field_extractor import get_transaction_data

logger = get_logger(__name__)

InputFn = Callable[[str], str]


def _read_html(path: str) -> str:
    return Path(path).read_text(encoding="utf-8")


def cmd_serve(args: argparse.Namespace) -> int:
    from qbonotes.api.app import main as serve

    serve()
    return 0


def cmd_extract(args: argparse.Namespace) -> int:
    result = {
        "is_transaction_page": is_transaction_page(args.url),
        "transaction": get_transaction_data(args.url, _read_html(args.html)).to_dict(),
    }
    print(json.dumps(result, indent=2))
    return 0


def _edit_fields(composer: NoteComposer, input_fn: InputFn) -> None:
    for field in EDITABLE_FIELDS:
        current = composer.fields[field]
        answer = input_fn(f"{field} [{current}]: ").strip()
        if answer:
            composer.update(field, answer)


def run_composer(
    composer: NoteComposer,
    client: NotesClient,
    input_fn: InputFn = input,
    note: str | None = None,
) -> int:
    """
    Drive the composer until the note is sent or the user gives up.

    An empty note at the prompt closes the form without sending.
    """
    if note is None:
        _edit_fields(composer, input_fn)

    while composer.is_open:
        text = note if note is not None else input_fn("Note (empty to cancel): ")
        composer.set_note(text)
        if not composer.can_submit:
            composer.close()
            print("Cancelled, nothing sent")
            return 1

        if composer.submit(client):
            print(f"Note saved: {composer.submitted_id}")
            return 0

        print(composer.error, file=sys.stderr)
        if note is not None:
            return 1
    return 1


def cmd_compose(args: argparse.Namespace) -> int:
    if not should_offer_note(args.url):
        print(f"Not a transaction page: {args.url}", file=sys.stderr)
        return 2

    settings = load_settings()
    if not AuthService.from_settings(settings).validate_subscription():
        print("No active subscription. Run `qbonotes login EMAIL` first.", file=sys.stderr)
        return 3

    transaction = get_transaction_data(args.url, _read_html(args.html))
    composer = NoteComposer(transaction)
    client = NotesClient(base_url=args.api_url or settings.api_url)
    return run_composer(composer, client, note=args.note)


def cmd_login(args: argparse.Namespace) -> int:
    auth = AuthService.from_settings(load_settings())
    auth.set_user_credentials(args.email)
    if not auth.validate_subscription():
        print(f"No active subscription for {args.email}", file=sys.stderr)
        return 1

    status = auth.get_auth_status() or {}
    print(f"Signed in as {args.email} (plan: {status.get('plan') or 'unknown'})")
    return 0


def cmd_logout(args: argparse.Namespace) -> int:
    AuthService.from_settings(load_settings()).logout()
    print("Signed out")
    return 0


def cmd_auth_status(args: argparse.Namespace) -> int:
    auth = AuthService.from_settings(load_settings())
    if not auth.has_stored_credentials():
        print("Not signed in")
        return 1

    status = auth.get_auth_status()
    email = auth.store.get_email()
    if status is None:
        print(f"{email}: subscription not checked recently")
    else:
        state = "active" if status["is_valid"] else "inactive"
        print(f"{email}: {state} (plan: {status['plan'] or 'unknown'})")
    return 0


def cmd_report(args: argparse.Namespace) -> int:
    from qbonotes.api.dependencies import build_services
    from qbonotes.reports.csv_export import generate_csv

    services = build_services(load_settings())
    try:
        if args.send:
            report = services.reports.send_daily_report(args.date)
        else:
            report = services.reports.generate_report(args.date)
    except ValueError as e:
        print(f"Invalid date: {e}", file=sys.stderr)
        return 2

    if args.csv:
        Path(args.csv).write_text(
            generate_csv(report, services.reports.report_timezone), encoding="utf-8"
        )
        print(f"Wrote {args.csv}")

    print(json.dumps({"date": report.date, "summary": report.summary.to_dict()}, indent=2))
    return 0


def cmd_check_schedule(args: argparse.Namespace) -> int:
    from qbonotes.reports.scheduler import next_fire_times

    try:
        times = next_fire_times(args.expression, args.timezone, count=args.count)
    except ValueError as e:
        print(f"Invalid schedule: {e}", file=sys.stderr)
        return 2

    print(f"{args.expression!r} in {args.timezone}:")
    for fire_time in times:
        print(f"  {fire_time.isoformat()}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="qbonotes", description="Transaction notes helper")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the API server")
    serve.set_defaults(func=cmd_serve)

    extract = sub.add_parser("extract", help="Scrape transaction fields from saved HTML")
    extract.add_argument("--url", required=True)
    extract.add_argument("--html", required=True, help="Path to the saved page")
    extract.set_defaults(func=cmd_extract)

    compose = sub.add_parser("compose", help="Write and send a note for a transaction page")
    compose.add_argument("--url", required=True)
    compose.add_argument("--html", required=True, help="Path to the saved page")
    compose.add_argument("--api-url", default=None)
    compose.add_argument("--note", default=None, help="Send this note without prompting")
    compose.set_defaults(func=cmd_compose)

    login = sub.add_parser("login", help="Store the user email and check the subscription")
    login.add_argument("email")
    login.set_defaults(func=cmd_login)

    logout = sub.add_parser("logout", help="Forget the stored email and cached subscription")
    logout.set_defaults(func=cmd_logout)

    auth_status = sub.add_parser("auth-status", help="Show the cached subscription state")
    auth_status.set_defaults(func=cmd_auth_status)

    report = sub.add_parser("report", help="Build the daily report")
    report.add_argument("--date", default=None, help="YYYY-MM-DD, default yesterday")
    report.add_argument("--csv", default=None, help="Write the CSV export here")
    report.add_argument("--send", action="store_true", help="Also append to Google Sheets")
    report.set_defaults(func=cmd_report)

    check = sub.add_parser("check-schedule", help="Validate a cron expression")
    check.add_argument("expression", nargs="?", default=DEFAULT_REPORT_SCHEDULE)
    check.add_argument("--timezone", default=DEFAULT_REPORT_TIMEZONE)
    check.add_argument("--count", type=int, default=3)
    check.set_defaults(func=cmd_check_schedule)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
