"""``mac <service> <command> [options]`` argument parsing and dispatch."""

from __future__ import annotations

import argparse
import importlib.metadata
import logging
import sys
from collections.abc import Callable, Sequence
from datetime import datetime, timedelta
from typing import Any

from . import formatting as fmt
from .calendar_service import AppleCalendarService
from .config import MacSettings
from .contacts_service import AppleContactsService
from .mail_service import AppleMailService
from .notes_service import AppleNotesService
from .reminders_service import AppleRemindersService

logger = logging.getLogger("mac_cli.cli")

HELP_TEXT = """\
mac - Unified CLI for macOS services

USAGE:
  mac <service> <command> [options]

SERVICES:
  mail        Email operations (Apple Mail)
  calendar    Calendar events
  contacts    Contact lookup
  reminders   Reminders/tasks
  notes       Notes access

GLOBAL OPTIONS:
  --json              Print records as JSON
  -v, --verbose       Debug logging to stderr
  --version           Show version and exit

MAIL COMMANDS:
  mac mail accounts                          List all mail accounts
  mac mail mailboxes <account>               List mailboxes for an account
  mac mail search <account> [options]        Search messages
    --mailbox <name>    Mailbox to search (default: INBOX)
    --sender <text>     Filter by sender
    --subject <text>    Filter by subject
    --unread            Only show unread messages
    --limit <n>         Limit results (default: 20)
  mac mail read <message-id>                 Read a specific message
  mac mail attachments <message-id>          List attachments
  mac mail save-attachments <id> [dir]       Save attachments
  mac mail draft <to> -s <subj> -b <body>    Create draft
    --cc <email>        CC recipient
    --bcc <email>       BCC recipient
  mac mail send <to> -s <subj> -b <body>     Send email (with confirmation)
    --no-confirm        Skip confirmation dialog
  mac mail mark-read <id>...                 Mark as read
  mac mail mark-unread <id>...               Mark as unread

CALENDAR COMMANDS:
  mac calendar calendars                     List all calendars
  mac calendar list [--days N]               Upcoming events (default: 7 days)
  mac calendar today                         Today's events
  mac calendar tomorrow                      Tomorrow's events
  mac calendar show <event-id>               Event details
  mac calendar add <title> [options]         Create event
    --date <date>       Date (e.g., "tomorrow", "2026-01-20")
    --time <HH:MM>      Time (e.g., "14:30")
    --duration <mins>   Duration in minutes (default: 60)
    --calendar <name>   Calendar name
    --location <text>   Location
    --notes <text>      Notes/description
    --all-day           Create all-day event
  mac calendar delete <event-id>             Delete event

CONTACTS COMMANDS:
  mac contacts search <query>                Search by name
  mac contacts show <name>                   Show contact details
  mac contacts list [--limit N]              List contacts (default: 50)
  mac contacts me                            Show "my card" info

REMINDERS COMMANDS:
  mac reminders lists                        List all reminder lists
  mac reminders show <list>                  Show reminders in a list
    --completed         Include completed reminders
  mac reminders add <list> <title> [options] Add a reminder
    --due <date>        Due date (e.g., "tomorrow")
    --priority <1-9>    Priority (1 high, 5 medium, 9 low)
    --notes <text>      Notes
  mac reminders complete <list> <index>      Mark as complete
  mac reminders delete <list> <index>        Delete reminder
  mac reminders today                        Due today across all lists
  mac reminders overdue                      Overdue items

NOTES COMMANDS:
  mac notes folders                          List all folders
  mac notes list [options]                   List notes
    --folder <name>     Filter by folder
    --limit <n>         Limit results (default: 20)
  mac notes show <title>                     Show note content
  mac notes search <query>                   Search note content
  mac notes add <title> --body <text> [--folder <name>]  Create note

EXAMPLES:
  mac mail accounts
  mac mail search "Google" --unread --limit 5
  mac calendar today
  mac calendar add "Team Meeting" --date tomorrow --time 14:00 --duration 60
  mac contacts search "John"
  mac reminders show "Shopping"
  mac reminders add "Work" "Review PR" --due tomorrow --priority 1
  mac notes search "project ideas"
"""

Emit = Callable[[str, Any], None]


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value!r}") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value!r}")
    return number


def _priority(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"priority must be 0-9, got {value!r}") from None
    if not 0 <= number <= 9:
        raise argparse.ArgumentTypeError(f"priority must be 0-9, got {value!r}")
    return number


def _split_recipients(value: str) -> list[str]:
    return [addr.strip() for addr in value.split(",") if addr.strip()]


def _get_version() -> str:
    try:
        return importlib.metadata.version("mac-cli")
    except importlib.metadata.PackageNotFoundError:
        return "0.1.0 (dev)"


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

def _global_options(parser: argparse.ArgumentParser, default: object = False) -> argparse.ArgumentParser:
    parser.add_argument("--version", action="store_true", default=default, help="Show version and exit")
    parser.add_argument(
        "--json", dest="json_output", action="store_true", default=default, help="Print records as JSON"
    )
    parser.add_argument("--verbose", "-v", action="store_true", default=default, help="Debug logging to stderr")
    return parser


# Accepted after the service and command too; SUPPRESS keeps an unset copy
# from overwriting a flag already given before the service name.
_GLOBAL_OPTIONS = _global_options(argparse.ArgumentParser(add_help=False), default=argparse.SUPPRESS)


def _command(subparsers: argparse._SubParsersAction, name: str, **kwargs) -> argparse.ArgumentParser:
    return subparsers.add_parser(name, parents=[_GLOBAL_OPTIONS], **kwargs)


def _add_mail_parser(services: argparse._SubParsersAction) -> None:
    mail = _command(services, "mail", help="Email operations (Apple Mail)")
    commands = mail.add_subparsers(dest="command", metavar="<command>", required=True)

    _command(commands, "accounts", help="List all mail accounts")

    p = _command(commands, "mailboxes", help="List mailboxes for an account")
    p.add_argument("account")

    p = _command(commands, "search", help="Search messages")
    p.add_argument("account")
    p.add_argument("--mailbox", default=None)
    p.add_argument("--sender", default=None)
    p.add_argument("--subject", default=None)
    p.add_argument("--unread", action="store_true")
    p.add_argument("--limit", type=_positive_int, default=None)

    for name, help_text in (("read", "Read a specific message"), ("attachments", "List attachments")):
        p = _command(commands, name, help=help_text)
        p.add_argument("message_id")

    p = _command(commands, "save-attachments", help="Save attachments")
    p.add_argument("message_id")
    p.add_argument("directory", nargs="?", default=None)

    for name, help_text in (("draft", "Create draft"), ("send", "Send email (with confirmation)")):
        p = _command(commands, name, help=help_text)
        p.add_argument("to", help="Comma-separated recipients")
        p.add_argument("-s", "--subject", required=True)
        p.add_argument("-b", "--body", required=True)
        p.add_argument("--cc", action="append", default=[])
        p.add_argument("--bcc", action="append", default=[])
        if name == "send":
            p.add_argument("--no-confirm", dest="no_confirm", action="store_true")

    for name, help_text in (("mark-read", "Mark as read"), ("mark-unread", "Mark as unread")):
        p = _command(commands, name, help=help_text)
        p.add_argument("message_ids", nargs="+")


def _add_calendar_parser(services: argparse._SubParsersAction) -> None:
    calendar = _command(services, "calendar", help="Calendar events")
    commands = calendar.add_subparsers(dest="command", metavar="<command>", required=True)

    _command(commands, "calendars", help="List all calendars")

    p = _command(commands, "list", help="Upcoming events")
    p.add_argument("--days", type=_positive_int, default=None)

    _command(commands, "today", help="Today's events")
    _command(commands, "tomorrow", help="Tomorrow's events")

    for name, help_text in (("show", "Event details"), ("delete", "Delete event")):
        p = _command(commands, name, help=help_text)
        p.add_argument("event_id")

    p = _command(commands, "add", help="Create event")
    p.add_argument("title")
    p.add_argument("--date", default=None)
    p.add_argument("--time", default=None)
    p.add_argument("--duration", type=_positive_int, default=None)
    p.add_argument("--calendar", default=None)
    p.add_argument("--location", default=None)
    p.add_argument("--notes", default=None)
    p.add_argument("--all-day", dest="all_day", action="store_true")


def _add_contacts_parser(services: argparse._SubParsersAction) -> None:
    contacts = _command(services, "contacts", help="Contact lookup")
    commands = contacts.add_subparsers(dest="command", metavar="<command>", required=True)

    p = _command(commands, "search", help="Search by name")
    p.add_argument("query")

    p = _command(commands, "show", help="Show contact details")
    p.add_argument("name")

    p = _command(commands, "list", help="List contacts")
    p.add_argument("--limit", type=_positive_int, default=None)

    _command(commands, "me", help='Show "my card" info')


def _add_reminders_parser(services: argparse._SubParsersAction) -> None:
    reminders = _command(services, "reminders", help="Reminders/tasks")
    commands = reminders.add_subparsers(dest="command", metavar="<command>", required=True)

    _command(commands, "lists", help="List all reminder lists")

    p = _command(commands, "show", help="Show reminders in a list")
    p.add_argument("list_name")
    p.add_argument("--completed", action="store_true")

    p = _command(commands, "add", help="Add a reminder")
    p.add_argument("list_name")
    p.add_argument("title")
    p.add_argument("--due", default=None)
    p.add_argument("--priority", type=_priority, default=None)
    p.add_argument("--notes", default=None)

    for name, help_text in (("complete", "Mark as complete"), ("delete", "Delete reminder")):
        p = _command(commands, name, help=help_text)
        p.add_argument("list_name")
        p.add_argument("index", type=_positive_int)

    _command(commands, "today", help="Due today across all lists")
    _command(commands, "overdue", help="Overdue items")


def _add_notes_parser(services: argparse._SubParsersAction) -> None:
    notes = _command(services, "notes", help="Notes access")
    commands = notes.add_subparsers(dest="command", metavar="<command>", required=True)

    _command(commands, "folders", help="List all folders")

    p = _command(commands, "list", help="List notes")
    p.add_argument("--folder", default=None)
    p.add_argument("--limit", type=_positive_int, default=None)

    p = _command(commands, "show", help="Show note content")
    p.add_argument("title")

    p = _command(commands, "search", help="Search note content")
    p.add_argument("query")

    p = _command(commands, "add", help="Create note")
    p.add_argument("title")
    p.add_argument("--body", required=True)
    p.add_argument("--folder", default=None)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mac",
        description="Unified CLI for macOS services",
        usage="mac <service> <command> [options]",
    )
    _global_options(parser)

    services = parser.add_subparsers(dest="service", metavar="<service>")
    _add_mail_parser(services)
    _add_calendar_parser(services)
    _add_contacts_parser(services)
    _add_reminders_parser(services)
    _add_notes_parser(services)
    services.add_parser("help", help="Show usage")
    return parser


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

def _run_mail(args: argparse.Namespace, settings: MacSettings, emit: Emit) -> int:
    mail = AppleMailService(
        timeout=settings.script_timeout_seconds,
        default_mailbox=settings.default_mailbox,
        download_dir=settings.download_dir,
    )
    command = args.command

    if command == "accounts":
        accounts = mail.accounts()
        emit(fmt.render_accounts(accounts), accounts)

    elif command == "mailboxes":
        mailboxes = mail.mailboxes(args.account)
        emit(fmt.render_mailboxes(args.account, mailboxes), mailboxes)

    elif command == "search":
        mailbox = args.mailbox or settings.default_mailbox
        messages = mail.search(
            args.account,
            mailbox,
            sender=args.sender,
            subject=args.subject,
            unread=args.unread,
            limit=args.limit or settings.mail_search_limit,
        )
        emit(fmt.render_messages(args.account, mailbox, messages), messages)

    elif command == "read":
        detail = mail.read(args.message_id)
        emit(fmt.render_message(detail), detail)

    elif command == "attachments":
        attachments = mail.attachments(args.message_id)
        emit(fmt.render_attachments(attachments), attachments)

    elif command == "save-attachments":
        saved = mail.save_attachments(args.message_id, args.directory)
        emit(fmt.render_saved_attachments(saved), saved)

    elif command == "draft":
        draft = mail.draft(_split_recipients(args.to), args.subject, args.body, cc=args.cc, bcc=args.bcc)
        emit(fmt.render_draft(draft), draft)

    elif command == "send":
        to = _split_recipients(args.to)
        confirm = settings.confirm_send and not args.no_confirm
        if not mail.send(to, args.subject, args.body, cc=args.cc, bcc=args.bcc, confirm=confirm):
            emit("\n Send cancelled by user.\n", {"sent": False})
            return 0
        emit(fmt.render_sent(to, args.subject), {"sent": True, "to": to, "subject": args.subject})

    elif command in ("mark-read", "mark-unread"):
        read = command == "mark-read"
        count = mail.mark(args.message_ids, read)
        emit(fmt.render_marked(count, read), {"updated": count, "read": read})

    return 0


def _run_calendar(args: argparse.Namespace, settings: MacSettings, emit: Emit) -> int:
    calendar = AppleCalendarService(
        timeout=settings.script_timeout_seconds,
        long_timeout=settings.long_script_timeout_seconds,
        default_calendar=settings.default_calendar,
    )
    command = args.command

    if command == "calendars":
        calendars = calendar.calendars()
        emit(fmt.render_calendars(calendars), calendars)

    elif command == "list":
        days = args.days or settings.calendar_days
        events = calendar.list_events(days)
        emit(fmt.render_events(days, events), events)

    elif command == "today":
        events = calendar.today()
        emit(fmt.render_day_events("Today", datetime.now(), events), events)

    elif command == "tomorrow":
        events = calendar.tomorrow()
        emit(fmt.render_day_events("Tomorrow", datetime.now() + timedelta(days=1), events), events)

    elif command == "show":
        detail = calendar.show(args.event_id)
        emit(fmt.render_event(detail), detail)

    elif command == "add":
        created = calendar.add(
            args.title,
            date=args.date,
            time=args.time,
            duration=args.duration or settings.event_duration_minutes,
            calendar=args.calendar,
            location=args.location,
            notes=args.notes,
            all_day=args.all_day,
        )
        emit(fmt.render_event_created(created), created)

    elif command == "delete":
        summary = calendar.delete(args.event_id)
        emit(fmt.render_event_deleted(summary), {"deleted": summary})

    return 0


def _run_contacts(args: argparse.Namespace, settings: MacSettings, emit: Emit) -> int:
    contacts = AppleContactsService(timeout=settings.script_timeout_seconds)
    command = args.command

    if command == "search":
        found = contacts.search(args.query)
        emit(fmt.render_contacts(args.query, found), found)

    elif command == "show":
        detail = contacts.show(args.name)
        emit(fmt.render_contact(detail), detail)

    elif command == "list":
        limit = args.limit or settings.contacts_list_limit
        summaries = contacts.list_contacts(limit)
        emit(fmt.render_contact_list(limit, summaries), summaries)

    elif command == "me":
        detail = contacts.me()
        emit(fmt.render_contact(detail, title_prefix="My Card: ", width=50), detail)

    return 0


def _run_reminders(args: argparse.Namespace, settings: MacSettings, emit: Emit) -> int:
    reminders = AppleRemindersService(
        timeout=settings.script_timeout_seconds,
        long_timeout=settings.long_script_timeout_seconds,
    )
    command = args.command

    if command == "lists":
        lists = reminders.lists()
        emit(fmt.render_reminder_lists(lists), lists)

    elif command == "show":
        items = reminders.show(args.list_name, include_completed=args.completed)
        emit(fmt.render_reminders(args.list_name, items), items)

    elif command == "add":
        created = reminders.add(
            args.list_name,
            args.title,
            due=args.due,
            priority=args.priority,
            notes=args.notes,
        )
        emit(
            fmt.render_reminder_added(args.list_name, created, args.due),
            {"list": args.list_name, "title": created, "due": args.due},
        )

    elif command == "complete":
        name = reminders.complete(args.list_name, args.index)
        emit(fmt.render_reminder_completed(name), {"completed": name})

    elif command == "delete":
        name = reminders.delete(args.list_name, args.index)
        emit(fmt.render_reminder_deleted(name), {"deleted": name})

    elif command == "today":
        due = reminders.due_today()
        emit(fmt.render_due_today(due), due)

    elif command == "overdue":
        overdue = reminders.overdue()
        emit(fmt.render_overdue(overdue), overdue)

    return 0


def _run_notes(args: argparse.Namespace, settings: MacSettings, emit: Emit) -> int:
    notes = AppleNotesService(
        timeout=settings.script_timeout_seconds,
        long_timeout=settings.long_script_timeout_seconds,
    )
    command = args.command

    if command == "folders":
        folders = notes.folders()
        emit(fmt.render_note_folders(folders), folders)

    elif command == "list":
        listed = notes.list_notes(folder=args.folder, limit=args.limit or settings.notes_list_limit)
        emit(fmt.render_notes(listed, folder=args.folder), listed)

    elif command == "show":
        detail = notes.show(args.title)
        emit(fmt.render_note(detail), detail)

    elif command == "search":
        hits = notes.search(args.query)
        emit(fmt.render_note_search(args.query, hits), hits)

    elif command == "add":
        created = notes.add(args.title, args.body, folder=args.folder)
        emit(fmt.render_note_created(created, args.folder), {"title": created, "folder": args.folder})

    return 0


_DISPATCH = {
    "mail": _run_mail,
    "calendar": _run_calendar,
    "contacts": _run_contacts,
    "reminders": _run_reminders,
    "notes": _run_notes,
}


def _configure_logging(verbose: bool, settings: MacSettings | None) -> None:
    if verbose:
        level = logging.DEBUG
    elif settings is not None:
        level = getattr(logging, settings.log_level)
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(message)s")


def run(argv: Sequence[str] | None = None) -> int:
    """Parse ``argv``, run one command, and return the process exit code."""
    argv = list(sys.argv[1:] if argv is None else argv)
    if not argv or argv[0] in ("help", "-h", "--help"):
        print(HELP_TEXT)
        return 0

    args = build_parser().parse_args(argv)

    if args.version:
        print(f"mac-cli {_get_version()}")
        return 0
    if not args.service or args.service == "help":
        print(HELP_TEXT)
        return 0

    def emit(text: str, payload: Any) -> None:
        print(fmt.render_json(payload) if args.json_output else text)

    settings: MacSettings | None = None
    try:
        settings = MacSettings()
        _configure_logging(args.verbose, settings)
        logger.debug("Dispatching %s %s", args.service, args.command)
        return _DISPATCH[args.service](args, settings, emit)
    except (RuntimeError, ValueError, OSError) as exc:
        if settings is None:
            _configure_logging(args.verbose, None)
        logger.debug("Command failed", exc_info=True)
        print(f"\n Error: {exc}\n", file=sys.stderr)
        return 1


def main() -> None:
    raise SystemExit(run())
