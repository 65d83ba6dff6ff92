"""Terminal rendering for the records each service returns.

Every ``render_*`` function returns the full text block to print. List views
use a ``-`` rule under a one-space-indented title; detail views frame the
record with ``=`` rules.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from dataclasses import asdict, is_dataclass
from datetime import datetime
from typing import Any

from .dates import (
    format_day_heading,
    format_long_day,
    format_relative,
    format_short_date,
    format_time,
    parse_host_date,
)
from .models import (
    Calendar,
    CalendarEvent,
    CalendarEventDetail,
    Contact,
    ContactDetail,
    ContactSummary,
    CreatedEvent,
    DraftResult,
    DueReminder,
    LabeledValue,
    MailAccount,
    MailAttachment,
    Mailbox,
    MailMessage,
    MailMessageDetail,
    Note,
    NoteDetail,
    NoteFolder,
    NoteSearchHit,
    Reminder,
    ReminderList,
    SavedAttachments,
)


def _list_header(title: str, width: int) -> list[str]:
    return [f"\n {title}\n", "-" * width]


def _block(lines: list[str]) -> str:
    return "\n".join(lines)


def _short_date(text: str) -> str:
    parsed = parse_host_date(text)
    return format_short_date(parsed) if parsed else text


def _priority_badge(priority: int) -> str:
    return f" !{priority}" if priority > 0 else ""


def render_json(payload: Any) -> str:
    """Serialize a record, a list of records, or a plain value as JSON."""

    def _convert(value: Any) -> Any:
        if is_dataclass(value) and not isinstance(value, type):
            return asdict(value)
        if isinstance(value, (list, tuple)):
            return [_convert(item) for item in value]
        return value

    return json.dumps(_convert(payload), indent=2, ensure_ascii=False)


# ---------------------------------------------------------------------------
# Mail
# ---------------------------------------------------------------------------

def render_accounts(accounts: Sequence[MailAccount]) -> str:
    lines = _list_header("Mail Accounts", 50)
    for account in accounts:
        lines.append(f"\n  {account.name}")
        lines.extend(f"   {email}" for email in account.emails)
    lines.append("\n")
    return _block(lines)


def render_mailboxes(account: str, mailboxes: Sequence[Mailbox]) -> str:
    lines = _list_header(f'Mailboxes for "{account}"', 50)
    for mailbox in mailboxes:
        badge = f" ({mailbox.unread_count} unread)" if mailbox.unread_count > 0 else ""
        lines.append(f"   {mailbox.name}{badge}")
    lines.append("\n")
    return _block(lines)


def render_messages(account: str, mailbox: str, messages: Sequence[MailMessage]) -> str:
    lines = _list_header(f"Messages in {account}/{mailbox} ({len(messages)} found)", 70)
    for msg in messages:
        read_icon = "  " if msg.is_read else "* "
        lines.append(f"\n{read_icon}[{msg.id}] {msg.subject}")
        lines.append(f"   From: {msg.sender}")
        lines.append(f"   Date: {_short_date(msg.date_received)}")
    lines.append("\n")
    return _block(lines)


def render_message(detail: MailMessageDetail) -> str:
    rule = "=" * 70
    return _block([
        "\n" + rule,
        f" {detail.subject}",
        rule,
        f"From: {detail.sender}",
        f"To: {detail.to}",
        f"Date: {detail.date_received}",
        "-" * 70,
        detail.content,
        rule + "\n",
    ])


def render_attachments(attachments: Sequence[MailAttachment]) -> str:
    if not attachments:
        return "\n No attachments on this message.\n"
    lines = _list_header(f"Attachments ({len(attachments)})", 60)
    for att in attachments:
        status = "[x]" if att.downloaded else "[ ]"
        lines.append(f"\n{status} {att.name}")
        lines.append(f"   Type: {att.mime_type}")
        lines.append(f"   Size: {att.size / 1024:.1f} KB")
    lines.append("\n")
    return _block(lines)


def render_saved_attachments(saved: SavedAttachments) -> str:
    if saved.count == 0:
        return "\n No attachments to save.\n"
    lines = [f"\n Saved {saved.count} attachment(s) to:", f"   {saved.directory}\n", "-" * 60]
    lines.extend(f"   {name}" for name in saved.names)
    lines.append("\n")
    return _block(lines)


def render_draft(draft: DraftResult) -> str:
    return _block([
        "\n Draft created successfully!",
        f"   Draft ID: {draft.id}",
        f"   To: {', '.join(draft.to)}",
        f"   Subject: {draft.subject}",
        "\n The draft is now open in Mail.app for review.\n",
    ])


def render_sent(to: Sequence[str], subject: str) -> str:
    return _block([
        "\n Email sent successfully!",
        f"   To: {', '.join(to)}",
        f"   Subject: {subject}\n",
    ])


def render_marked(count: int, read: bool) -> str:
    return f"\n Marked {count} message(s) as {'read' if read else 'unread'}.\n"


# ---------------------------------------------------------------------------
# Calendar
# ---------------------------------------------------------------------------

def render_calendars(calendars: Sequence[Calendar]) -> str:
    lines = _list_header("Calendars", 50)
    lines.extend(f"   {cal.name}" for cal in calendars)
    lines.append("\n")
    return _block(lines)


def _event_time(event: CalendarEvent, start: datetime | None) -> str:
    if event.all_day:
        return "All day"
    return format_time(start) if start else event.start_date


def render_events(days: int, events: Sequence[CalendarEvent]) -> str:
    """Upcoming events grouped under one heading per day."""
    lines = _list_header(f"Events (next {days} days)", 60)
    if not events:
        lines.append("\n  No events found.\n")
        return _block(lines)

    current_day = ""
    for event in events:
        start = parse_host_date(event.start_date)
        day = format_day_heading(start) if start else event.start_date
        if day != current_day:
            current_day = day
            lines.append(f"\n  {day}")
            lines.append("  " + "-" * 40)
        lines.append(f"    {_event_time(event, start)} - {event.summary}")
        if event.location:
            lines.append(f"      @ {event.location}")
        lines.append(f"      [{event.calendar}]")
    lines.append("\n")
    return _block(lines)


def render_day_events(label: str, day: datetime, events: Sequence[CalendarEvent]) -> str:
    """``label`` is ``"Today"`` or ``"Tomorrow"``."""
    lines = _list_header(f"{label} - {format_long_day(day)}", 50)
    if not events:
        lines.append(f"\n  No events {label.lower()}.\n")
        return _block(lines)

    for event in events:
        start = parse_host_date(event.start_date)
        lines.append(f"\n  {_event_time(event, start)} - {event.summary}")
        if event.location:
            lines.append(f"    @ {event.location}")
        lines.append(f"    [{event.calendar}]")
    lines.append("\n")
    return _block(lines)


def render_event(detail: CalendarEventDetail) -> str:
    rule = "=" * 60
    lines = [
        "\n" + rule,
        f" {detail.summary}",
        rule,
        f"Calendar: {detail.calendar}",
        f"Start: {detail.start_date}",
        f"End: {detail.end_date}",
    ]
    if detail.all_day:
        lines.append("All Day: Yes")
    if detail.location:
        lines.append(f"Location: {detail.location}")
    if detail.notes:
        lines.extend(["-" * 60, "Notes:", detail.notes])
    lines.append(rule + "\n")
    return _block(lines)


def render_event_created(event: CreatedEvent) -> str:
    lines = [
        "\n Event created successfully!",
        f"   ID: {event.id}",
        f"   Title: {event.title}",
        f"   Calendar: {event.calendar}",
    ]
    if event.location:
        lines.append(f"   Location: {event.location}")
    lines.append("\n")
    return _block(lines)


def render_event_deleted(summary: str) -> str:
    return f"\n Deleted event: {summary}\n"


# ---------------------------------------------------------------------------
# Contacts
# ---------------------------------------------------------------------------

def render_contacts(query: str, contacts: Sequence[Contact]) -> str:
    lines = _list_header(f'Contacts matching "{query}" ({len(contacts)} found)', 50)
    if not contacts:
        lines.append("\n  No contacts found.\n")
        return _block(lines)

    for contact in contacts:
        lines.append(f"\n  {contact.name}")
        if contact.company:
            lines.append(f"    {contact.company}")
        lines.extend(f"    {email}" for email in contact.emails)
        lines.extend(f"    {phone}" for phone in contact.phones)
    lines.append("\n")
    return _block(lines)


def _labeled_section(title: str, values: Sequence[LabeledValue]) -> list[str]:
    if not values:
        return []
    return [f"\n{title}:", *(f"  {item.label}: {item.value}" for item in values)]


def render_contact(detail: ContactDetail, title_prefix: str = "", width: int = 60) -> str:
    """Contact card. ``title_prefix`` is ``"My Card: "`` for the user's own card."""
    rule = "=" * width
    lines = ["\n" + rule, f" {title_prefix}{detail.name}", rule]
    if detail.work:
        lines.append(f"Work: {detail.work}")
    lines.extend(_labeled_section("Email", detail.emails))
    lines.extend(_labeled_section("Phone", detail.phones))
    lines.extend(_labeled_section("Address", detail.addresses))
    if detail.birthday:
        lines.append(f"\nBirthday: {detail.birthday}")
    if detail.note:
        lines.extend(["\nNotes:", detail.note])
    lines.append(rule + "\n")
    return _block(lines)


def render_contact_list(limit: int, contacts: Sequence[ContactSummary]) -> str:
    lines = _list_header(f"Contacts (showing {limit})", 60)
    for contact in contacts:
        details = " - ".join(part for part in (contact.email, contact.company) if part)
        lines.append(f"  {contact.name}" + (f" ({details})" if details else ""))
    lines.append("\n")
    return _block(lines)


# ---------------------------------------------------------------------------
# Reminders
# ---------------------------------------------------------------------------

def render_reminder_lists(lists: Sequence[ReminderList]) -> str:
    lines = _list_header("Reminder Lists", 50)
    for lst in lists:
        badge = f" ({lst.incomplete_count})" if lst.incomplete_count > 0 else ""
        lines.append(f"   {lst.name}{badge}")
    lines.append("\n")
    return _block(lines)


def render_reminders(list_name: str, reminders: Sequence[Reminder]) -> str:
    lines = _list_header(f'Reminders in "{list_name}" ({len(reminders)})', 60)
    if not reminders:
        lines.append("\n  No reminders.\n")
        return _block(lines)

    for reminder in reminders:
        checkbox = "[x]" if reminder.completed else "[ ]"
        due = f" ({reminder.due_date})" if reminder.due_date else ""
        lines.append(
            f"\n  {reminder.index}. {checkbox} {reminder.name}{_priority_badge(reminder.priority)}{due}"
        )
        if reminder.notes:
            lines.append(f"      {reminder.notes}")
    lines.append("\n")
    return _block(lines)


def render_reminder_added(list_name: str, title: str, due: str | None = None) -> str:
    lines = ["\n Reminder added!", f"   List: {list_name}", f"   Title: {title}"]
    if due:
        lines.append(f"   Due: {due}")
    lines.append("\n")
    return _block(lines)


def render_reminder_completed(name: str) -> str:
    return f"\n Completed: {name}\n"


def render_reminder_deleted(name: str) -> str:
    return f"\n Deleted: {name}\n"


def render_due_today(reminders: Sequence[DueReminder], now: datetime | None = None) -> str:
    lines = _list_header("Due Today", 50)
    if not reminders:
        lines.append("\n  Nothing due today!\n")
        return _block(lines)
    for reminder in reminders:
        lines.append(f"\n  [ ] {reminder.name}{_priority_badge(reminder.priority)}")
        parsed = parse_host_date(reminder.due_date)
        due = format_relative(parsed, now=now) if parsed else reminder.due_date
        lines.append(f"      Due: {due} [{reminder.list_name}]")
    lines.append("\n")
    return _block(lines)


def render_overdue(reminders: Sequence[DueReminder]) -> str:
    lines = _list_header("Overdue", 50)
    if not reminders:
        lines.append("\n  Nothing overdue!\n")
        return _block(lines)
    for reminder in reminders:
        lines.append(f"\n  [ ] {reminder.name}{_priority_badge(reminder.priority)}")
        lines.append(f"      Due: {_short_date(reminder.due_date)} [{reminder.list_name}]")
    lines.append("\n")
    return _block(lines)


# ---------------------------------------------------------------------------
# Notes
# ---------------------------------------------------------------------------

def render_note_folders(folders: Sequence[NoteFolder]) -> str:
    lines = _list_header("Note Folders", 50)
    lines.extend(f"   {folder.name} ({folder.count})" for folder in folders)
    lines.append("\n")
    return _block(lines)


def render_notes(notes: Sequence[Note], folder: str | None = None) -> str:
    header = f'Notes in "{folder}"' if folder else "Recent Notes"
    lines = _list_header(f"{header} ({len(notes)})", 60)
    if not notes:
        lines.append("\n  No notes found.\n")
        return _block(lines)
    for note in notes:
        lines.append(f"\n  {note.name}")
        lines.append(f"    [{note.folder}] - Modified: {_short_date(note.modification_date)}")
    lines.append("\n")
    return _block(lines)


def render_note(detail: NoteDetail) -> str:
    rule = "=" * 60
    return _block([
        "\n" + rule,
        f" {detail.name}",
        rule,
        f"Folder: {detail.folder}",
        f"Created: {detail.creation_date}",
        f"Modified: {detail.modification_date}",
        "-" * 60,
        detail.body,
        rule + "\n",
    ])


def render_note_search(query: str, hits: Sequence[NoteSearchHit]) -> str:
    lines = _list_header(f'Search results for "{query}"', 60)
    if not hits:
        lines.append("\n  No notes found.\n")
        return _block(lines)
    for hit in hits:
        lines.append(f"\n  {hit.name}")
        lines.append(f"    [{hit.folder}]")
        if hit.snippet:
            lines.append(f'    "{hit.snippet[:80]}..."')
    lines.append("\n")
    return _block(lines)


def render_note_created(title: str, folder: str | None = None) -> str:
    lines = ["\n Note created!", f"   Title: {title}"]
    if folder:
        lines.append(f"   Folder: {folder}")
    lines.append("\n")
    return _block(lines)
