"""Records rebuilt from AppleScript output.

These mirror state owned by Mail, Calendar, Contacts, Reminders and Notes.
They live for one invocation: decoded, printed, discarded.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# ---------------------------------------------------------------------------
# Mail
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class MailAccount:
    name: str
    emails: list[str] = field(default_factory=list)


@dataclass(slots=True)
class Mailbox:
    name: str
    unread_count: int = 0


@dataclass(slots=True)
class MailMessage:
    id: str
    subject: str
    sender: str
    date_received: str
    is_read: bool


@dataclass(slots=True)
class MailMessageDetail:
    subject: str
    sender: str
    date_received: str
    to: str
    content: str


@dataclass(slots=True)
class MailAttachment:
    name: str
    mime_type: str
    size: int
    downloaded: bool


@dataclass(slots=True)
class SavedAttachments:
    directory: str
    count: int
    names: list[str] = field(default_factory=list)


@dataclass(slots=True)
class DraftResult:
    id: str
    to: list[str]
    subject: str


# ---------------------------------------------------------------------------
# Calendar
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class Calendar:
    name: str
    color: str = ""


@dataclass(slots=True)
class CalendarEvent:
    id: str
    summary: str
    start_date: str
    end_date: str
    location: str
    calendar: str
    all_day: bool


@dataclass(slots=True)
class CalendarEventDetail:
    summary: str
    start_date: str
    end_date: str
    location: str
    notes: str
    all_day: bool
    calendar: str


@dataclass(slots=True)
class CreatedEvent:
    id: str
    title: str
    calendar: str
    location: str = ""


# ---------------------------------------------------------------------------
# Contacts
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class Contact:
    id: str
    name: str
    emails: list[str] = field(default_factory=list)
    phones: list[str] = field(default_factory=list)
    company: str = ""


@dataclass(slots=True)
class ContactSummary:
    id: str
    name: str
    email: str = ""
    company: str = ""


@dataclass(slots=True)
class LabeledValue:
    label: str
    value: str


@dataclass(slots=True)
class ContactDetail:
    name: str
    emails: list[LabeledValue] = field(default_factory=list)
    phones: list[LabeledValue] = field(default_factory=list)
    company: str = ""
    job_title: str = ""
    note: str = ""
    birthday: str = ""
    addresses: list[LabeledValue] = field(default_factory=list)

    @property
    def work(self) -> str:
        """``"<title> at <company>"`` with empty parts dropped."""
        return " at ".join(part for part in (self.job_title, self.company) if part)


# ---------------------------------------------------------------------------
# Reminders
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class ReminderList:
    name: str
    incomplete_count: int = 0


@dataclass(slots=True)
class Reminder:
    index: int
    id: str
    name: str
    due_date: str
    completed: bool
    priority: int
    notes: str


@dataclass(slots=True)
class DueReminder:
    list_name: str
    name: str
    due_date: str
    priority: int


# ---------------------------------------------------------------------------
# Notes
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class NoteFolder:
    name: str
    count: int = 0


@dataclass(slots=True)
class Note:
    id: str
    name: str
    folder: str
    creation_date: str
    modification_date: str


@dataclass(slots=True)
class NoteDetail:
    name: str
    body: str
    folder: str
    creation_date: str
    modification_date: str


@dataclass(slots=True)
class NoteSearchHit:
    id: str
    name: str
    folder: str
    modification_date: str
    snippet: str = ""
