"""Apple Reminders: lists, per-list views, add/complete/delete, due-today and overdue.

``complete`` and ``delete`` address reminders by their 1-based position among
the *incomplete* reminders of a list, the same numbering ``show`` prints by
default.
"""

from __future__ import annotations

import logging
from datetime import datetime

from .applescript import DEFAULT_TIMEOUT, LONG_TIMEOUT, escape, run_script
from .dates import format_applescript_date, parse_date
from .models import DueReminder, Reminder, ReminderList
from .records import parse_bool, parse_int, split_records

logger = logging.getLogger("mac_cli.reminders_service")


def _due_scan_script(window_setup: str, condition: str) -> str:
    """Script listing ``list|name|due|priority`` for incomplete reminders matching ``condition``."""
    return f'''
    tell application "Reminders"
        {window_setup}

        set output to ""
        repeat with lst in lists
            set lstName to name of lst
            repeat with r in (reminders of lst whose completed is false)
                try
                    set rDue to due date of r
                    if {condition} then
                        set rName to name of r
                        set rPriority to priority of r
                        set output to output & lstName & "|" & rName & "|" & (rDue as text) & "|" & rPriority & "\\n"
                    end if
                end try
            end repeat
        end repeat
        return output
    end tell
    '''


def _parse_due(raw: str | None) -> list[DueReminder]:
    return [
        DueReminder(list_name=parts[0], name=parts[1], due_date=parts[2], priority=parse_int(parts[3]))
        for parts in split_records(raw, 4)
    ]


def _check_index(index: int) -> int:
    if index < 1:
        raise ValueError(f"Reminder index must be a positive integer, got {index}")
    return index


class AppleRemindersService:
    """Reads and writes Reminders.app data via AppleScript."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, long_timeout: float = LONG_TIMEOUT):
        self.timeout = timeout
        self.long_timeout = long_timeout

    def lists(self) -> list[ReminderList]:
        script = '''
        tell application "Reminders"
            set output to ""
            repeat with lst in lists
                set lstName to name of lst
                set lstCount to count of (reminders of lst whose completed is false)
                set output to output & lstName & "|" & lstCount & "\\n"
            end repeat
            return output
        end tell
        '''
        raw = run_script(script, timeout=self.timeout)
        return [
            ReminderList(name=parts[0], incomplete_count=parse_int(parts[1]))
            for parts in split_records(raw, 2)
        ]

    def show(self, list_name: str, include_completed: bool = False) -> list[Reminder]:
        completion_filter = "" if include_completed else "whose completed is false"
        script = f'''
        tell application "Reminders"
            set theList to list "{escape(list_name)}"
            set output to ""
            set idx to 1
            repeat with r in (reminders of theList {completion_filter})
                set rId to id of r
                set rName to name of r
                set rDue to ""
                try
                    set rDue to due date of r as text
                end try
                set rCompleted to completed of r
                set rPriority to priority of r
                set rNotes to ""
                try
                    set rNotes to body of r
                end try
                if rNotes is missing value then set rNotes to ""
                set output to output & idx & "|" & rId & "|" & rName & "|" & rDue & "|" & rCompleted & "|" & rPriority & "|" & rNotes & "\\n"
                set idx to idx + 1
            end repeat
            return output
        end tell
        '''
        raw = run_script(script, timeout=self.long_timeout)
        return [
            Reminder(
                index=parse_int(parts[0]),
                id=parts[1],
                name=parts[2],
                due_date=parts[3],
                completed=parse_bool(parts[4]),
                priority=parse_int(parts[5]),
                notes=parts[6],
            )
            for parts in split_records(raw, 7)
        ]

    def add(
        self,
        list_name: str,
        title: str,
        due: str | None = None,
        priority: int | None = None,
        notes: str | None = None,
        now: datetime | None = None,
    ) -> str:
        """Create a reminder. Returns the name Reminders stored."""
        props = [f'name:"{escape(title)}"']
        if due:
            props.append(f'due date:date "{format_applescript_date(parse_date(due, now=now))}"')
        if priority:
            props.append(f"priority:{int(priority)}")
        if notes:
            props.append(f'body:"{escape(notes)}"')

        script = f'''
        tell application "Reminders"
            tell list "{escape(list_name)}"
                set newReminder to make new reminder with properties {{{", ".join(props)}}}
                return name of newReminder
            end tell
        end tell
        '''
        created = run_script(script, timeout=self.timeout)
        logger.info("Added reminder %r to list %r", created, list_name)
        return created

    def _by_index_script(self, list_name: str, index: int, action: str) -> str:
        return f'''
        tell application "Reminders"
            set theList to list "{escape(list_name)}"
            set incompleteReminders to (reminders of theList whose completed is false)
            if {index} > (count of incompleteReminders) then
                error "Reminder index out of range"
            end if
            set r to item {index} of incompleteReminders
            set rName to name of r
            {action}
            return rName
        end tell
        '''

    def complete(self, list_name: str, index: int) -> str:
        """Mark the ``index``-th incomplete reminder done. Returns its name."""
        script = self._by_index_script(list_name, _check_index(index), "set completed of r to true")
        name = run_script(script, timeout=self.timeout)
        logger.info("Completed reminder %r in list %r", name, list_name)
        return name

    def delete(self, list_name: str, index: int) -> str:
        script = self._by_index_script(list_name, _check_index(index), "delete r")
        name = run_script(script, timeout=self.timeout)
        logger.info("Deleted reminder %r from list %r", name, list_name)
        return name

    def due_today(self) -> list[DueReminder]:
        script = _due_scan_script(
            '''set todayStart to current date
        set time of todayStart to 0
        set todayEnd to todayStart + 1 * days''',
            "rDue >= todayStart and rDue < todayEnd",
        )
        return _parse_due(run_script(script, timeout=self.long_timeout))

    def overdue(self) -> list[DueReminder]:
        script = _due_scan_script("set now to current date", "rDue < now")
        return _parse_due(run_script(script, timeout=self.long_timeout))
