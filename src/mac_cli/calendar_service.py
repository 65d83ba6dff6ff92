"""Apple Calendar: calendars, event ranges, event details, create and delete."""

from __future__ import annotations

import logging
from datetime import datetime

from .applescript import DEFAULT_TIMEOUT, LONG_TIMEOUT, escape, run_script
from .dates import apply_time, format_applescript_date, parse_date, parse_host_date
from .models import Calendar, CalendarEvent, CalendarEventDetail, CreatedEvent
from .records import parse_bool, split_detail, split_records

logger = logging.getLogger("mac_cli.calendar_service")

_EVENT_FIELDS = 7


def _events_script(range_setup: str, end_comparison: str) -> str:
    """Script listing ``uid|summary|start|end|location|calendar|allday`` per event.

    ``range_setup`` must define ``startDate`` and ``endDate``.
    """
    return f'''
    tell application "Calendar"
        {range_setup}

        set output to ""
        repeat with cal in calendars
            set calName to name of cal
            try
                set eventList to (every event of cal whose start date >= startDate and start date {end_comparison} endDate)
                repeat with evt in eventList
                    set evtId to uid of evt
                    set evtSummary to summary of evt
                    set evtStart to start date of evt as text
                    set evtEnd to end date of evt as text
                    set evtLoc to ""
                    try
                        set evtLoc to location of evt
                    end try
                    if evtLoc is missing value then set evtLoc to ""
                    set evtAllDay to allday event of evt
                    set output to output & evtId & "|" & evtSummary & "|" & evtStart & "|" & evtEnd & "|" & evtLoc & "|" & calName & "|" & evtAllDay & "\\n"
                end repeat
            end try
        end repeat
        return output
    end tell
    '''


def _sort_key(event: CalendarEvent) -> tuple[int, datetime]:
    parsed = parse_host_date(event.start_date)
    if parsed is None:
        return (1, datetime.max)
    return (0, parsed.replace(tzinfo=None))


def parse_events(raw: str | None) -> list[CalendarEvent]:
    """Decode event lines and order them by start date; unparseable dates go last."""
    events = [
        CalendarEvent(
            id=parts[0],
            summary=parts[1],
            start_date=parts[2],
            end_date=parts[3],
            location=parts[4],
            calendar=parts[5],
            all_day=parse_bool(parts[6]),
        )
        for parts in split_records(raw, _EVENT_FIELDS)
    ]
    events.sort(key=_sort_key)
    return events


class AppleCalendarService:
    """Reads and writes Calendar.app events via AppleScript."""

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        long_timeout: float = LONG_TIMEOUT,
        default_calendar: str = "Calendar",
    ):
        self.timeout = timeout
        self.long_timeout = long_timeout
        self.default_calendar = default_calendar

    def calendars(self) -> list[Calendar]:
        script = '''
        tell application "Calendar"
            set output to ""
            repeat with cal in calendars
                set calName to name of cal
                set calColor to ""
                try
                    set calColor to color of cal as text
                end try
                set output to output & calName & "|" & calColor & "\\n"
            end repeat
            return output
        end tell
        '''
        raw = run_script(script, timeout=self.timeout)
        return [Calendar(name=parts[0], color=parts[1]) for parts in split_records(raw, 2)]

    def list_events(self, days: int = 7) -> list[CalendarEvent]:
        """Events starting between now and ``days`` days from now."""
        script = _events_script(
            f'''set startDate to current date
        set endDate to startDate + {int(days)} * days''',
            "<=",
        )
        return parse_events(run_script(script, timeout=self.long_timeout))

    def today(self) -> list[CalendarEvent]:
        script = _events_script(
            '''set startDate to current date
        set time of startDate to 0
        set endDate to startDate + 1 * days''',
            "<",
        )
        return parse_events(run_script(script, timeout=self.long_timeout))

    def tomorrow(self) -> list[CalendarEvent]:
        script = _events_script(
            '''set startDate to (current date) + 1 * days
        set time of startDate to 0
        set endDate to startDate + 1 * days''',
            "<",
        )
        return parse_events(run_script(script, timeout=self.long_timeout))

    def show(self, event_id: str) -> CalendarEventDetail:
        script = f'''
        tell application "Calendar"
            repeat with cal in calendars
                try
                    set evt to first event of cal whose uid is "{escape(event_id)}"
                    set evtSummary to summary of evt
                    set evtStart to start date of evt as text
                    set evtEnd to end date of evt as text
                    set evtLoc to ""
                    try
                        set evtLoc to location of evt
                    end try
                    if evtLoc is missing value then set evtLoc to ""
                    set evtNotes to ""
                    try
                        set evtNotes to description of evt
                    end try
                    if evtNotes is missing value then set evtNotes to ""
                    set evtAllDay to allday event of evt
                    set calName to name of cal

                    return evtSummary & "|||" & evtStart & "|||" & evtEnd & "|||" & evtLoc & "|||" & evtNotes & "|||" & evtAllDay & "|||" & calName
                end try
            end repeat
            error "Event not found"
        end tell
        '''
        raw = run_script(script, timeout=self.timeout)
        summary, start, end, location, notes, all_day, calendar = split_detail(raw, 7)[:7]
        return CalendarEventDetail(
            summary=summary,
            start_date=start,
            end_date=end,
            location=location,
            notes=notes,
            all_day=parse_bool(all_day),
            calendar=calendar,
        )

    def add(
        self,
        title: str,
        date: str | None = None,
        time: str | None = None,
        duration: int = 60,
        calendar: str | None = None,
        location: str | None = None,
        notes: str | None = None,
        all_day: bool = False,
        now: datetime | None = None,
    ) -> CreatedEvent:
        """Create an event. ``date`` accepts anything :func:`parse_date` does.

        Without ``date`` the event starts at the current time; ``time`` is
        only applied together with ``date``.
        """
        calendar_name = calendar or self.default_calendar

        if date:
            start = parse_date(date, now=now)
            if time:
                start = apply_time(start, time)
            date_expr = f'date "{format_applescript_date(start)}"'
        else:
            date_expr = "(current date)"

        extra_props = ""
        if location:
            extra_props += f', location:"{escape(location)}"'
        if notes:
            extra_props += f', description:"{escape(notes)}"'
        if all_day:
            extra_props += ", allday event:true"

        script = f'''
        tell application "Calendar"
            tell calendar "{escape(calendar_name)}"
                set startDate to {date_expr}
                set endDate to startDate + ({int(duration)} * minutes)
                set newEvent to make new event with properties {{summary:"{escape(title)}", start date:startDate, end date:endDate{extra_props}}}
                return uid of newEvent
            end tell
        end tell
        '''
        event_id = run_script(script, timeout=self.timeout)
        logger.info("Created event %s in %r", event_id, calendar_name)
        return CreatedEvent(id=event_id, title=title, calendar=calendar_name, location=location or "")

    def delete(self, event_id: str) -> str:
        """Delete an event by uid. Returns the deleted event's summary."""
        script = f'''
        tell application "Calendar"
            repeat with cal in calendars
                try
                    set evt to first event of cal whose uid is "{escape(event_id)}"
                    set evtName to summary of evt
                    delete evt
                    return evtName
                end try
            end repeat
            error "Event not found"
        end tell
        '''
        summary = run_script(script, timeout=self.timeout)
        logger.info("Deleted event %s (%s)", event_id, summary)
        return summary
