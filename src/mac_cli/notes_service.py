"""Apple Notes: folders, listing, show by title, full-text search, and create."""

from __future__ import annotations

import logging

from .applescript import DEFAULT_TIMEOUT, LONG_TIMEOUT, escape, run_script
from .models import Note, NoteDetail, NoteFolder, NoteSearchHit
from .records import parse_int, split_detail, split_records

logger = logging.getLogger("mac_cli.notes_service")

SNIPPET_CHARS = 100


class AppleNotesService:
    """Reads and writes Notes.app notes via AppleScript."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, long_timeout: float = LONG_TIMEOUT):
        self.timeout = timeout
        self.long_timeout = long_timeout

    def folders(self) -> list[NoteFolder]:
        script = '''
        tell application "Notes"
            set output to ""
            repeat with f in folders
                set fName to name of f
                set fCount to count of notes of f
                set output to output & fName & "|" & fCount & "\\n"
            end repeat
            return output
        end tell
        '''
        raw = run_script(script, timeout=self.timeout)
        return [NoteFolder(name=parts[0], count=parse_int(parts[1])) for parts in split_records(raw, 2)]

    def list_notes(self, folder: str | None = None, limit: int = 20) -> list[Note]:
        folder_filter = f'of folder "{escape(folder)}"' if folder else ""
        script = f'''
        tell application "Notes"
            set output to ""
            set counter to 0
            repeat with n in (notes {folder_filter})
                if counter >= {int(limit)} then exit repeat
                try
                    set nId to id of n
                    set nName to name of n
                    set nFolder to ""
                    try
                        set nFolder to name of container of n
                    end try
                    set nCreated to creation date of n as text
                    set nModified to modification date of n as text
                    set output to output & nId & "|" & nName & "|" & nFolder & "|" & nCreated & "|" & nModified & "\\n"
                    set counter to counter + 1
                end try
            end repeat
            return output
        end tell
        '''
        raw = run_script(script, timeout=self.timeout)
        return [
            Note(
                id=parts[0],
                name=parts[1],
                folder=parts[2],
                creation_date=parts[3],
                modification_date=parts[4],
            )
            for parts in split_records(raw, 5)
        ]

    def show(self, title: str) -> NoteDetail:
        """First note whose name contains ``title``, with its plaintext body."""
        script = f'''
        tell application "Notes"
            set matchedNotes to (notes whose name contains "{escape(title)}")
            if (count of matchedNotes) is 0 then
                error "Note not found"
            end if

            set n to first item of matchedNotes
            set nName to name of n
            set nBody to plaintext of n
            set nFolder to ""
            try
                set nFolder to name of container of n
            end try
            set nCreated to creation date of n as text
            set nModified to modification date of n as text

            return nName & "|||" & nBody & "|||" & nFolder & "|||" & nCreated & "|||" & nModified
        end tell
        '''
        raw = run_script(script, timeout=self.timeout)
        name, body, folder, created, modified = split_detail(raw, 5)[:5]
        return NoteDetail(
            name=name,
            body=body,
            folder=folder,
            creation_date=created,
            modification_date=modified,
        )

    def search(self, query: str) -> list[NoteSearchHit]:
        """Notes whose name or body contains ``query``.

        The snippet is the start of the body, and only when the body matched.
        """
        query_safe = escape(query)
        script = f'''
        tell application "Notes"
            set output to ""
            repeat with n in notes
                try
                    set nName to name of n
                    set nBody to plaintext of n
                    if nName contains "{query_safe}" or nBody contains "{query_safe}" then
                        set nId to id of n
                        set nFolder to ""
                        try
                            set nFolder to name of container of n
                        end try
                        set nModified to modification date of n as text
                        set snippet to ""
                        if nBody contains "{query_safe}" and (length of nBody) > 0 then
                            set snippetEnd to {SNIPPET_CHARS}
                            if (length of nBody) < snippetEnd then set snippetEnd to length of nBody
                            set snippet to text 1 thru snippetEnd of nBody
                        end if
                        set output to output & nId & "|" & nName & "|" & nFolder & "|" & nModified & "|" & snippet & "\\n"
                    end if
                end try
            end repeat
            return output
        end tell
        '''
        raw = run_script(script, timeout=self.long_timeout)
        hits = [
            NoteSearchHit(
                id=parts[0],
                name=parts[1],
                folder=parts[2],
                modification_date=parts[3],
                snippet=parts[4] if len(parts) > 4 else "",
            )
            for parts in split_records(raw, 4)
        ]
        logger.info("Notes search %r matched %s", query, len(hits))
        return hits

    def add(self, title: str, body: str, folder: str | None = None) -> str:
        """Create a note in ``folder`` (or the default folder). Returns its stored name."""
        target = f'folder "{escape(folder)}"' if folder else "default folder of default account"
        script = f'''
        tell application "Notes"
            tell {target}
                set newNote to make new note with properties {{name:"{escape(title)}", body:"{escape(body)}"}}
                return name of newNote
            end tell
        end tell
        '''
        created = run_script(script, timeout=self.timeout)
        logger.info("Created note %r%s", created, f" in folder {folder!r}" if folder else "")
        return created
