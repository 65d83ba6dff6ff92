"""Apple Mail: accounts, mailboxes, message search/read, attachments, drafts,
sending, and read-status changes.

Message lookups by id walk every mailbox of every account because Mail has
no global "message by id" accessor.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from .applescript import (
    DEFAULT_TIMEOUT,
    AppleScriptError,
    escape,
    quote_list,
    run_script,
    sanitize_id,
)
from .models import (
    DraftResult,
    MailAccount,
    MailAttachment,
    Mailbox,
    MailMessage,
    MailMessageDetail,
    SavedAttachments,
)
from .records import parse_bool, parse_int, split_detail, split_items, split_records

logger = logging.getLogger("mac_cli.mail_service")


def _recipient_block(kind: str, addresses: Sequence[str]) -> str:
    if not addresses:
        return ""
    return f'''
            repeat with addr in {{{quote_list(addresses)}}}
                make new {kind} recipient with properties {{address:addr}}
            end repeat'''


def _find_message(id_safe: str, body: str) -> str:
    """Wrap ``body`` in the every-account/every-mailbox lookup for ``msg``."""
    return f'''
    tell application "Mail"
        repeat with acc in accounts
            repeat with mb in mailboxes of acc
                try
                    set msg to first message of mb whose id is {id_safe}
                    {body}
                end try
            end repeat
        end repeat
        error "Message not found"
    end tell
    '''


class AppleMailService:
    """Reads and writes Mail.app data via AppleScript."""

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        default_mailbox: str = "INBOX",
        download_dir: Path | str | None = None,
    ):
        self.timeout = timeout
        self.default_mailbox = default_mailbox
        self.download_dir = Path(download_dir) if download_dir else Path.home() / "Downloads"

    def accounts(self) -> list[MailAccount]:
        script = '''
        tell application "Mail"
            set output to ""
            repeat with acc in accounts
                set accName to name of acc
                set accEmails to email addresses of acc
                set output to output & accName & "|"
                repeat with addr in accEmails
                    set output to output & addr & ","
                end repeat
                set output to output & "\\n"
            end repeat
            return output
        end tell
        '''
        raw = run_script(script, timeout=self.timeout)
        return [
            MailAccount(name=parts[0], emails=split_items(parts[1]))
            for parts in split_records(raw, 2)
        ]

    def mailboxes(self, account: str) -> list[Mailbox]:
        script = f'''
        tell application "Mail"
            set accountRef to account "{escape(account)}"
            set output to ""
            repeat with mb in mailboxes of accountRef
                set mbName to name of mb
                set mbUnread to unread count of mb
                set output to output & mbName & "|" & mbUnread & "\\n"
            end repeat
            return output
        end tell
        '''
        raw = run_script(script, timeout=self.timeout)
        return [
            Mailbox(name=parts[0], unread_count=parse_int(parts[1]))
            for parts in split_records(raw, 2)
        ]

    def search(
        self,
        account: str,
        mailbox: str | None = None,
        sender: str | None = None,
        subject: str | None = None,
        unread: bool = False,
        limit: int = 20,
    ) -> list[MailMessage]:
        """Messages of ``account``/``mailbox`` matching every given filter, newest as Mail orders them."""
        mailbox = mailbox or self.default_mailbox
        conditions: list[str] = []
        if sender:
            conditions.append(f'sender contains "{escape(sender)}"')
        if subject:
            conditions.append(f'subject contains "{escape(subject)}"')
        if unread:
            conditions.append("read status is false")

        if conditions:
            selection = f"(messages of mailboxRef whose {' and '.join(conditions)})"
        else:
            selection = "messages of mailboxRef"

        script = f'''
        tell application "Mail"
            set accountRef to account "{escape(account)}"
            set mailboxRef to mailbox "{escape(mailbox)}" of accountRef
            set matchedMessages to {selection}

            set resultList to {{}}
            set counter to 0
            repeat with msg in matchedMessages
                if counter >= {int(limit)} then exit repeat
                set msgId to id of msg as text
                set msgSubject to subject of msg
                set msgSender to sender of msg
                set msgDate to date received of msg as text
                set msgRead to read status of msg

                set msgData to msgId & "|" & msgSubject & "|" & msgSender & "|" & msgDate & "|" & msgRead
                set end of resultList to msgData
                set counter to counter + 1
            end repeat

            set AppleScript's text item delimiters to linefeed
            set output to resultList as text
            set AppleScript's text item delimiters to ""
            return output
        end tell
        '''
        raw = run_script(script, timeout=self.timeout)
        messages = [
            MailMessage(
                id=parts[0],
                subject=parts[1],
                sender=parts[2],
                date_received=parts[3],
                is_read=parse_bool(parts[4]),
            )
            for parts in split_records(raw, 5)
        ]
        logger.info("Found %s message(s) in %s/%s", len(messages), account, mailbox)
        return messages

    def read(self, message_id: str) -> MailMessageDetail:
        script = _find_message(
            sanitize_id(message_id),
            '''
                    set msgSubject to subject of msg
                    set msgSender to sender of msg
                    set msgDate to date received of msg as text
                    set msgContent to content of msg
                    set msgTo to ""
                    repeat with r in to recipients of msg
                        set msgTo to msgTo & address of r & ", "
                    end repeat

                    return msgSubject & "|||" & msgSender & "|||" & msgDate & "|||" & msgTo & "|||" & msgContent''',
        )
        raw = run_script(script, timeout=self.timeout)
        subject, sender, date_received, to, content = split_detail(raw, 5)[:5]
        return MailMessageDetail(
            subject=subject,
            sender=sender,
            date_received=date_received,
            to=to,
            content=content,
        )

    def attachments(self, message_id: str) -> list[MailAttachment]:
        script = _find_message(
            sanitize_id(message_id),
            '''
                    set attList to mail attachments of msg

                    set output to ""
                    repeat with att in attList
                        set attName to name of att
                        set attType to MIME type of att
                        set attSize to file size of att
                        set attDownloaded to downloaded of att
                        set output to output & attName & "|" & attType & "|" & attSize & "|" & attDownloaded & "\\n"
                    end repeat

                    return output''',
        )
        raw = run_script(script, timeout=self.timeout)
        return [
            MailAttachment(
                name=parts[0],
                mime_type=parts[1],
                size=parse_int(parts[2]),
                downloaded=parse_bool(parts[3]),
            )
            for parts in split_records(raw, 4)
        ]

    def save_attachments(self, message_id: str, directory: str | Path | None = None) -> SavedAttachments:
        """Save every attachment of a message into ``directory``.

        Raises:
            FileNotFoundError: if the target directory does not exist.
        """
        target = Path(directory).expanduser() if directory else self.download_dir
        if not target.is_dir():
            raise FileNotFoundError(f"Directory does not exist: {target}")

        script = _find_message(
            sanitize_id(message_id),
            f'''
                    set attList to mail attachments of msg
                    set saveCount to 0
                    set savedNames to ""

                    repeat with att in attList
                        try
                            set attName to name of att
                            set savePath to "{escape(str(target))}/" & attName
                            save att in POSIX file savePath
                            set saveCount to saveCount + 1
                            set savedNames to savedNames & attName & "\\n"
                        end try
                    end repeat

                    return (saveCount as text) & "|" & savedNames''',
        )
        raw = run_script(script, timeout=self.timeout)
        count_text, _, names_text = raw.partition("|")
        names = [name for name in names_text.split("\n") if name]
        logger.info("Saved %s attachment(s) of message %s to %s", parse_int(count_text), message_id, target)
        return SavedAttachments(directory=str(target), count=parse_int(count_text), names=names)

    def _compose_script(
        self,
        to: Sequence[str],
        subject: str,
        body: str,
        cc: Sequence[str],
        bcc: Sequence[str],
        *,
        visible: bool,
        send: bool,
    ) -> str:
        final_step = "send" if send else ""
        result = '"sent"' if send else "id of theMessage"
        return f'''
        tell application "Mail"
            set theMessage to make new outgoing message with properties {{subject:"{escape(subject)}", content:"{escape(body)}", visible:{"true" if visible else "false"}}}

            tell theMessage
                repeat with addr in {{{quote_list(to)}}}
                    make new to recipient with properties {{address:addr}}
                end repeat
                {_recipient_block("cc", cc)}
                {_recipient_block("bcc", bcc)}
                {final_step}
            end tell

            return {result}
        end tell
        '''

    def draft(
        self,
        to: Sequence[str],
        subject: str,
        body: str,
        cc: Sequence[str] = (),
        bcc: Sequence[str] = (),
    ) -> DraftResult:
        """Create an outgoing message and leave it open in Mail for review."""
        script = self._compose_script(to, subject, body, cc, bcc, visible=True, send=False)
        draft_id = run_script(script, timeout=self.timeout)
        logger.info("Created draft %s to %s", draft_id, ", ".join(to))
        return DraftResult(id=draft_id, to=list(to), subject=subject)

    def confirm_send(self, to: Sequence[str], subject: str) -> bool:
        """Ask for confirmation in a dialog. Returns False when the user cancels."""
        prompt = f"Send email?\\n\\nTo: {escape(', '.join(to))}\\nSubject: {escape(subject)}"
        script = (
            f'display dialog "{prompt}" buttons {{"Cancel", "Send"}} '
            'default button "Send" with title "mac CLI" with icon caution'
        )
        try:
            run_script(script, timeout=self.timeout)
        except AppleScriptError as exc:
            logger.info("Send confirmation declined: %s", exc)
            return False
        return True

    def send(
        self,
        to: Sequence[str],
        subject: str,
        body: str,
        cc: Sequence[str] = (),
        bcc: Sequence[str] = (),
        confirm: bool = True,
    ) -> bool:
        """Send a message. Returns False if the confirmation dialog was cancelled."""
        if confirm and not self.confirm_send(to, subject):
            return False
        script = self._compose_script(to, subject, body, cc, bcc, visible=False, send=True)
        run_script(script, timeout=self.timeout)
        logger.info("Sent email to %s", ", ".join(to))
        return True

    def mark(self, message_ids: Sequence[str], read: bool) -> int:
        """Set the read status of every listed message. Returns how many were updated."""
        ids = ", ".join(sanitize_id(message_id) for message_id in message_ids)
        script = f'''
        tell application "Mail"
            set idList to {{{ids}}}
            set updateCount to 0

            repeat with msgId in idList
                repeat with acc in accounts
                    repeat with mb in mailboxes of acc
                        try
                            set msg to first message of mb whose id is msgId
                            set read status of msg to {"true" if read else "false"}
                            set updateCount to updateCount + 1
                        end try
                    end repeat
                end repeat
            end repeat

            return updateCount
        end tell
        '''
        return parse_int(run_script(script, timeout=self.timeout))

    def mark_read(self, message_ids: Sequence[str]) -> int:
        return self.mark(message_ids, True)

    def mark_unread(self, message_ids: Sequence[str]) -> int:
        return self.mark(message_ids, False)
