from __future__ import annotations

import pytest

from conftest import failed
from mac_cli.applescript import AppleScriptError
from mac_cli.mail_service import AppleMailService
from mac_cli.models import MailAccount, Mailbox


def test_accounts_parses_names_and_addresses(osascript):
    osascript.queue("iCloud|me@icloud.com,me@me.com,\nWork|me@corp.com,\n")

    accounts = AppleMailService().accounts()

    assert accounts == [
        MailAccount(name="iCloud", emails=["me@icloud.com", "me@me.com"]),
        MailAccount(name="Work", emails=["me@corp.com"]),
    ]
    assert 'tell application "Mail"' in osascript.last_script


def test_mailboxes_parses_unread_counts(osascript):
    osascript.queue("INBOX|3\nSent Messages|0\n")

    mailboxes = AppleMailService().mailboxes("iCloud")

    assert mailboxes == [Mailbox("INBOX", 3), Mailbox("Sent Messages", 0)]
    assert 'account "iCloud"' in osascript.last_script


def test_search_builds_filters(osascript):
    osascript.queue(
        "101|Your receipt|Google <no-reply@google.com>|Tuesday, January 20, 2026 at 9:00:00 AM|false\n"
        "102|Security alert|Google <no-reply@google.com>|Monday, January 19, 2026 at 8:00:00 PM|true"
    )

    messages = AppleMailService().search("iCloud", sender="Google", unread=True, limit=5)

    script = osascript.last_script
    assert 'mailbox "INBOX" of accountRef' in script
    assert 'whose sender contains "Google" and read status is false' in script
    assert "counter >= 5" in script
    assert [m.id for m in messages] == ["101", "102"]
    assert messages[0].is_read is False
    assert messages[1].is_read is True
    assert messages[0].subject == "Your receipt"


def test_search_without_filters_reads_all_messages(osascript):
    osascript.queue("")

    assert AppleMailService(default_mailbox="Archive").search("Work") == []

    script = osascript.last_script
    assert "set matchedMessages to messages of mailboxRef" in script
    assert "whose" not in script
    assert 'mailbox "Archive"' in script


def test_search_escapes_user_text(osascript):
    osascript.queue("")

    AppleMailService().search('My "Work"', subject='re: "plans"')

    script = osascript.last_script
    assert 'account "My \\"Work\\""' in script
    assert 'subject contains "re: \\"plans\\""' in script


def test_read_returns_detail(osascript):
    osascript.queue(
        "Lunch?|||Bob <bob@x.com>|||Tuesday, January 20, 2026 at 11:00:00 AM|||me@x.com, |||Noon works.\nSee you."
    )

    detail = AppleMailService().read("4242")

    assert detail.subject == "Lunch?"
    assert detail.sender == "Bob <bob@x.com>"
    assert detail.to == "me@x.com, "
    assert detail.content == "Noon works.\nSee you."
    assert "whose id is 4242" in osascript.last_script
    assert 'error "Message not found"' in osascript.last_script


def test_read_sanitizes_message_id(osascript):
    osascript.queue("s|||f|||d|||t|||c")

    AppleMailService().read("1 or true")

    assert "whose id is 1_or_true" in osascript.last_script


def test_read_missing_message_raises(osascript):
    osascript.queue(failed("execution error: Message not found (-2700)"))

    with pytest.raises(AppleScriptError, match="Message not found"):
        AppleMailService().read("1")


def test_attachments(osascript):
    osascript.queue("report.pdf|application/pdf|2048|true\nphoto.png|image/png|1024|false\n")

    attachments = AppleMailService().attachments("77")

    assert [a.name for a in attachments] == ["report.pdf", "photo.png"]
    assert attachments[0].size == 2048
    assert attachments[0].downloaded is True
    assert attachments[1].mime_type == "image/png"


def test_save_attachments(osascript, tmp_path):
    osascript.queue("2|report.pdf\nphoto.png\n")

    saved = AppleMailService().save_attachments("77", tmp_path)

    assert saved.count == 2
    assert saved.names == ["report.pdf", "photo.png"]
    assert saved.directory == str(tmp_path)
    assert f'"{tmp_path}/" & attName' in osascript.last_script


def test_save_attachments_uses_configured_download_dir(osascript, tmp_path):
    osascript.queue("0|")

    saved = AppleMailService(download_dir=tmp_path).save_attachments("77")

    assert saved.count == 0
    assert saved.names == []
    assert saved.directory == str(tmp_path)


def test_save_attachments_missing_directory_raises_before_scripting(osascript, tmp_path):
    with pytest.raises(FileNotFoundError, match="Directory does not exist"):
        AppleMailService().save_attachments("77", tmp_path / "nope")
    assert osascript.scripts == []


def test_draft_is_visible_and_not_sent(osascript):
    osascript.queue("9001")

    draft = AppleMailService().draft(
        ["a@x.com", "b@y.com"], "Plans", 'Say "hi"', cc=["c@z.com"], bcc=["d@w.com"]
    )

    assert draft.id == "9001"
    assert draft.to == ["a@x.com", "b@y.com"]
    script = osascript.last_script
    assert "visible:true" in script
    assert '{"a@x.com", "b@y.com"}' in script
    assert "make new cc recipient" in script
    assert "make new bcc recipient" in script
    assert 'content:"Say \\"hi\\""' in script
    assert "return id of theMessage" in script
    assert 'return "sent"' not in script


def test_draft_without_cc_has_no_cc_block(osascript):
    osascript.queue("1")

    AppleMailService().draft(["a@x.com"], "s", "b")

    assert "cc recipient" not in osascript.last_script


def test_send_without_confirmation(osascript):
    osascript.queue("sent")

    assert AppleMailService().send(["a@x.com"], "Hi", "Body", confirm=False) is True

    assert len(osascript.scripts) == 1
    script = osascript.last_script
    assert "visible:false" in script
    assert "send" in script
    assert 'return "sent"' in script


def test_send_confirmed(osascript):
    osascript.queue("button returned:Send", "sent")

    assert AppleMailService().send(["a@x.com"], "Hi", "Body") is True

    assert len(osascript.scripts) == 2
    assert "display dialog" in osascript.scripts[0]
    assert 'with title "mac CLI"' in osascript.scripts[0]
    assert "To: a@x.com" in osascript.scripts[0]


def test_send_cancelled_does_not_send(osascript):
    osascript.queue(failed("execution error: User canceled. (-128)"))

    assert AppleMailService().send(["a@x.com"], "Hi", "Body") is False

    assert len(osascript.scripts) == 1


def test_mark_read_returns_count(osascript):
    osascript.queue("2")

    assert AppleMailService().mark_read(["11", "12"]) == 2

    script = osascript.last_script
    assert "set idList to {11, 12}" in script
    assert "set read status of msg to true" in script


def test_mark_unread(osascript):
    osascript.queue("1")

    assert AppleMailService().mark_unread(["11"]) == 1

    assert "set read status of msg to false" in osascript.last_script
