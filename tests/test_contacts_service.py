from __future__ import annotations

import pytest

from conftest import failed
from mac_cli.applescript import AppleScriptError
from mac_cli.contacts_service import AppleContactsService
from mac_cli.models import ContactDetail, ContactSummary, LabeledValue


def test_search(osascript):
    osascript.queue("p1|Jane Doe|jane@acme.com,jd@me.com,|555-1234,|Acme\np2|Janet Roe|||\n")

    contacts = AppleContactsService().search("Jan")

    assert [c.name for c in contacts] == ["Jane Doe", "Janet Roe"]
    assert contacts[0].emails == ["jane@acme.com", "jd@me.com"]
    assert contacts[0].phones == ["555-1234"]
    assert contacts[0].company == "Acme"
    assert contacts[1].emails == []
    assert 'whose name contains "Jan"' in osascript.last_script


def test_show_parses_labeled_values(osascript):
    osascript.queue(
        "Jane Doe|||work:jane@acme.com,home:jd@me.com,|||mobile:555-1234,|||Acme|||Engineer"
        "|||Met at a conference|||March 3, 1990|||home:1 Main St, Springfield, IL 62701;"
    )

    detail = AppleContactsService().show("Jane")

    assert detail.name == "Jane Doe"
    assert detail.emails == [
        LabeledValue("work", "jane@acme.com"),
        LabeledValue("home", "jd@me.com"),
    ]
    assert detail.phones == [LabeledValue("mobile", "555-1234")]
    assert detail.addresses == [LabeledValue("home", "1 Main St, Springfield, IL 62701")]
    assert detail.work == "Engineer at Acme"
    assert detail.note == "Met at a conference"
    assert detail.birthday == "March 3, 1990"


def test_show_missing_contact_raises(osascript):
    osascript.queue(failed("execution error: Contact not found (-2700)"))

    with pytest.raises(AppleScriptError, match="Contact not found"):
        AppleContactsService().show("Nobody")


def test_list_contacts_respects_limit(osascript):
    osascript.queue("p1|Jane Doe|jane@acme.com|Acme\np2|Bob||\n")

    contacts = AppleContactsService().list_contacts(limit=2)

    assert contacts == [
        ContactSummary("p1", "Jane Doe", "jane@acme.com", "Acme"),
        ContactSummary("p2", "Bob", "", ""),
    ]
    assert "counter >= 2" in osascript.last_script


def test_me(osascript):
    osascript.queue("Me Myself|||home:me@me.com,|||mobile:555,||||||")

    detail = AppleContactsService().me()

    assert detail.name == "Me Myself"
    assert detail.emails == [LabeledValue("home", "me@me.com")]
    assert detail.work == ""
    assert detail.addresses == []
    assert "set p to my card" in osascript.last_script


def test_work_title_only():
    assert ContactDetail(name="x", job_title="CTO").work == "CTO"
    assert ContactDetail(name="x", company="Acme").work == "Acme"
