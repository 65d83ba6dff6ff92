"""Apple Contacts: name search, card details, listing, and "My Card"."""

from __future__ import annotations

import logging

from .applescript import DEFAULT_TIMEOUT, escape, run_script
from .models import Contact, ContactDetail, ContactSummary, LabeledValue
from .records import ADDRESS_SEP, split_detail, split_items, split_labeled, split_records

logger = logging.getLogger("mac_cli.contacts_service")

# Collects labeled emails and phones of person ``p`` into pEmails / pPhones.
_LABELED_CHANNELS = '''
        set pEmails to ""
        repeat with e in emails of p
            set pEmails to pEmails & (label of e) & ":" & (value of e) & ","
        end repeat
        set pPhones to ""
        repeat with ph in phones of p
            set pPhones to pPhones & (label of ph) & ":" & (value of ph) & ","
        end repeat
        set pCompany to ""
        try
            set pCompany to organization of p
        end try
        if pCompany is missing value then set pCompany to ""
        set pTitle to ""
        try
            set pTitle to job title of p
        end try
        if pTitle is missing value then set pTitle to ""
'''


def _labeled(value: str, sep: str = ",") -> list[LabeledValue]:
    return [LabeledValue(*split_labeled(item)) for item in split_items(value, sep)]


class AppleContactsService:
    """Reads Contacts.app people via AppleScript."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT):
        self.timeout = timeout

    def search(self, query: str) -> list[Contact]:
        script = f'''
        tell application "Contacts"
            set matchedPeople to (every person whose name contains "{escape(query)}")
            set output to ""
            repeat with p in matchedPeople
                set pId to id of p
                set pName to name of p
                set pEmails to ""
                repeat with e in emails of p
                    set pEmails to pEmails & value of e & ","
                end repeat
                set pPhones to ""
                repeat with ph in phones of p
                    set pPhones to pPhones & value of ph & ","
                end repeat
                set pCompany to ""
                try
                    set pCompany to organization of p
                end try
                if pCompany is missing value then set pCompany to ""
                set output to output & pId & "|" & pName & "|" & pEmails & "|" & pPhones & "|" & pCompany & "\\n"
            end repeat
            return output
        end tell
        '''
        raw = run_script(script, timeout=self.timeout)
        contacts = [
            Contact(
                id=parts[0],
                name=parts[1],
                emails=split_items(parts[2]),
                phones=split_items(parts[3]),
                company=parts[4],
            )
            for parts in split_records(raw, 5)
        ]
        logger.info("Contacts search %r matched %s", query, len(contacts))
        return contacts

    def show(self, name: str) -> ContactDetail:
        """Full card of the first person whose name contains ``name``."""
        script = f'''
        tell application "Contacts"
            set matchedPeople to (every person whose name contains "{escape(name)}")
            if (count of matchedPeople) is 0 then
                error "Contact not found"
            end if

            set p to first item of matchedPeople
            set pName to name of p
            {_LABELED_CHANNELS}
            set pNote to ""
            try
                set pNote to note of p
            end try
            if pNote is missing value then set pNote to ""
            set pBirthday to ""
            try
                set pBirthday to birth date of p as text
            end try
            set pAddresses to ""
            repeat with addr in addresses of p
                try
                    set addrStr to (label of addr) & ":" & (street of addr) & ", " & (city of addr) & ", " & (state of addr) & " " & (zip of addr)
                    set pAddresses to pAddresses & addrStr & ";"
                end try
            end repeat

            return pName & "|||" & pEmails & "|||" & pPhones & "|||" & pCompany & "|||" & pTitle & "|||" & pNote & "|||" & pBirthday & "|||" & pAddresses
        end tell
        '''
        raw = run_script(script, timeout=self.timeout)
        c_name, emails, phones, company, title, note, birthday, addresses = split_detail(raw, 8)[:8]
        return ContactDetail(
            name=c_name,
            emails=_labeled(emails),
            phones=_labeled(phones),
            company=company,
            job_title=title,
            note=note,
            birthday=birthday,
            addresses=_labeled(addresses, ADDRESS_SEP),
        )

    def list_contacts(self, limit: int = 50) -> list[ContactSummary]:
        script = f'''
        tell application "Contacts"
            set output to ""
            set counter to 0
            repeat with p in every person
                if counter >= {int(limit)} then exit repeat
                set pId to id of p
                set pName to name of p
                set pEmail to ""
                try
                    set pEmail to value of first email of p
                end try
                set pCompany to ""
                try
                    set pCompany to organization of p
                end try
                if pCompany is missing value then set pCompany to ""
                set output to output & pId & "|" & pName & "|" & pEmail & "|" & pCompany & "\\n"
                set counter to counter + 1
            end repeat
            return output
        end tell
        '''
        raw = run_script(script, timeout=self.timeout)
        return [
            ContactSummary(id=parts[0], name=parts[1], email=parts[2], company=parts[3])
            for parts in split_records(raw, 4)
        ]

    def me(self) -> ContactDetail:
        script = f'''
        tell application "Contacts"
            set p to my card
            if p is missing value then
                error "No 'My Card' set in Contacts"
            end if

            set pName to name of p
            {_LABELED_CHANNELS}
            return pName & "|||" & pEmails & "|||" & pPhones & "|||" & pCompany & "|||" & pTitle
        end tell
        '''
        raw = run_script(script, timeout=self.timeout)
        c_name, emails, phones, company, title = split_detail(raw, 5)[:5]
        return ContactDetail(
            name=c_name,
            emails=_labeled(emails),
            phones=_labeled(phones),
            company=company,
            job_title=title,
        )
