#!/usr/bin/env python
#
# File: $Id$
#
"""
The envelope of a message, as returned by the IMAP server for the ENVELOPE
fetch item and, for every nested message/rfc822 part, inside the
BODYSTRUCTURE response.

The fields of the envelope structure are in the following order:
- date
- subject
- from
- sender
- reply-to
- to
- cc
- bcc
- in-reply-to
- message-id

The date, subject, in-reply-to, and message-id fields are strings. The from,
sender, reply-to, to, cc, and bcc fields are parenthesized lists of address
structures. The strings are as the server sent them, ie: the subject may
well still be RFC2047 encoded.
"""
# system imports
#
import logging
import re
from dataclasses import dataclass
from typing import Optional, Tuple, Union

# project imports
#
from .constants import ENVELOPE_ADDRESS_FIELDS
from .cursor import Cursor
from .tokens import NIL, NO_MATCH, Token, field_value, read_nil, read_nstring
from .utils import to_bytes

logger = logging.getLogger("bodystructure.envelope")

_envelope_tag_re = re.compile(rb"\(ENVELOPE(?=[ \t\r\n(])", re.IGNORECASE)


########################################################################
########################################################################
#
@dataclass(frozen=True, kw_only=True)
class Address:
    """
    One address from an address list:

    - `name`: the personal name, "Terry Gray" in "Terry Gray <gray@example.com>"
    - `source_route`: the SMTP at-domain-list, almost always None
    - `account`: the part before the '@'
    - `host`: the part after the '@'
    """

    name: Optional[str] = None
    source_route: Optional[str] = None
    account: Optional[str] = None
    host: Optional[str] = None

    ####################################################################
    #
    @property
    def mailbox(self) -> str:
        """
        `account@host`, or the empty string if there is no account.
        """
        if not self.account:
            return ""
        return f"{self.account}@{self.host or ''}"

    ####################################################################
    #
    @property
    def display(self) -> str:
        """
        The full address for display purposes. If we only have one of the
        name and the mailbox that is what we display, if we have both it is
        `name <mailbox>`, if we have neither it is the empty string.
        """
        mailbox = self.mailbox
        if bool(mailbox) != bool(self.name):
            return self.name or mailbox
        return f"{self.name} <{mailbox}>" if mailbox else ""

    ####################################################################
    #
    def __str__(self) -> str:
        return self.display


########################################################################
########################################################################
#
@dataclass(frozen=True, kw_only=True)
class Envelope:
    """
    The parsed envelope. An address list the server sent as NIL is None,
    which is not the same as an empty list.
    """

    date: Optional[str] = None
    subject: Optional[str] = None
    from_: Optional[Tuple[Address, ...]] = None
    sender: Optional[Tuple[Address, ...]] = None
    reply_to: Optional[Tuple[Address, ...]] = None
    to: Optional[Tuple[Address, ...]] = None
    cc: Optional[Tuple[Address, ...]] = None
    bcc: Optional[Tuple[Address, ...]] = None
    in_reply_to: Optional[str] = None
    message_id: Optional[str] = None


####################################################################
#
def read_address(cursor: Cursor) -> Union[Address, Token]:
    """
    address         = "(" addr-name SP addr-adl SP addr-mailbox SP
                      addr-host ")"

    A NIL here ends the address list we are in.
    """
    if read_nil(cursor):
        return NIL
    if not cursor.open_paren():
        return NO_MATCH

    name = field_value(cursor, read_nstring(cursor), "address name")
    source_route = field_value(
        cursor, read_nstring(cursor), "address source route"
    )
    account = field_value(cursor, read_nstring(cursor), "address mailbox")
    host = field_value(cursor, read_nstring(cursor), "address host")
    cursor.close_paren("')' closing an address")
    return Address(
        name=name, source_route=source_route, account=account, host=host
    )


####################################################################
#
def read_address_list(cursor: Cursor) -> Union[Tuple[Address, ...], Token]:
    """
    "(" 1*address ")" / nil
    """
    if read_nil(cursor):
        return NIL
    if not cursor.open_paren():
        return NO_MATCH

    addrs = []
    while True:
        addr = read_address(cursor)
        if isinstance(addr, Token):
            break
        addrs.append(addr)
    cursor.close_paren("')' closing an address list")
    return tuple(addrs)


####################################################################
#
def read_envelope(cursor: Cursor) -> Envelope:
    """
    Read an envelope structure starting at the cursor's position.
    """
    if not cursor.open_paren():
        raise cursor.unexpected("'(' beginning an envelope")

    date = field_value(cursor, read_nstring(cursor), "envelope date")
    subject = field_value(cursor, read_nstring(cursor), "envelope subject")
    addr_lists = {}
    for field, header in ENVELOPE_ADDRESS_FIELDS:
        addr_lists[field] = field_value(
            cursor, read_address_list(cursor), f"'{header}' address list"
        )
    in_reply_to = field_value(
        cursor, read_nstring(cursor), "envelope in-reply-to"
    )
    message_id = field_value(
        cursor, read_nstring(cursor), "envelope message-id"
    )
    cursor.close_paren("')' closing an envelope")

    return Envelope(
        date=date,
        subject=subject,
        in_reply_to=in_reply_to,
        message_id=message_id,
        **addr_lists,
    )


####################################################################
#
def parse_envelope(text: Union[bytes, str]) -> Envelope:
    """
    Parse the server's response to an ENVELOPE fetch. The response may
    still have the `(ENVELOPE` tag in front of it.

    Raises a ParseError if the response is malformed.
    """
    cursor = Cursor(to_bytes(text))
    tagged = cursor.open_tagged_list(_envelope_tag_re)
    envelope = read_envelope(cursor)
    if tagged:
        cursor.skip_whitespace()
        if cursor.peek() == b")":
            cursor.close_paren()

    cursor.skip_whitespace()
    if not cursor.at_end():
        logger.debug(
            "Ignoring %d octets after the envelope at offset %d",
            cursor.remaining,
            cursor.pos,
        )
    return envelope
