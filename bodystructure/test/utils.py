"""
Some common code used by more than one test case.

These render the BODYSTRUCTURE and ENVELOPE responses an IMAP server would
send for an `email.message.EmailMessage` so that we can test the parser
against structures built from real messages and not just hand written
strings.
"""

# system imports
#
import email.utils
from email.message import EmailMessage
from typing import Iterable, List, Optional

# project imports
#
from ..constants import ENVELOPE_ADDRESS_FIELDS
from ..envelope import Address, Envelope


####################################################################
#
def quote(value: str) -> bytes:
    """
    An IMAP quoted string, escaping the quoted specials.
    """
    value = value.replace("\\", "\\\\").replace('"', '\\"')
    return b'"' + value.encode("utf-8") + b'"'


####################################################################
#
def nstring(value: Optional[str]) -> bytes:
    return b"NIL" if value is None else quote(str(value))


####################################################################
#
def literal(value: bytes) -> bytes:
    """
    An IMAP literal: the octet count, CRLF, and the octets verbatim.
    """
    return f"{{{len(value)}}}\r\n".encode("latin-1") + value


####################################################################
#
def encode_address(addr: Address) -> bytes:
    return (
        b"("
        + b" ".join(
            nstring(x)
            for x in (addr.name, addr.source_route, addr.account, addr.host)
        )
        + b")"
    )


####################################################################
#
def encode_address_list(addrs: Optional[Iterable[Address]]) -> bytes:
    if addrs is None:
        return b"NIL"
    return b"(" + b"".join(encode_address(x) for x in addrs) + b")"


####################################################################
#
def encode_envelope(envelope: Envelope) -> bytes:
    fields = [nstring(envelope.date), nstring(envelope.subject)]
    for field, _ in ENVELOPE_ADDRESS_FIELDS:
        fields.append(encode_address_list(getattr(envelope, field)))
    fields.append(nstring(envelope.in_reply_to))
    fields.append(nstring(envelope.message_id))
    return b"(" + b" ".join(fields) + b")"


####################################################################
#
def header_or_nil(msg: EmailMessage, field: str) -> bytes:
    """
    a shortcut for quoting a header if it exists in a message otherwise
    it returns "NIL"
    """
    return quote(str(msg[field])) if field in msg else b"NIL"


########################################################################
#
def encode_addrs(msg: EmailMessage, field: str) -> bytes:
    """
    Encode all the email addresses in a given field in the message as an
    address list.

    The fields of an address are in the following order: personal name, [SMTP]
    at-domain-list (source route), mailbox name, and host name.
    """
    field_data: List[str] = [str(x) for x in msg.get_all(field, [])]
    if not field_data:
        return b"NIL"

    addrs = []
    for real_name, email_address in email.utils.getaddresses(field_data):
        account, _, host = email_address.partition("@")
        addrs.append(
            Address(
                name=real_name if real_name else None,
                account=account,
                host=host if host else None,
            )
        )
    return encode_address_list(addrs)


####################################################################
#
def envelope_of(msg: EmailMessage) -> bytes:
    """
    The envelope structure of the message as the server would send it.
    The sender and reply-to default to the from address.
    """
    frm = encode_addrs(msg, "from")
    sender = encode_addrs(msg, "sender") if "sender" in msg else frm
    reply_to = encode_addrs(msg, "reply-to") if "reply-to" in msg else frm
    fields = (
        header_or_nil(msg, "date"),
        header_or_nil(msg, "subject"),
        frm,
        sender,
        reply_to,
        encode_addrs(msg, "to"),
        encode_addrs(msg, "cc"),
        encode_addrs(msg, "bcc"),
        header_or_nil(msg, "in-reply-to"),
        header_or_nil(msg, "message-id"),
    )
    return b"(" + b" ".join(fields) + b")"


##################################################################
#
def body_parameters(msg: EmailMessage) -> bytes:
    """
    The body parameters for a message as a parenthesized list. Text and
    message parts without a charset are given US-ASCII.
    """
    params = {}
    charset = msg.get_content_charset()
    if charset is None and msg.get_content_maintype() in ("text", "message"):
        charset = "us-ascii"
    if charset:
        params["CHARSET"] = charset.upper()

    if "Content-Type" in msg:
        for param, value in msg["Content-Type"].params.items():
            if param.lower() == "charset":
                continue
            params[param.upper()] = value

    if not params:
        return b"NIL"
    pairs = b" ".join(quote(k) + b" " + quote(v) for k, v in params.items())
    return b"(" + pairs + b")"


#######################################################################
#
def body_disposition(msg: EmailMessage) -> bytes:
    """
    The content disposition as a body disposition: the disposition type
    followed by a parenthesized list of its parameters.
    """
    cd = msg.get_content_disposition()
    if cd is None:
        return b"NIL"

    params = msg["Content-Disposition"].params
    if not params:
        return b"(" + quote(cd.upper()) + b" NIL)"
    pairs = b" ".join(
        quote(k.upper()) + b" " + quote(v) for k, v in params.items()
    )
    return b"(" + quote(cd.upper()) + b" (" + pairs + b"))"


####################################################################
#
def extension_data(msg: EmailMessage) -> List[bytes]:
    return [
        body_disposition(msg),
        header_or_nil(msg, "content-language"),
        header_or_nil(msg, "content-location"),
    ]


#######################################################################
#
def bodystructure_of(msg: EmailMessage, ext_data: bool = True) -> bytes:
    """
    The BODYSTRUCTURE (or, without `ext_data`, the BODY) response for the
    message.
    """
    content_type = msg.get_content_type()
    if msg.is_multipart() and content_type != "message/rfc822":
        # The boundary is only made up when the message is first serialized.
        #
        if msg.get_boundary() is None:
            msg.as_bytes()
        sub_parts = [bodystructure_of(x, ext_data) for x in msg.get_payload()]
        subtype = quote(msg.get_content_subtype().upper())
        if not ext_data:
            return b"(" + b"".join(sub_parts) + b" " + subtype + b")"

        ext = b" ".join([body_parameters(msg)] + extension_data(msg))
        return b"(" + b"".join(sub_parts) + b" " + subtype + b" " + ext + b")"

    maintype = msg.get_content_maintype()
    result = [
        quote(maintype.upper()),
        quote(msg.get_content_subtype().upper()),
        body_parameters(msg),
        header_or_nil(msg, "content-id"),
        header_or_nil(msg, "content-description"),
        quote(str(msg.get("Content-Transfer-Encoding", "7BIT"))),
    ]

    if content_type == "message/rfc822":
        encapsulated_msg = msg.get_payload(0)
        encapsulated_text = encapsulated_msg.as_bytes()
        result.append(str(len(encapsulated_text)).encode("latin-1"))
        result.append(envelope_of(encapsulated_msg))
        result.append(bodystructure_of(encapsulated_msg, ext_data))
        result.append(str(encapsulated_text.count(b"\n")).encode("latin-1"))
    else:
        payload = msg.get_payload().encode("utf-8")
        result.append(str(len(payload)).encode("latin-1"))
        if maintype == "text":
            result.append(str(payload.count(b"\n")).encode("latin-1"))

    if ext_data:
        result.append(b"NIL")
        result.extend(extension_data(msg))
    return b"(" + b" ".join(result) + b")"
