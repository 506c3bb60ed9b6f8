#!/usr/bin/env python
#
# File: $Id$
#
"""
The token readers for the bits of the IMAP grammar that BODYSTRUCTURE and
ENVELOPE responses are built from.

Every reader takes the Cursor to read from and returns one of three things:

- `NIL` if the server sent the `NIL` keyword,
- `NO_MATCH` if what is next in the input can not start the token (nothing
  is consumed in this case),
- the value it read.

`NIL` means "this field is absent", `NO_MATCH` means "there is no token
here" and is what terminates the loops over lists. They are kept apart so
that a missing field is never mistaken for an explicit NIL.
"""
# system imports
#
import re
from enum import Enum
from types import MappingProxyType
from typing import Mapping, NamedTuple, Optional, Tuple, Union

# project imports
#
from .cursor import Cursor
from .exceptions import UnexpectedToken, UnterminatedLiteral
from .utils import decode


############################################################################
#
class Token(Enum):
    NIL = "NIL"
    NO_MATCH = "no match"

    def __repr__(self):
        return self.name


NIL = Token.NIL
NO_MATCH = Token.NO_MATCH

Params = Mapping[str, Optional[str]]

# A body language is either a single language tag or a parenthesized list of
# them.
#
Language = Union[None, str, Tuple[str, ...]]


############################################################################
#
class Disposition(NamedTuple):
    """
    The content disposition of a part: the disposition type, ie:
    'attachment' or 'inline', and its parameters (which are None if the
    server sent NIL for them.)
    """

    type: Optional[str]
    params: Optional[Params]


# Lots of regular expressions.
#
# An atom is one or more characters that is not an atom special
# ie: "(" / ")" / "{" / SPACE / CTL / list_wildcards / quoted_specials
#
# Strictly speaking a server should never send an atom where an nstring is
# expected, but some do (ie: an unquoted encoding like 7BIT) so we accept
# them.
#
_atom = rb'[^\(\)\{ \x00-\x1f\x7f%\*"\\]+'
_atom_re = re.compile(_atom)

# NIL is case insensitive but must not just be the start of a longer atom.
#
_nil_re = re.compile(rb"NIL(?!" + _atom + rb")", re.IGNORECASE)

# A quoted string is any char except quoted specials, unless they are quoted
# (those are: " and \). Bare CR and LF are accepted too.
#
_quoted_re = re.compile(rb'"((?:[^\\"]|\\["\\])*)"')
_unescape_re = re.compile(rb'\\(["\\])')

# A literal string has a 'literal prefix' which is of the from {\d}?+CRLF.
# The "+" indicates a non-synchronizing literal. Lengths are 32 bit numbers
# so anything longer than ten digits is not a literal.
#
_lit_ref_re = re.compile(rb"\{(\d{1,10})\+?\}\r\n")

# Numbers (sizes, line counts) are plain digits, at most ten of them.
#
_number_re = re.compile(r"[0-9]{1,10}")


####################################################################
#
def read_nil(cursor: Cursor) -> bool:
    """
    Consume a `NIL` if that is what is next. Returns True if it was.
    """
    cursor.skip_whitespace()
    return cursor.match(_nil_re) is not None


####################################################################
#
def read_nstring(cursor: Cursor) -> Union[str, Token]:
    """
    nstring         = string / nil
    nil             = "NIL"
    string          = quoted / literal
    quoted          = DQUOTE *QUOTED-CHAR DQUOTE
    QUOTED-CHAR     = <any TEXT-CHAR except quoted-specials> /
                      "\\" quoted-specials
    quoted-specials = DQUOTE / "\\"
    literal         = "{" number "}" CRLF *CHAR8
                        ; Number represents the number of CHAR8s

    and failing all of those a bare atom.
    """
    if read_nil(cursor):
        return NIL

    quoted = cursor.match(_quoted_re, group=1)
    if quoted is not None:
        return decode(_unescape_re.sub(rb"\1", quoted))

    # A literal string. The server sent us the length of the string up front
    # and the octets follow the CRLF verbatim, whatever they are. All we need
    # to check is that the input actually has that many octets left.
    #
    start = cursor.pos
    literal_length = cursor.match(_lit_ref_re, group=1)
    if literal_length is not None:
        length = int(literal_length)
        if length > cursor.remaining:
            raise UnterminatedLiteral(start, length, cursor.remaining)
        return decode(cursor.take(length))

    atom = cursor.match(_atom_re)
    if atom is not None:
        return decode(atom)

    return NO_MATCH


####################################################################
#
def read_number(cursor: Cursor, expected="number") -> Union[int, Token]:
    """
    Sizes and line counts. Some servers quote them so they are read as an
    nstring and then must be all digits. NIL means "unknown", which is not
    the same as zero.
    """
    cursor.skip_whitespace()
    start = cursor.pos
    value = read_nstring(cursor)
    if isinstance(value, Token):
        return value
    if _number_re.fullmatch(value) is None:
        raise UnexpectedToken(start, expected)
    return int(value)


####################################################################
#
def read_param_pairs(cursor: Cursor) -> Union[Params, Token]:
    """
    A parenthesized list of attribute/value pairs, ie:

        ("CHARSET" "US-ASCII" "NAME" "cc.diff")

    or NIL. The list ends when a key can not be read (the ')' or a NIL key.)
    An empty list, `()`, is an empty mapping which is different from NIL.
    """
    if read_nil(cursor):
        return NIL
    if not cursor.open_paren():
        return NO_MATCH

    params = {}
    while True:
        key = read_nstring(cursor)
        value = read_nstring(cursor)
        if isinstance(key, Token):
            break
        if value is NO_MATCH:
            raise cursor.unexpected("value for parameter '%s'" % key)
        params[key] = None if value is NIL else value

    cursor.close_paren("')' closing a parameter list")
    return MappingProxyType(params)


####################################################################
#
def read_disposition(cursor: Cursor) -> Union[Disposition, Token]:
    """
    body-fld-dsp    = "(" string SP body-fld-param ")" / nil
    """
    if read_nil(cursor):
        return NIL
    if not cursor.open_paren():
        return NO_MATCH

    disp_type = read_nstring(cursor)
    if disp_type is NO_MATCH:
        raise cursor.unexpected("disposition type")
    params = read_param_pairs(cursor)
    cursor.close_paren("')' closing a body disposition")
    return Disposition(
        type=None if disp_type is NIL else disp_type,
        params=None if isinstance(params, Token) else params,
    )


####################################################################
#
def read_language(cursor: Cursor) -> Union[str, Tuple[str, ...], Token]:
    """
    body-fld-lang   = nstring / "(" string *(SP string) ")"
    """
    if not cursor.open_paren():
        return read_nstring(cursor)

    langs = []
    while True:
        lang = read_nstring(cursor)
        if lang is NO_MATCH:
            break
        if lang is not NIL:
            langs.append(lang)
    cursor.close_paren("')' closing a body language list")
    return tuple(langs)


####################################################################
#
def skip_extension(cursor: Cursor) -> int:
    """
    Consume any body extension data up to (but not including) the ')' that
    closes the part we are in:

        body-extension  = nstring / number /
                          "(" body-extension *(SP body-extension) ")"

    Returns the number of items skipped. Nested lists are tracked with a
    counter, not by recursing, since this is data we do not understand.
    """
    skipped = 0
    depth = 0
    while True:
        cursor.skip_whitespace()
        if cursor.peek() == b")":
            if depth == 0:
                return skipped
            cursor.close_paren()
            depth -= 1
            continue
        if cursor.open_paren():
            depth += 1
            skipped += 1
            continue
        if read_nstring(cursor) is NO_MATCH:
            raise cursor.unexpected("body extension data")
        skipped += 1


####################################################################
#
def field_value(cursor: Cursor, value, expected, optional=False):
    """
    Turn what a token reader returned in to the value we store in our
    model: NIL becomes None.

    NO_MATCH means the field is missing. That is only acceptable for an
    `optional` field and only when the list the field is in has ended
    (trailing extension fields are left off by the non-extensible BODY
    response.) Otherwise it is a ParseError about what we `expected`.
    """
    if value is NO_MATCH:
        if optional and cursor.peek() == b")":
            return None
        raise cursor.unexpected(expected)
    if value is NIL:
        return None
    return value
