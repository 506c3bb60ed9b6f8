#!/usr/bin/env python
#
# File: $Id$
#
"""
The cursor that the BODYSTRUCTURE and ENVELOPE parsers move along the
response from the IMAP server.

A cursor is created for every parse and threaded through every reader. It
holds the immutable input buffer and our position in it. Everything that
consumes input goes through the methods here, and they all share the same
contract: on success the matched input is swallowed, on failure the position
is left where it was.
"""
# system imports
#
import re
from typing import List, Optional, Pattern

# project imports
#
from .exceptions import ParseError, UnbalancedParens, UnexpectedToken

# IMAP only talks about SPACE between tokens, but servers fold long responses
# so we are lenient and skip line breaks and tabs as well.
#
_whitespace_re = re.compile(rb"[ \t\r\n]+")


########################################################################
########################################################################
#
class Cursor:
    """
    A read position over an immutable buffer of bytes.

    Besides the position the cursor tracks the offsets of the '('s that
    have been opened but not yet closed. When the input runs out while a list
    is still open we can then report exactly which '(' was never closed.
    """

    ####################################################################
    #
    def __init__(self, data: bytes, pos: int = 0):
        self.data = data
        self.pos = pos
        self.open_parens: List[int] = []

    ####################################################################
    #
    def __repr__(self):
        return "<Cursor pos: %d of %d, next: %r>" % (
            self.pos,
            len(self.data),
            self.data[self.pos : self.pos + 10],
        )

    ####################################################################
    #
    @property
    def remaining(self) -> int:
        """
        The number of octets left in the input.
        """
        return len(self.data) - self.pos

    ####################################################################
    #
    def at_end(self) -> bool:
        return self.pos >= len(self.data)

    ####################################################################
    #
    def peek(self) -> bytes:
        """
        The next octet in the input without consuming it. An empty bytes
        object when there is no more input.
        """
        return self.data[self.pos : self.pos + 1]

    ####################################################################
    #
    def skip_whitespace(self) -> int:
        """
        Consume a run of whitespace. Returns how many octets were skipped.
        """
        match = _whitespace_re.match(self.data, self.pos)
        if match is None:
            return 0
        self.pos = match.end()
        return match.end() - match.start()

    ####################################################################
    #
    def take(self, length: int) -> bytes:
        """
        Consume exactly `length` octets verbatim, whatever they are.

        The caller is expected to have checked that there are enough octets
        remaining.
        """
        if length > self.remaining:
            raise ValueError(
                "asked for %d octets, only %d remain" % (length, self.remaining)
            )
        result = self.data[self.pos : self.pos + length]
        self.pos += length
        return result

    ####################################################################
    #
    def match(
        self, regexp: Pattern[bytes], group: int = 0, expected=None
    ) -> Optional[bytes]:
        """
        Attempt to match the given regular expression at our current
        position. If it matches the matched octets are swallowed and
        `match.group(group)` is returned.

        If it does not match nothing is consumed. If `expected` is None we
        return None, otherwise we raise the appropriate ParseError describing
        what we `expected` to find.
        """
        match = regexp.match(self.data, self.pos)
        if match is None:
            if expected is None:
                return None
            raise self.unexpected(expected)
        self.pos = match.end()
        return match.group(group)

    ####################################################################
    #
    def simple_string(
        self, string: bytes, case_matters: bool = False, expected=None
    ) -> Optional[bytes]:
        """
        Like `match()` but for a fixed run of octets so we do not waste time
        invoking a regular expression. Unless `case_matters` the comparison
        is case insensitive.
        """
        candidate = self.data[self.pos : self.pos + len(string)]
        if case_matters:
            found = candidate == string
        else:
            found = candidate.lower() == string.lower()

        if not found:
            if expected is None:
                return None
            raise self.unexpected(expected)
        self.pos += len(string)
        return candidate

    ####################################################################
    #
    def open_paren(self) -> bool:
        """
        Skip whitespace and, if the next octet is a '(', consume it and
        remember where it was. Returns True if we opened a list.
        """
        self.skip_whitespace()
        start = self.pos
        if self.simple_string(b"(", case_matters=True) is None:
            return False
        self.open_parens.append(start)
        return True

    ####################################################################
    #
    def open_tagged_list(self, tag_re: Pattern[bytes]) -> bool:
        """
        Like `open_paren()` but for a '(' followed by a tag, like the
        `(BODYSTRUCTURE` a caller may have left at the front of the
        response. `tag_re` must match starting at the '('.
        """
        self.skip_whitespace()
        start = self.pos
        if self.match(tag_re) is None:
            return False
        self.open_parens.append(start)
        return True

    ####################################################################
    #
    def close_paren(self, expected="')'") -> None:
        """
        Skip whitespace and consume the ')' that closes the innermost open
        list. Raises a ParseError if there is no ')' next.
        """
        self.skip_whitespace()
        self.simple_string(b")", case_matters=True, expected=expected)
        if self.open_parens:
            self.open_parens.pop()

    ####################################################################
    #
    def unexpected(self, expected) -> ParseError:
        """
        Build the exception for not finding `expected` at our current
        position. If we ran off the end of the input while a list was still
        open that is reported as unbalanced parentheses.
        """
        if self.at_end() and self.open_parens:
            return UnbalancedParens(self.open_parens[-1])
        return UnexpectedToken(self.pos, expected)
