#!/usr/bin/env python
#
# File: $Id$
#
"""
The exceptions raised while parsing BODYSTRUCTURE and ENVELOPE responses and
while addressing parts of a parsed structure. They are kept in this module to
avoid circular dependencies between the parsing modules.
"""


#######################################################################
#
class BodyStructureException(Exception):
    def __init__(self, value="bodystructure exception"):
        self.value = value

    def __str__(self):
        return self.value


#######################################################################
#
# Anything that goes wrong while consuming the server's response. All of
# these carry the byte offset in to the input buffer where the problem was
# detected.
#
class ParseError(BodyStructureException):
    def __init__(self, value="parse error", offset=0):
        self.value = value
        self.offset = offset

    def __str__(self):
        return "%s at offset %d" % (self.value, self.offset)


##################################################################
##################################################################
#
class UnexpectedToken(ParseError):
    """
    The input at `offset` could not begin the thing we were expecting to
    find there.
    """

    def __init__(self, offset, expected):
        self.offset = offset
        self.expected = expected
        self.value = "expected %s" % expected

    def __str__(self):
        return "UnexpectedToken: %s at offset %d" % (self.value, self.offset)


##################################################################
##################################################################
#
class UnterminatedLiteral(ParseError):
    """
    A literal (`{n}CRLF...`) declared more octets than remain in the input.
    `offset` is the position of the literal's opening brace.
    """

    def __init__(self, offset, declared_len, available=None):
        self.offset = offset
        self.declared_len = declared_len
        self.available = available
        self.value = "literal declared %d octets" % declared_len

    def __str__(self):
        if self.available is None:
            return "UnterminatedLiteral: %s at offset %d" % (
                self.value,
                self.offset,
            )
        return "UnterminatedLiteral: %s, only %d available, at offset %d" % (
            self.value,
            self.available,
            self.offset,
        )


##################################################################
##################################################################
#
class UnbalancedParens(ParseError):
    """
    The input ended while a parenthesized list was still open. `offset` is
    the position of the innermost '(' that was never closed.
    """

    def __init__(self, offset):
        self.offset = offset
        self.value = "unclosed '('"

    def __str__(self):
        return "UnbalancedParens: %s at offset %d" % (self.value, self.offset)


##################################################################
##################################################################
#
class DepthExceeded(ParseError):
    """
    Multipart and message/rfc822 parts were nested deeper than we are
    willing to follow.
    """

    def __init__(self, limit, offset=0):
        self.limit = limit
        self.offset = offset
        self.value = "nesting deeper than %d levels" % limit

    def __str__(self):
        return "DepthExceeded: %s at offset %d" % (self.value, self.offset)


############################################################################
#
# Addressing a part in an already parsed structure has its own exception.
#
class InvalidPath(BodyStructureException):
    def __init__(self, path, reason="invalid path"):
        self.path = path
        self.reason = reason
        self.value = reason

    def __str__(self):
        return "InvalidPath: '%s': %s" % (self.path, self.reason)
