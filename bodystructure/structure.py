#!/usr/bin/env python
#
# File: $Id$
#
"""
Parse the [MIME-IMB] body structure of a message, as returned by an IMAP
server for the BODYSTRUCTURE (or the non-extensible BODY) fetch item, in to
a tree of parts.

For example, a simple text message of 48 lines and 2279 octets can have a
body structure of:

   ("TEXT" "PLAIN" ("CHARSET" "US-ASCII") NIL NIL "7BIT" 2279 48)

Multiple parts are indicated by parenthesis nesting. Instead of a body type
as the first element of the parenthesized list, there is a sequence of one or
more nested body structures. The element after them is the multipart subtype
(mixed, digest, parallel, alternative, etc.):

   (("TEXT" "PLAIN" ("CHARSET" "US-ASCII") NIL NIL "7BIT" 1152 23)
    ("TEXT" "PLAIN" ("CHARSET" "US-ASCII" "NAME" "cc.diff")
    "<960723163407.20117h@cac.washington.edu>" "Compiler diff"
    "BASE64" 4554 73)
    "MIXED")

Every part in the tree knows its path: a dot-separated string of 1-based
part indices. A nested message/rfc822 part always has exactly one nested
part, the structure of the embedded message. A forwarded message with an
attachment parses to:

    multipart/mixed                   1
        text/plain                    1.1
        application/pdf               1.2
        message/rfc822                1.3
            multipart/alternative     1.3.1
                text/plain            1.3.1.1
                text/html             1.3.1.2
        image/png                     1.4
"""
# system imports
#
import logging
import re
import sys
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple, Union

# project imports
#
from .constants import (
    DEFAULT_MAX_DEPTH,
    MESSAGE_RFC822,
    MULTIPART,
    ROOT_PATH,
    TEXT,
)
from .cursor import Cursor
from .envelope import Envelope, read_envelope
from .exceptions import DepthExceeded
from .tokens import (
    NO_MATCH,
    Disposition,
    Language,
    Params,
    Token,
    field_value,
    read_disposition,
    read_language,
    read_nstring,
    read_number,
    read_param_pairs,
    skip_extension,
)
from .utils import to_bytes

logger = logging.getLogger("bodystructure.structure")

_structure_tag_re = re.compile(
    rb"\((?:BODYSTRUCTURE|BODY)(?=[ \t\r\n(])", re.IGNORECASE
)


########################################################################
########################################################################
#
@dataclass(frozen=True, kw_only=True)
class BodyPart:
    """
    The fields common to every part of a body structure.

    A part is one of `SinglePart`, `MessagePart` (a `SinglePart` that holds
    an embedded message) or `MultiPart`. Which one is decided by the shape of
    the server's response, not by the `type` string.
    """

    type: str
    path: str
    params: Optional[Params] = None
    disposition: Optional[Disposition] = None
    language: Language = None
    location: Optional[str] = None

    ####################################################################
    #
    @property
    def maintype(self) -> str:
        return self.type.partition("/")[0]

    ####################################################################
    #
    @property
    def subtype(self) -> str:
        return self.type.partition("/")[2]

    ####################################################################
    #
    @property
    def parts(self) -> Tuple["BodyPart", ...]:
        """
        The parts directly below this one.
        """
        return ()

    ####################################################################
    #
    def param(self, name: str, default=None) -> Optional[str]:
        """
        Look up a body parameter. Servers are not consistent about the case
        of parameter names so the lookup is case insensitive.
        """
        if self.params is None:
            return default
        name = name.lower()
        for key, value in self.params.items():
            if key.lower() == name:
                return value
        return default

    ####################################################################
    #
    @property
    def charset(self) -> Optional[str]:
        """
        The charset parameter of this part. A multipart has none of its
        own, so we report the charset of its first nested part. Servers send
        it in whatever case the message used.
        """
        charset = self.param("charset")
        if charset:
            return charset
        if isinstance(self, MultiPart):
            return self.children[0].charset
        return None

    ####################################################################
    #
    @property
    def disp(self) -> Optional[str]:
        """
        The content disposition type as the server sent it, ie: 'INLINE' or
        'ATTACHMENT'.
        """
        if self.disposition is None:
            return None
        return self.disposition.type

    ####################################################################
    #
    @property
    def filename(self) -> Optional[str]:
        """
        The `filename` parameter of the content disposition, else the
        content type's `name` parameter.
        """
        if self.disposition is not None and self.disposition.params:
            for key, value in self.disposition.params.items():
                if key.lower() == "filename":
                    return value
        return self.param("name")

    ####################################################################
    #
    def part_at(self, path: str) -> "BodyPart":
        """
        Return the part at `path` in the tree below (and including) this
        part. See `bodystructure.path.resolve()`.
        """
        # Imported here since the path module needs our part classes.
        #
        from .path import resolve

        return resolve(self, path)

    ####################################################################
    #
    def walk(self) -> Iterator["BodyPart"]:
        """
        Every part in the tree, depth first, starting with this one.
        """
        from .path import walk

        return walk(self)

    ####################################################################
    #
    def has_attachments(self) -> bool:
        """
        True if any part of the tree is something other than text or
        multipart. A multipart/alternative with a plain and an HTML body has
        no attachments even though it is multipart.
        """
        for part in self.walk():
            if part.maintype not in (TEXT, MULTIPART):
                return True
        return False


########################################################################
########################################################################
#
@dataclass(frozen=True, kw_only=True)
class SinglePart(BodyPart):
    """
    A non-multipart part. `size` is the size of the part in octets as it is
    encoded in the message, NOT the size of the decoded data. `line_count`
    is only set for text parts (and embedded messages.)
    """

    content_id: Optional[str] = None
    description: Optional[str] = None
    encoding: Optional[str] = None
    size: Optional[int] = None
    line_count: Optional[int] = None
    md5: Optional[str] = None


########################################################################
########################################################################
#
@dataclass(frozen=True, kw_only=True)
class MessagePart(SinglePart):
    """
    A message/rfc822 part. It carries the envelope of the embedded message
    and the structure of the embedded message as its single sub-part.
    """

    envelope: Envelope
    embedded: BodyPart

    @property
    def parts(self) -> Tuple[BodyPart, ...]:
        return (self.embedded,)


########################################################################
########################################################################
#
@dataclass(frozen=True, kw_only=True)
class MultiPart(BodyPart):
    """
    A multipart part. `children` is never empty.
    """

    children: Tuple[BodyPart, ...]

    @property
    def parts(self) -> Tuple[BodyPart, ...]:
        return self.children


####################################################################
#
def max_safe_depth() -> int:
    """
    The deepest nesting we can follow without running out of stack. Every
    level of nesting costs two frames and the caller and token readers
    need some too, so this is a quarter of the interpreter's recursion
    limit.
    """
    return sys.getrecursionlimit() // 4


####################################################################
#
def child_path(path_prefix: Optional[str], index: int) -> str:
    """
    The path of the `index`'th (1-based) part below `path_prefix`.
    """
    return f"{path_prefix}.{index}" if path_prefix else str(index)


####################################################################
#
def _close_part(cursor: Cursor) -> None:
    """
    Skip any body extension data we do not know about and consume the ')'
    that closes the part.
    """
    skipped = skip_extension(cursor)
    if skipped:
        logger.debug(
            "Skipped %d unknown extension items before offset %d",
            skipped,
            cursor.pos,
        )
    cursor.close_paren("')' closing a body structure")


####################################################################
#
def _extension_fields(cursor: Cursor) -> dict:
    """
    The extension data shared by single and multipart parts: disposition,
    language and location. They are optional, as is the whole lot.
    """
    return {
        "disposition": field_value(
            cursor,
            read_disposition(cursor),
            "body disposition",
            optional=True,
        ),
        "language": field_value(
            cursor, read_language(cursor), "body language", optional=True
        ),
        "location": field_value(
            cursor, read_nstring(cursor), "body location", optional=True
        ),
    }


####################################################################
#
def _parse_multipart(
    cursor: Cursor,
    path_prefix: Optional[str],
    path: str,
    depth: int,
    max_depth: int,
) -> MultiPart:
    """
    body-type-mpart = 1*body SP media-subtype
                      [SP body-ext-mpart]

    The subtype comes after the nested parts so the type is only known once
    all of them have been parsed.
    """
    children = []
    while True:
        child = parse_structure(
            cursor,
            child_path(path_prefix, len(children) + 1),
            depth=depth + 1,
            max_depth=max_depth,
        )
        if child is NO_MATCH:
            break
        children.append(child)

    subtype = field_value(cursor, read_nstring(cursor), "multipart subtype")
    params = field_value(
        cursor, read_param_pairs(cursor), "body parameters", optional=True
    )
    fields = _extension_fields(cursor)
    _close_part(cursor)

    return MultiPart(
        type=f"{MULTIPART}/{(subtype or '').lower()}",
        path=path,
        children=tuple(children),
        params=params,
        **fields,
    )


####################################################################
#
def _parse_single_part(
    cursor: Cursor,
    path_prefix: Optional[str],
    path: str,
    depth: int,
    max_depth: int,
) -> SinglePart:
    """
    body-type-1part = (body-type-basic / body-type-msg / body-type-text)
                      [SP body-ext-1part]

    The basic fields are:
    - body type
    - body subtype
    - body parameter parenthesized list
    - body id - Content-ID header field value
    - body description - Content-Description header field
    - body encoding - content transfer encoding
    - body size - size of the body in octets

    After the basic fields:
      If this is a `message/rfc822`:
        - envelope structure
        - body structure
        - size of the encapsulated message in text lines
      If bodytype is 'text':
        - size of the body in text lines

    After the above fields comes the "extension data": md5, disposition,
    language and location.
    """
    maintype = field_value(cursor, read_nstring(cursor), "body type")
    subtype = field_value(cursor, read_nstring(cursor), "body subtype")
    part_type = f"{maintype or ''}/{subtype or ''}".lower()

    fields = {
        "type": part_type,
        "path": path,
        "params": field_value(
            cursor, read_param_pairs(cursor), "body parameters", optional=True
        ),
        "content_id": field_value(cursor, read_nstring(cursor), "body id"),
        "description": field_value(
            cursor, read_nstring(cursor), "body description"
        ),
        "encoding": field_value(
            cursor, read_nstring(cursor), "body encoding"
        ),
        "size": field_value(
            cursor, read_number(cursor, "body size"), "body size"
        ),
    }

    part_class = SinglePart
    if part_type == MESSAGE_RFC822:
        part_class = MessagePart
        fields["envelope"] = read_envelope(cursor)
        embedded = parse_structure(
            cursor,
            child_path(path_prefix, 1),
            depth=depth + 1,
            max_depth=max_depth,
        )
        if embedded is NO_MATCH:
            raise cursor.unexpected("body structure of an embedded message")
        fields["embedded"] = embedded
        fields["line_count"] = field_value(
            cursor,
            read_number(cursor, "body lines"),
            "body lines",
            optional=True,
        )
    elif part_type.startswith(TEXT + "/"):
        fields["line_count"] = field_value(
            cursor,
            read_number(cursor, "body lines"),
            "body lines",
            optional=True,
        )

    fields["md5"] = field_value(
        cursor, read_nstring(cursor), "body md5", optional=True
    )
    fields.update(_extension_fields(cursor))
    _close_part(cursor)

    return part_class(**fields)


####################################################################
#
def parse_structure(
    cursor: Cursor,
    path_prefix: Optional[str] = None,
    depth: int = 1,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> Union[BodyPart, Token]:
    """
    Parse the body structure that starts at the cursor's position.

    Returns NO_MATCH if the next thing in the input is not a '(' (this is
    how a multipart knows it has run out of nested parts.) Raises a
    ParseError for anything malformed and DepthExceeded if parts are nested
    more than `max_depth` deep.

    Keyword Arguments:
    cursor      -- the cursor to read from
    path_prefix -- the path of the part being parsed. Its nested parts are
                   numbered below it. With no prefix the part is given the
                   path "1" and its nested parts are numbered from "1".
    depth       -- how deeply nested the part being parsed is (the root is 1)
    max_depth   -- the deepest nesting we are willing to follow
                   (never more than `max_safe_depth()`)
    """
    cursor.skip_whitespace()
    start = cursor.pos
    if not cursor.open_paren():
        return NO_MATCH
    if max_depth > max_safe_depth():
        logger.warning(
            "Max depth %d is more than the stack allows, using %d",
            max_depth,
            max_safe_depth(),
        )
        max_depth = max_safe_depth()
    if depth > max_depth:
        raise DepthExceeded(max_depth, offset=start)

    path = path_prefix if path_prefix else ROOT_PATH
    cursor.skip_whitespace()
    if cursor.peek() == b"(":
        part = _parse_multipart(cursor, path_prefix, path, depth, max_depth)
    else:
        part = _parse_single_part(cursor, path_prefix, path, depth, max_depth)

    logger.debug("Parsed %s part at path %s", part.type, part.path)
    return part


####################################################################
#
def parse_bodystructure(
    text: Union[bytes, str], max_depth: int = DEFAULT_MAX_DEPTH
) -> BodyPart:
    """
    Parse the server's response to a BODYSTRUCTURE (or BODY) fetch in to a
    tree of parts. The response may still have the `(BODYSTRUCTURE` tag in
    front of it. The root part always has the path "1".

    Raises a ParseError if the response is malformed.
    """
    cursor = Cursor(to_bytes(text))
    tagged = cursor.open_tagged_list(_structure_tag_re)

    part = parse_structure(cursor, ROOT_PATH, max_depth=max_depth)
    if part is NO_MATCH:
        raise cursor.unexpected("'(' beginning a body structure")

    if tagged:
        cursor.skip_whitespace()
        if cursor.peek() == b")":
            cursor.close_paren()

    cursor.skip_whitespace()
    if not cursor.at_end():
        logger.debug(
            "Ignoring %d octets after the body structure at offset %d",
            cursor.remaining,
            cursor.pos,
        )
    return part
