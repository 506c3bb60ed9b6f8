#!/usr/bin/env python
#
# File: $Id$
#
"""
Addressing parts of a parsed body structure by their path.

A path is a dot-separated string of 1-based part indices, the same numbering
every part carries in its `path` attribute, ie: "1.3.1.2". The first index
is the root part itself. A nested message/rfc822 part always has exactly one
nested part, the structure of the embedded message, so the index that steps
in to it is always 1.
"""
# system imports
#
import logging
import re
from typing import Iterator, List

# project imports
#
from .exceptions import InvalidPath
from .structure import BodyPart, MessagePart, MultiPart

logger = logging.getLogger("bodystructure.path")

# A part index: a positive integer without leading zeros.
#
_index_re = re.compile(r"[1-9][0-9]*")


####################################################################
#
def split_path(path: str) -> List[int]:
    """
    Turn a path in to a list of part indices, raising InvalidPath if it is
    not a dot-separated list of positive integers. The empty path is the
    empty list.
    """
    if path == "":
        return []
    indices = []
    for segment in path.split("."):
        if _index_re.fullmatch(segment) is None:
            raise InvalidPath(
                path, f"'{segment}' is not a positive part number"
            )
        indices.append(int(segment))
    return indices


####################################################################
#
def resolve(root: BodyPart, path: str) -> BodyPart:
    """
    Return the part at `path` in the tree rooted at `root`.

    `path` is in the same numbering as the parts' `path` attributes so
    `resolve(root, part.path)` is `part` for every part in the tree. The
    empty path, or the root's own path, is the root.

    Raises InvalidPath if the path is malformed, is not below the root, uses
    an index that is out of range or tries to go below a part that has no
    nested parts.
    """
    split_path(path)
    if path == "" or path == root.path:
        return root

    prefix = root.path + "."
    if not path.startswith(prefix):
        raise InvalidPath(
            path, f"not a part of the structure rooted at '{root.path}'"
        )

    part = root
    for index in split_path(path[len(prefix) :]):
        match part:
            case MultiPart():
                if index > len(part.children):
                    raise InvalidPath(
                        path,
                        f"part '{part.path}' only has "
                        f"{len(part.children)} parts",
                    )
                part = part.children[index - 1]
            case MessagePart():
                # The only part of an embedded message is its body. Asking
                # for anything else is a mistake on the caller's part, but
                # there is only one place they could have meant.
                #
                if index != 1:
                    logger.warning(
                        "Path '%s': asked for part %d of message/rfc822 "
                        "part '%s', which only has part 1",
                        path,
                        index,
                        part.path,
                    )
                part = part.embedded
            case _:
                raise InvalidPath(
                    path, f"part '{part.path}' ({part.type}) has no parts"
                )
    return part


####################################################################
#
def walk(part: BodyPart) -> Iterator[BodyPart]:
    """
    Yield `part` and then every part below it, depth first. An embedded
    message's structure comes right after its message/rfc822 part.
    """
    yield part
    for sub_part in part.parts:
        yield from walk(sub_part)
