#!/usr/bin/env python
#
# File: $Id$
#
"""
Various global constants.
"""
from pathlib import Path

# How deeply multipart and message/rfc822 parts may be nested before we give
# up on a structure. The root part is at depth 1. Whatever this is set to the
# parser will not go deeper than a quarter of the interpreter's recursion
# limit.
#
DEFAULT_MAX_DEPTH = 100

# The path of the root part of a parsed body structure.
#
ROOT_PATH = "1"

MULTIPART = "multipart"
MESSAGE_RFC822 = "message/rfc822"
TEXT = "text"

# The order of the address lists in an envelope: the Envelope attribute and
# the header it comes from.
#
ENVELOPE_ADDRESS_FIELDS = (
    ("from_", "from"),
    ("sender", "sender"),
    ("reply_to", "reply-to"),
    ("to", "to"),
    ("cc", "cc"),
    ("bcc", "bcc"),
)

DEFAULT_LOG_CONFIG_FILES = [
    Path("~/.config/imapbs/imapbs_log.json").expanduser(),
    Path("~/.config/imapbs/imapbs_log.cfg").expanduser(),
    Path("/etc/imapbs_log.json"),
    Path("/etc/imapbs_log.cfg"),
    Path("/usr/local/etc/imapbs_log.json"),
    Path("/usr/local/etc/imapbs_log.cfg"),
]
