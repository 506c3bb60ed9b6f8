#!/usr/bin/env python
#
# File: $Id$
#
"""
Show the structure of a message from an IMAP server's BODYSTRUCTURE (or
ENVELOPE) response. The response is read from a file, or stdin, exactly as
the server sent it (an optional leading `(BODYSTRUCTURE` or `(ENVELOPE` tag
is fine.)

NOTE: For all command line options that can also be specified via an env. var:
      the command line option will override the env. var if set.

Usage:
  imapbs [--envelope] [--part=<path>] [--max-depth=<d>] [--debug]
         [--log-config=<lc>] [<file>]

Options:
  --version
  -h, --help         Show this text and exit
  --envelope         The input is an ENVELOPE response. Show its fields.
  --part=<path>      Show the fields of the part at this path, ie: `1.3.1`,
                     instead of the whole tree of parts.
  --max-depth=<d>    Refuse structures with parts nested deeper than this.
                     Defaults to 100. The env. var is `MAX_DEPTH`.
  --debug            Will set the default logging level to `DEBUG` thus
                     enabling all of the debug logging. The env var is `DEBUG`
  --log-config=<lc>  The log config file. This file may be either a JSON file
                     that follows the python logging configuration dictionary
                     schema or a file that conforms to the python logging
                     configuration file format. If no file is specified it will
                     check in ~/.config/imapbs, /etc and /usr/local/etc for a
                     file named `imapbs_log.cfg` or `imapbs_log.json`. If no
                     valid file can be found or loaded it will default to
                     logging warnings to stderr. The env. var is `LOG_CONFIG`
  <file>             The file holding the server's response. If not given, or
                     `-`, the response is read from stdin.
"""
# system imports
#
import logging
import sys
from pathlib import Path
from typing import Optional

# 3rd party imports
#
from docopt import docopt
from dotenv import dotenv_values, find_dotenv
from rich.console import Console
from rich.table import Table
from rich.text import Text
from rich.traceback import install as rich_install
from rich.tree import Tree

# Application imports
#
from bodystructure import __version__ as VERSION
from bodystructure.constants import DEFAULT_MAX_DEPTH, ENVELOPE_ADDRESS_FIELDS
from bodystructure.envelope import Envelope, parse_envelope
from bodystructure.exceptions import BodyStructureException
from bodystructure.structure import (
    BodyPart,
    MessagePart,
    MultiPart,
    SinglePart,
    parse_bodystructure,
)
from bodystructure.utils import setup_logging

logger = logging.getLogger("bodystructure.imapbs")

TRUE_VALUES = ("1", "true", "yes", "on")


####################################################################
#
def part_label(part: BodyPart) -> Text:
    """
    One line describing a part: its path, type and, for non-multipart
    parts, its encoding, size and file name.
    """
    label = Text.assemble((part.path, "bold"), " ", (part.type, "cyan"))
    if isinstance(part, SinglePart):
        if part.encoding:
            label.append(f" {part.encoding}")
        if part.size is not None:
            label.append(f" {part.size} octets")
        if part.filename:
            label.append(f" {part.filename!r}", style="green")
    return label


####################################################################
#
def part_tree(part: BodyPart, parent: Optional[Tree] = None) -> Tree:
    """
    Build a rich Tree of the part and everything below it.
    """
    label = part_label(part)
    node = Tree(label) if parent is None else parent.add(label)
    for sub_part in part.parts:
        part_tree(sub_part, node)
    return node


####################################################################
#
def _fmt(value) -> str:
    if value is None:
        return "NIL"
    if isinstance(value, tuple):
        return ", ".join(str(x) for x in value)
    if hasattr(value, "items"):
        return ", ".join(f"{k}={v}" for k, v in value.items())
    return str(value)


####################################################################
#
def part_table(part: BodyPart) -> Table:
    """
    The fields of a single part as a two column table.
    """
    table = Table(show_header=False, title=f"Part {part.path}")
    table.add_column("field", style="bold")
    table.add_column("value")
    table.add_row("type", part.type)
    table.add_row("params", _fmt(part.params))

    match part:
        case MultiPart():
            table.add_row("parts", str(len(part.children)))
        case SinglePart():
            table.add_row("content-id", _fmt(part.content_id))
            table.add_row("description", _fmt(part.description))
            table.add_row("encoding", _fmt(part.encoding))
            table.add_row("size", _fmt(part.size))
            if part.line_count is not None:
                table.add_row("lines", _fmt(part.line_count))
            table.add_row("md5", _fmt(part.md5))

    disposition = part.disposition
    table.add_row(
        "disposition",
        "NIL"
        if disposition is None
        else f"{_fmt(disposition.type)} ({_fmt(disposition.params)})",
    )
    table.add_row("language", _fmt(part.language))
    table.add_row("location", _fmt(part.location))
    if isinstance(part, MessagePart):
        table.add_row("subject", _fmt(part.envelope.subject))
    return table


####################################################################
#
def envelope_table(envelope: Envelope) -> Table:
    """
    The fields of an envelope as a two column table.
    """
    table = Table(show_header=False, title="Envelope")
    table.add_column("field", style="bold")
    table.add_column("value")
    table.add_row("date", _fmt(envelope.date))
    table.add_row("subject", _fmt(envelope.subject))
    for field, header in ENVELOPE_ADDRESS_FIELDS:
        table.add_row(header, _fmt(getattr(envelope, field)))
    table.add_row("in-reply-to", _fmt(envelope.in_reply_to))
    table.add_row("message-id", _fmt(envelope.message_id))
    return table


#############################################################################
#
def main(argv=None) -> int:
    """
    Our main entry point. Parse the options, set up logging, read the
    response and show what we parsed out of it.
    """
    rich_install()
    args = docopt(__doc__, argv=argv, version=VERSION)
    envelope_only = args["--envelope"]
    part_path = args["--part"]
    max_depth = args["--max-depth"]
    debug = args["--debug"]
    log_config = args["--log-config"]
    input_file = args["<file>"]

    config = dotenv_values(find_dotenv(usecwd=True))

    # If docopt is not set, see if the option is set in the config. If it
    # not set there either, then set it to the default value.
    #
    if max_depth is None:
        max_depth = (
            config["MAX_DEPTH"] if "MAX_DEPTH" in config else DEFAULT_MAX_DEPTH
        )
    if not debug:
        debug = str(config.get("DEBUG", "")).lower() in TRUE_VALUES
    if log_config is None:
        log_config = config["LOG_CONFIG"] if "LOG_CONFIG" in config else None

    setup_logging(log_config, debug)

    console = Console()
    err_console = Console(stderr=True)

    try:
        max_depth = int(max_depth)
    except ValueError:
        err_console.print(
            Text(f"imapbs: max depth must be a number: '{max_depth}'")
        )
        return 1

    if input_file is None or input_file == "-":
        data = sys.stdin.buffer.read()
    else:
        data = Path(input_file).read_bytes()
    logger.debug("Read %d octets of response", len(data))

    try:
        if envelope_only:
            console.print(envelope_table(parse_envelope(data)))
            return 0

        root = parse_bodystructure(data, max_depth=max_depth)
        if part_path is not None:
            console.print(part_table(root.part_at(part_path)))
        else:
            console.print(part_tree(root))
    except BodyStructureException as exc:
        err_console.print(Text(f"imapbs: {exc}"))
        return 1
    return 0


############################################################################
############################################################################
#
# Here is where it all starts
#
if __name__ == "__main__":
    sys.exit(main())
#
#
############################################################################
############################################################################
