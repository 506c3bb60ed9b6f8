"""
Parse the BODYSTRUCTURE and ENVELOPE responses of an IMAP server in to a
tree of message parts.
"""

__version__ = "1.0.0"

from .constants import DEFAULT_MAX_DEPTH  # noqa: F401
from .envelope import Address, Envelope, parse_envelope  # noqa: F401
from .exceptions import (  # noqa: F401
    BodyStructureException,
    DepthExceeded,
    InvalidPath,
    ParseError,
    UnbalancedParens,
    UnexpectedToken,
    UnterminatedLiteral,
)
from .path import resolve, walk  # noqa: F401
from .structure import (  # noqa: F401
    BodyPart,
    MessagePart,
    MultiPart,
    SinglePart,
    parse_bodystructure,
)
from .tokens import Disposition  # noqa: F401
