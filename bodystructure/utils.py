"""
This module contains utility functions that do not properly belong to any
other module: coercing the caller's input in to bytes, decoding the values
we pull out of a response, and setting up logging for the command line tool.
"""

# system imports
#
import json
import logging
import logging.config
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Optional, Union

# Project imports
#
from .constants import DEFAULT_LOG_CONFIG_FILES

if TYPE_CHECKING:
    from _typeshed import StrPath


####################################################################
#
def to_bytes(text: Union[bytes, bytearray, memoryview, str]) -> bytes:
    """
    The parsers work on bytes because literal lengths are counted in
    octets. If we are handed a `str` it is encoded as UTF-8.
    """
    if isinstance(text, str):
        return text.encode("utf-8")
    return bytes(text)


####################################################################
#
def decode(value: bytes) -> str:
    """
    Decode a value pulled out of a server response. Servers are supposed to
    send 7-bit data (anything else being RFC2047 encoded) but in practice
    we see UTF-8 and the occasional latin-1, so try them in that order.
    Latin-1 can decode any sequence of octets.
    """
    try:
        return value.decode("utf-8")
    except UnicodeDecodeError:
        return value.decode("latin-1")


####################################################################
#
def _load_log_config(log_config: Path) -> None:
    """
    Load a logging config file. A `.json` file is a logging config
    dictionary, anything else is in the logging config file format.
    """
    if log_config.suffix == ".json":
        cfg = json.loads(log_config.read_text())
        logging.config.dictConfig(cfg)
    else:
        logging.config.fileConfig(str(log_config))


####################################################################
#
def setup_logging(log_config: Optional["StrPath"], debug: bool) -> None:
    """
    Set up the logger for the command line tool. The library itself never
    configures logging.

    Attempt to load the logging config passed in. If we are not able to load
    that then check a bunch of common directories. If none of those work, use
    a default config that logs to stderr.
    """
    root_logger = logging.getLogger()

    if debug:
        root_logger.setLevel(logging.DEBUG)

    if log_config is not None:
        log_config = Path(log_config)
        if log_config.exists():
            _load_log_config(log_config)
            return
        print(
            f"WARNING: Logging config '{log_config}' does not exist",
            file=sys.stderr,
        )

    for log_config in DEFAULT_LOG_CONFIG_FILES:
        if log_config.exists():
            _load_log_config(log_config)
            return

    # If no logging config file is specified then this is what will be used.
    # It is formatted as a logging config dict.
    #
    DEFAULT_LOGGING_CONFIG: Dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "basic": {
                "format": "[{asctime}] {levelname}:{module}.{funcName}: {message}",
                "style": "{",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "basic",
                "stream": "ext://sys.stderr",
            },
        },
        "loggers": {
            "bodystructure": {
                "handlers": ["console"],
                "level": "DEBUG" if debug else "WARNING",
                "propagate": False,
            },
        },
    }
    logging.config.dictConfig(DEFAULT_LOGGING_CONFIG)
