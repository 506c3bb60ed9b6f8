"""
pytest fixtures for testing `bodystructure`
"""
# System imports
#
import logging
from email.headerregistry import Address
from email.message import EmailMessage
from email.utils import format_datetime

# 3rd party imports
#
import pytest

# project imports
#
from .factories import AddressFactory, EnvelopeFactory


####################################################################
#
@pytest.fixture
def email_factory(faker):
    """
    Returns a function that makes a multipart/alternative message (a text
    body and an HTML version of it) with made up headers.
    """

    def make_email(subject=None):
        msg = EmailMessage()
        msg["Date"] = format_datetime(faker.date_time_between(start_date="-1y"))
        msg["Message-ID"] = f"<{faker.uuid4()}@{faker.domain_name()}>"
        msg["Subject"] = subject if subject else faker.sentence()
        msg["From"] = Address(faker.name(), addr_spec=faker.email())
        msg["To"] = Address(faker.name(), addr_spec=faker.email())
        text = faker.paragraph()
        msg.set_content(text)
        msg.add_alternative(f"<p>{text}</p>", subtype="html")
        return msg

    return make_email


####################################################################
#
@pytest.fixture
def forwarded_email(email_factory):
    """
    A message with a text body, a binary attachment and a forwarded message
    attached:

        multipart/mixed                   1
            text/plain                    1.1
            application/octet-stream      1.2
            message/rfc822                1.3
                multipart/alternative     1.3.1
                    text/plain            1.3.1.1
                    text/html             1.3.1.2
    """
    inner = email_factory(subject="First draft of report")

    msg = EmailMessage()
    msg["Date"] = "Tue, 19 Sep 1995 13:30:00 -0000"
    msg["From"] = "Jane Sender <jane@example.com>"
    msg["To"] = "joe@example.com"
    msg["Subject"] = "Fwd: First draft of report"
    msg["Message-ID"] = "<199509192301.23456@example.org>"
    msg.set_content("See the attached.\n")
    msg.add_attachment(
        b"\x00\x01\x02 some binary data",
        maintype="application",
        subtype="octet-stream",
        filename="data.bin",
    )
    msg.add_attachment(inner)
    return msg


####################################################################
#
@pytest.fixture
def address_factory():
    return AddressFactory


####################################################################
#
@pytest.fixture
def envelope_factory():
    return EnvelopeFactory


####################################################################
#
@pytest.fixture
def restore_logging():
    """
    `setup_logging()` configures the `bodystructure` logger to not propagate
    and that would hide our log messages from `caplog` in later tests. Put
    the logger back the way it was.
    """
    logger = logging.getLogger("bodystructure")
    root_logger = logging.getLogger()
    saved = (
        logger.handlers[:],
        logger.level,
        logger.propagate,
        logger.disabled,
        root_logger.level,
    )
    yield
    logger.handlers[:] = saved[0]
    logger.setLevel(saved[1])
    logger.propagate = saved[2]
    logger.disabled = saved[3]
    root_logger.setLevel(saved[4])
