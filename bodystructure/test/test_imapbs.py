"""
Test the `imapbs` command line tool.
"""
# System imports
#
import io
import sys

# 3rd party imports
#
import pytest

# Project imports
#
from ..imapbs import main, part_label, part_tree
from ..structure import parse_bodystructure
from .utils import bodystructure_of, envelope_of

pytestmark = pytest.mark.usefixtures("restore_logging")

MIXED = (
    b'(("TEXT" "PLAIN" ("CHARSET" "US-ASCII") NIL NIL "7BIT" 24 1 NIL NIL NIL NIL)'
    b'("APPLICATION" "OCTET-STREAM" ("NAME" "attachment.dat") NIL NIL "7BIT" 2'
    b' NIL ("ATTACHMENT" ("FILENAME" "attachment.dat")) NIL NIL)'
    b' "MIXED" ("BOUNDARY" "Next_Mixed") NIL NIL NIL)'
)


####################################################################
#
def nested(depth: int) -> bytes:
    leaf = b'("TEXT" "PLAIN" NIL NIL NIL "7BIT" 1 1)'
    return b"(" * (depth - 1) + leaf + b' "MIXED")' * (depth - 1)


####################################################################
#
@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """
    Run in an empty directory so that no stray `.env` file is picked up.
    """
    monkeypatch.chdir(tmp_path)
    return tmp_path


####################################################################
#
def test_part_label():
    root = parse_bodystructure(MIXED)
    assert part_label(root).plain == "1 multipart/mixed"
    assert (
        part_label(root.children[1]).plain
        == "1.2 application/octet-stream 7BIT 2 octets 'attachment.dat'"
    )
    tree = part_tree(root)
    assert len(tree.children) == 2
    assert tree.children[0].label.plain.startswith("1.1 text/plain")


####################################################################
#
def test_show_tree(workdir, capsys):
    response = workdir / "response.txt"
    response.write_bytes(b"(BODYSTRUCTURE " + MIXED + b")")
    assert main([str(response)]) == 0
    out = capsys.readouterr().out
    assert "1 multipart/mixed" in out
    assert "1.1 text/plain" in out
    assert "1.2 application/octet-stream" in out
    assert "attachment.dat" in out


####################################################################
#
def test_show_part(workdir, capsys, forwarded_email):
    response = workdir / "response.txt"
    response.write_bytes(bodystructure_of(forwarded_email))
    assert main(["--part=1.3", str(response)]) == 0
    out = capsys.readouterr().out
    assert "Part 1.3" in out
    assert "message/rfc822" in out
    assert "Fwd: First draft of report" not in out
    assert "First draft of report" in out


####################################################################
#
def test_show_envelope(workdir, capsys, email_factory):
    msg = email_factory(subject="Lunch on Friday")
    response = workdir / "response.txt"
    response.write_bytes(b"(ENVELOPE " + envelope_of(msg) + b")")
    assert main(["--envelope", str(response)]) == 0
    out = capsys.readouterr().out
    assert "Envelope" in out
    assert "Lunch on Friday" in out


####################################################################
#
def test_read_stdin(workdir, capsys, monkeypatch):
    monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(MIXED)))
    assert main(["-"]) == 0
    assert "1.2 application/octet-stream" in capsys.readouterr().out


####################################################################
#
@pytest.mark.parametrize(
    "args,data,error",
    [
        pytest.param([], b'("TEXT" "PLAIN"', "UnbalancedParens", id="unclosed"),
        pytest.param([], b"NIL", "UnexpectedToken", id="not a structure"),
        pytest.param(["--part=1.9"], MIXED, "InvalidPath", id="bad part"),
        pytest.param(
            ["--max-depth=2"], nested(3), "DepthExceeded", id="too deep"
        ),
        pytest.param(
            ["--max-depth=deep"], MIXED, "must be a number", id="bad depth"
        ),
    ],
)
def test_errors(workdir, capsys, args, data, error):
    response = workdir / "response.txt"
    response.write_bytes(data)
    assert main(args + [str(response)]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert error in captured.err


####################################################################
#
def test_dotenv_config(workdir, capsys):
    response = workdir / "response.txt"
    response.write_bytes(nested(3))
    (workdir / ".env").write_text("MAX_DEPTH=2\n")

    assert main([str(response)]) == 1
    assert "DepthExceeded" in capsys.readouterr().err

    # The command line wins over the .env file.
    #
    assert main(["--max-depth=3", str(response)]) == 0
    assert "1.1.1 text/plain" in capsys.readouterr().out
