import os
import socket

import pytest

from myftp import commands
from myftp.session import ClientSession


@pytest.fixture
def base(tmp_path):
    return os.path.realpath(str(tmp_path))


@pytest.fixture
def conn(base):
    server_side, client_side = socket.socketpair()
    session = ClientSession(server_side, base, base)
    yield session, client_side
    session.close()
    client_side.close()


def _read(peer):
    return peer.recv(65536).decode()


def test_user_sets_name(conn):
    session, peer = conn
    commands.handle_user(session, "USER bob extra")
    assert session.username == "bob"
    assert _read(peer) == "331 User name okay, need password.\r\n"


def test_user_without_name(conn):
    session, peer = conn
    commands.handle_user(session, "USER   ")
    assert session.username == ""
    assert _read(peer) == "530 Usage: USER <username>\r\n"


def test_pass_before_user(conn):
    session, peer = conn
    commands.handle_pass(session, "PASS")
    assert _read(peer) == "503 Login with USER first.\r\n"
    assert session.authenticated is False


def test_anonymous_login(conn):
    session, peer = conn
    commands.handle_user(session, "USER Anonymous")
    _read(peer)
    commands.handle_pass(session, "PASS")
    assert session.authenticated is True
    assert _read(peer) == "230 User logged in, proceed.\r\n"
    commands.handle_pass(session, "PASS")
    assert _read(peer) == "530 User already connected.\r\n"


def test_anonymous_with_password_rejected(conn):
    session, peer = conn
    session.username = "Anonymous"
    commands.handle_pass(session, "PASS secret")
    assert session.authenticated is False
    assert _read(peer) == "530 Invalid password for Anonymous.\r\n"


def test_other_user_rejected(conn):
    session, peer = conn
    session.username = "bob"
    commands.handle_pass(session, "PASS password")
    assert _read(peer) == "530 Incorrect pwd.\r\n"
    commands.handle_pass(session, "PASS")
    assert _read(peer) == "530 Usage: PASS <password>\r\n"
    assert session.authenticated is False


def test_pwd_reports_cwd(conn, base):
    session, peer = conn
    commands.handle_pwd(session, "PWD")
    assert _read(peer) == f'257 "{base}" is the current directory.\r\n'


def test_cwd_relative(conn, base):
    session, peer = conn
    os.mkdir(os.path.join(base, "sub"))
    commands.handle_cwd(session, "CWD sub")
    assert session.cwd == os.path.join(base, "sub")
    assert _read(peer) == "250 Directory successfully changed.\r\n"


def test_cwd_absolute_is_under_base(conn, base):
    session, peer = conn
    os.makedirs(os.path.join(base, "a", "b"))
    session.cwd = os.path.join(base, "a")
    commands.handle_cwd(session, "CWD /a/b")
    assert session.cwd == os.path.join(base, "a", "b")
    assert _read(peer) == "250 Directory successfully changed.\r\n"


def test_cwd_missing(conn, base):
    session, peer = conn
    commands.handle_cwd(session, "CWD nowhere")
    assert session.cwd == base
    assert _read(peer) == "550 Directory not found.\r\n"


def test_cwd_on_file(conn, base):
    session, peer = conn
    with open(os.path.join(base, "f.txt"), "w") as fh:
        fh.write("x")
    commands.handle_cwd(session, "CWD f.txt")
    assert session.cwd == base
    assert _read(peer) == "550 Failed to change directory.\r\n"


def test_cwd_without_argument(conn, base):
    session, peer = conn
    commands.handle_cwd(session, "CWD")
    assert session.cwd == base
    assert _read(peer) == "501 Syntax error in parameters.\r\n"


def test_cdup_goes_to_parent(conn, base):
    session, peer = conn
    os.mkdir(os.path.join(base, "sub"))
    session.cwd = os.path.join(base, "sub")
    commands.handle_cdup(session, "CDUP")
    assert session.cwd == base
    assert _read(peer) == "200 Command okay.\r\n"


def test_cdup_at_root(conn):
    session, peer = conn
    session.cwd = "/"
    commands.handle_cdup(session, "CDUP")
    assert session.cwd == "/"
    assert _read(peer) == "550 Already at root directory.\r\n"


def test_noop_and_help(conn):
    session, peer = conn
    commands.handle_noop(session, "NOOP")
    assert _read(peer) == "200 NOOP command okay.\r\n"
    commands.handle_help(session, "HELP")
    assert _read(peer) == (
        "214 All commands: USER, PASS, CWD, CDUP, QUIT, PWD, NOOP, HELP\r\n"
    )


@pytest.mark.parametrize(
    "text, expected",
    [
        ("  a b\r\nc", "ab"),
        (" file.txt", "file.txt"),
        ("   ", ""),
        ("x\ny", "x"),
    ],
)
def test_clean_path(text, expected):
    assert commands.clean_path(text) == expected


def test_dele_removes_file(conn, base):
    session, peer = conn
    path = os.path.join(base, "gone.txt")
    with open(path, "w") as fh:
        fh.write("data")
    commands.handle_dele(session, "DELE gone.txt")
    assert not os.path.exists(path)
    assert _read(peer) == "250 File action okay, completed.\r\n"


def test_dele_missing(conn):
    session, peer = conn
    commands.handle_dele(session, "DELE missing.txt")
    assert _read(peer) == "550 File not found.\r\n"


def test_dele_directory(conn, base):
    session, peer = conn
    os.mkdir(os.path.join(base, "dir"))
    commands.handle_dele(session, "DELE dir")
    assert os.path.isdir(os.path.join(base, "dir"))
    assert _read(peer) == "550 Cannot delete a directory.\r\n"


def test_dele_without_argument(conn):
    session, peer = conn
    commands.handle_dele(session, "DELE  ")
    assert _read(peer) == "501 Syntax error in parameters.\r\n"