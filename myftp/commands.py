"""Handlers for the login, navigation and deletion commands."""

from __future__ import annotations

import os

from myftp.session import MAX_USERNAME, ClientSession

HELP_TEXT = "214 All commands: USER, PASS, CWD, CDUP, QUIT, PWD, NOOP, HELP"


def _argument(line: str) -> str:
    """The text after the command word and the spaces that follow it."""
    parts = line.split(None, 1)
    return parts[1] if len(parts) > 1 else ""


def handle_user(session: ClientSession, line: str) -> None:
    """USER <name>: remember the user name and ask for a password."""
    args = line[4:].lstrip(" ")
    if not args:
        session.reply("530 Usage: USER <username>")
        return
    name = args[:MAX_USERNAME]
    name = name.split("\n", 1)[0].split(" ", 1)[0]
    session.username = name
    session.reply("331 User name okay, need password.")


def handle_pass(session: ClientSession, line: str) -> None:
    """PASS [password]: log in; only Anonymous with an empty password succeeds."""
    password = _argument(line)
    if not session.username:
        session.reply("503 Login with USER first.")
        return
    if session.authenticated:
        session.reply("530 User already connected.")
        return
    if session.username == "Anonymous":
        if password:
            session.reply("530 Invalid password for Anonymous.")
            return
        session.authenticated = True
        session.reply("230 User logged in, proceed.")
        return
    if not password:
        session.reply("530 Usage: PASS <password>")
        return
    session.reply("530 Incorrect pwd.")


def handle_cdup(session: ClientSession, line: str) -> None:
    """CDUP: move the working directory to its parent."""
    if session.cwd == "/":
        session.reply("550 Already at root directory.")
        return
    parent = os.path.realpath(os.path.join(session.cwd, ".."))
    if not os.path.isdir(parent):
        session.reply("550 Failed to change directory.")
        return
    session.cwd = parent
    session.reply("200 Command okay.")


def handle_cwd(session: ClientSession, line: str) -> None:
    """CWD <path>: change the working directory.

    Absolute paths are taken relative to the base directory, others relative
    to the current working directory.
    """
    target = line[4:].lstrip(" ")
    if not target:
        session.reply("501 Syntax error in parameters.")
        return
    if target.startswith("/"):
        requested = session.base_dir + target
    else:
        requested = f"{session.cwd}/{target}"
    if not os.path.exists(requested):
        session.reply("550 Directory not found.")
        return
    if not os.path.isdir(requested) or not os.access(requested, os.X_OK):
        session.reply("550 Failed to change directory.")
        return
    session.cwd = os.path.realpath(requested)
    session.reply("250 Directory successfully changed.")


def handle_pwd(session: ClientSession, line: str) -> None:
    """PWD: report the working directory."""
    session.reply(f'257 "{session.cwd}" is the current directory.')


def handle_noop(session: ClientSession, line: str) -> None:
    """NOOP: do nothing."""
    session.reply("200 NOOP command okay.")


def handle_help(session: ClientSession, line: str) -> None:
    """HELP: list the commands."""
    session.reply(HELP_TEXT)


def clean_path(text: str) -> str:
    """Cut the text at the first line break and drop every whitespace character."""
    first_line = text.lstrip().split("\r", 1)[0].split("\n", 1)[0]
    return "".join(ch for ch in first_line if not ch.isspace())


def handle_dele(session: ClientSession, line: str) -> None:
    """DELE <file>: delete a regular file in the working directory."""
    name = clean_path(line[4:])
    if not name:
        session.reply("501 Syntax error in parameters.")
        return
    full_path = f"{session.cwd}/{name}"
    if not os.path.exists(full_path):
        session.reply("550 File not found.")
        return
    try:
        is_dir = os.path.isdir(full_path)
    except OSError:
        session.reply("550 Could not retrieve file info.")
        return
    if is_dir:
        session.reply("550 Cannot delete a directory.")
        return
    if not os.access(full_path, os.W_OK):
        session.reply("550 Access denied.")
        return
    try:
        os.remove(full_path)
    except OSError:
        session.reply("550 Could not delete file.")
        return
    session.reply("250 File action okay, completed.")