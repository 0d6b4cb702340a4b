"""Data connection commands: PASV, PORT, LIST and RETR."""

from __future__ import annotations

import contextlib
import ipaddress
import os
import re
import socket

from myftp.session import ClientSession

CHUNK_SIZE = 1024
PASV_HOST = "127.0.0.1"

_PORT_ARGS = re.compile(r",".join([r"\s*([+-]?\d+)"] * 6))


def parse_port_arguments(args: str) -> tuple[str, int]:
    """Parse "h1,h2,h3,h4,p1,p2" into a dotted host and a port number.

    Text after the sixth number is ignored. Raises ValueError when the six
    numbers cannot be read.
    """
    match = _PORT_ARGS.match(args)
    if match is None:
        raise ValueError(f"invalid PORT arguments: {args!r}")
    h1, h2, h3, h4, p1, p2 = (int(group) for group in match.groups())
    address = ((h1 << 24) | (h2 << 16) | (h3 << 8) | h4) & 0xFFFFFFFF
    port = ((p1 << 8) + p2) & 0xFFFF
    return str(ipaddress.IPv4Address(address)), port


def format_pasv_reply(host: str, port: int) -> str:
    """The 227 reply announcing a passive listener at host:port."""
    fields = host.replace(".", ",")
    return f"227 Entering Passive Mode ({fields},{port // 256},{port % 256})."


def _listen_passive() -> socket.socket:
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((PASV_HOST, 0))
        sock.listen(1)
    except OSError:
        sock.close()
        raise
    return sock


def handle_pasv(session: ClientSession, line: str) -> None:
    """PASV: open a listener for the next transfer and announce it."""
    try:
        listener = _listen_passive()
    except OSError:
        session.reply("425 Cannot open data connection")
        return
    host, port = listener.getsockname()[:2]
    session.reply(format_pasv_reply(host, port))
    if session.pasv_socket is not None:
        with contextlib.suppress(OSError):
            session.pasv_socket.close()
    session.pasv_socket = listener


def handle_port(session: ClientSession, line: str) -> None:
    """PORT h1,h2,h3,h4,p1,p2: connect to the client for the next transfer."""
    try:
        host, port = parse_port_arguments(line[5:])
    except ValueError:
        session.reply("501 Syntax error in parameters.")
        return
    try:
        data = socket.create_connection((host, port))
    except OSError:
        session.reply("425 Can't open data connection.")
        return
    if session.port_socket is not None:
        with contextlib.suppress(OSError):
            session.port_socket.close()
    session.port_socket = data
    session.reply("200 PORT command successful.")


def _open_data_connection(session: ClientSession) -> socket.socket | None:
    if not session.has_data_channel():
        session.reply("425 Use PASV or PORT first.")
        return None
    if session.pasv_socket is not None:
        try:
            conn, _ = session.pasv_socket.accept()
        except OSError:
            session.reply("425 Cannot open data connection")
            return None
        return conn
    return session.port_socket


def _release_channel(session: ClientSession) -> None:
    """Close the channel the transfer used: the passive one first."""
    if session.pasv_socket is not None:
        with contextlib.suppress(OSError):
            session.pasv_socket.close()
        session.pasv_socket = None
    elif session.port_socket is not None:
        with contextlib.suppress(OSError):
            session.port_socket.close()
        session.port_socket = None


def _close_quietly(sock: socket.socket) -> None:
    with contextlib.suppress(OSError):
        sock.close()


def _send_listing(session: ClientSession, data: socket.socket) -> None:
    try:
        names = [".", "..", *os.listdir(session.base_dir)]
    except OSError:
        session.reply("550 Failed to open directory.")
        return
    session.reply("150 Here comes directory listing.")
    for name in names:
        try:
            data.sendall(f"{name}\r\n".encode("utf-8", errors="replace"))
        except OSError:
            break


def handle_list(session: ClientSession, line: str) -> None:
    """LIST: send the names in the base directory over the data connection."""
    if " " in line:
        session.reply("501 Error : No arguments needed.")
        return
    data = _open_data_connection(session)
    if data is None:
        return
    _send_listing(session, data)
    _close_quietly(data)
    session.reply("226 Directory send OK.")
    _release_channel(session)


def _send_file(session: ClientSession, data: socket.socket, name: str) -> None:
    path = os.path.join(session.cwd, name)
    try:
        source = open(path, "rb")
    except OSError:
        session.reply("550 File not found.")
        _close_quietly(data)
        return
    session.reply("150 Opening data connection.")
    with source:
        for chunk in iter(lambda: source.read(CHUNK_SIZE), b""):
            try:
                data.sendall(chunk)
            except OSError:
                break
    _close_quietly(data)
    session.reply("226 Transfer complete.")


def handle_retr(session: ClientSession, line: str) -> None:
    """RETR <file>: send a file's contents over the data connection."""
    name = line[4:].lstrip(" ")
    if not name or name[0] in "\r\n":
        session.reply("501 Syntax error in parameters.")
        return
    data = _open_data_connection(session)
    if data is None:
        return
    _send_file(session, data, name)
    _release_channel(session)