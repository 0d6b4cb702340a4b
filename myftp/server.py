"""The FTP server: accepting clients, reading commands and dispatching them."""

from __future__ import annotations

import contextlib
import os
import re
import selectors
import socket
import sys
from collections.abc import Callable

from myftp.commands import (
    handle_cdup,
    handle_cwd,
    handle_dele,
    handle_help,
    handle_noop,
    handle_pass,
    handle_pwd,
    handle_user,
)
from myftp.session import ClientSession
from myftp.transfer import handle_list, handle_pasv, handle_port, handle_retr

MAX_CLIENTS = 150
BUFFER_SIZE = 1024

USAGE = (
    "USAGE: ./myftp port path\n"
    "  port is the port number on which the server socket listens\n"
    "  path is the path to the home directory for the Anonymous user"
)

Handler = Callable[[ClientSession, str], None]

_QUIT = "QUIT"

COMMANDS: dict[str, Handler | None] = {
    "USER": handle_user,
    "PASS": handle_pass,
    _QUIT: None,
    "CWD": handle_cwd,
    "CDUP": handle_cdup,
    "NOOP": handle_noop,
    "HELP": handle_help,
    "PWD": handle_pwd,
    "DELE": handle_dele,
    "LIST": handle_list,
    "RETR": handle_retr,
    "PASV": handle_pasv,
    "PORT": handle_port,
}

_OPEN_COMMANDS = ("USER", "PASS", "QUIT")


def _matches(line: str, name: str) -> bool:
    size = len(name)
    if line[:size].upper() != name:
        return False
    return len(line) == size or line[size].isspace()


def dispatch(session: ClientSession, line: str) -> bool:
    """Run one command line for the session.

    Returns True when the client asked to quit and should be disconnected.
    """
    line = re.split(r"[\r\n]", line, maxsplit=1)[0]
    if not session.authenticated and line[:4].upper() not in _OPEN_COMMANDS:
        session.reply("530 Please login with USER and PASS.")
        return False
    for name, handler in COMMANDS.items():
        if not _matches(line, name):
            continue
        if handler is None:
            session.reply("221 Goodbye.")
            return True
        handler(session, line)
        return False
    session.reply("500 Commande non reconnue")
    return False


class FtpServer:
    """A single-threaded FTP server multiplexing its clients with a selector."""

    def __init__(self, port: int, base_dir: str) -> None:
        self.base_dir = base_dir
        self.sessions: list[ClientSession] = []
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            self.sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            self.sock.bind(("", port))
            self.sock.listen(MAX_CLIENTS)
        except OSError:
            self.sock.close()
            raise
        self.port = self.sock.getsockname()[1]
        self._selector = selectors.DefaultSelector()
        self._selector.register(self.sock, selectors.EVENT_READ, None)
        print("Serveur en attente de connexions...")

    def accept_client(self) -> ClientSession | None:
        """Accept one pending connection; None when it failed or the server is full."""
        try:
            conn, (host, port) = self.sock.accept()[0], self.sock.getsockname()
        except OSError as exc:
            print(f"accept: {exc}", file=sys.stderr)
            return None
        with contextlib.suppress(OSError):
            host, port = conn.getpeername()[:2]
        print(f"Connexion de {host}:{port}")
        if len(self.sessions) >= MAX_CLIENTS:
            conn.close()
            return None
        session = ClientSession(conn, self.base_dir, os.getcwd())
        self.sessions.append(session)
        self._selector.register(conn, selectors.EVENT_READ, session)
        session.reply("220 FTP Server Ready")
        return session

    def _remove(self, session: ClientSession) -> None:
        with contextlib.suppress(OSError, ValueError):
            print(f"Client {session.sock.fileno()} déconnecté")
        with contextlib.suppress(KeyError, ValueError):
            self._selector.unregister(session.sock)
        if session in self.sessions:
            self.sessions.remove(session)
        session.close()

    def process_message(self, session: ClientSession) -> bool:
        """Read and run one message; returns False once the client is gone."""
        try:
            data = session.sock.recv(BUFFER_SIZE - 1)
        except OSError:
            data = b""
        if not data:
            self._remove(session)
            return False
        line = data.decode("utf-8", errors="replace")
        print(f"Message reçu : {line}", end="")
        if dispatch(session, line):
            self._remove(session)
            return False
        return True

    def serve_forever(self) -> None:
        """Accept clients and run their commands until interrupted."""
        while True:
            for key, _ in self._selector.select():
                if key.data is None:
                    self.accept_client()
                else:
                    self.process_message(key.data)

    def close(self) -> None:
        """Disconnect every client and stop listening."""
        for session in list(self.sessions):
            self._remove(session)
        self._selector.close()
        with contextlib.suppress(OSError):
            self.sock.close()


def _atoi(text: str) -> int:
    match = re.match(r"\s*([+-]?\d+)", text)
    return int(match.group(1)) if match else 0


def main(argv: list[str] | None = None) -> int:
    """Run the server: myftp <port> <path>."""
    args = sys.argv[1:] if argv is None else list(argv)
    if args == ["-help"]:
        print(USAGE)
        return 0
    if len(args) != 2:
        print(USAGE)
        return 84
    port_text, base_dir = args
    if not os.path.isdir(base_dir):
        print("Error: Directory does not exist.", file=sys.stderr)
        return 84
    try:
        server = FtpServer(_atoi(port_text) & 0xFFFF, base_dir)
    except OSError as exc:
        print(f"bind/listen: {exc}", file=sys.stderr)
        return 1
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())