"""Per-connection state of a client talking to the server."""

from __future__ import annotations

import contextlib
import socket

MAX_USERNAME = 1023


class ClientSession:
    """State of one control connection: login, working directory and data channels."""

    def __init__(self, sock: socket.socket, base_dir: str, cwd: str) -> None:
        self.sock = sock
        self.base_dir = base_dir
        self.cwd = cwd
        self.username = ""
        self.authenticated = False
        self.pasv_socket: socket.socket | None = None
        self.port_socket: socket.socket | None = None

    def reply(self, text: str) -> None:
        """Send one reply line, terminated by CRLF, on the control connection."""
        payload = (text + "\r\n").encode("utf-8", errors="replace")
        # A vanished peer is noticed on the next read, as with a plain write.
        with contextlib.suppress(OSError):
            self.sock.sendall(payload)

    def has_data_channel(self) -> bool:
        """Whether PASV or PORT has prepared a data connection."""
        return self.pasv_socket is not None or self.port_socket is not None

    def close_data(self) -> None:
        """Close any prepared data connection."""
        for sock in (self.pasv_socket, self.port_socket):
            if sock is not None:
                with contextlib.suppress(OSError):
                    sock.close()
        self.pasv_socket = None
        self.port_socket = None

    def close(self) -> None:
        """Close the data channels and the control connection."""
        self.close_data()
        with contextlib.suppress(OSError):
            self.sock.close()