# myftp

A small FTP server that serves many clients from a single thread, using a
selector to multiplex the connections. It accepts the `Anonymous` user with
an empty password and supports passive (`PASV`) and active (`PORT`) data
connections.

## Installation

```
pip install .
```

## Running the server

```
myftp PORT PATH
```

- `PORT` is the port number on which the server listens, on all interfaces.
- `PATH` is the served directory. It must already exist.

`myftp -help` prints the usage text and exits with status 0. A wrong number
of arguments or a missing directory makes the program exit with status 84;
a failure to bind or listen exits with status 1. Ctrl-C stops the server and
closes every connection.

At most 150 clients are served at once; further connections are closed
straight away.

When a client connects, it gets `220 FTP Server Ready`. It then logs in:

```
USER Anonymous
331 User name okay, need password.
PASS
230 User logged in, proceed.
```

Any other user name is accepted by `USER`, but `PASS` then always answers
`530`. Until a client is logged in, every command except `USER`, `PASS` and
`QUIT` is refused with `530 Please login with USER and PASS.`

## Commands

| Command                  | Effect                                                           |
|--------------------------|------------------------------------------------------------------|
| `USER name`              | Sets the user name                                               |
| `PASS [pwd]`             | Logs in; only `Anonymous` with an empty password is accepted     |
| `QUIT`                   | Replies `221 Goodbye.` and closes the connection                 |
| `CWD path`               | Changes the working directory                                    |
| `CDUP`                   | Goes to the parent of the working directory                      |
| `PWD`                    | Prints the working directory                                     |
| `NOOP`                   | Does nothing and replies `200 NOOP command okay.`                |
| `HELP`                   | Lists the commands                                               |
| `DELE file`              | Deletes a file in the working directory; directories are refused |
| `PASV`                   | Opens a listening data socket on 127.0.0.1                       |
| `PORT h1,h2,h3,h4,p1,p2` | Connects a data socket to the client                             |
| `LIST`                   | Sends the names in the served directory over the data channel    |
| `RETR file`              | Sends a file's contents over the data channel                    |

Command names are not case-sensitive. Unknown commands get
`500 Commande non reconnue`.

A few details worth knowing:

- Each client's working directory starts as the directory the server was
  started from, not the served directory.
- `CWD` takes a path starting with `/` as relative to the served directory,
  and any other path as relative to the working directory.
- `LIST` takes no arguments and always lists the served directory, one name
  per line, including `.` and `..`.
- `RETR` and `DELE` take their file names relative to the working directory.
- `LIST` and `RETR` need a data connection set up first with `PASV` or
  `PORT`; without one the reply is `425 Use PASV or PORT first.` The data
  connection is closed after each transfer.

## What it does not do

There are no real user accounts and no passwords: only anonymous login
works. There is no upload (`STOR`), no directory creation or removal, no
`TYPE`, `MODE` or `SYST`, and no TLS. The working directory is not confined
to the served directory.

## Using it from Python

```python
from myftp.server import FtpServer

server = FtpServer(2121, "/srv/ftp")
try:
    server.serve_forever()
finally:
    server.close()
```

Passing port `0` lets the system choose one; the chosen port is in
`server.port`. `FtpServer.accept_client()` and
`FtpServer.process_message(session)` run one step of the loop by hand.

`myftp.server.dispatch(session, line)` runs one command line against a
`myftp.session.ClientSession` and returns `True` when the client asked to
quit. The helpers `myftp.transfer.parse_port_arguments` and
`myftp.transfer.format_pasv_reply` parse `PORT` arguments and build the
`227` reply.