"""Discord rich presence: shows the open file and workspace in a Discord profile."""

from __future__ import annotations

import json
import os
import socket
import struct
import sys
import time
import uuid
from dataclasses import dataclass
from typing import IO, Callable, Optional

DISCORD_APP_ID = "883058757163159633"

_OP_HANDSHAKE = 0
_OP_FRAME = 1
_OP_CLOSE = 2
_OP_PING = 3
_OP_PONG = 4

_HEADER = struct.Struct("<II")
_RECONNECT_INTERVAL = 15.0


def image_key_for(extension: str) -> str:
    """Name of the presence image shown for a file extension."""
    if extension in (".cpp", ".hpp", ".h", ".cxx"):
        return "cpp"
    if extension == ".c":
        return "c"
    if extension == ".cs":
        return "csharp"
    if extension == "genoinrt":
        return "geno"
    return "default"


@dataclass
class Settings:
    """Which parts of the presence are shown."""

    show_filename: bool = True
    show_workspace_name: bool = True
    show_time: bool = True
    show: bool = True


@dataclass
class RichPresence:
    """What Discord displays for the running editor."""

    state: Optional[str] = None
    details: Optional[str] = None
    start_timestamp: Optional[int] = None
    instance: bool = False
    large_image_key: Optional[str] = None
    small_image_key: Optional[str] = None
    small_image_text: Optional[str] = None


def _activity(presence: RichPresence) -> dict:
    activity: dict = {"instance": presence.instance}
    if presence.state is not None:
        activity["state"] = presence.state
    if presence.details is not None:
        activity["details"] = presence.details
    if presence.start_timestamp is not None:
        activity["timestamps"] = {"start": presence.start_timestamp}
    assets = {
        key: value
        for key, value in (
            ("large_image", presence.large_image_key),
            ("small_image", presence.small_image_key),
            ("small_text", presence.small_image_text),
        )
        if value is not None
    }
    if assets:
        activity["assets"] = assets
    return activity


def _encode(op: int, payload: dict) -> bytes:
    body = json.dumps(payload).encode("utf-8")
    return _HEADER.pack(op, len(body)) + body


class _SocketTransport:
    """Unix domain socket connection to the Discord client."""

    def __init__(self, sock: socket.socket) -> None:
        self._sock = sock
        self._sock.setblocking(False)

    def send(self, data: bytes) -> None:
        self._sock.setblocking(True)
        try:
            self._sock.sendall(data)
        finally:
            self._sock.setblocking(False)

    def receive(self) -> bytes:
        try:
            data = self._sock.recv(65536)
        except BlockingIOError:
            return b""
        if not data:
            raise ConnectionError("connection closed by Discord")
        return data

    def close(self) -> None:
        self._sock.close()


class _PipeTransport:
    """Named pipe connection; each request is answered by exactly one frame."""

    def __init__(self, pipe: IO[bytes]) -> None:
        self._pipe = pipe
        self._pending = b""

    def _read_exact(self, size: int) -> bytes:
        data = b""
        while len(data) < size:
            chunk = self._pipe.read(size - len(data))
            if not chunk:
                raise ConnectionError("connection closed by Discord")
            data += chunk
        return data

    def send(self, data: bytes) -> None:
        self._pipe.write(data)
        self._pipe.flush()
        header = self._read_exact(_HEADER.size)
        _, length = _HEADER.unpack(header)
        self._pending += header + self._read_exact(length)

    def receive(self) -> bytes:
        data, self._pending = self._pending, b""
        return data

    def close(self) -> None:
        self._pipe.close()


def _ipc_paths():
    if os.name == "nt":
        for index in range(10):
            yield rf"\\?\pipe\discord-ipc-{index}"
        return
    base = next(
        (os.environ[name] for name in ("XDG_RUNTIME_DIR", "TMPDIR", "TMP", "TEMP") if os.environ.get(name)),
        "/tmp",
    )
    for index in range(10):
        yield os.path.join(base, f"discord-ipc-{index}")


def _connect_ipc():
    for path in _ipc_paths():
        try:
            if os.name == "nt":
                return _PipeTransport(open(path, "r+b", buffering=0))
            sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
            try:
                sock.connect(path)
            except OSError:
                sock.close()
                raise
            return _SocketTransport(sock)
        except OSError:
            continue
    raise ConnectionError("Discord is not running")


class DiscordRPC:
    """Keeps the user's Discord presence in step with the editor."""

    def __init__(
        self,
        application_id: str = DISCORD_APP_ID,
        connect: Callable[[], object] = _connect_ipc,
        stream: Optional[IO[str]] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.application_id = application_id
        self.settings = Settings()
        self.current_rpc = RichPresence()
        self.current_file = ""
        self.workspace = ""
        self.current_file_ext = ""
        self.start_time = clock()
        self.start_in_unix_time = -1
        self._connect = connect
        self._stream = stream
        self._clock = clock
        self._transport = None
        self._initialized = False
        self._buffer = b""
        self._sent: Optional[RichPresence] = None
        self._last_attempt: Optional[float] = None

    def _print(self, text: str) -> None:
        (self._stream if self._stream is not None else sys.stdout).write(text)

    def build_presence(self) -> RichPresence:
        """The presence that the current file, workspace and settings describe."""
        presence = RichPresence()
        if self.settings.show_filename:
            if self.current_file in ("", "No File"):
                presence.state = "No File"
            else:
                presence.state = self.current_file
        if self.settings.show_workspace_name:
            presence.details = self.workspace
        if self.settings.show_time:
            presence.start_timestamp = int(self.start_time)
        presence.instance = False
        presence.large_image_key = image_key_for(self.current_file_ext)
        presence.small_image_key = image_key_for("genoinrt")
        presence.small_image_text = "Geno"
        return presence

    def update_discord(self) -> None:
        """Publish the presence if it changed and handle messages from Discord."""
        self.start_in_unix_time = int(self.start_time)
        if self.settings.show:
            presence = self.build_presence()
            self.current_rpc = presence
            if self._transport is not None and presence != self._sent:
                self._send(
                    _OP_FRAME,
                    {
                        "cmd": "SET_ACTIVITY",
                        "args": {"pid": os.getpid(), "activity": _activity(presence)},
                        "nonce": str(uuid.uuid4()),
                    },
                )
                if self._transport is not None:
                    self._sent = presence
        self._run_callbacks()

    def init_discord(self) -> None:
        """Connect to the Discord client; later updates retry if it is not running."""
        self._initialized = True
        self._try_connect()

    def shutdown(self) -> None:
        """Close the connection and stop reconnecting."""
        self._initialized = False
        if self._transport is not None:
            try:
                self._transport.close()
            except OSError:
                pass
        self._transport = None
        self._buffer = b""
        self._sent = None

    def _try_connect(self) -> None:
        self._last_attempt = self._clock()
        try:
            transport = self._connect()
        except OSError:
            return
        self._transport = transport
        self._buffer = b""
        self._sent = None
        self._send(_OP_HANDSHAKE, {"v": 1, "client_id": self.application_id})

    def _send(self, op: int, payload: dict) -> None:
        try:
            self._transport.send(_encode(op, payload))
        except OSError as exc:
            self._disconnect(-1, str(exc))

    def _disconnect(self, code: int, message: str) -> None:
        if self._transport is not None:
            try:
                self._transport.close()
            except OSError:
                pass
        self._transport = None
        self._buffer = b""
        self._sent = None
        self._print(f"\nDiscord: disconnected ({code}: {message})\n")

    def _run_callbacks(self) -> None:
        if self._transport is None:
            if self._initialized and (
                self._last_attempt is None
                or self._clock() - self._last_attempt >= _RECONNECT_INTERVAL
            ):
                self._try_connect()
            return
        try:
            self._buffer += self._transport.receive()
        except OSError as exc:
            self._disconnect(-1, str(exc))
            return
        while self._transport is not None and len(self._buffer) >= _HEADER.size:
            op, length = _HEADER.unpack_from(self._buffer)
            end = _HEADER.size + length
            if len(self._buffer) < end:
                break
            body = self._buffer[_HEADER.size:end]
            self._buffer = self._buffer[end:]
            try:
                payload = json.loads(body.decode("utf-8")) if body else {}
            except ValueError:
                payload = {}
            self._handle_frame(op, payload)

    def _handle_frame(self, op: int, payload: dict) -> None:
        if op == _OP_PING:
            self._send(_OP_PONG, payload)
        elif op == _OP_CLOSE:
            self._disconnect(payload.get("code", 0), payload.get("message", ""))
        elif op == _OP_FRAME:
            event = payload.get("evt")
            data = payload.get("data") or {}
            if event == "READY":
                user = data.get("user") or {}
                self._print(
                    f"\nDiscord: connected to user {user.get('username', '')} - {user.get('id', '')}\n"
                )
            elif event == "ERROR":
                self._print(f"\nDiscord: error ({data.get('code', 0)}: {data.get('message', '')})\n")