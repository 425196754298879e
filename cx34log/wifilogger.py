"""Posting status lines to a web script over HTTPS."""

from __future__ import annotations

import logging
import socket
import ssl
from dataclasses import dataclass
from typing import Callable, Iterable, Protocol

log = logging.getLogger(__name__)

REDIRECT_PREFIX = "Location: https://script.googleusercontent.com"
MAX_LINE_LENGTH = 598


class Connection(Protocol):
    def sendall(self, data: bytes) -> None: ...

    def recv(self, size: int) -> bytes: ...

    def settimeout(self, timeout: float | None) -> None: ...

    def close(self) -> None: ...


@dataclass
class LoggerConfig:
    """Where and how status lines are posted."""

    script_id: str = ""
    host: str = "script.google.com"
    port: int = 443
    response_timeout: float = 60.0
    read_grace: float = 0.01


def _tls_connect(host: str, port: int) -> Connection:
    raw = socket.create_connection((host, port), timeout=30)
    return ssl.create_default_context().wrap_socket(raw, server_hostname=host)


def find_redirect(lines: Iterable[str]) -> str | None:
    """Return the target of the last redirect header among ``lines``, if any."""
    redirect = None
    for line in lines:
        if line.startswith(REDIRECT_PREFIX):
            redirect = line[len(REDIRECT_PREFIX):].rstrip("\r")
    return redirect


class WifiLogger:
    """Sends status lines over a kept-alive HTTPS connection."""

    def __init__(
        self,
        config: LoggerConfig,
        connect: Callable[[str, int], Connection] | None = None,
    ) -> None:
        self.config = config
        self._connect = connect or _tls_connect
        self._conn: Connection | None = None
        self.bytes_read = 0

    def request_path(self, status: str) -> str:
        return f"/macros/s/{self.config.script_id}/exec?Action=LogHPRun&Status={status}"

    def build_request(self, status: str) -> bytes:
        text = (
            f"GET {self.request_path(status)} HTTP/1.1\r\n"
            f"Host: {self.config.host}\r\n"
            "Connection: keep-alive\r\n"
            "\r\n"
        )
        return text.encode("latin-1")

    def _close(self) -> None:
        if self._conn is not None:
            try:
                self._conn.close()
            except OSError:
                pass
            self._conn = None

    def _receive(self) -> tuple[bytes, bool] | None:
        """Read one burst of response; None if nothing came within the timeout."""
        conn = self._conn
        assert conn is not None
        conn.settimeout(self.config.response_timeout)
        try:
            first = conn.recv(4096)
        except TimeoutError:
            return None
        if not first:
            return b"", True
        chunks = [first]
        conn.settimeout(self.config.read_grace)
        while True:
            try:
                chunk = conn.recv(4096)
            except TimeoutError:
                return b"".join(chunks), False
            if not chunk:
                return b"".join(chunks), True
            chunks.append(chunk)

    def post_update(self, status: str) -> str | None:
        """Send ``status``; return the redirect URL from the reply, if one came."""
        self.bytes_read = 0
        if self._conn is None:
            log.info("Connecting to server...")
            try:
                self._conn = self._connect(self.config.host, self.config.port)
            except OSError as exc:
                log.warning("unable to connect to server: %s", exc)
                self._conn = None
                return None
            log.info("connected to server")

        log.info("GET %s", self.request_path(status))
        try:
            self._conn.sendall(self.build_request(status))
            received = self._receive()
        except OSError as exc:
            log.warning("connection lost: %s", exc)
            self._close()
            return None

        if received is None:
            log.info("Closing Client")
            self._close()
            return None
        data, closed = received
        if closed:
            log.info("Server disconnect detected")
            self._close()
        self.bytes_read = len(data)

        lines = [
            raw[:MAX_LINE_LENGTH].decode("latin-1") for raw in data.split(b"\n")[:-1]
        ]
        redirect = find_redirect(lines)
        if redirect is None:
            if data:
                log.warning("Error, redirect string not found")
        else:
            log.info("Redirect: %s", redirect)
        return redirect