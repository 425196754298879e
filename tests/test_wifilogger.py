import pytest

from cx34log.wifilogger import LoggerConfig, WifiLogger, find_redirect

PREFIX = "Location: https://script.googleusercontent.com"


class FakeConnection:
    def __init__(self, responses):
        self.responses = list(responses)
        self.sent = []
        self.closed = False

    def sendall(self, data):
        self.sent.append(data)

    def recv(self, size):
        if not self.responses:
            raise TimeoutError
        return self.responses.pop(0)

    def settimeout(self, timeout):
        self.timeout = timeout

    def close(self):
        self.closed = True


class Connector:
    def __init__(self, connections):
        self.connections = list(connections)
        self.calls = []

    def __call__(self, host, port):
        self.calls.append((host, port))
        conn = self.connections.pop(0)
        if isinstance(conn, Exception):
            raise conn
        return conn


def make_logger(connections):
    connector = Connector(connections)
    return WifiLogger(LoggerConfig(script_id="abc"), connect=connector), connector


def test_request_path():
    logger, _ = make_logger([])
    assert logger.request_path("S") == "/macros/s/abc/exec?Action=LogHPRun&Status=S"


def test_build_request():
    logger, _ = make_logger([])
    request = logger.build_request("S")
    assert request.startswith(
        b"GET /macros/s/abc/exec?Action=LogHPRun&Status=S HTTP/1.1\r\n"
    )
    assert b"Host: script.google.com\r\n" in request
    assert b"Connection: keep-alive\r\n" in request
    assert request.endswith(b"\r\n\r\n")


def test_find_redirect_none():
    assert find_redirect(["HTTP/1.1 302 Found", "Content-Type: text/html"]) is None


def test_find_redirect_takes_last():
    lines = [PREFIX + "/first\r", "x", PREFIX + "/second\r"]
    assert find_redirect(lines) == "/second"


def test_post_update_returns_redirect_and_keeps_connection():
    reply = ("HTTP/1.1 302 Found\r\n" + PREFIX + "/target?x=1\r\n\r\n").encode()
    conn = FakeConnection([reply[:10], reply[10:]])
    logger, connector = make_logger([conn])
    assert logger.post_update("S") == "/target?x=1"
    assert conn.sent == [logger.build_request("S")]
    assert conn.closed is False
    assert logger.bytes_read == len(reply)
    conn.responses = [reply]
    assert logger.post_update("T") == "/target?x=1"
    assert connector.calls == [("script.google.com", 443)]


def test_post_update_server_close_reconnects_next_time():
    first = FakeConnection([b"HTTP/1.1 200 OK\r\n", b""])
    second = FakeConnection([(PREFIX + "/t\n").encode()])
    logger, connector = make_logger([first, second])
    assert logger.post_update("S") is None
    assert first.closed is True
    assert logger.post_update("S") == "/t"
    assert len(connector.calls) == 2


def test_post_update_timeout_closes():
    conn = FakeConnection([])
    logger, _ = make_logger([conn])
    assert logger.post_update("S") is None
    assert conn.closed is True


def test_post_update_connect_failure():
    logger, connector = make_logger([OSError("refused")])
    assert logger.post_update("S") is None
    assert len(connector.calls) == 1


def test_partial_last_line_is_ignored():
    conn = FakeConnection([(PREFIX + "/t").encode(), b""])
    logger, _ = make_logger([conn])
    assert logger.post_update("S") is None


@pytest.mark.parametrize("extra", [0, 100])
def test_long_lines_are_truncated(extra):
    url = "/" + "a" * (700 + extra)
    conn = FakeConnection([(PREFIX + url + "\n").encode()])
    logger, _ = make_logger([conn])
    redirect = logger.post_update("S")
    assert len(PREFIX) + len(redirect) == 598
    assert url.startswith(redirect)