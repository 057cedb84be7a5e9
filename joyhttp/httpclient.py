"""Callback-driven HTTP/1.1 GET client with optional TLS."""

from __future__ import annotations

import enum
import logging
import re
import socket
import ssl
import sys
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

log = logging.getLogger(__name__)

HTTP_PORT = 80
HTTPS_PORT = 443

_RECV_SIZE = 4096
_STATUS_RE = re.compile(rb"HTTP/\d\.\d +(\d{3})")

HeadersFn = Callable[[Any, bytes, Optional[int]], Any]
RecvFn = Callable[[Any, bytes], Any]
ResultFn = Callable[[Any, "HttpResult", int, int], Any]


class HttpResult(enum.IntEnum):
    """Overall outcome of a request."""

    OK = 0
    ERR_UNKNOWN = 1
    ERR_CONNECT = 2
    ERR_HOSTNAME = 3
    ERR_CLOSED = 4
    ERR_TIMEOUT = 5
    ERR_SVR_RESP = 6
    ERR_MEM = 7
    LOCAL_ABORT = 8
    ERR_CONTENT_LEN = 9


@dataclass
class HttpRequest:
    """Parameters of a GET request.

    ``headers_fn(arg, headers, content_len)`` receives the raw header block;
    ``recv_fn(arg, body)`` receives each chunk of the body;
    ``result_fn(arg, result, rx_content_len, status)`` is called once at the end.
    A truthy return value from ``headers_fn`` or ``recv_fn`` aborts the request.
    When ``port`` is 0 the default is used: 443 with TLS, 80 without.
    """

    hostname: str
    url: str
    headers_fn: Optional[HeadersFn] = None
    recv_fn: Optional[RecvFn] = None
    result_fn: Optional[ResultFn] = None
    callback_arg: Any = None
    port: int = 0
    tls_context: Optional[ssl.SSLContext] = None
    timeout: float = 30.0
    complete: bool = field(default=False, init=False)
    result: Optional[HttpResult] = field(default=None, init=False)

    @property
    def effective_port(self) -> int:
        if self.port:
            return self.port
        return HTTPS_PORT if self.tls_context is not None else HTTP_PORT


class _Abort(Exception):
    """Raised when a callback asks for the connection to be dropped."""


def _content_length(header: bytes) -> Optional[int]:
    for line in header.split(b"\r\n")[1:]:
        name, sep, value = line.partition(b":")
        if sep and name.strip().lower() == b"content-length":
            try:
                return int(value.strip())
            except ValueError:
                return None
    return None


def _request_bytes(req: HttpRequest) -> bytes:
    return (
        f"GET {req.url} HTTP/1.1\r\n"
        "User-Agent: joyhttp\r\n"
        "Accept: */*\r\n"
        f"Host: {req.hostname}\r\n"
        "Connection: Close\r\n"
        "\r\n"
    ).encode("latin-1")


class PendingRequest:
    """A request running in the background."""

    def __init__(self, request: HttpRequest):
        self.request = request
        self.status = 0
        self.rx_content_len = 0
        self._done = threading.Event()
        self._thread = threading.Thread(
            target=self._run, name=f"http-{request.hostname}", daemon=True
        )

    @property
    def done(self) -> bool:
        return self._done.is_set()

    def wait(self, timeout=None) -> HttpResult:
        """Block until the request completes and return its result."""
        if not self._done.wait(timeout):
            raise TimeoutError(f"request to {self.request.hostname} still running")
        assert self.request.result is not None
        return self.request.result

    def _start(self) -> None:
        self._thread.start()

    def _run(self) -> None:
        req = self.request
        try:
            result = self._perform()
        except _Abort:
            result = HttpResult.LOCAL_ABORT
        except TimeoutError:
            result = HttpResult.ERR_TIMEOUT
        except OSError:
            result = HttpResult.ERR_CLOSED
        except Exception:
            log.exception("callback failed")
            result = HttpResult.LOCAL_ABORT
        log.debug(
            "result %d len %u server_response %u",
            result,
            self.rx_content_len,
            self.status,
        )
        req.complete = True
        req.result = result
        try:
            if req.result_fn is not None:
                req.result_fn(req.callback_arg, result, self.rx_content_len, self.status)
        finally:
            self._done.set()

    def _perform(self) -> HttpResult:
        req = self.request
        try:
            raw = socket.create_connection(
                (req.hostname, req.effective_port), timeout=req.timeout
            )
        except socket.gaierror:
            return HttpResult.ERR_HOSTNAME
        except TimeoutError:
            return HttpResult.ERR_TIMEOUT
        except OSError:
            return HttpResult.ERR_CONNECT
        sock: socket.socket = raw
        if req.tls_context is not None:
            try:
                sock = req.tls_context.wrap_socket(raw, server_hostname=req.hostname)
            except OSError as exc:
                log.error("TLS handshake with %s failed: %s", req.hostname, exc)
                raw.close()
                return HttpResult.ERR_CONNECT
        with sock:
            return self._exchange(sock)

    def _deliver(self, chunk: bytes) -> None:
        req = self.request
        self.rx_content_len += len(chunk)
        if req.recv_fn is not None and req.recv_fn(req.callback_arg, chunk):
            raise _Abort

    def _exchange(self, sock: socket.socket) -> HttpResult:
        req = self.request
        sock.sendall(_request_bytes(req))
        buffer = b""
        content_len: Optional[int] = None
        headers_done = False
        while chunk := sock.recv(_RECV_SIZE):
            if headers_done:
                self._deliver(chunk)
                continue
            buffer += chunk
            if self.status == 0:
                line_end = buffer.find(b"\r\n")
                if line_end < 0:
                    continue
                match = _STATUS_RE.match(buffer[:line_end])
                if match is None:
                    return HttpResult.ERR_SVR_RESP
                self.status = int(match.group(1))
            end = buffer.find(b"\r\n\r\n")
            if end < 0:
                continue
            header, body = buffer[: end + 4], buffer[end + 4 :]
            headers_done = True
            content_len = _content_length(header)
            if req.headers_fn is not None and req.headers_fn(
                req.callback_arg, header, content_len
            ):
                raise _Abort
            if body:
                self._deliver(body)
        if not headers_done:
            return HttpResult.ERR_CLOSED
        if content_len is not None and self.rx_content_len != content_len:
            return HttpResult.ERR_CONTENT_LEN
        return HttpResult.OK


def header_print_fn(arg, headers: bytes, content_len) -> None:
    """Header callback that writes the header block to stdout."""
    print(f"\nheaders {len(headers)}")
    sys.stdout.write(headers.decode("latin-1"))


def receive_print_fn(arg, body: bytes) -> None:
    """Body callback that writes each chunk to stdout."""
    print("\ncontent err 0")
    sys.stdout.write(body.decode("latin-1"))


def request_async(req: HttpRequest) -> PendingRequest:
    """Start a request in the background; the request is done when ``req.complete``."""
    if not req.hostname:
        raise ValueError("hostname is required")
    if not req.url:
        raise ValueError("url is required")
    req.complete = False
    req.result = None
    pending = PendingRequest(req)
    pending._start()
    return pending


def request_sync(req: HttpRequest) -> HttpResult:
    """Make a request and return its result once it has completed."""
    return request_async(req).wait()