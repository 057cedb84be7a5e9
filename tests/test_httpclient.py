import socket
import threading

import pytest

from joyhttp.httpclient import (
    HttpRequest,
    HttpResult,
    header_print_fn,
    receive_print_fn,
    request_async,
    request_sync,
)


def _serve(response, release=None):
    listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    listener.bind(("127.0.0.1", 0))
    listener.listen(1)
    captured = {}

    def run():
        conn, _ = listener.accept()
        with conn:
            data = b""
            while b"\r\n\r\n" not in data:
                chunk = conn.recv(1024)
                if not chunk:
                    break
                data += chunk
            captured["request"] = data
            if release is not None:
                release.wait(10)
            conn.sendall(response)
        listener.close()

    thread = threading.Thread(target=run, daemon=True)
    thread.start()
    return listener.getsockname()[1], captured, thread


def _closed_port():
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return port


def _collecting_request(port, url="/"):
    seen = {"headers": [], "body": [], "result": None}

    def on_headers(arg, headers, content_len):
        arg["headers"].append((headers, content_len))

    def on_body(arg, body):
        arg["body"].append(body)

    def on_result(arg, result, rx_len, status):
        arg["result"] = (result, rx_len, status)

    req = HttpRequest(
        hostname="127.0.0.1",
        url=url,
        headers_fn=on_headers,
        recv_fn=on_body,
        result_fn=on_result,
        callback_arg=seen,
        port=port,
        timeout=5.0,
    )
    return req, seen


def test_successful_request_delivers_headers_and_body():
    port, captured, thread = _serve(b"HTTP/1.1 200 OK\r\nContent-Length: 5\r\n\r\nhello")
    req, seen = _collecting_request(port, "/x?y=1")
    assert request_sync(req) is HttpResult.OK
    thread.join(5)
    assert req.complete
    assert req.result is HttpResult.OK
    assert b"".join(seen["body"]) == b"hello"
    headers, content_len = seen["headers"][0]
    assert headers.startswith(b"HTTP/1.1 200 OK")
    assert headers.endswith(b"\r\n\r\n")
    assert content_len == 5
    assert seen["result"] == (HttpResult.OK, 5, 200)
    assert captured["request"].startswith(b"GET /x?y=1 HTTP/1.1\r\n")
    assert b"Host: 127.0.0.1\r\n" in captured["request"]


def test_not_found_still_completes_with_status():
    port, _, thread = _serve(b"HTTP/1.1 404 Not Found\r\nContent-Length: 0\r\n\r\n")
    req, seen = _collecting_request(port)
    assert request_sync(req) is HttpResult.OK
    thread.join(5)
    assert seen["result"][2] == 404


def test_short_body_is_content_length_error():
    port, _, thread = _serve(b"HTTP/1.1 200 OK\r\nContent-Length: 10\r\n\r\nhello")
    req, _ = _collecting_request(port)
    assert request_sync(req) is HttpResult.ERR_CONTENT_LEN
    thread.join(5)


def test_close_before_headers_is_closed_error():
    port, _, thread = _serve(b"")
    req, seen = _collecting_request(port)
    assert request_sync(req) is HttpResult.ERR_CLOSED
    thread.join(5)
    assert seen["headers"] == []


def test_garbage_status_line_is_server_response_error():
    port, _, thread = _serve(b"garbage\r\n\r\n")
    req, _ = _collecting_request(port)
    assert request_sync(req) is HttpResult.ERR_SVR_RESP
    thread.join(5)


def test_refused_connection_is_connect_error():
    req, seen = _collecting_request(_closed_port())
    assert request_sync(req) is HttpResult.ERR_CONNECT
    assert seen["result"][0] is HttpResult.ERR_CONNECT


def test_truthy_header_callback_aborts():
    port, _, thread = _serve(b"HTTP/1.1 200 OK\r\nContent-Length: 5\r\n\r\nhello")
    body = []
    req = HttpRequest(
        hostname="127.0.0.1",
        url="/",
        headers_fn=lambda arg, h, n: True,
        recv_fn=lambda arg, b: body.append(b),
        port=port,
        timeout=5.0,
    )
    assert request_sync(req) is HttpResult.LOCAL_ABORT
    thread.join(5)
    assert body == []


def test_missing_hostname_raises():
    with pytest.raises(ValueError):
        request_async(HttpRequest(hostname="", url="/"))


def test_missing_url_raises():
    with pytest.raises(ValueError):
        request_async(HttpRequest(hostname="127.0.0.1", url=""))


def test_wait_times_out_then_completes():
    release = threading.Event()
    port, _, thread = _serve(b"HTTP/1.1 200 OK\r\nContent-Length: 2\r\n\r\nok", release)
    req, _ = _collecting_request(port)
    pending = request_async(req)
    with pytest.raises(TimeoutError):
        pending.wait(0.2)
    assert req.complete is False
    release.set()
    assert pending.wait(5) is HttpResult.OK
    assert pending.status == 200
    assert pending.rx_content_len == 2
    thread.join(5)


def test_header_print_fn_writes_headers(capsys):
    header_print_fn(None, b"abcd", 4)
    assert capsys.readouterr().out == "\nheaders 4\nabcd"


def test_receive_print_fn_writes_body(capsys):
    receive_print_fn(None, b"body text")
    assert capsys.readouterr().out.endswith("body text")