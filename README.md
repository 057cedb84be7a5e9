# joyhttp

Turn pairs of analog joystick readings into compass directions and report
each one to an HTTP(S) server, one request at a time. The package also holds
the small callback-driven HTTP/1.1 GET client it uses, and a check that TLS
certificate verification accepts a correct root certificate and rejects a
wrong one.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Commands

### joyhttp-joystick

Reads joystick samples as lines of two integers, `x y`, from a file or from
standard input. For each sample it works out the direction, sends it to the
server as `GET <url-prefix><direction>` and then waits before the next
sample. Blank lines are skipped. A line without exactly two integers stops
the command with exit status 1.

```
printf '4095 2047\n2047 2047\n' | joyhttp-joystick --host localhost --port 8080 --no-tls
```

Options:

- `--host` – server to send to.
- `--port` – port to use; `0` (the default) means 443 with TLS, 80 without.
- `--url-prefix` – path that the encoded direction is appended to
  (default `/mensagem?msg=`).
- `--interval` – seconds to wait after each sample (default `1.0`).
- `--no-tls` – use plain HTTP. Without it HTTPS is used, and the server's
  certificate is **not** verified.
- `--input` – file of samples; `-` (the default) reads standard input.

The headers and body of every response are written to standard output. A
failed request is reported with its result code; the command carries on with
the next sample.

### joyhttp-verify

Makes the same HTTPS request twice: once trusting the correct root
certificate, which must succeed, and once trusting a different certificate,
which must fail. It prints `Test passed` and exits with 0 when both outcomes
are as expected, and exits with 1 otherwise, or when a certificate file
cannot be read or parsed.

```
joyhttp-verify --good-cert root.pem --bad-cert other.pem
```

Options: `--good-cert` and `--bad-cert` (PEM files, both required), `--host`
and `--url` (the server and path to fetch; each has a default).

## Library use

### Directions

`joyhttp.joystick.get_direction(x, y)` maps 12-bit readings (0 to 4095) to one
of nine names. Readings within 500 of the centre (2047) count as centred on
that axis; `x` chooses between north and south, `y` between east and west.
Negative readings raise `ValueError`.

```python
from joyhttp.joystick import get_direction

get_direction(2047, 2047)   # "Centro"
get_direction(4095, 2047)   # "Norte"
get_direction(0, 2047)      # "Sul"
get_direction(2047, 4095)   # "Leste"
get_direction(2047, 0)      # "Oeste"
get_direction(4095, 4095)   # "Nordeste"
get_direction(0, 0)         # "Sudoeste"
```

### URL encoding

`joyhttp.joystick.urlencode(text, output_size=512)` percent-encodes the UTF-8
bytes of `text`, leaving letters, digits and `- _ . ~` as they are and using
upper-case hex digits. The result always stays shorter than `output_size`,
and an escape is never cut in half. An `output_size` below 1 raises
`ValueError`.

```python
from joyhttp.joystick import urlencode

urlencode("Nordeste")   # "Nordeste"
urlencode("a b")        # "a%20b"
urlencode("direção")    # "dire%C3%A7%C3%A3o"
```

### Sending a direction

`DirectionSender(host, url_prefix, port)` sends directions with
`send(direction)`, which returns the request's `HttpResult`. Its
`fail_count` counts consecutive failed requests and goes back to 0 after a
success. `tls_context` is an unverified TLS context by default; set it to
`None` for plain HTTP.

```python
from joyhttp.joystick import DirectionSender

sender = DirectionSender("localhost", "/mensagem?msg=", 8080)
sender.tls_context = None
result = sender.send("Norte")
print(result, sender.fail_count)
```

### Certificate check

`joyhttp.verify.verify_certificates(host, url, good_cert, bad_cert)` takes two
PEM roots (as `str` or `bytes`), fetches `url` with each, and returns both
results. It raises `RuntimeError` unless the first succeeds and the second
fails, and `ValueError` when `host` or `url` is empty.

### The HTTP client

`joyhttp.httpclient.HttpRequest` describes one GET request:

- `hostname`, `url` – where to send it.
- `port` – `0` picks 443 when `tls_context` is set and 80 otherwise.
- `tls_context` – an `ssl.SSLContext` for HTTPS, or `None`.
- `timeout` – socket timeout in seconds (default 30).
- `headers_fn(arg, headers, content_len)` – called once with the raw header
  block and the `Content-Length` value, or `None` if there is none.
- `recv_fn(arg, body)` – called with each chunk of the body.
- `result_fn(arg, result, rx_content_len, status)` – called once at the end.
- `callback_arg` – passed as `arg` to every callback.

A truthy return from `headers_fn` or `recv_fn` aborts the request. After the
request ends, `complete` is `True` and `result` holds the outcome.

`request_async(req)` starts the request on a background thread and returns a
`PendingRequest`; its `done` property tells whether it has finished and
`wait(timeout=None)` blocks until it has, returning the result or raising
`TimeoutError`. `request_sync(req)` starts the request and waits for it.
Both raise `ValueError` when `hostname` or `url` is empty.

The outcome is an `HttpResult`: `OK`, `ERR_HOSTNAME` (name lookup failed),
`ERR_CONNECT` (connection or TLS handshake failed), `ERR_TIMEOUT`,
`ERR_CLOSED` (connection dropped before the headers were complete),
`ERR_SVR_RESP` (malformed status line), `ERR_CONTENT_LEN` (body length
differs from `Content-Length`) or `LOCAL_ABORT` (a callback aborted or
raised). `OK` means the exchange completed; the HTTP status code is passed
separately to `result_fn`.

`header_print_fn` and `receive_print_fn` are ready-made callbacks that write
the headers and body to standard output.

```python
from joyhttp.httpclient import HttpRequest, HttpResult, request_sync

chunks = []
req = HttpRequest(
    hostname="localhost",
    url="/",
    port=8080,
    recv_fn=lambda arg, body: chunks.append(body),
)
if request_sync(req) is HttpResult.OK:
    print(b"".join(chunks))
```

## What it does not do

- It does not read a joystick itself: `joyhttp-joystick` takes readings
  that some other program has written as `x y` lines.
- It does not set up a network connection (Wi-Fi or otherwise); it uses the
  one the machine already has.
- The HTTP client only makes GET requests, does not follow redirects and
  does not decode chunked transfer encoding: the body is passed on exactly
  as it arrives.