"""Read joystick samples, turn them into compass directions and report them over HTTP."""

from __future__ import annotations

import argparse
import contextlib
import ssl
import string
import sys
import time
from typing import Iterator, TextIO

from joyhttp.httpclient import (
    HttpRequest,
    HttpResult,
    header_print_fn,
    receive_print_fn,
    request_sync,
)

HOST = "serverpico.onrender.com"
URL_REQUEST = "/mensagem?msg="

ADC_MAX = 4095
DEADZONE = 500
CENTER = ADC_MAX // 2

BUFFER_SIZE = 512

_UNRESERVED = frozenset((string.ascii_letters + string.digits + "-_.~").encode("ascii"))


def urlencode(text: str, output_size: int = BUFFER_SIZE) -> str:
    """Percent-encode ``text``; the result is shorter than ``output_size``."""
    if output_size < 1:
        raise ValueError("output_size must be positive")
    pieces = []
    length = 0
    for byte in text.encode("utf-8"):
        if length + 3 >= output_size:
            break
        piece = chr(byte) if byte in _UNRESERVED else f"%{byte:02X}"
        pieces.append(piece)
        length += len(piece)
    return "".join(pieces)


def get_direction(x: int, y: int) -> str:
    """Map raw joystick readings to one of nine direction names."""
    if x < 0 or y < 0:
        raise ValueError("readings must be non-negative")
    high, low = CENTER + DEADZONE, CENTER - DEADZONE
    if x > high:
        if y > high:
            return "Nordeste"
        if y < low:
            return "Noroeste"
        return "Norte"
    if x < low:
        if y > high:
            return "Sudeste"
        if y < low:
            return "Sudoeste"
        return "Sul"
    if y > high:
        return "Leste"
    if y < low:
        return "Oeste"
    return "Centro"


def _unverified_context() -> ssl.SSLContext:
    context = ssl.create_default_context()
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    return context


class DirectionSender:
    """Sends directions to the server and counts consecutive failures."""

    def __init__(self, host=HOST, url_prefix=URL_REQUEST, port=0):
        self.host = host
        self.url_prefix = url_prefix
        self.port = port
        self.tls_context: ssl.SSLContext | None = _unverified_context()
        self.fail_count = 0

    def send(self, direction: str) -> HttpResult:
        """Send one direction and return the request's result."""
        full_url = (self.url_prefix + urlencode(direction))[: BUFFER_SIZE - 1]
        req = HttpRequest(
            hostname=self.host,
            url=full_url,
            headers_fn=header_print_fn,
            recv_fn=receive_print_fn,
            port=self.port,
            tls_context=self.tls_context,
        )
        print(f"Enviando direção: {direction}")
        result = request_sync(req)
        if result is not HttpResult.OK:
            print(f"Erro ao enviar a requisição! Código de erro: {int(result)}")
            self.fail_count += 1
        else:
            self.fail_count = 0
        return result


def _samples(stream: TextIO) -> Iterator[tuple[int, int]]:
    for number, line in enumerate(stream, start=1):
        if not line.strip():
            continue
        fields = line.split()
        if len(fields) != 2:
            raise ValueError(f"line {number}: expected two readings")
        try:
            x, y = int(fields[0]), int(fields[1])
        except ValueError:
            raise ValueError(f"line {number}: readings must be integers") from None
        yield x, y


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog="joyhttp-joystick",
        description="Report joystick directions read as 'x y' lines to an HTTP server.",
    )
    parser.add_argument("--host", default=HOST)
    parser.add_argument("--port", type=int, default=0)
    parser.add_argument("--url-prefix", default=URL_REQUEST)
    parser.add_argument("--interval", type=float, default=1.0)
    parser.add_argument("--no-tls", action="store_true")
    parser.add_argument("--input", default="-", help="file of samples, '-' for stdin")
    args = parser.parse_args(argv)

    sender = DirectionSender(args.host, args.url_prefix, args.port)
    if args.no_tls:
        sender.tls_context = None

    with contextlib.ExitStack() as stack:
        if args.input == "-":
            stream = sys.stdin
        else:
            try:
                stream = stack.enter_context(open(args.input, encoding="utf-8"))
            except OSError as exc:
                print(f"cannot open {args.input}: {exc}", file=sys.stderr)
                return 1
        print("Conectado! Iniciando leitura do joystick...")
        try:
            for x, y in _samples(stream):
                sender.send(get_direction(x, y))
                time.sleep(args.interval)
        except ValueError as exc:
            print(exc, file=sys.stderr)
            return 1
    return 0