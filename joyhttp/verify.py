"""Check that certificate verification accepts a good root and rejects a bad one."""

from __future__ import annotations

import argparse
import ssl
import sys

from joyhttp.httpclient import (
    HttpRequest,
    HttpResult,
    header_print_fn,
    receive_print_fn,
    request_sync,
)

HOST = "fw-download-alias1.raspberrypi.com"
URL_REQUEST = "/net_install/boot.sig"


def _verifying_context(cert) -> ssl.SSLContext:
    pem = cert.decode("ascii") if isinstance(cert, (bytes, bytearray)) else cert
    return ssl.create_default_context(cadata=pem)


def _fetch(host: str, url: str, cert) -> HttpResult:
    req = HttpRequest(
        hostname=host,
        url=url,
        headers_fn=header_print_fn,
        recv_fn=receive_print_fn,
        tls_context=_verifying_context(cert),
    )
    return request_sync(req)


def verify_certificates(host, url, good_cert, bad_cert) -> tuple[HttpResult, HttpResult]:
    """Fetch ``url`` trusting each PEM root in turn.

    Returns both results; raises RuntimeError unless the good root succeeds
    and the bad root fails.
    """
    if not host:
        raise ValueError("host is required")
    if not url:
        raise ValueError("url is required")
    passed = _fetch(host, url, good_cert)
    failed = _fetch(host, url, bad_cert)
    if passed is not HttpResult.OK or failed is HttpResult.OK:
        raise RuntimeError("test failed")
    return passed, failed


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog="joyhttp-verify",
        description="Verify that TLS certificate checking works against a server.",
    )
    parser.add_argument("--host", default=HOST)
    parser.add_argument("--url", default=URL_REQUEST)
    parser.add_argument("--good-cert", required=True, help="PEM file of the correct root")
    parser.add_argument("--bad-cert", required=True, help="PEM file of a wrong root")
    args = parser.parse_args(argv)

    try:
        with open(args.good_cert, encoding="ascii") as handle:
            good_cert = handle.read()
        with open(args.bad_cert, encoding="ascii") as handle:
            bad_cert = handle.read()
    except (OSError, UnicodeDecodeError) as exc:
        print(f"cannot read certificate: {exc}", file=sys.stderr)
        return 1

    try:
        verify_certificates(args.host, args.url, good_cert, bad_cert)
    except ssl.SSLError as exc:
        print(f"invalid certificate: {exc}", file=sys.stderr)
        return 1
    except RuntimeError as exc:
        print(exc, file=sys.stderr)
        return 1
    print("Test passed")
    return 0