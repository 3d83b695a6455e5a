"""Link service — public URLs and QR codes for stored files."""

import ipaddress
import socket
from urllib.parse import quote, urlsplit, urlunsplit

import segno

_UNROUTABLE_HOSTS = {"localhost", "0.0.0.0", "::"}


def get_local_ip() -> str:
    """Best guess at this machine's LAN address, or 'localhost'."""
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        try:
            # No packets are sent; this only selects the outbound interface
            sock.connect(("10.255.255.255", 1))
            return sock.getsockname()[0]
        except OSError:
            return "localhost"


def _is_unroutable(host: str) -> bool:
    if host in _UNROUTABLE_HOSTS:
        return True
    try:
        address = ipaddress.ip_address(host)
    except ValueError:
        return False
    return address.is_loopback or address.is_unspecified


def resolve_base_url(request_base_url: str, public_base_url: str | None = None) -> str:
    """Pick the base URL other devices should use to reach this server."""
    if public_base_url:
        return public_base_url.rstrip("/")

    parts = urlsplit(request_base_url)
    host = parts.hostname or "localhost"
    if _is_unroutable(host):
        netloc = get_local_ip()
        if parts.port:
            netloc = f"{netloc}:{parts.port}"
        parts = parts._replace(netloc=netloc)
    return urlunsplit(parts).rstrip("/")


def build_url(base_url: str, filename: str) -> str:
    return f"{base_url.rstrip('/')}/file/{quote(filename)}"


def qr_data_uri(url: str) -> str:
    """Encode ``url`` as a PNG QR code data URI."""
    return segno.make_qr(url, error="m").png_data_uri(scale=6, border=2)
