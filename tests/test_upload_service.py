import pytest

from api.upload.services import link_service
from api.upload.services.upload_service import parse_expiry
from config import parse_size


@pytest.mark.parametrize("raw, expected", [
    (None, None),
    ("", None),
    ("  ", None),
    ("1", 1.0),
    ("90", 90.0),
    ("0.5", 0.5),
])
def test_parse_expiry(raw, expected):
    assert parse_expiry(raw) == expected


@pytest.mark.parametrize("raw", ["0", "-5", "abc", "nan", "inf", "99999999999"])
def test_parse_expiry_rejects(raw):
    with pytest.raises(ValueError):
        parse_expiry(raw)


@pytest.mark.parametrize("raw, expected", [
    ("512", 512),
    ("10KB", 10 * 1024),
    ("100MB", 100 * 1024**2),
    ("1.5 gb", int(1.5 * 1024**3)),
    ("", 0),
])
def test_parse_size(raw, expected):
    assert parse_size(raw) == expected


def test_parse_size_rejects_garbage():
    with pytest.raises(ValueError):
        parse_size("lots")


def test_public_base_url_wins():
    assert link_service.resolve_base_url(
        "http://127.0.0.1:3000/", "https://share.example.com/"
    ) == "https://share.example.com"


def test_loopback_replaced_with_lan_address(monkeypatch):
    monkeypatch.setattr(link_service, "get_local_ip", lambda: "192.168.1.20")
    assert link_service.resolve_base_url("http://127.0.0.1:3000/") == "http://192.168.1.20:3000"
    assert link_service.resolve_base_url("http://localhost/") == "http://192.168.1.20"


def test_routable_host_kept():
    assert link_service.resolve_base_url("http://files.lan:8080/") == "http://files.lan:8080"


def test_build_url_quotes_name():
    assert link_service.build_url("http://h/", "1-ab-a b.txt") == "http://h/file/1-ab-a%20b.txt"


def test_qr_data_uri():
    assert link_service.qr_data_uri("http://h/file/x").startswith("data:image/png;base64,")
