from __future__ import annotations

import pytest
from flask import Flask

from corecms_auth.interfaces.http.exchange import current_exchange
from corecms_auth.interfaces.http.ip_resolver import ForwardedIpResolver, canonical_ip
from corecms_auth.shared.config import AuthConfig


@pytest.fixture()
def app() -> Flask:
    return Flask(__name__)


def _resolve(app: Flask, resolver: ForwardedIpResolver, **environ) -> str:
    headers = environ.pop("headers", {})
    with app.test_request_context("/", headers=headers, environ_base=environ):
        return resolver.resolve(current_exchange())


def test_forwarded_chain_is_used_verbatim(app: Flask) -> None:
    resolver = ForwardedIpResolver()
    ip = _resolve(
        app,
        resolver,
        REMOTE_ADDR="10.0.0.9",
        headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.1"},
    )
    assert ip == "203.0.113.7, 10.0.0.1"


def test_first_hop_only(app: Flask) -> None:
    resolver = ForwardedIpResolver(first_only=True)
    ip = _resolve(app, resolver, headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.1"})
    assert ip == "203.0.113.7"


def test_untrusted_forwarded_header_is_ignored(app: Flask) -> None:
    resolver = ForwardedIpResolver(trust_forwarded_for=False)
    ip = _resolve(
        app, resolver, REMOTE_ADDR="10.0.0.9", headers={"X-Forwarded-For": "203.0.113.7"}
    )
    assert ip == "10.0.0.9"


def test_falls_back_to_socket_peer(app: Flask) -> None:
    assert _resolve(app, ForwardedIpResolver(), REMOTE_ADDR="192.0.2.4") == "192.0.2.4"


def test_falls_back_to_remote_addr_header(app: Flask) -> None:
    ip = _resolve(app, ForwardedIpResolver(), REMOTE_ADDR="", headers={"REMOTE_ADDR": "192.0.2.5"})
    assert ip == "192.0.2.5"


def test_nothing_usable_gives_empty_string(app: Flask) -> None:
    assert _resolve(app, ForwardedIpResolver(), REMOTE_ADDR="") == ""


def test_from_config() -> None:
    resolver = ForwardedIpResolver.from_config(
        AuthConfig(trust_forwarded_for=False, forwarded_first_only=True)
    )
    app = Flask(__name__)
    ip = _resolve(app, resolver, REMOTE_ADDR="10.0.0.9", headers={"X-Forwarded-For": "1.1.1.1"})
    assert ip == "10.0.0.9"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("2001:db8:0:0:0:0:0:1", "2001:db8::1"),
        ("2001:DB8::1", "2001:db8::1"),
        ("[2001:db8::1]", "2001:db8::1"),
        ("2001:db8::1,  10.0.0.1,", "2001:db8::1, 10.0.0.1"),
        ("unknown, 10.0.0.1", "unknown, 10.0.0.1"),
        ("", ""),
    ],
)
def test_canonical_ip(raw: str, expected: str) -> None:
    assert canonical_ip(raw) == expected
