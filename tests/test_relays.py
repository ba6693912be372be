import asyncio

import httpx
import pytest

from chosic_scout.errors import DeliveryError
from chosic_scout.relays import ProxyRotator, activate_relays, build_url
from chosic_scout.schemas import RelayConfig

TARGET = "https://www.chosic.com/playlist-generator/?q=queen&type=song"

RELAYS = [
    RelayConfig(name=f"relay{i}", template=f"https://relay{i}.test/?url={{url}}")
    for i in range(3)
]


def make_rotator(outcomes, seen):
    """outcomes maps relay host -> status code, or an exception class to raise."""

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        outcome = outcomes[request.url.host]
        if isinstance(outcome, type) and issubclass(outcome, Exception):
            raise outcome("boom", request=request)
        return httpx.Response(outcome, json={"relay": request.url.host})

    return ProxyRotator(relays=RELAYS, transport=httpx.MockTransport(handler))


def hosts(seen):
    return [r.url.host for r in seen]


def test_build_url_percent_encodes_target():
    url = build_url(RELAYS[0], "https://www.chosic.com/x/?q=a b&type=song")
    assert url == "https://relay0.test/?url=https%3A%2F%2Fwww.chosic.com%2Fx%2F%3Fq%3Da%20b%26type%3Dsong"


def test_build_url_raw_template():
    relay = RelayConfig(name="raw", template="https://raw.test/{raw_url}")
    assert build_url(relay, TARGET) == "https://raw.test/" + TARGET


def test_next_call_starts_at_last_success():
    seen = []
    rotator = make_rotator(
        {"relay0.test": httpx.ConnectError, "relay1.test": 200, "relay2.test": 200}, seen
    )

    r = asyncio.run(rotator.fetch(TARGET))
    assert r.json() == {"relay": "relay1.test"}
    assert rotator.start_index == 1
    assert hosts(seen) == ["relay0.test", "relay1.test"]

    seen.clear()
    asyncio.run(rotator.fetch(TARGET))
    assert hosts(seen) == ["relay1.test"]


def test_non_success_status_moves_to_next_relay():
    seen = []
    rotator = make_rotator({"relay0.test": 503, "relay1.test": 404, "relay2.test": 200}, seen)
    r = asyncio.run(rotator.fetch(TARGET))
    assert r.status_code == 200
    assert rotator.start_index == 2


def test_rotation_wraps_around():
    seen = []
    rotator = make_rotator({"relay0.test": 200, "relay1.test": 200, "relay2.test": httpx.ReadTimeout}, seen)
    rotator.start_index = 2
    asyncio.run(rotator.fetch(TARGET))
    assert hosts(seen) == ["relay2.test", "relay0.test"]
    assert rotator.start_index == 0


def test_all_relays_throwing_carries_last_error():
    seen = []
    rotator = make_rotator(
        {"relay0.test": httpx.ConnectError, "relay1.test": 500, "relay2.test": httpx.ReadTimeout}, seen
    )
    with pytest.raises(DeliveryError) as exc:
        asyncio.run(rotator.fetch(TARGET))
    assert isinstance(exc.value.last_error, httpx.ReadTimeout)
    assert exc.value.__cause__ is exc.value.last_error
    assert len(seen) == 3
    assert rotator.start_index == 0


def test_all_relays_rejecting_is_generic_failure():
    seen = []
    rotator = make_rotator({"relay0.test": 500, "relay1.test": 502, "relay2.test": 403}, seen)
    with pytest.raises(DeliveryError, match="all relays failed") as exc:
        asyncio.run(rotator.fetch(TARGET))
    assert exc.value.last_error is None


def test_no_relays():
    rotator = ProxyRotator(relays=[])
    with pytest.raises(DeliveryError):
        asyncio.run(rotator.fetch(TARGET))


def test_headers_are_merged_and_form_body_sent():
    seen = []
    rotator = make_rotator({"relay0.test": 200, "relay1.test": 200, "relay2.test": 200}, seen)

    asyncio.run(rotator.fetch(TARGET))
    assert seen[0].headers["accept"] == "application/json, text/html"

    asyncio.run(
        rotator.fetch(TARGET, method="POST", headers={"Accept": "text/plain", "X-Test": "1"}, data={"q": "queen"})
    )
    req = seen[1]
    assert req.method == "POST"
    assert req.headers["accept"] == "text/plain"
    assert req.headers["x-test"] == "1"
    assert req.headers["content-type"] == "application/x-www-form-urlencoded"
    assert req.content == b"q=queen"


def test_probe_reports_each_relay_without_rotating():
    seen = []
    rotator = make_rotator({"relay0.test": httpx.ConnectError, "relay1.test": 500, "relay2.test": 200}, seen)
    statuses = asyncio.run(rotator.probe("https://httpbin.org/get"))

    assert [s.ok for s in statuses] == [False, False, True]
    assert statuses[0].status_code is None and "ConnectError" in statuses[0].error
    assert statuses[1].status_code == 500
    assert rotator.start_index == 0


def test_activate_opens_only_consent_pages_staggered():
    relays = [
        RelayConfig(name="a", template="https://a.test/{url}"),
        RelayConfig(name="b", template="https://b.test/{url}", activation_url="https://b.test/consent"),
        RelayConfig(name="c", template="https://c.test/{raw_url}", activation_url="https://c.test/demo"),
    ]
    events = []
    result = activate_relays(
        relays,
        opener=lambda url: events.append(("open", url)),
        sleep=lambda s: events.append(("sleep", s)),
        stagger=0.25,
    )
    assert result is None
    assert events == [
        ("open", "https://b.test/consent"),
        ("sleep", 0.25),
        ("open", "https://c.test/demo"),
    ]
