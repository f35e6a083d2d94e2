from __future__ import annotations

from urllib.parse import parse_qs

import httpx
import pytest
import respx

from case_messaging.infrastructure.sms.http_gateway import (
    HttpSmsGateway,
    fill_template,
    format_phone_number,
)

BASE_URL = "https://sms.test"
SID = "AC123"


def _gateway(**overrides) -> HttpSmsGateway:
    params = dict(
        base_url=BASE_URL,
        account_sid=SID,
        auth_token="secret",
        sender="+33100000000",
    )
    params.update(overrides)
    return HttpSmsGateway(**params)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("06 12 34 56 78", "+33612345678"),
        ("06.12.34.56.78", "+33612345678"),
        ("+44 20 7946 0958", "+442079460958"),
        ("0044 20 7946 0958", "+442079460958"),
        ("33612345678", "+33612345678"),
        ("", None),
        (None, None),
    ],
)
def test_format_phone_number(raw, expected):
    assert format_phone_number(raw) == expected


def test_format_phone_number_other_country():
    assert format_phone_number("0471 12 34 56", default_country_code="32") == "+32471123456"


def test_fill_template():
    assert fill_template("Hi {{name}}, {{missing}}!", {"name": "Chloe"}) == "Hi Chloe, !"


@pytest.mark.asyncio
async def test_disabled_gateway_skips():
    gateway = _gateway(base_url="")
    await gateway.start()

    result = await gateway.send_notification_sms("0612345678", "message_received", {})

    assert result.skipped is True
    assert result.reason == "disabled"
    await gateway.stop()


@pytest.mark.asyncio
@respx.mock
async def test_send_posts_form_to_provider():
    route = respx.post(f"{BASE_URL}/2010-04-01/Accounts/{SID}/Messages.json").mock(
        return_value=httpx.Response(201, json={"sid": "SM42", "status": "queued"})
    )
    gateway = _gateway()
    await gateway.start()
    try:
        result = await gateway.send_notification_sms(
            "06 12 34 56 78", "message_received", {"sender_name": "Alice Martin"},
        )
    finally:
        await gateway.stop()

    assert result.success is True
    assert result.provider_id == "SM42"
    request = route.calls.last.request
    form = parse_qs(request.content.decode())
    assert form["To"] == ["+33612345678"]
    assert form["From"] == ["+33100000000"]
    assert "Alice Martin" in form["Body"][0]
    assert request.headers["Authorization"].startswith("Basic ")


@pytest.mark.asyncio
@respx.mock
async def test_provider_error_raises():
    respx.post(f"{BASE_URL}/2010-04-01/Accounts/{SID}/Messages.json").mock(
        return_value=httpx.Response(400, json={"code": 21211, "message": "Invalid 'To'"})
    )
    gateway = _gateway()
    await gateway.start()
    try:
        with pytest.raises(httpx.HTTPStatusError):
            await gateway.send("0612345678", "hello")
    finally:
        await gateway.stop()


@pytest.mark.asyncio
async def test_unknown_template_skipped():
    gateway = _gateway()
    await gateway.start()
    try:
        result = await gateway.send_notification_sms("0612345678", "appointment_reminder", {})
    finally:
        await gateway.stop()

    assert result.skipped is True
    assert result.reason == "unknown_template"
