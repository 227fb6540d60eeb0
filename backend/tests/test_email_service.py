from __future__ import annotations

import json

import httpx
import pytest

from app.core.config import get_settings
from app.services.email_service import EmailService


@pytest.fixture
def sendgrid_key(monkeypatch):
    monkeypatch.setattr(get_settings(), "sendgrid_api_key", "SG.test-key")


@pytest.mark.asyncio
async def test_send_posts_sendgrid_payload(sendgrid_key) -> None:
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(202)

    service = EmailService(transport=httpx.MockTransport(handler))
    sent = await service.send(["amara@afriverse.news", ""], "Post approved", "<p>Your post is <b>approved</b></p>")

    assert sent is True
    request = captured[0]
    assert request.headers["authorization"] == "Bearer SG.test-key"
    body = json.loads(request.content)
    assert body["personalizations"][0]["to"] == [{"email": "amara@afriverse.news"}]
    assert body["subject"] == "Post approved"
    assert body["content"][0] == {"type": "text/plain", "value": "Your post is approved"}


@pytest.mark.asyncio
async def test_send_returns_false_on_error_status(sendgrid_key) -> None:
    service = EmailService(transport=httpx.MockTransport(lambda request: httpx.Response(400, text="bad sender")))
    assert await service.send("kwame@afriverse.news", "Hello", "<p>hi</p>") is False


@pytest.mark.asyncio
async def test_send_without_api_key_is_a_no_op(monkeypatch) -> None:
    monkeypatch.setattr(get_settings(), "sendgrid_api_key", "")
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(202)

    service = EmailService(transport=httpx.MockTransport(handler))
    assert service.configured is False
    assert await service.send("kwame@afriverse.news", "Hello", "<p>hi</p>") is False
    assert calls == []


@pytest.mark.asyncio
async def test_send_with_no_recipients_skips_request(sendgrid_key) -> None:
    service = EmailService(transport=httpx.MockTransport(lambda request: httpx.Response(202)))
    assert await service.send([], "Hello", "<p>hi</p>") is False
