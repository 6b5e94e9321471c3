"""
Unit tests for ResendEmailSender adapter.

Uses httpx.MockTransport, so no network access is needed.
"""

import json

import httpx
import pytest

from src.adapters.mail.resend import ResendEmailSender
from src.domain.exceptions import NotificationFailure
from src.domain.ports import EmailMessage

MESSAGE = EmailMessage(
    sender="ProVisa <contact@provisa.fr>",
    to=("jean@test.com",),
    subject="Candidature bien reçue - ProVisa",
    html="<p>Merci</p>",
    reply_to="contact@provisa.fr",
)


def make_sender(handler) -> ResendEmailSender:
    return ResendEmailSender(api_key="re_test_key", transport=httpx.MockTransport(handler))


class TestSend:
    """Tests for the request sent to Resend."""

    def test_posts_payload_with_bearer_auth(self) -> None:
        captured: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return httpx.Response(200, json={"id": "email_123"})

        make_sender(handler).send(MESSAGE)

        request = captured[0]
        assert request.method == "POST"
        assert request.url == "https://api.resend.com/emails"
        assert request.headers["Authorization"] == "Bearer re_test_key"
        assert json.loads(request.content) == {
            "from": "ProVisa <contact@provisa.fr>",
            "to": ["jean@test.com"],
            "subject": "Candidature bien reçue - ProVisa",
            "html": "<p>Merci</p>",
            "reply_to": "contact@provisa.fr",
        }

    def test_reply_to_omitted_when_absent(self) -> None:
        captured: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(json.loads(request.content))
            return httpx.Response(200, json={"id": "email_124"})

        message = EmailMessage(sender="a@b.fr", to=("c@d.fr",), subject="s", html="h")
        make_sender(handler).send(message)

        assert "reply_to" not in captured[0]


class TestFailures:
    """Transport and HTTP errors become NotificationFailure."""

    def test_http_error_status_raises(self) -> None:
        sender = make_sender(lambda request: httpx.Response(422, json={"message": "invalid from"}))

        with pytest.raises(NotificationFailure, match="422"):
            sender.send(MESSAGE)

    def test_transport_error_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        with pytest.raises(NotificationFailure):
            make_sender(handler).send(MESSAGE)

