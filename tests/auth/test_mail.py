import smtplib
from unittest.mock import MagicMock

import pytest

from online_judge.data.repositories import MailClient
from online_judge.errors import DeliveryException


@pytest.fixture
def smtp_client():
    return MailClient(
        host="smtp.test", port=587, username="mailer", password="secret",
        sender="no-reply@test", use_tls=True,
    )


def test_build_code_message(smtp_client):
    message = smtp_client.build_code_message("alice@example.com", "123456")

    assert message["To"] == "alice@example.com"
    assert message["From"] == "no-reply@test"
    assert "123456" in message.get_content()


@pytest.mark.asyncio
async def test_send_verification_code(smtp_client, monkeypatch):
    conn = MagicMock()
    conn.__enter__.return_value = conn
    monkeypatch.setattr(smtp_client, "_new_connection", lambda: conn)

    await smtp_client.send_verification_code("alice@example.com", "123456")

    conn.starttls.assert_called_once()
    conn.login.assert_called_once_with("mailer", "secret")
    sent = conn.send_message.call_args.args[0]
    assert sent["To"] == "alice@example.com"


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [smtplib.SMTPException("relay denied"), OSError("unreachable")])
async def test_send_verification_code_failure(smtp_client, monkeypatch, error):
    def refuse():
        raise error

    monkeypatch.setattr(smtp_client, "_new_connection", refuse)

    with pytest.raises(DeliveryException):
        await smtp_client.send_verification_code("alice@example.com", "123456")
