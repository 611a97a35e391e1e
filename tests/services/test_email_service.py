"""Unit tests for EmailService"""

import logging
import smtplib
from unittest.mock import MagicMock, patch

import pytest

from core.config import Settings
from core.exceptions import EmailDeliveryError
from services.email_service import EmailService


@pytest.fixture
def smtp_settings():
    return Settings(
        _env_file=None,
        smtp_host="smtp.example.com",
        smtp_port=2525,
        smtp_user="mailer",
        smtp_password="mailer-password",
        smtp_from_email="noreply@example.com",
        app_url="https://school.example.com/",
    )


def test_reset_link_uses_app_url(smtp_settings):
    service = EmailService(smtp_settings)
    assert service.build_reset_link("abc123") == (
        "https://school.example.com/reset-password?token=abc123"
    )


@pytest.mark.asyncio
async def test_unconfigured_smtp_logs_link_instead_of_sending(caplog):
    """
    GIVEN no SMTP credentials
    WHEN a reset email is requested
    THEN nothing is sent and the link is logged
    """
    service = EmailService(Settings(_env_file=None, smtp_host=None))

    with patch("services.email_service.smtplib.SMTP") as mock_smtp:
        with caplog.at_level(logging.WARNING, logger="services.email_service"):
            await service.send_password_reset("parent@example.com", "tok")

    mock_smtp.assert_not_called()
    assert "reset-password?token=tok" in caplog.text


@pytest.mark.asyncio
async def test_sends_over_starttls(smtp_settings):
    """
    GIVEN configured SMTP
    WHEN a reset email is sent
    THEN the server is contacted with STARTTLS and login before sendmail
    """
    server = MagicMock()

    with patch("services.email_service.smtplib.SMTP") as mock_smtp:
        mock_smtp.return_value.__enter__.return_value = server
        await EmailService(smtp_settings).send_password_reset("parent@example.com", "tok")

    mock_smtp.assert_called_once_with("smtp.example.com", 2525, timeout=15)
    server.starttls.assert_called_once()
    server.login.assert_called_once_with("mailer", "mailer-password")
    sender, recipients, message = server.sendmail.call_args.args
    assert sender == "noreply@example.com"
    assert recipients == ["parent@example.com"]
    assert "reset-password?token=tok" in message


@pytest.mark.asyncio
async def test_smtp_failure_raises_delivery_error(smtp_settings):
    server = MagicMock()
    server.login.side_effect = smtplib.SMTPAuthenticationError(535, b"bad credentials")

    with patch("services.email_service.smtplib.SMTP") as mock_smtp:
        mock_smtp.return_value.__enter__.return_value = server
        with pytest.raises(EmailDeliveryError):
            await EmailService(smtp_settings).send_password_reset("parent@example.com", "tok")
