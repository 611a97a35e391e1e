import asyncio
import logging
import smtplib
from email.mime.text import MIMEText

from core.config import Settings, get_settings
from core.exceptions import EmailDeliveryError

logger = logging.getLogger(__name__)


class EmailService:
    """Outbound mail over SMTP with STARTTLS"""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

    def build_reset_link(self, token: str) -> str:
        return f"{self.settings.app_url.rstrip('/')}/reset-password?token={token}"

    async def send_password_reset(self, recipient_email: str, token: str) -> None:
        link = self.build_reset_link(token)
        body = (
            "We received a request to reset your password.\n\n"
            f"Reset it here: {link}\n\n"
            f"The link expires in {self.settings.password_reset_expire_minutes} minutes. "
            "If you did not request this, you can ignore this email."
        )

        if not self.settings.smtp_configured:
            logger.warning(
                "SMTP is not configured; password reset link for %s: %s", recipient_email, link
            )
            return

        await asyncio.to_thread(self._send, recipient_email, "Reset your password", body)
        logger.info("Password reset email sent to %s", recipient_email)

    def _send(self, recipient_email: str, subject: str, body: str) -> None:
        msg = MIMEText(body)
        msg["Subject"] = subject
        msg["From"] = self.settings.smtp_from_email
        msg["To"] = recipient_email

        try:
            with smtplib.SMTP(self.settings.smtp_host, self.settings.smtp_port, timeout=15) as server:
                server.starttls()
                server.login(self.settings.smtp_user, self.settings.smtp_password)
                server.sendmail(self.settings.smtp_from_email, [recipient_email], msg.as_string())
        except (smtplib.SMTPException, OSError) as exc:
            raise EmailDeliveryError(f"Failed to send email: {exc}") from exc
