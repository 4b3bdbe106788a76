"""Outbound email delivery for verification codes."""

import asyncio
import smtplib
from email.message import EmailMessage
from typing import Optional

from online_judge.config import Config, logger
from online_judge.errors import DeliveryException

mail_logger = logger.getChild("mail")


class MailClient:
    """Sends messages through an SMTP relay, one connection per message."""

    def __init__(
        self,
        host: str = "",
        port: int = 0,
        username: Optional[str] = None,
        password: Optional[str] = None,
        sender: str = "",
        use_tls: bool = False,
    ) -> None:
        self._host = host
        self._port = port
        self._username = username
        self._password = password
        self._sender = sender
        self._use_tls = use_tls

    def _new_connection(self) -> smtplib.SMTP:
        return smtplib.SMTP(host=self._host, port=self._port, timeout=10)

    def send_message(self, message: EmailMessage) -> None:
        with self._new_connection() as conn:
            if self._use_tls:
                conn.starttls()
            if self._username:
                conn.login(self._username, self._password or "")
            conn.send_message(message)

    def build_code_message(self, email: str, code: str) -> EmailMessage:
        minutes = max(Config.VERIFICATION_CODE_EXPIRY // 60, 1)
        message = EmailMessage()
        message["Subject"] = "Your Online Judge verification code"
        message["From"] = self._sender
        message["To"] = email
        message.set_content(
            f"Your verification code is {code}.\n"
            f"It expires in {minutes} minute(s). If you did not request it, ignore this email."
        )
        return message

    async def send_verification_code(self, email: str, code: str) -> None:
        message = self.build_code_message(email, code)
        try:
            await asyncio.to_thread(self.send_message, message)
        except (smtplib.SMTPException, OSError) as e:
            mail_logger.error(f"Failed to send verification code to {email}: {str(e)}")
            raise DeliveryException(detail="Failed to send verification code")
        mail_logger.info(f"Verification code sent to {email}")


mail_client = MailClient(
    host=Config.SMTP_HOST,
    port=Config.SMTP_PORT,
    username=Config.SMTP_USERNAME,
    password=Config.SMTP_PASSWORD,
    sender=Config.SMTP_SENDER,
    use_tls=Config.SMTP_USE_TLS,
)


def get_mail_client() -> MailClient:
    return mail_client
