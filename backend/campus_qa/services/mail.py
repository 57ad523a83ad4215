"""
OTP Delivery

Account handlers only depend on the OTPSender interface: hand it an address
and a code, get back whether delivery succeeded.

- LogOTPSender writes the code to the server log (development default)
- SMTPOTPSender sends a plain-text email through an SMTP relay
"""

import asyncio
import logging
import smtplib
from abc import ABC, abstractmethod
from email.message import EmailMessage

from campus_qa.core.config import Settings

logger = logging.getLogger(__name__)

PURPOSE_LABELS = {
    "register": "Đăng ký",
    "forgot": "Quên mật khẩu",
}


class OTPSender(ABC):
    """Delivers one-time codes to an email address."""

    @abstractmethod
    async def send_code(self, email: str, code: str, purpose: str) -> bool:
        """
        Deliver `code` to `email`.

        Args:
            email: Recipient address
            code: The one-time code
            purpose: "register" or "forgot"

        Returns:
            True if the code was handed off for delivery
        """
        ...


class LogOTPSender(OTPSender):
    """Mock mail server: the code only ever reaches the server log."""

    async def send_code(self, email: str, code: str, purpose: str) -> bool:
        logger.info(
            "[MOCK EMAIL] to=%s purpose=%s otp=%s",
            email,
            PURPOSE_LABELS.get(purpose, purpose),
            code,
        )
        return True


class SMTPOTPSender(OTPSender):
    def __init__(
        self,
        host: str,
        port: int,
        sender: str,
        username: str = "",
        password: str = "",
        use_tls: bool = True,
        expire_minutes: int = 5,
    ):
        self.host = host
        self.port = port
        self.sender = sender
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.expire_minutes = expire_minutes

    def build_message(self, email: str, code: str, purpose: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = email
        message["Subject"] = f"Mã OTP {PURPOSE_LABELS.get(purpose, purpose)}"
        message.set_content(
            f"Mã OTP của bạn là: {code}\n"
            f"Mã có hiệu lực trong {self.expire_minutes} phút."
        )
        return message

    def _deliver(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=30) as smtp:
            if self.use_tls:
                smtp.starttls()
            if self.username:
                smtp.login(self.username, self.password)
            smtp.send_message(message)

    async def send_code(self, email: str, code: str, purpose: str) -> bool:
        message = self.build_message(email, code, purpose)
        try:
            await asyncio.to_thread(self._deliver, message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Failed to send OTP email to %s: %s", email, e)
            return False
        logger.info("OTP email sent to %s (%s)", email, purpose)
        return True


def create_otp_sender(settings: Settings) -> OTPSender:
    """Build the sender selected by OTP_DELIVERY."""
    if settings.otp_delivery == "log":
        return LogOTPSender()
    elif settings.otp_delivery == "smtp":
        return SMTPOTPSender(
            host=settings.smtp_host,
            port=settings.smtp_port,
            sender=settings.smtp_sender,
            username=settings.smtp_username,
            password=settings.smtp_password,
            use_tls=settings.smtp_use_tls,
            expire_minutes=settings.otp_expire_minutes,
        )
    else:
        raise ValueError(f"Unknown OTP delivery: {settings.otp_delivery}")
