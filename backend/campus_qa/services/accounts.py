"""
Account Service

Login, OTP issuing, OTP-verified registration and password reset against
the `users` table. Each operation reads one row, validates inline and
optionally writes that row back. Expected failures raise AccountError with
the message shown to the user.
"""

import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from campus_qa.core.errors import AccountError
from campus_qa.core.security import (
    generate_otp,
    hash_password,
    otp_matches,
    verify_password,
)
from campus_qa.models.user import User
from campus_qa.services.mail import OTPSender

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8

# User-facing messages
EMAIL_NOT_REGISTERED = "Email chưa đăng ký"
ACCOUNT_NOT_VERIFIED = "Tài khoản chưa xác thực OTP"
ACCOUNT_CORRUPT = "Lỗi dữ liệu tài khoản"
WRONG_PASSWORD = "Sai mật khẩu"
LOGIN_SUCCESS = "Đăng nhập thành công"
EMAIL_IN_USE = "Email này đã được sử dụng."
EMAIL_NOT_FOUND = "Email không tồn tại trong hệ thống."
OTP_SENT = "Đã gửi mã OTP"
OTP_SEND_FAILED = "Lỗi hệ thống khi gửi OTP"
REGISTER_EMAIL_INVALID = "Email không hợp lệ (hãy yêu cầu gửi lại OTP)"
RESET_EMAIL_INVALID = "Email không tồn tại"
OTP_WRONG = "Mã OTP không đúng"
OTP_EXPIRED = "Mã OTP đã hết hạn"
PASSWORD_TOO_SHORT = f"Mật khẩu phải có ít nhất {MIN_PASSWORD_LENGTH} ký tự"
REGISTER_SUCCESS = "Đăng ký thành công!"
RESET_SUCCESS = "Đổi mật khẩu thành công. Hãy đăng nhập lại."


class OTPDeliveryError(Exception):
    """The OTP was stored but the delivery capability reported failure."""


def utcnow() -> datetime:
    """Naive UTC timestamp, matching the DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


def _check_password(password: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise AccountError(PASSWORD_TOO_SHORT)


def _check_otp(user: User, otp: str) -> None:
    """OTP must match the stored code and must not be past its expiry."""
    if not otp_matches(otp, user.otp_code):
        raise AccountError(OTP_WRONG)
    if user.otp_expires_at is None or utcnow() > user.otp_expires_at:
        raise AccountError(OTP_EXPIRED)


async def login(db: AsyncSession, email: str, password: str) -> User:
    """Return the user whose verified credentials match."""
    user = await get_user_by_email(db, email)

    if not user:
        raise AccountError(EMAIL_NOT_REGISTERED)
    if not user.is_verified:
        raise AccountError(ACCOUNT_NOT_VERIFIED)
    if not user.password_hash:
        raise AccountError(ACCOUNT_CORRUPT)
    if not verify_password(password, user.password_hash):
        raise AccountError(WRONG_PASSWORD)

    return user


async def _store_registration_otp(
    db: AsyncSession, user: User | None, email: str, otp: str, expires_at: datetime
) -> None:
    if user is not None:
        user.otp_code = otp
        user.otp_expires_at = expires_at
        await db.commit()
        return

    db.add(
        User(email=email, otp_code=otp, otp_expires_at=expires_at, is_verified=False)
    )
    try:
        await db.commit()
    except IntegrityError:
        # A concurrent request created the row first; overwrite its OTP instead
        await db.rollback()
        logger.info("Concurrent registration for %s, updating OTP", email)
        user = await get_user_by_email(db, email)
        if user is None or user.is_verified:
            raise AccountError(EMAIL_IN_USE)
        user.otp_code = otp
        user.otp_expires_at = expires_at
        await db.commit()


async def send_otp(
    db: AsyncSession,
    sender: OTPSender,
    email: str,
    purpose: str,
    expire_minutes: int = 5,
) -> str:
    """
    Issue a fresh OTP for registration or password recovery.

    Args:
        db: Database session
        sender: Delivery capability for the code
        email: Target address
        purpose: "register" or "forgot"
        expire_minutes: Lifetime of the code

    Returns:
        The issued code (callers must not echo it to the client)

    Raises:
        AccountError: register for a verified email, or forgot for an
            unknown/unverified one
        OTPDeliveryError: the sender reported failure
    """
    otp = generate_otp()
    expires_at = utcnow() + timedelta(minutes=expire_minutes)

    user = await get_user_by_email(db, email)

    if purpose == "register":
        if user and user.is_verified:
            raise AccountError(EMAIL_IN_USE)
        await _store_registration_otp(db, user, email, otp, expires_at)
    elif purpose == "forgot":
        if not user or not user.is_verified:
            raise AccountError(EMAIL_NOT_FOUND)
        user.otp_code = otp
        user.otp_expires_at = expires_at
        await db.commit()
    else:
        raise ValueError(f"Unknown OTP purpose: {purpose}")

    if not await sender.send_code(email, otp, purpose):
        raise OTPDeliveryError(f"Could not deliver OTP to {email}")

    return otp


async def verify_registration(
    db: AsyncSession, email: str, password: str, otp: str
) -> User:
    """Activate an account whose OTP checks out and set its password."""
    user = await get_user_by_email(db, email)
    if not user:
        raise AccountError(REGISTER_EMAIL_INVALID)

    _check_otp(user, otp)
    _check_password(password)

    user.password_hash = hash_password(password)
    user.is_verified = True
    user.otp_code = None
    user.otp_expires_at = None
    await db.commit()
    return user


async def reset_password(
    db: AsyncSession, email: str, otp: str, new_password: str
) -> User:
    """Replace the password of an account whose OTP checks out."""
    user = await get_user_by_email(db, email)
    if not user:
        raise AccountError(RESET_EMAIL_INVALID)

    _check_otp(user, otp)
    _check_password(new_password)

    user.password_hash = hash_password(new_password)
    user.otp_code = None
    user.otp_expires_at = None
    await db.commit()
    return user
