import secrets

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

OTP_DIGITS = 6


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def hash_password(password: str) -> str:
    """Hash a password."""
    return pwd_context.hash(password)


def generate_otp() -> str:
    """Generate a zero-padded numeric one-time code."""
    return f"{secrets.randbelow(10**OTP_DIGITS):0{OTP_DIGITS}d}"


def otp_matches(supplied: str | None, stored: str | None) -> bool:
    """Constant-time OTP comparison. A cleared (None) code never matches."""
    if not supplied or not stored:
        return False
    return secrets.compare_digest(supplied.encode("utf-8"), stored.encode("utf-8"))
