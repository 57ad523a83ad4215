from typing import Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel, EmailStr, Field
from sqlalchemy.ext.asyncio import AsyncSession

from campus_qa.core.context import Services
from campus_qa.core.database import get_db
from campus_qa.core.errors import (
    AccountError,
    account_error_response,
    server_error_response,
)
from campus_qa.services import accounts

router = APIRouter()


# Schemas
class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class SendOTPRequest(BaseModel):
    email: EmailStr
    type: Literal["register", "forgot"]


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str
    otp: str


class ResetPasswordRequest(BaseModel):
    email: EmailStr
    otp: str
    new_password: str = Field(alias="newPassword")


class UserInfo(BaseModel):
    name: str


class LoginResponse(BaseModel):
    success: bool
    userId: int
    user: UserInfo
    message: str


class MessageResponse(BaseModel):
    success: bool
    message: str


# Endpoints
@router.post("/login", response_model=LoginResponse)
async def login(data: LoginRequest, services: Services, db: AsyncSession = Depends(get_db)):
    """Login with email and password."""
    try:
        user = await accounts.login(db, data.email, data.password)
    except AccountError as e:
        return account_error_response(e)
    except Exception as e:
        return server_error_response("Lỗi Server", e, services.settings)

    return LoginResponse(
        success=True,
        userId=user.id,
        user=UserInfo(name=user.email),
        message=accounts.LOGIN_SUCCESS,
    )


@router.post("/send-otp", response_model=MessageResponse)
async def send_otp(data: SendOTPRequest, services: Services, db: AsyncSession = Depends(get_db)):
    """Issue an OTP for registration ("register") or password recovery ("forgot")."""
    try:
        await accounts.send_otp(
            db,
            services.otp_sender,
            data.email,
            data.type,
            expire_minutes=services.settings.otp_expire_minutes,
        )
    except AccountError as e:
        return account_error_response(e)
    except Exception as e:
        return server_error_response(accounts.OTP_SEND_FAILED, e, services.settings)

    return MessageResponse(success=True, message=accounts.OTP_SENT)


@router.post("/register", response_model=MessageResponse)
async def register(data: RegisterRequest, services: Services, db: AsyncSession = Depends(get_db)):
    """Verify the registration OTP and activate the account."""
    try:
        await accounts.verify_registration(db, data.email, data.password, data.otp)
    except AccountError as e:
        return account_error_response(e)
    except Exception as e:
        return server_error_response("Lỗi đăng ký", e, services.settings)

    return MessageResponse(success=True, message=accounts.REGISTER_SUCCESS)


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    data: ResetPasswordRequest, services: Services, db: AsyncSession = Depends(get_db)
):
    """Verify the recovery OTP and set a new password."""
    try:
        await accounts.reset_password(db, data.email, data.otp, data.new_password)
    except AccountError as e:
        return account_error_response(e)
    except Exception as e:
        return server_error_response("Lỗi đổi mật khẩu", e, services.settings)

    return MessageResponse(success=True, message=accounts.RESET_SUCCESS)
