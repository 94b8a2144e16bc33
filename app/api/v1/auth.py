import logging
from datetime import datetime, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, Form, Header, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.core.mailer import send_reset_email, send_verify_email_otp
from app.core.security import (
    create_access_token,
    generate_otp,
    get_otp_hash,
    get_password_hash,
    verify_otp,
    verify_password,
    verify_token,
)
from app.models.admin import Admin
from app.models.user import User
from app.schemas.auth import (
    ForgetPasswordRequest,
    MessageResponse,
    RegisterRequest,
    ResetPasswordRequest,
    TokenResponse,
    VerifyOTPRequest,
)
from app.schemas.user import RegisterResponse
from app.utils.timeutils import as_naive_utc, utcnow

logger = logging.getLogger(__name__)
router = APIRouter()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _bearer_payload(authorization: Optional[str], role: str) -> dict:
    if not authorization:
        raise _unauthorized("Authorization header required")

    try:
        scheme, token = authorization.split()
    except ValueError:
        raise _unauthorized("Invalid authorization header format")
    if scheme.lower() != "bearer":
        raise _unauthorized("Invalid authentication scheme")

    payload, error = verify_token(token)
    if error == "expired":
        raise _unauthorized("Token has expired")
    elif error == "invalid":
        raise _unauthorized("Could not validate credentials")

    if payload.get("sub") is None or payload.get("role") != role:
        raise _unauthorized("Token payload invalid")
    return payload


def get_current_user(
    authorization: Optional[str] = Header(None), db: Session = Depends(get_db)
) -> User:
    payload = _bearer_payload(authorization, "user")
    user = db.query(User).filter(User.email == payload["sub"]).first()
    if user is None:
        raise _unauthorized("User not found")
    if user.state == "blocked":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User is blocked")
    return user


def get_current_admin(
    authorization: Optional[str] = Header(None), db: Session = Depends(get_db)
) -> Admin:
    payload = _bearer_payload(authorization, "admin")
    admin = db.query(Admin).filter(Admin.email == payload["sub"]).first()
    if admin is None:
        raise _unauthorized("Admin not found")
    return admin


def _expired(expiration: Optional[datetime]) -> bool:
    return expiration is None or as_naive_utc(expiration) < as_naive_utc(utcnow())


@router.post("/register", response_model=RegisterResponse)
def register_user(user_data: RegisterRequest, db: Session = Depends(get_db)):
    existing_user = db.query(User).filter(User.email == user_data.email).first()
    if existing_user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered"
        )

    otp = generate_otp()
    db_user = User(
        name=user_data.name,
        email=user_data.email,
        password_hash=get_password_hash(user_data.password),
        registration_otp=get_otp_hash(otp),
        registration_otp_expiration=utcnow()
        + timedelta(minutes=settings.otp_expire_minutes),
        state="pending",
        created_at=utcnow(),
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)

    send_verify_email_otp(user_data.email, otp)
    return {
        "user": db_user,
        "message": "Register successfully, please check your mail to verify email",
    }


@router.post("/verify-email", response_model=MessageResponse)
def verify_email_by_otp(
    verify_data: VerifyOTPRequest,
    email: str = Query(...),
    db: Session = Depends(get_db),
):
    user = db.query(User).filter(User.email == email).first()
    if not user or user.state != "pending" or _expired(user.registration_otp_expiration):
        raise HTTPException(status_code=400, detail="Invalid or expired OTP")

    if not verify_otp(verify_data.code, user.registration_otp):
        raise HTTPException(status_code=400, detail="Invalid OTP")

    user.state = "verified"
    user.registration_otp = None
    user.registration_otp_expiration = None
    db.commit()
    return {"message": "OTP verified successfully"}


@router.post("/login", response_model=TokenResponse)
def login(
    email: str = Form(...),
    password: str = Form(...),
    db: Session = Depends(get_db),
):
    user = db.query(User).filter(User.email == email.strip()).first()
    if not user or not verify_password(password, user.password_hash):
        raise _unauthorized("Incorrect email or password")
    if user.state == "pending":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Email not verified"
        )
    if user.state == "blocked":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User is blocked")

    user.last_login = utcnow()
    db.commit()

    access_token = create_access_token(data={"sub": user.email, "role": "user"})
    logger.info(f"User {user.id} signed in")
    return {"access_token": access_token, "token_type": "bearer", "name": user.name}


@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(reset_data: ForgetPasswordRequest, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == reset_data.email).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Email not found"
        )

    reset_code = generate_otp()
    user.reset_otp = get_otp_hash(reset_code)
    user.reset_otp_expiration = utcnow() + timedelta(minutes=15)
    db.commit()

    send_reset_email(reset_data.email, reset_code)
    return {"message": "Reset code has been sent to your email"}


@router.post("/reset-password", response_model=MessageResponse)
def reset_password(reset_data: ResetPasswordRequest, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == reset_data.email).first()
    if not user or _expired(user.reset_otp_expiration):
        raise HTTPException(status_code=400, detail="Invalid or expired OTP")
    if not verify_otp(reset_data.code, user.reset_otp):
        raise HTTPException(status_code=400, detail="Invalid OTP")

    user.password_hash = get_password_hash(reset_data.new_password)
    user.reset_otp = None
    user.reset_otp_expiration = None
    db.commit()
    return {"message": "Password reset successfully"}
