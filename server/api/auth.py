# server/api/auth.py

import logging
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from database import get_db
from models.user import User as UserModel
from core.errors import AuthError, ConflictError, StorageError
from core.security import (
    burn_password_check,
    create_session_token,
    get_password_hash,
    verify_password,
)
from core.session import COOKIE_NAME


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

INVALID_CREDENTIALS = "invalid email or password"


# -------------------------------
# Schemas
# -------------------------------

class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=8)
    full_name: str = ""


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class User(BaseModel):
    """
    Outward view of an account. Never carries the password hash.
    """
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    full_name: str
    avatar: str
    is_active: bool
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None


class LoginUser(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    full_name: str


class LoginResponse(BaseModel):
    message: str
    user: LoginUser


class MessageResponse(BaseModel):
    message: str


# -------------------------------
# Credential Manager
# -------------------------------

def register_user(db: Session, req: RegisterRequest) -> UserModel:
    try:
        taken = (
            db.query(UserModel)
            .filter(UserModel.deleted_at.is_(None))
            .filter(or_(UserModel.username == req.username, UserModel.email == req.email))
            .count()
        )
    except SQLAlchemyError as exc:
        logger.exception("Duplicate check failed for %s", req.username)
        raise StorageError("db error") from exc
    if taken:
        raise ConflictError("username or email already in use")

    user = UserModel(
        username=req.username,
        email=req.email,
        hashed_password=get_password_hash(req.password),
        full_name=req.full_name,
    )
    try:
        db.add(user)
        db.commit()
        db.refresh(user)
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError("username or email already in use") from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Insert failed for %s", req.username)
        raise StorageError("insert error") from exc

    logger.info("Registered user id=%s username=%s", user.id, user.username)
    return user


def authenticate_user(db: Session, email: str, password: str) -> UserModel:
    """
    Unknown email and wrong password fail the same way.
    """
    try:
        user = (
            db.query(UserModel)
            .filter(UserModel.email == email, UserModel.deleted_at.is_(None))
            .first()
        )
    except SQLAlchemyError as exc:
        logger.exception("User lookup failed")
        raise StorageError("db error") from exc

    if user is None:
        burn_password_check()
        raise AuthError(INVALID_CREDENTIALS)
    if not verify_password(password, user.hashed_password):
        raise AuthError(INVALID_CREDENTIALS)
    return user


def set_session_cookie(response: Response, token: str, expires_at: datetime, secure: bool):
    response.set_cookie(
        key=COOKIE_NAME,
        value=token,
        expires=expires_at,
        path="/",
        secure=secure,
        httponly=True,
        samesite="strict",
    )


def clear_session_cookie(response: Response, secure: bool):
    response.delete_cookie(
        key=COOKIE_NAME,
        path="/",
        secure=secure,
        httponly=True,
        samesite="strict",
    )


# -------------------------------
# Endpoints
# -------------------------------

@router.post("/register", response_model=User, status_code=status.HTTP_201_CREATED)
def register(req: RegisterRequest, db: Session = Depends(get_db)):
    return register_user(db, req)


@router.post("/login", response_model=LoginResponse)
def login(req: LoginRequest, request: Request, response: Response, db: Session = Depends(get_db)):
    try:
        user = authenticate_user(db, req.email, req.password)
    except AuthError:
        logger.warning("Failed login attempt")
        raise

    settings = request.app.state.settings
    token, expires_at = create_session_token(user.id, user.username, settings.jwt_secret)
    set_session_cookie(response, token, expires_at, settings.cookie_secure)

    logger.info("Login succeeded for user id=%s", user.id)
    return {"message": "login successful", "user": user}


@router.post("/logout", response_model=MessageResponse)
def logout(request: Request, response: Response):
    # Stateless tokens: this only tells the browser to drop the cookie.
    clear_session_cookie(response, request.app.state.settings.cookie_secure)
    return {"message": "logout successful"}
