"""
Authentication and profile API endpoints
"""
import secrets

from fastapi import APIRouter, Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool
import logging

from elearning.api.dependencies import get_current_user
from elearning.database import get_db
from elearning.exceptions import BadRequestError, NotFoundError, UnauthorizedError
from elearning.models import User
from elearning.schemas.user import (
    GoogleLoginRequest,
    GoogleLoginResponse,
    LoginRequest,
    MessageResponse,
    ProfileUpdate,
    ProfileUpdateResponse,
    TokenResponse,
    UserRegister,
    UserResponse,
)
from elearning.utils.google_auth import verify_google_token
from elearning.utils.security import sign_token, verify_password

router = APIRouter(tags=["auth"])
logger = logging.getLogger(__name__)


def _email_taken(db: Session, email: str) -> bool:
    return db.query(User).filter(User.email == email).first() is not None


@router.get("/")
async def home():
    return "Welcome to the home page!"


@router.post("/register", response_model=UserResponse, status_code=201)
async def register(payload: UserRegister, db: Session = Depends(get_db)):
    """Create an account; the password is hashed before insert"""
    user = User(
        email=payload.email,
        password=payload.password,
        full_name=payload.full_name,
        age=payload.age,
        address=payload.address,
        phone=payload.phone,
        about=payload.about
    )

    if _email_taken(db, user.email):
        raise BadRequestError("Email already in use")

    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise BadRequestError("Email already in use")
    db.refresh(user)

    logger.info(f"User registered: {user.id}")
    return user


@router.post("/login", response_model=TokenResponse)
async def login(payload: LoginRequest, db: Session = Depends(get_db)):
    if not payload.email:
        raise BadRequestError("Email is required")
    if not payload.password:
        raise BadRequestError("Password is required")

    user = db.query(User).filter(User.email == payload.email).first()
    if not user or not verify_password(payload.password, user.password):
        raise UnauthorizedError("Invalid email/password")

    return {"access_token": sign_token({"id": user.id})}


@router.post("/google-login", response_model=GoogleLoginResponse)
async def google_login(payload: GoogleLoginRequest, db: Session = Depends(get_db)):
    """
    Sign in with a Google ID token

    First-time Google users get an account with a random password.
    """
    if not payload.token:
        raise BadRequestError("Google token is required")

    google_user = await run_in_threadpool(verify_google_token, payload.token)

    user = db.query(User).filter(User.email == google_user["email"]).first()
    if not user:
        user = User(
            email=google_user["email"],
            full_name=google_user["name"] or google_user["email"],
            password=secrets.token_urlsafe(15)
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        logger.info(f"User created from Google login: {user.id}")

    return {
        "access_token": sign_token({"id": user.id}),
        "id": user.id,
        "email": user.email,
        "full_name": user.full_name
    }


@router.get("/profile", response_model=UserResponse)
async def get_profile(current_user: User = Depends(get_current_user)):
    return current_user


@router.put("/profile", response_model=ProfileUpdateResponse)
async def update_profile(
    payload: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    user = db.get(User, current_user.id)
    if not user:
        raise NotFoundError("User not found")

    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(user, field, value)
    db.commit()
    db.refresh(user)

    return {"message": "Profile updated successfully", "data": user}


@router.delete("/delete-account", response_model=MessageResponse)
async def delete_account(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    user = db.get(User, current_user.id)
    if not user:
        raise NotFoundError("User not found")

    db.delete(user)
    db.commit()

    logger.info(f"User deleted: {current_user.id}")
    return {"message": "Your account has been successfully deleted"}
