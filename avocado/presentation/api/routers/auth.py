"""API router for registration, verification and login."""

import logging

from fastapi import APIRouter, Depends, status

from ....core.config import Settings
from ....core.dependencies import get_email_service, get_settings, get_user_service
from ....domain.models import User
from ....services.email_service import EmailService
from ....services.user_service import UserService
from ..dependencies import get_current_user
from ..schemas.auth import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    RegisterResponse,
    ResendVerificationRequest,
    UserResponse,
    VerifyRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    user_service: UserService = Depends(get_user_service),
    email_service: EmailService = Depends(get_email_service),
    settings: Settings = Depends(get_settings),
) -> RegisterResponse:
    """Register a new student account."""
    user, verification_token = user_service.register(
        name=request.name,
        personal_email=request.personal_email,
        uni_email=request.uni_email,
        password=request.password,
    )

    if not email_service.send_verification_email(
        to_email=user.uni_email,
        verification_token=verification_token,
        base_url=settings.frontend_base_url,
    ):
        logger.warning("Verification email for user %s was not delivered", user.id)

    return RegisterResponse(
        user_id=user.id,
        verification_token=verification_token,
        uni_email=user.uni_email,
    )


@router.post("/login", response_model=LoginResponse)
async def login(
    request: LoginRequest,
    user_service: UserService = Depends(get_user_service),
) -> LoginResponse:
    """Login and get a signed session token."""
    user = user_service.authenticate(request.email, request.password)
    return LoginResponse(token=user_service.create_token(user), user=serialize_user(user))


@router.post("/verify", response_model=MessageResponse)
async def verify(
    request: VerifyRequest,
    user_service: UserService = Depends(get_user_service),
) -> MessageResponse:
    """Verify a university email with its token."""
    user_service.verify_email(request.token)
    return MessageResponse(message="Email verified successfully")


@router.post("/resend_verification", response_model=MessageResponse)
async def resend_verification(
    request: ResendVerificationRequest,
    user_service: UserService = Depends(get_user_service),
    email_service: EmailService = Depends(get_email_service),
    settings: Settings = Depends(get_settings),
) -> MessageResponse:
    """Issue a new verification token. The answer never reveals whether the account exists."""
    issued = user_service.resend_verification(request.email)
    if issued:
        user, verification_token = issued
        email_service.send_verification_email(
            to_email=user.uni_email,
            verification_token=verification_token,
            base_url=settings.frontend_base_url,
        )
    return MessageResponse(
        message="If an unverified account exists, a verification email has been sent."
    )


@router.get("/me", response_model=UserResponse)
async def me(user: User = Depends(get_current_user)) -> UserResponse:
    return serialize_user(user)


def serialize_user(user: User) -> UserResponse:
    return UserResponse(
        user_id=user.id,
        name=user.name,
        email=user.personal_email,
        uni_email=user.uni_email,
        role_id=user.role_id,
        avatar_color=user.avatar_color,
        is_verified=user.is_verified,
    )
