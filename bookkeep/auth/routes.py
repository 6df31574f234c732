"""Authentication API routes. Public: no bearer token required."""

from fastapi import APIRouter, Depends, status

from .dependencies import get_auth_service
from .schemas import LoginRequest, LoginResponse, MessageResponse, RegisterRequest
from .service import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request_body: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    """
    Register a new user with username, email and password.

    Fails with 400 if the email is already registered.
    """
    await auth_service.register(request_body)
    return MessageResponse(message="User registered successfully")


@router.post("/login", response_model=LoginResponse)
async def login(
    request_body: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> LoginResponse:
    """
    Login with email and password.

    Returns a bearer token and the user summary. Unknown email and wrong
    password both answer 400 "Invalid credentials".
    """
    return await auth_service.login(request_body)
