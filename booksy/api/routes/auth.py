"""
Authentication API Routes for Booksy.

Handles:
- User registration (Sign Up)
- User login (token issuance)
"""

from fastapi import APIRouter, Depends, status

from booksy.accounts.service import CredentialService
from booksy.api.dependencies import get_credential_service
from booksy.api.schemas import (
    ErrorResponse,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
    UserResponse,
)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Missing fields"},
        409: {"model": ErrorResponse, "description": "Email or username taken"},
    },
)
def register(
    body: RegisterRequest,
    service: CredentialService = Depends(get_credential_service),
):
    """Register a new user and sign them in."""
    user, token = service.register(body.username, body.email, body.password)
    return RegisterResponse(user=UserResponse.model_validate(user), token=token)


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing fields"},
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
    },
)
def login(
    body: LoginRequest,
    service: CredentialService = Depends(get_credential_service),
):
    """Exchange email and password for a bearer token."""
    token, user = service.login(body.email, body.password)
    return LoginResponse(token=token, user=UserResponse.model_validate(user))
