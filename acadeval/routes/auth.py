"""
Auth API routes
"""
from fastapi import APIRouter, Depends

from acadeval.dependencies import get_auth_service
from acadeval.schemas import LoginRequest, TokenResponse
from acadeval.services import AuthService

router = APIRouter()


@router.post("/login", response_model=TokenResponse)
async def login(request: LoginRequest, service: AuthService = Depends(get_auth_service)):
    """
    Exchange email and password for a bearer token
    """
    return service.login(request.email, request.password)
