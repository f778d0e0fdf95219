from fastapi import APIRouter, Depends

from academy.users.dependencies import get_user_repository
from academy.users.repository import UserRepository
from academy.utils import success_response
from .schemas import LoginRequest, RegisterRequest
from .service import AuthService

auth_router = APIRouter()


@auth_router.post("/register")
async def register(
    body: RegisterRequest,
    repository: UserRepository = Depends(get_user_repository),
):
    """Create a Student account and return JWT + user data."""
    svc = AuthService(repository)
    result = await svc.register(name=body.name, email=body.email, password=body.password)
    return success_response(data=result, message="Registration successful", code=201)


@auth_router.post("/login")
async def login(
    body: LoginRequest,
    repository: UserRepository = Depends(get_user_repository),
):
    """Authenticate user and return JWT + user data."""
    svc = AuthService(repository)
    result = await svc.authenticate(email=body.email, password=body.password)
    return success_response(data=result, message="Login successful")
