"""Authentication endpoints for the Threadline API."""

from fastapi import APIRouter, status

from threadline.schemas.common import ApiResponse
from threadline.schemas.user import SigninRequest, SigninResponse, SignupRequest

from ..dependencies import UserServiceDep

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post(
    "/signup",
    response_model=ApiResponse[None],
    status_code=status.HTTP_201_CREATED,
)
async def signup(body: SignupRequest, users: UserServiceDep) -> ApiResponse[None]:
    """Register a new account. The profile is filled in separately."""
    await users.signup(body.email, body.password, body.password_confirm)
    return ApiResponse(message="Signup success")


@router.post("/signin", response_model=ApiResponse[SigninResponse])
async def signin(body: SigninRequest, users: UserServiceDep) -> ApiResponse[SigninResponse]:
    """Exchange credentials for a bearer token."""
    token = await users.signin(body.email, body.password)
    return ApiResponse(message="Signin success", data=SigninResponse(token=token))
