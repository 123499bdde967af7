from typing import Optional

from fastapi import APIRouter, Cookie, Depends, Request, Response, status
from pydantic import BaseModel, EmailStr, Field, model_validator

from src.api.error import http_error
from src.api.response import envelope
from src.api.utils.cookies import REFRESH_COOKIE, SESSION_COOKIE, CookieTransport
from src.api.utils.jwt import TokenCodec
from src.app.services.session_cache import SessionCache
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import (
    SignInCommand,
    SignInUseCase,
    SignOutUseCase,
    SignUpCommand,
    SignUpUseCase,
)
from src.depends import (
    get_cookie_transport,
    get_optional_identity,
    get_session_cache,
    get_token_codec,
    get_unit_of_work,
    refresh_session,
)
from src.domain.identity import IdentitySnapshot

router = APIRouter(prefix="/auth", tags=["Authentication"])


class SignUpRequest(BaseModel):
    """
    Sign-up HTTP request payload

    bcrypt only reads the first 72 bytes, so longer passwords are rejected.
    """

    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=6, max_length=72, description="User password")


@router.post("/sign-up", status_code=status.HTTP_201_CREATED)
async def sign_up(body: SignUpRequest, uow: UnitOfWork = Depends(get_unit_of_work)):
    """
    User Sign Up

    Creates an account with setup=False. No cookies are issued.

    Raises:
        - 409 Conflict: Email already exists
        - 400 Bad Request: Invalid input
    """
    use_case = SignUpUseCase(uow)
    result = await use_case.execute(
        SignUpCommand(email=body.email, password=body.password)
    )

    if result.is_err():
        raise http_error(result.error)

    return envelope(
        status.HTTP_201_CREATED, "Signed up successfully!", result.value.identity
    )


class SignInRequest(BaseModel):
    """Sign-in HTTP request payload; email or username is required"""

    email: Optional[EmailStr] = Field(None, description="User email address")
    username: Optional[str] = Field(None, description="Username")
    password: str = Field(..., max_length=72, description="User password")

    @model_validator(mode="after")
    def require_identifier(self):
        if not self.email and not self.username:
            raise ValueError("Email or Username required!")
        return self


@router.post("/sign-in", status_code=status.HTTP_200_OK)
async def sign_in(
    body: SignInRequest,
    request: Request,
    response: Response,
    uow: UnitOfWork = Depends(get_unit_of_work),
    cache: SessionCache = Depends(get_session_cache),
    codec: TokenCodec = Depends(get_token_codec),
    cookies: CookieTransport = Depends(get_cookie_transport),
):
    """
    User Sign In

    Sets the access cookie. Once the profile setup is complete, also creates a
    session and sets the refresh and session id cookies.

    Returns:
        - 200 OK: Signed in with a session
        - 202 Accepted: Profile setup incomplete, access cookie only

    Raises:
        - 404 Not Found: Unknown email/username (cookies cleared)
        - 403 Forbidden: Incorrect password (cookies cleared)
    """
    command = SignInCommand(
        email=body.email,
        username=body.username,
        password=body.password,
        device=request.headers.get("user-agent"),
        ip_address=request.client.host if request.client else None,
    )
    use_case = SignInUseCase(uow, cache, codec)
    result = await use_case.execute(command)

    if result.is_err():
        raise http_error(result.error, clear_cookies=True)

    data = result.value
    cookies.set_access(response, data.access.token)

    if data.setup_required:
        response.status_code = status.HTTP_202_ACCEPTED
        return envelope(
            status.HTTP_202_ACCEPTED, "Please, complete your profile!", data.identity
        )

    cookies.set_refresh(response, data.refresh.token)
    cookies.set_session_id(response, data.session_id)
    return envelope(status.HTTP_200_OK, "Signed in successfully!", data.identity)


@router.post("/sign-out", status_code=status.HTTP_200_OK)
async def sign_out(
    response: Response,
    refresh_token: Optional[str] = Cookie(None, alias=REFRESH_COOKIE),
    session_id: Optional[str] = Cookie(None, alias=SESSION_COOKIE),
    identity: Optional[IdentitySnapshot] = Depends(get_optional_identity),
    uow: UnitOfWork = Depends(get_unit_of_work),
    cache: SessionCache = Depends(get_session_cache),
    codec: TokenCodec = Depends(get_token_codec),
    cookies: CookieTransport = Depends(get_cookie_transport),
):
    """
    User Sign Out

    Deletes the caller's session, drops the cached identity and clears all
    cookies. Succeeds even when no cookies are present.
    """
    use_case = SignOutUseCase(uow, cache, codec)
    result = await use_case.execute(identity, refresh_token, session_id)

    if result.is_err():
        raise http_error(result.error)

    cookies.clear(response)
    return envelope(status.HTTP_200_OK, "Signed out successfully!", result.value.identity)


@router.get("/refresh", status_code=status.HTTP_200_OK)
async def refresh(identity: IdentitySnapshot = Depends(refresh_session)):
    """
    Refresh Authentication

    Issues a new access cookie from the refresh and session id cookies,
    rotating the refresh token inside its renewal window.

    Raises:
        - 401 Unauthorized: Cookies missing, or refresh token expired
          (session deleted, cookies cleared)
        - 403 Forbidden: Invalid token, unknown session, or lost rotation race
    """
    return envelope(status.HTTP_200_OK, "Authentication refreshed!", identity)
