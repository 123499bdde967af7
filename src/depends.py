from typing import Optional

from fastapi import Cookie, Depends, Request, Response

from src.adapter.services.resources import AppResources
from src.api.error import http_error
from src.api.utils.cookies import ACCESS_COOKIE, REFRESH_COOKIE, SESSION_COOKIE, CookieTransport
from src.api.utils.jwt import InvalidTokenError, TokenCodec, TokenExpiredError
from src.app.services.session_cache import SessionCache
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import RefreshSessionUseCase, ResolveIdentityUseCase
from src.domain.errors import Forbidden, Unauthorized
from src.domain.identity import IdentitySnapshot
from src.domain.result import Result, Return


def get_resources(request: Request) -> AppResources:
    return request.app.state.resources


def get_cookie_transport(request: Request) -> CookieTransport:
    return request.app.state.cookies


def get_session_cache(resources: AppResources = Depends(get_resources)) -> SessionCache:
    return resources.cache


def get_token_codec(resources: AppResources = Depends(get_resources)) -> TokenCodec:
    return resources.codec


async def get_unit_of_work(resources: AppResources = Depends(get_resources)):
    async with resources.session_factory() as session:
        yield resources.unit_of_work(session)


async def _resolve_access(
    access_token: Optional[str],
    uow: UnitOfWork,
    cache: SessionCache,
    codec: TokenCodec,
) -> Result[IdentitySnapshot]:
    if not access_token:
        return Return.err(
            Unauthorized("MISSING_ACCESS_TOKEN", "Unauthorized access request!")
        )
    try:
        claims = codec.verify_access(access_token)
    except TokenExpiredError:
        return Return.err(Unauthorized("ACCESS_TOKEN_EXPIRED", "Access token expired!"))
    except InvalidTokenError:
        return Return.err(Forbidden("INVALID_ACCESS_TOKEN", "Invalid access request!"))

    return await ResolveIdentityUseCase(uow, cache).execute(claims.subject_id)


async def get_current_identity(
    request: Request,
    access_token: Optional[str] = Cookie(None, alias=ACCESS_COOKIE),
    uow: UnitOfWork = Depends(get_unit_of_work),
    cache: SessionCache = Depends(get_session_cache),
    codec: TokenCodec = Depends(get_token_codec),
) -> IdentitySnapshot:
    """
    Dependency to verify the access cookie and resolve its identity.

    Returns:
        IdentitySnapshot, also attached to request.state.identity

    Raises:
        ClientError: 401 missing/expired token, 403 invalid token, 404 unknown user
    """
    result = await _resolve_access(access_token, uow, cache, codec)
    if result.is_err():
        raise http_error(result.error)

    request.state.identity = result.value
    return result.value


async def get_optional_identity(
    request: Request,
    access_token: Optional[str] = Cookie(None, alias=ACCESS_COOKIE),
    uow: UnitOfWork = Depends(get_unit_of_work),
    cache: SessionCache = Depends(get_session_cache),
    codec: TokenCodec = Depends(get_token_codec),
) -> Optional[IdentitySnapshot]:
    """Like get_current_identity, but None instead of an error"""
    result = await _resolve_access(access_token, uow, cache, codec)
    if result.is_err():
        return None

    request.state.identity = result.value
    return result.value


async def refresh_session(
    request: Request,
    response: Response,
    refresh_token: Optional[str] = Cookie(None, alias=REFRESH_COOKIE),
    session_id: Optional[str] = Cookie(None, alias=SESSION_COOKIE),
    uow: UnitOfWork = Depends(get_unit_of_work),
    cache: SessionCache = Depends(get_session_cache),
    codec: TokenCodec = Depends(get_token_codec),
    cookies: CookieTransport = Depends(get_cookie_transport),
) -> IdentitySnapshot:
    """
    Dependency that runs the refresh state machine from the refresh cookies.

    Sets the new access cookie, plus refresh and session id cookies when the
    refresh token rotated. An expired refresh token clears all cookies.

    Raises:
        ClientError: 401 missing/expired credential, 403 invalid/mismatched
            credential or lost rotation race
    """
    use_case = RefreshSessionUseCase(uow, cache, codec)
    result = await use_case.execute(refresh_token, session_id)

    if result.is_err():
        error = result.error
        raise http_error(error, clear_cookies=error.code == "SESSION_EXPIRED")

    data = result.value
    cookies.set_access(response, data.access.token)
    if data.rotated:
        cookies.set_refresh(response, data.refresh.token)
        cookies.set_session_id(response, data.session_id)

    request.state.identity = data.identity
    return data.identity
