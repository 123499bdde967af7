"""
Admin API Routes - Maintenance Endpoints

Authentication is via Admin API Key, not user cookies.
"""

from fastapi import APIRouter, Depends, status

from src.api.error import http_error
from src.api.response import envelope
from src.api.utils.admin_auth import verify_admin_api_key
from src.api.utils.jwt import TokenCodec
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import SweepExpiredSessionsUseCase
from src.depends import get_token_codec, get_unit_of_work

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.post(
    "/sessions/sweep",
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(verify_admin_api_key)],
)
async def sweep_expired_sessions(
    uow: UnitOfWork = Depends(get_unit_of_work),
    codec: TokenCodec = Depends(get_token_codec),
):
    """
    Sweep Expired Sessions

    Deletes every session whose refresh token has expired, across all users.
    The same sweep also runs on a timer (SWEEP_INTERVAL).

    Requires: X-Admin-API-Key header

    Raises:
        - 401 Unauthorized: Missing or invalid admin API key
    """
    use_case = SweepExpiredSessionsUseCase(uow, codec)
    result = await use_case.execute()

    if result.is_err():
        raise http_error(result.error)

    return envelope(status.HTTP_200_OK, "Expired sessions deleted!", result.value)
