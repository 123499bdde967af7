"""
Admin API Key Authentication

Validates admin API keys for maintenance endpoints.
"""

import secrets

from fastapi import Header, Request

from src.api.error import http_error
from src.domain.errors import Unauthorized


async def verify_admin_api_key(request: Request, x_admin_api_key: str = Header(None)):
    """
    Verify admin API key from X-Admin-API-Key header.

    Used by operators and schedulers to trigger maintenance such as the
    expired-session sweep. Different from user cookie authentication.

    Raises:
        ClientError: 401 if key is missing or invalid

    Returns:
        True if valid
    """
    if not x_admin_api_key:
        raise http_error(Unauthorized("UNAUTHORIZED", "Admin API key required"))

    valid_admin_key = request.app.state.config.ADMIN_API_KEY

    if not secrets.compare_digest(x_admin_api_key, valid_admin_key):
        raise http_error(Unauthorized("INVALID_API_KEY", "Invalid admin API key"))

    return True
