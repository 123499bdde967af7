"""
Cookie Transport

Binds the access token, refresh token and session id to HTTP cookies.
"""

from starlette.responses import Response

ACCESS_COOKIE = "access"
REFRESH_COOKIE = "refresh"
SESSION_COOKIE = "current"

SESSION_COOKIES = (ACCESS_COOKIE, REFRESH_COOKIE, SESSION_COOKIE)


class CookieTransport:
    """
    Cookie lifetimes:
    - access: ACCESS_EXPIRY
    - refresh and session id: 2 x REFRESH_EXPIRY, so an expired refresh token
      still reaches the server and its session can be cleaned up

    All cookies are HTTP-only and SameSite=Strict; Secure in production.
    """

    def __init__(self, access_expiry: int, refresh_expiry: int, secure: bool):
        self.access_max_age = int(access_expiry)
        self.refresh_max_age = int(refresh_expiry) * 2
        self.secure = secure

    @classmethod
    def from_config(cls, config) -> "CookieTransport":
        return cls(
            access_expiry=config.ACCESS_EXPIRY,
            refresh_expiry=config.REFRESH_EXPIRY,
            secure=config.COOKIE_SECURE,
        )

    def _set(self, response: Response, key: str, value: str, max_age: int) -> None:
        response.set_cookie(
            key,
            value,
            max_age=max_age,
            httponly=True,
            samesite="strict",
            secure=self.secure,
        )

    def set_access(self, response: Response, token: str) -> None:
        self._set(response, ACCESS_COOKIE, token, self.access_max_age)

    def set_refresh(self, response: Response, token: str) -> None:
        self._set(response, REFRESH_COOKIE, token, self.refresh_max_age)

    def set_session_id(self, response: Response, session_id: str) -> None:
        self._set(response, SESSION_COOKIE, session_id, self.refresh_max_age)

    def clear(self, response: Response) -> None:
        """Expire all session cookies; absent cookies are fine."""
        for key in SESSION_COOKIES:
            response.delete_cookie(
                key, httponly=True, samesite="strict", secure=self.secure
            )
