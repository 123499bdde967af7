from fastapi import status

from src.domain.errors import BadRequest, Conflict, Forbidden, NotFound, Unauthorized
from src.domain.result import Error

STATUS_BY_ERROR = {
    BadRequest: status.HTTP_400_BAD_REQUEST,
    Unauthorized: status.HTTP_401_UNAUTHORIZED,
    Forbidden: status.HTTP_403_FORBIDDEN,
    NotFound: status.HTTP_404_NOT_FOUND,
    Conflict: status.HTTP_409_CONFLICT,
}


class ClientError(Exception):
    def __init__(
        self,
        base_error: Error,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        clear_cookies: bool = False,
    ):
        self.base_error = base_error
        self.status_code = status_code
        self.clear_cookies = clear_cookies
        super().__init__(base_error.message)


class ServerError(Exception):
    def __init__(self, base_error: Error):
        self.base_error = base_error
        super().__init__(base_error.message)


def http_error(error: Error, *, clear_cookies: bool = False) -> Exception:
    """
    Map a typed use case error to the exception the handlers render.

    Untyped errors are server errors.
    """
    status_code = STATUS_BY_ERROR.get(type(error))
    if status_code is None:
        return ServerError(error)
    return ClientError(error, status_code=status_code, clear_cookies=clear_cookies)
