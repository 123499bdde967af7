"""
Authentication error taxonomy.

Each kind maps to one HTTP status in the API layer:
- Unauthorized: no credential presented, or credential expired and cleaned up
- Forbidden: credential present but invalid, mismatched, or lost a rotation race
- NotFound: referenced identity/session does not exist
- Conflict: duplicate unique field
- BadRequest: well-formed request the business rules reject
"""

from .result import Error


class Unauthorized(Error):
    pass


class Forbidden(Error):
    pass


class NotFound(Error):
    pass


class Conflict(Error):
    pass


class BadRequest(Error):
    pass
