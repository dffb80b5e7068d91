from typing import Any

from starlette import status


class QuinielaError(Exception):
    """Base class for errors that are reported back to the caller as-is."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "BAD_REQUEST"

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        self.code = code or self.default_code
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {"detail": self.message, "code": self.code}


class Forbidden(QuinielaError):
    status_code = status.HTTP_403_FORBIDDEN
    default_code = "FORBIDDEN"


class InvalidArgument(QuinielaError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "INVALID_ARGUMENT"


class NotFound(QuinielaError):
    status_code = status.HTTP_404_NOT_FOUND
    default_code = "NOT_FOUND"

    def __init__(self, resource: str, identifier: Any = None, code: str | None = None) -> None:
        message = f"{resource} not found"
        if identifier is not None:
            message = f"{resource} with id '{identifier}' not found"
        super().__init__(message, code)


class MatchLocked(Forbidden):
    default_code = "MATCH_LOCKED"


class MatchOutOfScope(InvalidArgument):
    default_code = "MATCH_OUT_OF_SCOPE"


class ExternalFetchFailure(QuinielaError):
    """Raised when the standings provider errors out or times out."""

    status_code = status.HTTP_502_BAD_GATEWAY
    default_code = "EXTERNAL_FETCH_FAILURE"
