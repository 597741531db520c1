# Error taxonomy raised by services and rendered by FastAPI.
from typing import Any, Dict, Iterable, List, Optional

from fastapi import HTTPException, status


class ValidationFailed(HTTPException):
    def __init__(
        self,
        detail: str = "validation failed",
        errors: Optional[List[Dict[str, str]]] = None,
    ):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)
        self.errors = errors or []

    # Build from pydantic error dicts, flattening each location to a dotted field.
    @classmethod
    def from_errors(cls, raw_errors: Iterable[Dict[str, Any]]) -> "ValidationFailed":
        errors = []
        for error in raw_errors:
            location = list(error.get("loc", ()))
            if location and location[0] in {"body", "path", "query", "header"}:
                location = location[1:]
            errors.append(
                {
                    "field": ".".join(str(part) for part in location) or "body",
                    "message": str(error.get("msg", "invalid value")),
                }
            )
        return cls(errors=errors)


class Conflict(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class Unauthorized(HTTPException):
    def __init__(self, detail: str = "not authenticated"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class Forbidden(HTTPException):
    def __init__(self, detail: str = "forbidden"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class NotFound(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class UpstreamFailure(HTTPException):
    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail
        )


class RateLimited(HTTPException):
    def __init__(self, retry_after: int, message: Optional[str] = None):
        self.retry_after = retry_after
        super().__init__(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail={
                "message": message
                or "upstream rate limit reached, retry in a few moments",
                "retryAfter": retry_after,
            },
            headers={"Retry-After": str(retry_after)},
        )
