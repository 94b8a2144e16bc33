from typing import List, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse


class DomainError(Exception):
    kind = "internal"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors or []

    def to_dict(self) -> dict:
        body = {"kind": self.kind, "detail": self.message}
        if self.errors:
            body["errors"] = self.errors
        return body


class NotFoundError(DomainError):
    kind = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(DomainError):
    kind = "conflict"
    status_code = status.HTTP_409_CONFLICT


class NotApprovedError(DomainError):
    kind = "not_approved"
    status_code = status.HTTP_403_FORBIDDEN


class InvalidInputError(DomainError):
    kind = "invalid_input"
    status_code = status.HTTP_400_BAD_REQUEST


class InvalidAssigneeError(InvalidInputError):
    def __init__(self, invalid_ids: List[str]):
        super().__init__("Invalid assignee IDs: " + ", ".join(invalid_ids))
        self.invalid_ids = list(invalid_ids)


class NoChangeError(DomainError):
    kind = "no_change"
    status_code = status.HTTP_400_BAD_REQUEST


class ForbiddenError(DomainError):
    kind = "forbidden"
    status_code = status.HTTP_403_FORBIDDEN


class InternalError(DomainError):
    pass


async def domain_error_handler(request: Request, exc: DomainError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())
