"""
API error types.

Every deliberate error reaches the client as {"detail", "error_code"}.
Routers raise these; `main.api_exception_handler` renders them.
"""
from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class APIException(HTTPException):
    error_code = "API_ERROR"

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        if error_code:
            self.error_code = error_code

    def to_dict(self) -> Dict[str, Any]:
        return {"detail": self.detail, "error_code": self.error_code}


class ValidationError(APIException):
    """User input rejected before any work was done (e.g. a size that isn't a positive number)."""

    def __init__(self, detail: str, field: Optional[str] = None):
        self.field = field
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=detail,
            error_code=f"VALIDATION_ERROR_{field.upper()}" if field else "VALIDATION_ERROR",
        )


class UpstreamServiceError(APIException):
    """The store or an external service failed; nothing was changed and the user may retry."""

    error_code = "UPSTREAM_UNAVAILABLE"

    def __init__(self, detail: str = "Something went wrong. Please try again."):
        super().__init__(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=detail)
