"""커스텀 HTTP 예외 클래스 모듈.

Custom HTTP exception classes module.
Services raise these domain errors without knowing status codes; the
messages are returned verbatim to the caller and client apps branch on them.

Usage:
    from app.utils.exceptions import ConflictError, WindowExpiredError
    raise ConflictError("Shift is already full")
    raise WindowExpiredError("Cannot cancel shift with less than 24 hours remaining. ...")
"""

from fastapi import HTTPException, status


class ValidationError(HTTPException):
    """422 예외 — 형식 오류 또는 범위를 벗어난 입력.

    422 Unprocessable Entity exception for malformed or out-of-range input.
    The detail uses the same field-level shape as FastAPI request validation
    so clients handle both the same way.

    Args:
        message: 오류 메시지 (Human-readable message)
        field: 문제 필드명 (Offending field name, optional)
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        loc: list[str] = ["body", field] if field else ["body"]
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=[{"loc": loc, "msg": message, "type": "value_error"}],
        )
        self.message: str = message
        self.field: str | None = field


class AuthorizationError(HTTPException):
    """403 Forbidden 예외 — 역할이 맞지 않거나 리소스 소유자가 아닐 때.

    403 Forbidden exception.
    Raised on wrong role, non-owner access, or a per-shift block.

    Args:
        detail: 오류 메시지 (Error message, default: "Insufficient permissions")
    """

    def __init__(self, detail: str = "Insufficient permissions") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class NotFoundError(HTTPException):
    """404 Not Found 예외 — 요청한 리소스를 찾을 수 없을 때 사용.

    404 Not Found exception.

    Args:
        detail: 오류 메시지 (Error message, default: "Resource not found")
    """

    def __init__(self, detail: str = "Resource not found") -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ConflictError(HTTPException):
    """400 예외 — 상태 전이 조건 위반.

    400 Bad Request exception for state-machine guard violations:
    wrong status for the requested transition, shift full, duplicate
    application or invoice, schedule overlap.

    Args:
        detail: 오류 메시지 (Error message, default: "Conflict with current state")
    """

    def __init__(self, detail: str = "Conflict with current state") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class WindowExpiredError(HTTPException):
    """400 예외 — 허용 시간 범위를 벗어난 작업.

    400 Bad Request exception for a time-bound action attempted outside its
    allowed window (late cancellation, completion after the payment window,
    creation inside the minimum lead time).

    Args:
        detail: 오류 메시지 (Error message explaining the window)
    """

    def __init__(self, detail: str = "Action is no longer allowed for this shift") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class UnauthorizedError(HTTPException):
    """401 Unauthorized 예외 — 인증 실패 시 사용.

    401 Unauthorized exception.
    Raised when authentication is missing, invalid, or expired.

    Args:
        detail: 오류 메시지 (Error message, default: "Authentication required")
    """

    def __init__(self, detail: str = "Authentication required") -> None:
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)
