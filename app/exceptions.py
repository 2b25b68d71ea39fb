# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
# Errors should tell HOW to fix, not just WHAT failed.
#
# Every workflow error maps to one category the UI can show distinctly:
#   ValidationError     -> malformed input, raised before any write
#   ForbiddenError      -> caller is not allowed to do this
#   InvalidStateError   -> operation not valid for the current task/bid status
#   NotFoundError       -> missing task/bid/profile
#   PersistenceError    -> the Supabase gateway failed or rejected the write
#   PartialFailureError -> bid resolution left rows inconsistent
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse


class CampusMarketException(Exception):
    """
    Base exception for the Campus Market API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "CAMPUS_MARKET_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Workflow Error Categories
# =============================================================================

class ValidationError(CampusMarketException):
    """Raised when input is missing or malformed. Nothing has been written."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        suggestion: str | None = None,
    ):
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            status_code=422,
            suggestion=suggestion or "Fix the highlighted field and submit again",
            details={"field": field} if field else None,
        )


class ForbiddenError(CampusMarketException):
    """Raised when the caller does not own the resource they act on."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            message=message,
            code="FORBIDDEN",
            status_code=403,
            details=details,
        )


class InvalidStateError(CampusMarketException):
    """Raised when a task or bid is not in a status that allows the operation."""

    def __init__(
        self,
        message: str,
        code: str = "INVALID_STATE",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=409,
            suggestion=suggestion or "Reload the task to see its current status",
            details=details,
        )


class NotFoundError(CampusMarketException):
    """Raised when a task, bid or profile doesn't exist."""

    def __init__(
        self,
        message: str,
        code: str = "NOT_FOUND",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=404,
            suggestion=suggestion,
            details=details,
        )


class PersistenceError(CampusMarketException):
    """Raised when the Supabase gateway fails or rejects a write."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            message=message,
            code="PERSISTENCE_ERROR",
            status_code=503,
            suggestion="Try again later or contact support if the issue persists",
            details=details,
        )


class PartialFailureError(CampusMarketException):
    """
    Raised when bid resolution committed some steps but not all.

    The details name the completed and failed steps together with the task
    and bid ids, so an operator can reconcile the rows by hand.
    """

    def __init__(
        self,
        task_id: str,
        bid_id: str,
        completed_steps: list[str],
        failed_step: str,
        error: str,
        freelancer_id: str | None = None,
    ):
        super().__init__(
            message=f"Bid acceptance stopped at '{failed_step}': {error}",
            code="PARTIAL_FAILURE",
            status_code=500,
            suggestion="The task is already assigned. Contact support to finish updating the remaining bids",
            details={
                "task_id": task_id,
                "bid_id": bid_id,
                "freelancer_id": freelancer_id,
                "completed_steps": completed_steps,
                "failed_step": failed_step,
                "error": error,
            },
        )
        self.completed_steps = completed_steps
        self.failed_step = failed_step
        self.task_id = task_id
        self.freelancer_id = freelancer_id


# =============================================================================
# Specific Errors
# =============================================================================

class TaskNotFoundError(NotFoundError):
    """Raised when a task ID doesn't exist."""

    def __init__(self, task_id: str):
        super().__init__(
            message=f"Task not found: {task_id}",
            code="TASK_NOT_FOUND",
            suggestion="Check that the task_id is correct",
            details={"task_id": task_id},
        )


class BidNotFoundError(NotFoundError):
    """Raised when a bid ID doesn't exist (or belongs to another task)."""

    def __init__(self, bid_id: str, task_id: str | None = None):
        details = {"bid_id": bid_id}
        if task_id:
            details["task_id"] = task_id
        super().__init__(
            message=f"Bid not found: {bid_id}",
            code="BID_NOT_FOUND",
            suggestion="Check that the bid_id is correct and belongs to this task",
            details=details,
        )


class ProfileNotFoundError(NotFoundError):
    """Raised when a user has no profile row."""

    def __init__(self, user_id: str):
        super().__init__(
            message=f"Profile not found: {user_id}",
            code="PROFILE_NOT_FOUND",
            suggestion="The profile is created on first sign-in; sign in again and retry",
            details={"user_id": user_id},
        )


class ResearchNotFoundError(NotFoundError):
    """Raised when a research post ID doesn't exist."""

    def __init__(self, research_id: str):
        super().__init__(
            message=f"Research not found: {research_id}",
            code="RESEARCH_NOT_FOUND",
            suggestion="Check that the research_id is correct",
            details={"research_id": research_id},
        )


class DuplicateBidError(InvalidStateError):
    """Raised when a user bids twice on the same task."""

    def __init__(self, task_id: str, freelancer_id: str):
        super().__init__(
            message="You have already submitted a bid for this task",
            code="DUPLICATE_BID",
            suggestion="Wait for the client to respond to your existing bid",
            details={"task_id": task_id, "freelancer_id": freelancer_id},
        )


class AssistantError(CampusMarketException):
    """Raised when the language-model API call fails."""

    def __init__(self, error: str, details: dict[str, Any] | None = None):
        super().__init__(
            message=f"Assistant request failed: {error}",
            code="ASSISTANT_ERROR",
            status_code=502,
            suggestion="Try again in a moment",
            details=details,
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def campus_market_exception_handler(
    request: Request,
    exc: CampusMarketException
) -> JSONResponse:
    """
    Convert CampusMarketException to JSON response.

    Returns structured error with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def validation_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Handle request body validation errors raised by FastAPI.

    Uses the same code as service-level ValidationError so clients see one
    category for malformed input.
    """
    errors = exc.errors() if hasattr(exc, "errors") else str(exc)
    return JSONResponse(
        status_code=422,
        content={
            "detail": "Validation error",
            "code": "VALIDATION_ERROR",
            "errors": errors if isinstance(errors, str) else [
                {"loc": list(e.get("loc", [])), "msg": e.get("msg")} for e in errors
            ],
        }
    )


def validation_error_from_pydantic(exc: Exception) -> ValidationError:
    """
    Turn a pydantic ValidationError into our ValidationError.

    Reports the first failing field, which is what the forms display.
    """
    errors = exc.errors() if hasattr(exc, "errors") else []
    if not errors:
        return ValidationError(str(exc))
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ())) or None
    message = first.get("msg", "Invalid value")
    if field:
        message = f"{field}: {message}"
    return ValidationError(message, field=field)
