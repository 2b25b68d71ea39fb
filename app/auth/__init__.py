# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# Verifies Supabase Auth JWTs and exposes the caller to route handlers.
#
# Usage:
#   from app.auth import get_current_user, AuthUser
#
#   @router.post("/tasks")
#   async def create_task(user: AuthUser = Depends(get_current_user)):
#       ...  # user.id becomes the task's client_id
# =============================================================================

from app.auth.dependencies import get_current_user, decode_token
from app.auth.models import AuthUser, UserResponse

__all__ = [
    "get_current_user",
    "decode_token",
    "AuthUser",
    "UserResponse",
]
