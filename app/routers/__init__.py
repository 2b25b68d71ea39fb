# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - tasks.py: Task posting, task board, bidding and bid acceptance
# - profiles.py: Read and edit user profiles
# - research.py: Shared research and collaboration requests
# - assistant.py: AI writing and matching helper
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import tasks
from . import profiles
from . import assistant
from . import research

__all__ = [
    "health",
    "tasks",
    "profiles",
    "assistant",
    "research",
]
