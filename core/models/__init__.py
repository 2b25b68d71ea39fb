# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - task.py: Task schemas and TaskStatus
# - bid.py: Bid schemas, BidStatus and the accept-bid result
# - profile.py: User profile schemas
# - assistant.py: AI assistant request/response
# - research.py: Research posts and collaboration requests
#
# These models define the "contract" between API and clients.
# =============================================================================

from .task import (
    TaskCreate,
    TaskList,
    TaskResponse,
    TaskStatus,
)

from .bid import (
    AcceptBidRequest,
    AcceptBidResponse,
    BidCreate,
    BidResponse,
    BidStatus,
)

from .profile import (
    ProfileResponse,
    ProfileUpdate,
)

from .assistant import (
    AssistantRequest,
    AssistantRequestType,
    AssistantResponse,
)

from .research import (
    CollaborationRequestCreate,
    CollaborationResponse,
    CollaborationStatus,
    ResearchCreate,
    ResearchResponse,
    ResearchStatus,
)

__all__ = [
    # Task
    "TaskCreate",
    "TaskList",
    "TaskResponse",
    "TaskStatus",
    # Bid
    "AcceptBidRequest",
    "AcceptBidResponse",
    "BidCreate",
    "BidResponse",
    "BidStatus",
    # Profile
    "ProfileResponse",
    "ProfileUpdate",
    # Assistant
    "AssistantRequest",
    "AssistantRequestType",
    "AssistantResponse",
    # Research
    "CollaborationRequestCreate",
    "CollaborationResponse",
    "CollaborationStatus",
    "ResearchCreate",
    "ResearchResponse",
    "ResearchStatus",
]
