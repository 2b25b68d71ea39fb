# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .task_service import TaskService
from .bid_service import BidService
from .bid_resolution_service import BidResolutionService
from .profile_service import ProfileService
from .assistant_service import AssistantService
from .research_service import ResearchService

__all__ = [
    "TaskService",
    "BidService",
    "BidResolutionService",
    "ProfileService",
    "AssistantService",
    "ResearchService",
]
