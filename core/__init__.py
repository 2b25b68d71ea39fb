# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the marketplace workflow:
# - models/: Pydantic schemas for tasks, bids, profiles, assistant calls
# - services/: Task lifecycle, bid submission, bid resolution, profiles,
#   AI assistant
#
# Code in this package should NOT import from FastAPI.
# This keeps the logic testable and reusable.
# =============================================================================
