# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the Campus Market API:
# - test_models.py: Unit tests for Pydantic model validation
# - test_task_service.py / test_bid_service.py: Task and bid rules
# - test_bid_resolution.py: Accepting a bid, races and partial failures
# - test_profile_service.py / test_assistant_service.py: Supporting services
# - test_api.py: Endpoint tests through FastAPI's TestClient
# - test_auth.py / test_websocket.py: Token checks and realtime updates
#
# Run tests with: pytest
# =============================================================================
