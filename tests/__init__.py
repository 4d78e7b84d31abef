# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the Interview Arena API:
# - test_config.py: Settings loading and fail-fast validation
# - test_database.py: Store connector, retry/backoff, user queries
# - test_app.py: HTTP surface, pipeline order, CORS, static gateway
# - test_auth.py / test_chat.py: Session verification and gated routes
# - test_jobs.py: Job bridge, signatures, registry and worker tasks
# - test_client_router.py / test_api_client.py: Frontend routing and client
#
# Run tests with: poetry run pytest
# =============================================================================
