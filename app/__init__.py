# =============================================================================
# app/ - FastAPI Application Package
# =============================================================================
# This package contains the FastAPI web application:
# - main.py: App factory, entry point, error handlers
# - config.py: Environment variable loading and settings
# - middleware.py: The ordered request pipeline (json_body -> cors -> auth)
# - static.py: Production frontend bundle serving
# - auth/: Clerk session verification and route gating
# - routers/: API endpoint definitions organized by feature
#
# The app layer is thin - it handles HTTP concerns and delegates
# business logic to the core/ package.
# =============================================================================
