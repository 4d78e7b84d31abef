# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - books.py: Books check endpoint
# - chat.py: Chat token endpoint (authenticated)
# - jobs.py: Background job bridge (webhook intake)
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import books
from . import chat
from . import jobs

__all__ = [
    "health",
    "books",
    "chat",
    "jobs",
]
