# =============================================================================
# lib/ - Standalone Client Modules
# =============================================================================
# This package contains the clients for external services:
# - database.py: Supabase connector (the process store handle)
# - stream_client.py: Stream chat API client and user tokens
# - job_signature.py: Signing/verification of job webhook calls
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.database import Database, DatabaseConnectionError, DatabaseError, connect
from lib.stream_client import StreamClient, StreamClientError, create_user_token

__all__ = [
    # Database
    "Database",
    "DatabaseConnectionError",
    "DatabaseError",
    "connect",
    # Stream
    "StreamClient",
    "StreamClientError",
    "create_user_token",
]
