# =============================================================================
# client/ - Frontend Routing and API Access
# =============================================================================
# - router.py: Path -> view resolution with the auth gate, as a state machine
# - pages.py: What the home and problems views show
# - api.py: Shared HTTP client carrying credentials
# =============================================================================

from client.router import (
    AuthEvent,
    AuthState,
    ClientRouter,
    RouteDecision,
    View,
    resolve_route,
)

__all__ = [
    "AuthEvent",
    "AuthState",
    "ClientRouter",
    "RouteDecision",
    "View",
    "resolve_route",
]
