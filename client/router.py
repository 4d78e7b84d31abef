# =============================================================================
# client/router.py - Client-Side Router
# =============================================================================
# Maps browser paths to page views, gating protected paths on auth state.
#
# resolve_route() is a pure function of (path, auth state). ClientRouter is
# the state machine around it: auth-provider events and navigations are its
# inputs; the render decision plus any client-side redirect are its outputs.
#
# Usage:
#   router = ClientRouter(navigate=history.replace)
#   router.navigate("/problems")         # -> redirect to "/" while signed out
#   router.handle(AuthEvent.SIGNED_IN)   # re-resolves, no polling
#   router.page                          # {"view": "home", "controls": [...]}
# =============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

logger = logging.getLogger(__name__)

HOME_PATH = "/"
PROBLEMS_PATH = "/problems"


class AuthState(str, Enum):
    """What the auth provider currently says about the user."""
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"

    @classmethod
    def from_signed_in(cls, is_signed_in: bool) -> "AuthState":
        return cls.AUTHENTICATED if is_signed_in else cls.UNAUTHENTICATED


class AuthEvent(str, Enum):
    """Auth-provider events the router reacts to."""
    SIGNED_IN = "signed_in"
    SIGNED_OUT = "signed_out"


class View(str, Enum):
    """Page views the router can render."""
    HOME = "home"
    PROBLEMS = "problems"


@dataclass(frozen=True)
class Route:
    path: str
    view: View
    protected: bool = False


ROUTES: dict[str, Route] = {
    HOME_PATH: Route(HOME_PATH, View.HOME),
    PROBLEMS_PATH: Route(PROBLEMS_PATH, View.PROBLEMS, protected=True),
}


@dataclass(frozen=True)
class RouteDecision:
    """
    Outcome of resolving a path.

    Exactly one of `view` / `redirect_to` is set for known paths; both are
    None for paths with no route (nothing renders).
    """
    path: str
    view: Optional[View] = None
    redirect_to: Optional[str] = None

    @property
    def is_redirect(self) -> bool:
        return self.redirect_to is not None

    @property
    def not_found(self) -> bool:
        return self.view is None and self.redirect_to is None


def _normalize(path: str) -> str:
    path = path.split("?", 1)[0].split("#", 1)[0] or HOME_PATH
    if len(path) > 1:
        path = path.rstrip("/")
    return path


def resolve_route(path: str, auth_state: AuthState) -> RouteDecision:
    """
    Decide what a path renders for the given auth state.

    - "/" always renders home
    - "/problems" renders problems when authenticated, else redirects to "/"
    - anything else renders nothing
    """
    path = _normalize(path)
    route = ROUTES.get(path)
    if route is None:
        return RouteDecision(path=path)

    if route.protected and auth_state is not AuthState.AUTHENTICATED:
        return RouteDecision(path=path, redirect_to=HOME_PATH)

    return RouteDecision(path=path, view=route.view)


class ClientRouter:
    """
    Reactive router state machine.

    Args:
        navigate: Side effect run for redirects (client-side, replaces the
            current history entry)
        auth_state: Initial auth state
        path: Initial path
    """

    def __init__(
        self,
        navigate: Callable[[str], None] | None = None,
        auth_state: AuthState = AuthState.UNAUTHENTICATED,
        path: str = HOME_PATH,
    ):
        self._navigate = navigate or (lambda _path: None)
        self.auth_state = auth_state
        self.path = _normalize(path)
        self.current = self._settle()

    def _settle(self) -> RouteDecision:
        """Resolve the current path, following redirects until a view (or nothing) renders."""
        seen = set()
        decision = resolve_route(self.path, self.auth_state)
        while decision.is_redirect:
            if decision.redirect_to in seen:
                raise RuntimeError(f"Redirect loop at {decision.redirect_to}")
            seen.add(decision.redirect_to)
            logger.debug(f"Redirecting {decision.path} -> {decision.redirect_to}")
            self._navigate(decision.redirect_to)
            self.path = decision.redirect_to
            decision = resolve_route(self.path, self.auth_state)
        return decision

    def navigate(self, path: str) -> RouteDecision:
        """User-initiated navigation (link click, address bar)."""
        self.path = _normalize(path)
        self.current = self._settle()
        return self.current

    def handle(self, event: AuthEvent) -> RouteDecision:
        """Apply an auth-provider event and re-render the current path."""
        self.auth_state = (
            AuthState.AUTHENTICATED if event is AuthEvent.SIGNED_IN else AuthState.UNAUTHENTICATED
        )
        self.current = self._settle()
        return self.current

    @property
    def page(self) -> Optional[dict]:
        """The current decision rendered as a page; None when nothing renders."""
        from client.pages import render

        if self.current.view is None:
            return None
        return render(self.current.view, self.auth_state)
