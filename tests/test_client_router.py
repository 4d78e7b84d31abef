# =============================================================================
# tests/test_client_router.py - Client Router Tests
# =============================================================================
# Tests for path resolution with the auth gate and the reactive router.
# =============================================================================

import pytest

from client.pages import home_controls, render
from client.router import (
    AuthEvent,
    AuthState,
    ClientRouter,
    View,
    resolve_route,
)


class TestResolveRoute:
    """Test the pure path -> decision function."""

    @pytest.mark.parametrize("auth_state", list(AuthState))
    def test_home_always_renders(self, auth_state):
        decision = resolve_route("/", auth_state)
        assert decision.view is View.HOME
        assert decision.is_redirect is False

    def test_problems_when_signed_in(self):
        decision = resolve_route("/problems", AuthState.AUTHENTICATED)
        assert decision.view is View.PROBLEMS
        assert decision.redirect_to is None

    def test_problems_when_signed_out_redirects_home(self):
        decision = resolve_route("/problems", AuthState.UNAUTHENTICATED)
        assert decision.view is None
        assert decision.redirect_to == "/"

    @pytest.mark.parametrize("path", ["/problems/", "/problems?tab=easy", "/problems#top"])
    def test_path_normalization(self, path):
        assert resolve_route(path, AuthState.AUTHENTICATED).view is View.PROBLEMS

    def test_unknown_path_renders_nothing(self):
        decision = resolve_route("/nowhere", AuthState.AUTHENTICATED)
        assert decision.not_found is True

    def test_from_signed_in(self):
        assert AuthState.from_signed_in(True) is AuthState.AUTHENTICATED
        assert AuthState.from_signed_in(False) is AuthState.UNAUTHENTICATED


class TestClientRouter:
    """Test the reactive state machine."""

    def test_signed_out_navigation_to_problems_lands_home(self):
        navigations = []
        router = ClientRouter(navigate=navigations.append)

        decision = router.navigate("/problems")

        assert decision.view is View.HOME
        assert router.path == "/"
        assert navigations == ["/"]

    def test_signed_in_navigation_to_problems_renders_it(self):
        navigations = []
        router = ClientRouter(navigate=navigations.append, auth_state=AuthState.AUTHENTICATED)

        decision = router.navigate("/problems")

        assert decision.view is View.PROBLEMS
        assert navigations == []

    def test_initial_protected_path_redirects(self):
        navigations = []
        router = ClientRouter(navigate=navigations.append, path="/problems")

        assert router.current.view is View.HOME
        assert navigations == ["/"]

    def test_sign_out_on_protected_page_redirects(self):
        navigations = []
        router = ClientRouter(
            navigate=navigations.append,
            auth_state=AuthState.AUTHENTICATED,
            path="/problems",
        )

        decision = router.handle(AuthEvent.SIGNED_OUT)

        assert router.auth_state is AuthState.UNAUTHENTICATED
        assert decision.view is View.HOME
        assert navigations == ["/"]

    def test_sign_in_on_home_stays_home(self):
        router = ClientRouter()

        decision = router.handle(AuthEvent.SIGNED_IN)

        assert router.auth_state is AuthState.AUTHENTICATED
        assert decision.view is View.HOME

    def test_sign_in_then_problems(self):
        router = ClientRouter()
        router.handle(AuthEvent.SIGNED_IN)

        assert router.navigate("/problems").view is View.PROBLEMS

    def test_page_follows_auth_events(self):
        router = ClientRouter()
        assert router.page == {"view": "home", "controls": ["sign_in_button", "user_button"]}

        router.handle(AuthEvent.SIGNED_IN)
        assert router.page == {"view": "home", "controls": ["sign_out_button", "user_button"]}

        router.navigate("/problems")
        assert router.page == {"view": "problems", "controls": ["user_button"]}

    def test_unknown_path_has_no_page(self):
        router = ClientRouter(path="/nowhere")
        assert router.page is None


class TestPages:
    """Test what the views show."""

    def test_home_signed_out(self):
        assert home_controls(AuthState.UNAUTHENTICATED) == ["sign_in_button", "user_button"]

    def test_home_signed_in(self):
        assert home_controls(AuthState.AUTHENTICATED) == ["sign_out_button", "user_button"]

    def test_render_problems(self):
        assert render(View.PROBLEMS, AuthState.AUTHENTICATED)["view"] == "problems"
