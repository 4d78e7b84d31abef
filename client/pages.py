# =============================================================================
# client/pages.py - Page Views
# =============================================================================
# What each view shows, as data. Styling and toasts are the UI layer's job.
# =============================================================================

from client.router import AuthState, View


def home_controls(auth_state: AuthState) -> list[str]:
    """
    Controls on the home page.

    Signed-out visitors get a sign-in button (modal), signed-in users a
    sign-out button; the user menu button is always present.
    """
    if auth_state is AuthState.AUTHENTICATED:
        controls = ["sign_out_button"]
    else:
        controls = ["sign_in_button"]
    return controls + ["user_button"]


def render(view: View, auth_state: AuthState) -> dict:
    """Describe a rendered view."""
    if view is View.HOME:
        return {"view": view.value, "controls": home_controls(auth_state)}
    return {"view": view.value, "controls": ["user_button"]}
