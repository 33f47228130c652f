"""View models consumed by UI layers."""

from ne_app.viewmodels.view_state import ViewState, ViewStatus, error_state, loading_state

__all__ = ["ViewState", "ViewStatus", "error_state", "loading_state"]
