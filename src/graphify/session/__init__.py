"""Session state for the chart workflow."""

from graphify.session.state import SessionState

__all__ = ["SessionState"]
