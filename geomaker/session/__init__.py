"""
Session Package.

Mutable session state, its lifecycle controller and the serializer that
projects a snapshot into the assistant's grounding context.
"""

from .state import IDLE_MESSAGE, SessionState, TrainingProgress
from .context import NOT_AVAILABLE, SessionContext, build_session_context, context_from_state
from .controller import SessionController, UploadOutcome

__all__ = [
    "IDLE_MESSAGE",
    "SessionState",
    "TrainingProgress",
    "NOT_AVAILABLE",
    "SessionContext",
    "build_session_context",
    "context_from_state",
    "SessionController",
    "UploadOutcome",
]
