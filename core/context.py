"""
Session Context
---------------
The id of the recording session in progress, carried in a context
variable so every log record emitted during a session can be stamped
with it.
"""

import contextvars
import uuid
from typing import Optional

# Context variable for session_id - thread-safe and async-safe
_session_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "session_id", default=None
)


def generate_session_id() -> str:
    """Generate a unique session ID."""
    return f"session_{uuid.uuid4().hex[:12]}"


def get_session_id() -> Optional[str]:
    """Get the current session ID from context."""
    return _session_id_var.get()


def set_session_id(session_id: Optional[str]) -> contextvars.Token:
    """Set the current session ID in context."""
    return _session_id_var.set(session_id)


def reset_session_id(token: contextvars.Token) -> None:
    """Reset the session ID to its previous value."""
    _session_id_var.reset(token)
