from querydeck.session.gate import requires_confirmation
from querydeck.session.manager import SessionManager, SessionState, SessionStateError

__all__ = ["SessionManager", "SessionState", "SessionStateError", "requires_confirmation"]
