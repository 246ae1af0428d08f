"""
Error types raised by the analysis pipeline and the session state machine.

AnalysisError subclasses are *classified*: each carries a stable ``code`` and the
message shown to the user when the session lands in the Error state.
SessionError subclasses reject an operation outright and leave the session as it was.
"""
from typing import Optional


class VerifyAIError(Exception):
    """Base class for everything this package raises on purpose."""


# ---- Analysis failures (session -> Error) ----

class AnalysisError(VerifyAIError):
    code = "analysis_error"
    user_message = "Failed to analyze document."

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail or self.user_message
        super().__init__(self.detail)

    def public_message(self) -> str:
        return self.user_message


class ConfigurationError(AnalysisError):
    """Service credentials are missing. Surfaced verbatim."""
    code = "configuration_error"
    user_message = "AI service configuration missing."

    def public_message(self) -> str:
        return self.detail


class EmptyResponse(AnalysisError):
    code = "empty_response"


class MalformedResponse(AnalysisError):
    code = "malformed_response"


class IntegrityError(AnalysisError):
    """Segments do not reconstruct the analyzed text."""
    code = "integrity_error"


class TransportError(AnalysisError):
    code = "transport_error"
    user_message = "AI service unavailable. Please try again later."


# ---- Extraction ----

class ExtractionError(VerifyAIError):
    code = "extraction_error"

    def __init__(self, filename: str, reason: str):
        self.filename = filename
        self.reason = reason
        super().__init__(f"Failed to read file '{filename}': {reason}")


# ---- Rejected session operations (state untouched) ----

class SessionError(VerifyAIError):
    pass


class SessionBusyError(SessionError):
    """An analysis is already in flight for this session."""


class InvalidStateError(SessionError):
    pass


class InputTooShortError(SessionError):
    def __init__(self, minimum: int):
        self.minimum = minimum
        super().__init__(f"Please provide a longer text (min {minimum} chars).")


class SelectionError(SessionError):
    pass


class SessionNotFoundError(SessionError):
    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session not found: {session_id}")
