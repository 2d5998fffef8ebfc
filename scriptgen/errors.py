from __future__ import annotations


class ScriptGenError(Exception):
    """Base class for every error raised by a generation session."""


class ValidationError(ScriptGenError):
    """Scenario input rejected before any external call."""


class ConfigurationError(ScriptGenError):
    pass


class ServiceError(ScriptGenError):
    """Completion service transport failure, non-2xx status or timeout."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class InterpretationError(ScriptGenError):
    """A completion response that does not have the expected shape."""

    def __init__(self, message: str, raw_text: str = "") -> None:
        super().__init__(message)
        self.raw_text = raw_text


class SessionStateError(ScriptGenError):
    pass


class SessionBusyError(SessionStateError):
    pass
