from typing import List, Optional


class AIServiceError(Exception):
    """Base class for failures surfaced to the client as {"error": message}."""

    status_code = 500
    stage = "unknown"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AIServiceError):
    """A required request field is missing or has the wrong type."""

    status_code = 400
    stage = "validation"

    def __init__(self, fields: List[str], message: Optional[str] = None):
        self.fields = list(fields)
        super().__init__(message or f"Missing required fields: {', '.join(self.fields)}")


class ConfigurationError(AIServiceError):
    """The model credential (or another setting) is absent or unusable."""

    stage = "configuration"


class UpstreamError(AIServiceError):
    """The model endpoint answered with a non-success status or could not be reached."""

    stage = "upstream"

    def __init__(self, message: str, status: Optional[int] = None, body: Optional[str] = None):
        super().__init__(message)
        self.status = status
        # Kept for logging only, never sent back to the client
        self.body = body[:500] if body else body


class FormatError(AIServiceError):
    """The model's text could not be decoded into the expected schema."""

    stage = "format"

    def __init__(self, message: str, raw: Optional[str] = None):
        super().__init__(message)
        self.raw = raw
