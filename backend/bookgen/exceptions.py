"""Domain error taxonomy shared by the lifecycle engine, exporter and generator."""
from typing import Optional


class BookGenError(Exception):
    """Base class for every error surfaced to API callers."""

    status_code = 500
    error_code = "internal_error"

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


class NotFoundError(BookGenError):
    """Referenced entity does not exist (or belongs to another owner)."""

    status_code = 404
    error_code = "not_found"

    def __init__(self, entity: str, entity_id: Optional[str] = None, message: str = ""):
        details = {"entity": entity}
        if entity_id is not None:
            details["id"] = entity_id
        super().__init__(message or f"{entity} not found", details)
        self.entity = entity
        self.entity_id = entity_id


class ValidationFailedError(BookGenError):
    """Malformed or out-of-range input."""

    status_code = 400
    error_code = "validation_failed"


class UnsupportedFormatError(ValidationFailedError):
    """Export format token outside the supported set."""

    error_code = "unsupported_format"

    def __init__(self, fmt: str, supported: Optional[list] = None):
        details = {"format": fmt}
        if supported:
            details["supported"] = ", ".join(supported)
        super().__init__(f"Unsupported export format: {fmt}", details)
        self.format = fmt


class InvalidStateError(BookGenError):
    """Operation not allowed in the entity's current state."""

    status_code = 409
    error_code = "invalid_state"


class AuthError(BookGenError):
    """Generation credential missing or rejected."""

    status_code = 400
    error_code = "auth_error"


class UpstreamError(BookGenError):
    """Text-generation backend failure."""

    status_code = 502
    error_code = "upstream_error"

    def __init__(self, message: str, status: Optional[int] = None, details: Optional[dict] = None):
        details = dict(details or {})
        if status is not None:
            details["status"] = status
        super().__init__(message, details)
        self.status = status


class ParseError(UpstreamError):
    """Structured output expected but no JSON could be extracted."""

    error_code = "parse_error"

    def __init__(self, message: str = "Failed to parse AI response", raw_response: str = ""):
        details = {"raw_response": raw_response[:200]} if raw_response else {}
        super().__init__(message, details=details)
        self.raw_response = raw_response


class ExportFailedError(BookGenError):
    """Format-specific rendering failure."""

    status_code = 500
    error_code = "export_failed"
