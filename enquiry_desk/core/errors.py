"""
Error Taxonomy
==============
Every failure the service reports to a caller is one of these.
The API layer turns them into `{"error": ...}` responses.
"""

from typing import Any, Optional


class EnquiryDeskError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.message}


class ValidationError(EnquiryDeskError):
    """Missing or malformed input (e.g. a lead without a phone)"""
    status_code = 400


class InvalidStateError(EnquiryDeskError):
    """Illegal lifecycle transition for a lead or an order"""
    status_code = 409


class ConfigurationError(EnquiryDeskError):
    """Required credentials are not set"""
    status_code = 500


class UpstreamError(EnquiryDeskError):
    """The messaging provider answered with a non-2xx status"""

    def __init__(self, message: str, status_code: int = 502, details: Optional[Any] = None):
        super().__init__(message)
        self.status_code = status_code
        self.details = details

    def to_dict(self) -> dict:
        return {"error": self.message, "details": self.details}


class RecordNotFound(LookupError):
    """Unknown lead / order / stock id; the API answers 404"""
