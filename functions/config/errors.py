"""Home assessment error handling.

Custom exceptions and error codes for the assessment pipeline.
"""

from typing import Optional, Dict, Any


# Error Codes
class ErrorCode:
    """Error code constants."""

    # Validation Errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    MISSING_FIELD = "MISSING_FIELD"
    INVALID_FIELD = "INVALID_FIELD"

    # Configuration Errors
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    # Gateway Errors
    GATEWAY_ERROR = "GATEWAY_ERROR"
    LLM_RATE_LIMIT = "LLM_RATE_LIMIT"
    LLM_CONTEXT_TOO_LONG = "LLM_CONTEXT_TOO_LONG"
    INVALID_RESPONSE = "INVALID_RESPONSE"
    IMAGE_FETCH_FAILED = "IMAGE_FETCH_FAILED"

    # Rendering Errors
    RENDER_FAILED = "RENDER_FAILED"

    INTERNAL_ERROR = "INTERNAL_ERROR"


class AssessmentError(Exception):
    """Base exception for assessment pipeline errors.

    Provides structured error information for API responses.

    Attributes:
        code: Error code from ErrorCode constants
        message: Human-readable error message
        details: Additional error context
        status: HTTP status the entry points answer with
    """

    status: int = 500

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        """Initialize AssessmentError.

        Args:
            code: Error code from ErrorCode constants
            message: Human-readable error message
            details: Additional error context
        """
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to the JSON body of an error response.

        Returns:
            Dictionary with success=False, error, code and, when present, details.
        """
        body = {
            "success": False,
            "error": self.message,
            "code": self.code,
        }
        if self.details:
            body["details"] = self.details
        return body

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"


class ValidationError(AssessmentError):
    """Input validation error, answered with a client error.

    The code defaults to MISSING_FIELD when a field is named and
    VALIDATION_ERROR otherwise.
    """

    status = 400

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict] = None,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or (ErrorCode.MISSING_FIELD if field else ErrorCode.VALIDATION_ERROR),
            message=message,
            details={**(details or {}), "field": field} if field else details
        )
        self.field = field


class ConfigurationError(AssessmentError):
    """Missing or invalid server configuration (e.g. the AI gateway key)."""

    def __init__(self, message: str, setting: Optional[str] = None):
        super().__init__(
            code=ErrorCode.CONFIGURATION_ERROR,
            message=message,
            details={"setting": setting} if setting else None
        )


class GatewayError(AssessmentError):
    """AI gateway failure: network, empty or malformed model output."""

    def __init__(
        self,
        message: str,
        code: str = ErrorCode.GATEWAY_ERROR,
        details: Optional[Dict] = None
    ):
        super().__init__(code=code, message=message, details=details)


class RenderError(AssessmentError):
    """PDF / spreadsheet rendering failure."""

    def __init__(self, message: str, renderer: str, details: Optional[Dict] = None):
        super().__init__(
            code=ErrorCode.RENDER_FAILED,
            message=message,
            details={**(details or {}), "renderer": renderer}
        )
        self.renderer = renderer
