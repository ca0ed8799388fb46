"""
Error taxonomy for integration-guard

Only the boundary (request parsing, the analyzer call, HTTP handlers) raises
these; the synthesis functions themselves never fail on well-typed input.
"""
from typing import Any, Dict, Optional


class IntegrationGuardError(Exception):
    """Base exception carrying an HTTP status and a bilingual message"""
    status_code = 500
    default_message = "Internal server error"
    default_message_ar = "خطأ داخلي في الخادم"

    def __init__(self, message: Optional[str] = None, message_ar: Optional[str] = None):
        self.message = message or self.default_message
        self.message_ar = message_ar or self.default_message_ar
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Error envelope returned to HTTP clients"""
        return {"error": self.message, "errorAr": self.message_ar}


class ValidationError(IntegrationGuardError):
    """Missing or malformed request fields"""
    status_code = 400
    default_message = "Invalid request"
    default_message_ar = "طلب غير صالح"


class AuthenticationError(IntegrationGuardError):
    """No authenticated session"""
    status_code = 401
    default_message = "Authentication required - please login"
    default_message_ar = "المصادقة مطلوبة - يرجى تسجيل الدخول"


class AuthorizationError(IntegrationGuardError):
    """Authenticated, but not an owner"""
    status_code = 403
    default_message = "Owner access required"
    default_message_ar = "يتطلب صلاحيات المالك"


class RateLimitError(IntegrationGuardError):
    """Per-identity request quota exceeded"""
    status_code = 429
    default_message = "Rate limit exceeded - please wait"
    default_message_ar = "تم تجاوز الحد المسموح - يرجى الانتظار"

    def __init__(self, retry_after: int = 0, message: Optional[str] = None,
                 message_ar: Optional[str] = None):
        super().__init__(message, message_ar)
        self.retry_after = max(0, retry_after)


class SynthesisFailure(IntegrationGuardError):
    """Unexpected internal fault; clients only see the generic message"""
    status_code = 500


class UpstreamAnalyzerError(Exception):
    """The architecture analyzer could not produce an answer.

    Not shown to clients: detection degrades to an empty list.
    """
    pass


class AnalyzerUnavailable(UpstreamAnalyzerError):
    """The analyzer call failed, timed out or is not configured"""
    pass
