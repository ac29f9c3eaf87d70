"""Exception types and error codes for analytics API failures."""


class ErrorCode:
    """Standard error codes attached to analytics API failures."""

    # Transport errors
    HTTP_STATUS = "http_status"
    TRANSPORT_ERROR = "transport_error"
    TIMEOUT = "timeout"

    # Payload errors
    INVALID_JSON = "invalid_json"
    INVALID_ENVELOPE = "invalid_envelope"


# User-facing hints shown next to the dashboard error banner
REMEDIATION_HINTS = {
    ErrorCode.HTTP_STATUS: "The analytics service rejected the request. Try refreshing in a few moments.",
    ErrorCode.TRANSPORT_ERROR: "The analytics service is unreachable. Check your connection and refresh.",
    ErrorCode.TIMEOUT: "The analytics service took too long to answer. Try refreshing.",
    ErrorCode.INVALID_JSON: "The analytics service returned an unreadable response.",
    ErrorCode.INVALID_ENVELOPE: "The analytics service returned an unexpected queue format.",
}


class ChurnwatchError(Exception):
    """Base class for all churnwatch errors."""


class AnalyticsApiError(ChurnwatchError):
    """A request against the analytics API failed or returned an unusable body."""

    def __init__(
        self,
        message: str,
        *,
        endpoint: str,
        code: str,
        status_code: int | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.endpoint = endpoint
        self.code = code
        self.status_code = status_code

    @property
    def remediation(self) -> str | None:
        return REMEDIATION_HINTS.get(self.code)

    def __str__(self) -> str:
        return f"{self.endpoint} → {self.message}"


class QueueRetrievalError(AnalyticsApiError):
    """The customer queue could not be retrieved.

    Raised by both the single-page and the batched retrieval modes. The
    dashboard surfaces it as an error message and keeps the last committed
    customer collection.
    """

    def __init__(self, message: str, *, endpoint: str, code: str, status_code: int | None = None, offset: int = 0):
        super().__init__(message, endpoint=endpoint, code=code, status_code=status_code)
        self.offset = offset

    @classmethod
    def from_api_error(cls, exc: AnalyticsApiError, offset: int = 0) -> "QueueRetrievalError":
        return cls(exc.message, endpoint=exc.endpoint, code=exc.code, status_code=exc.status_code, offset=offset)
