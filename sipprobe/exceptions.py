"""Exception hierarchy for the SIP REGISTER probe.

All errors are terminal for a probe run except ProtocolError, which is
logged and the offending datagram ignored. The orchestrator converts them
into a failed RegisterOutcome; only the CLI maps outcomes to exit codes.
"""


class SIPProbeError(Exception):
    """Base exception for all probe errors."""

    error_kind = "error"


class ConfigurationError(SIPProbeError):
    """Invalid probe configuration."""

    error_kind = "configuration"


class TransportError(SIPProbeError):
    """Socket resolve/bind/send/receive failure."""

    error_kind = "transport"


class RegisterTimeout(SIPProbeError):
    """No final response arrived within the timeout window."""

    error_kind = "timeout"


class ProtocolError(SIPProbeError):
    """Received datagram is not a parseable SIP response."""

    error_kind = "protocol"


# =============================================================================
# Response-driven failures
# =============================================================================

class ResponseError(SIPProbeError):
    """Base for failures caused by a final SIP response.

    Carries the status code and reason phrase exactly as received.
    """

    error_kind = "response"

    def __init__(self, message: str, status_code: int = 0, status_text: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.status_text = status_text


class AuthRequiredNoCredentials(ResponseError):
    """401/407 received but no password or no challenge header."""

    error_kind = "auth_required"


class AuthenticationFailed(ResponseError):
    """Server challenged again after the allowed authentication attempts."""

    error_kind = "auth_failed"


class RegistrationRejected(ResponseError):
    """Final 4xx/5xx/6xx response other than an authentication challenge."""

    error_kind = "rejected"


class UnexpectedResponse(ResponseError):
    """Final response the probe does not act on (3xx redirects)."""

    error_kind = "unexpected_response"
