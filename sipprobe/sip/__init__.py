"""SIP protocol handling module."""

from sipprobe.sip.models import RegisterRequest, SIPResponse
from sipprobe.sip.parser import parse_sip_response
from sipprobe.sip.builder import build_register
from sipprobe.sip.digest import build_authorization_header, compute_digest_response

__all__ = [
    "RegisterRequest",
    "SIPResponse",
    "parse_sip_response",
    "build_register",
    "build_authorization_header",
    "compute_digest_response",
]
