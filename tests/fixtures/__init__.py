"""Test fixtures for the REGISTER probe.

Usage:
    from tests.fixtures import FakeTransport, build_response, reply_to
"""

from tests.fixtures.sip_messages import (
    TEST_CHALLENGE,
    TEST_DOMAIN,
    TEST_NONCE,
    TEST_PASSWORD,
    TEST_REALM,
    TEST_USER,
    build_response,
    parse_request,
    reply_to,
)
from tests.fixtures.transport import FakeTransport

__all__ = [
    "TEST_CHALLENGE",
    "TEST_DOMAIN",
    "TEST_NONCE",
    "TEST_PASSWORD",
    "TEST_REALM",
    "TEST_USER",
    "build_response",
    "parse_request",
    "reply_to",
    "FakeTransport",
]
