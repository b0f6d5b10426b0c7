"""Tests for SIP Digest authentication."""

import hashlib

import pytest

from sipprobe.sip.digest import (
    build_authorization_header,
    compute_digest_response,
    md5_hex,
    parse_challenge,
    parse_challenge_params,
)


def _md5(value: str) -> str:
    return hashlib.md5(value.encode()).hexdigest()


class TestComputeDigestResponse:
    """Test the RFC 2617 MD5 response computation."""

    def test_known_vector(self):
        """Test against a precomputed value."""
        response = compute_digest_response(
            "1001", "asterisk", "secret", "abc123", "REGISTER", "sip:pbx.example.com"
        )

        assert response == "96f1aa6f4849737f797b26458a17770e"

    def test_matches_formula(self):
        """Test response = MD5(MD5(user:realm:pass):nonce:MD5(method:uri))."""
        response = compute_digest_response(
            "alice", "x", "pw", "y", "REGISTER", "sip:example.com"
        )

        expected = _md5(
            f"{_md5('alice:x:pw')}:y:{_md5('REGISTER:sip:example.com')}"
        )
        assert response == expected

    def test_deterministic(self):
        """Test identical inputs give identical hashes."""
        args = ("1001", "asterisk", "secret", "abc123", "REGISTER", "sip:pbx.example.com")

        assert compute_digest_response(*args) == compute_digest_response(*args)

    def test_lowercase_hex(self):
        """Test output is 32 lowercase hex characters."""
        response = compute_digest_response("u", "r", "p", "n", "REGISTER", "sip:d")

        assert len(response) == 32
        assert response == response.lower()

    def test_empty_string_md5(self):
        """Test md5_hex helper."""
        assert md5_hex("") == "d41d8cd98f00b204e9800998ecf8427e"


class TestParseChallenge:
    """Test challenge parameter extraction."""

    def test_quoted_and_unquoted(self):
        """Test both key="value" and key=value forms."""
        params = parse_challenge_params(
            'Digest realm="asterisk", nonce="1a2b3c", algorithm=MD5, stale=FALSE'
        )

        assert params == {
            "realm": "asterisk",
            "nonce": "1a2b3c",
            "algorithm": "MD5",
            "stale": "FALSE",
        }

    def test_no_spaces_between_params(self):
        """Test parameters separated by commas only."""
        params = parse_challenge_params('Digest realm="x",nonce="y"')

        assert params == {"realm": "x", "nonce": "y"}

    def test_defaults(self):
        """Test missing realm/nonce/algorithm fall back to defaults."""
        challenge = parse_challenge("Digest", default_realm="pbx.example.com")

        assert challenge.realm == "pbx.example.com"
        assert challenge.nonce == ""
        assert challenge.algorithm == "MD5"
        assert challenge.opaque is None

    def test_opaque(self):
        """Test opaque parameter is captured."""
        challenge = parse_challenge(
            'Digest realm="r", nonce="n", opaque="5ccc069c403ebaf9"', default_realm="d"
        )

        assert challenge.opaque == "5ccc069c403ebaf9"


class TestBuildAuthorizationHeader:
    """Test authorization header formatting."""

    def test_authorization_header(self):
        """Test the complete Authorization line."""
        header = build_authorization_header(
            'Digest realm="asterisk",nonce="abc123"',
            username="1001",
            password="secret",
            method="REGISTER",
            uri="sip:pbx.example.com",
            default_realm="pbx.example.com",
        )

        assert header == (
            'Authorization: Digest username="1001", realm="asterisk", '
            'nonce="abc123", uri="sip:pbx.example.com", '
            'response="96f1aa6f4849737f797b26458a17770e", algorithm=MD5'
        )

    def test_proxy_authorization_header(self):
        """Test 407 challenges are answered with Proxy-Authorization."""
        header = build_authorization_header(
            'Digest realm="asterisk",nonce="abc123"',
            username="1001",
            password="secret",
            method="REGISTER",
            uri="sip:pbx.example.com",
            default_realm="pbx.example.com",
            proxy=True,
        )

        assert header.startswith("Proxy-Authorization: Digest ")

    def test_realm_defaults_to_domain(self):
        """Test the configured domain is used as realm when absent."""
        header = build_authorization_header(
            'Digest nonce="n"',
            username="1001",
            password="pw",
            method="REGISTER",
            uri="sip:pbx.example.com",
            default_realm="pbx.example.com",
        )

        assert 'realm="pbx.example.com"' in header
        expected = compute_digest_response(
            "1001", "pbx.example.com", "pw", "n", "REGISTER", "sip:pbx.example.com"
        )
        assert f'response="{expected}"' in header

    def test_opaque_echoed(self):
        """Test opaque is returned to the server."""
        header = build_authorization_header(
            'Digest realm="r", nonce="n", opaque="xyz"',
            username="1001",
            password="pw",
            method="REGISTER",
            uri="sip:d",
            default_realm="d",
        )

        assert header.endswith(', opaque="xyz"')

    @pytest.mark.parametrize("algorithm", ["MD5", "md5"])
    def test_algorithm_echoed(self, algorithm):
        """Test the algorithm from the challenge is echoed."""
        header = build_authorization_header(
            f'Digest realm="r", nonce="n", algorithm={algorithm}',
            username="1001",
            password="pw",
            method="REGISTER",
            uri="sip:d",
            default_realm="d",
        )

        assert header.endswith(f"algorithm={algorithm}")
