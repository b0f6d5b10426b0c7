"""SIP Digest authentication (RFC 2617 MD5, no qop).

Computes the Authorization / Proxy-Authorization header for a REGISTER
retried after a 401 or 407 challenge.
"""

import hashlib
import re
from dataclasses import dataclass
from typing import Optional

# key=value or key="value" pairs inside a challenge
CHALLENGE_PARAM_PATTERN = re.compile(r'(\w+)=(?:"([^"]+)"|([^,\s]+))')

DEFAULT_ALGORITHM = "MD5"


@dataclass
class DigestChallenge:
    """Parameters extracted from a WWW-Authenticate / Proxy-Authenticate value."""

    realm: str
    nonce: str = ""
    algorithm: str = DEFAULT_ALGORITHM
    opaque: Optional[str] = None


def md5_hex(data: str) -> str:
    """Lowercase hex MD5 of a UTF-8 string."""
    return hashlib.md5(data.encode("utf-8")).hexdigest()


def parse_challenge_params(challenge: str) -> dict[str, str]:
    """Extract key/value parameters from a challenge header value."""
    params = {}
    for match in CHALLENGE_PARAM_PATTERN.finditer(challenge):
        params[match.group(1)] = match.group(2) or match.group(3)
    return params


def parse_challenge(challenge: str, default_realm: str) -> DigestChallenge:
    """Parse a Digest challenge, filling in defaults for missing parameters.

    Args:
        challenge: Header value, e.g. 'Digest realm="asterisk",nonce="abc"'
        default_realm: Realm to use when the challenge carries none

    Returns:
        DigestChallenge with realm, nonce and algorithm always set
    """
    params = parse_challenge_params(challenge)
    return DigestChallenge(
        realm=params.get("realm") or default_realm,
        nonce=params.get("nonce") or "",
        algorithm=params.get("algorithm") or DEFAULT_ALGORITHM,
        opaque=params.get("opaque"),
    )


def compute_digest_response(
    username: str,
    realm: str,
    password: str,
    nonce: str,
    method: str,
    uri: str,
) -> str:
    """Compute the Digest response hash.

    HA1 = MD5(username:realm:password)
    HA2 = MD5(method:uri)
    response = MD5(HA1:nonce:HA2)
    """
    ha1 = md5_hex(f"{username}:{realm}:{password}")
    ha2 = md5_hex(f"{method}:{uri}")
    return md5_hex(f"{ha1}:{nonce}:{ha2}")


def build_authorization_header(
    challenge: str,
    username: str,
    password: str,
    method: str,
    uri: str,
    default_realm: str,
    proxy: bool = False,
) -> str:
    """Build a complete authorization header line answering a challenge.

    Args:
        challenge: WWW-Authenticate or Proxy-Authenticate value
        username: SIP username
        password: SIP password
        method: Request method ("REGISTER")
        uri: Request URI (e.g. "sip:pbx.example.com")
        default_realm: Realm used when the challenge has none
        proxy: Answer a 407 with Proxy-Authorization instead of Authorization

    Returns:
        Header line such as 'Authorization: Digest username="1001", ...'
    """
    parsed = parse_challenge(challenge, default_realm)
    response = compute_digest_response(
        username, parsed.realm, password, parsed.nonce, method, uri
    )

    name = "Proxy-Authorization" if proxy else "Authorization"
    value = (
        f'Digest username="{username}", realm="{parsed.realm}", '
        f'nonce="{parsed.nonce}", uri="{uri}", response="{response}", '
        f"algorithm={parsed.algorithm}"
    )
    if parsed.opaque:
        value += f', opaque="{parsed.opaque}"'

    return f"{name}: {value}"
