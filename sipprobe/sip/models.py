"""SIP protocol data models.

Dataclasses for the outgoing REGISTER request and the parsed response.
"""

from dataclasses import dataclass, field
from typing import Optional

from sipprobe.config import MAX_FORWARDS, USER_AGENT


@dataclass
class RegisterRequest:
    """Outgoing SIP REGISTER request.

    Header order is fixed. An authorization line, when present, goes directly
    after Contact and always inside the header block.
    """

    request_uri: str
    via: str
    from_header: str
    to_header: str
    call_id: str
    cseq: int
    contact: str
    sip_version: str = "SIP/2.0"

    # Complete "Authorization: ..." or "Proxy-Authorization: ..." line
    authorization: Optional[str] = None

    max_forwards: int = MAX_FORWARDS
    user_agent: str = USER_AGENT
    expires: int = 60

    @property
    def method(self) -> str:
        return "REGISTER"

    def lines(self) -> list[str]:
        """Header block as an ordered list of lines (no terminator)."""
        lines = [
            f"{self.method} {self.request_uri} {self.sip_version}",
            f"Via: {self.via}",
            f"From: {self.from_header}",
            f"To: {self.to_header}",
            f"Call-ID: {self.call_id}",
            f"CSeq: {self.cseq} {self.method}",
            f"Contact: {self.contact}",
        ]

        if self.authorization:
            lines.append(self.authorization)

        lines.append(f"Max-Forwards: {self.max_forwards}")
        lines.append(f"User-Agent: {self.user_agent}")
        lines.append(f"Expires: {self.expires}")

        # No body
        lines.append("Content-Length: 0")
        return lines

    def to_text(self) -> str:
        """Serialize to CRLF-joined text ending with a blank line."""
        return "\r\n".join(self.lines()) + "\r\n\r\n"

    def to_bytes(self) -> bytes:
        """Serialize request to SIP message bytes."""
        return self.to_text().encode("utf-8")


@dataclass
class SIPResponse:
    """Parsed SIP response.

    Header names are lowercased; the last occurrence of a repeated header wins.
    A status line that does not parse yields status_code 0 and "Unknown".
    """

    status_code: int
    reason_phrase: str
    headers: dict[str, str] = field(default_factory=dict)

    # Raw message for debugging
    raw: bytes = b""

    @property
    def is_valid(self) -> bool:
        """Status line was parsed."""
        return self.status_code != 0

    @property
    def is_provisional(self) -> bool:
        return 100 <= self.status_code < 200

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def is_redirect(self) -> bool:
        return 300 <= self.status_code < 400

    @property
    def is_auth_challenge(self) -> bool:
        """401 Unauthorized or 407 Proxy Authentication Required."""
        return self.status_code in (401, 407)

    @property
    def challenge(self) -> Optional[str]:
        """WWW-Authenticate value, falling back to Proxy-Authenticate."""
        return self.headers.get("www-authenticate") or self.headers.get("proxy-authenticate")

    @property
    def contact(self) -> Optional[str]:
        return self.headers.get("contact")

    @property
    def expires(self) -> Optional[str]:
        return self.headers.get("expires")

    @property
    def call_id(self) -> Optional[str]:
        return self.headers.get("call-id")

    @property
    def cseq_number(self) -> Optional[int]:
        """Sequence number from the CSeq header, if present and numeric."""
        cseq = self.headers.get("cseq")
        if not cseq:
            return None
        number = cseq.split()[0]
        return int(number) if number.isdigit() else None

    @property
    def status(self) -> str:
        """Status code and reason as one string, e.g. "401 Unauthorized"."""
        return f"{self.status_code} {self.reason_phrase}"
