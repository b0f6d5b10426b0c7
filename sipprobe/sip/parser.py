"""SIP response parser.

Splits a raw SIP response into status line and a header map.
"""

import logging
import re

from sipprobe.sip.models import SIPResponse

log = logging.getLogger(__name__)

# Regex pattern for the status line: SIP/2.0 401 Unauthorized
STATUS_LINE_PATTERN = re.compile(r"^SIP/2\.0 (\d{3}) (.+)$")

UNKNOWN_STATUS_TEXT = "Unknown"


def parse_headers(lines: list[str]) -> dict[str, str]:
    """Build a header map from header lines.

    Each line is split at its first colon; names are lowercased and values
    trimmed. Lines without a colon (or starting with one) are skipped, and
    the last occurrence of a name wins.

    Args:
        lines: Header lines following the status line

    Returns:
        Mapping of lowercased header name to value
    """
    headers = {}
    for line in lines:
        if not line.strip():
            break  # End of headers

        colon = line.find(":")
        if colon <= 0:
            continue

        name = line[:colon].strip().lower()
        headers[name] = line[colon + 1:].strip()

    return headers


def parse_sip_response(data: bytes) -> SIPResponse:
    """Parse a SIP response from raw bytes.

    Never raises for malformed input: an unrecognised status line yields
    status code 0 with reason "Unknown", headers are still collected.

    Args:
        data: Raw datagram bytes

    Returns:
        Parsed SIPResponse
    """
    text = data.decode("utf-8", errors="replace")
    lines = text.replace("\r\n", "\n").split("\n")

    status_line = lines[0].strip()
    match = STATUS_LINE_PATTERN.match(status_line)
    if match:
        status_code = int(match.group(1))
        reason_phrase = match.group(2).strip()
    else:
        log.debug(f"Unrecognised status line: {status_line[:50]!r}")
        status_code = 0
        reason_phrase = UNKNOWN_STATUS_TEXT

    response = SIPResponse(
        status_code=status_code,
        reason_phrase=reason_phrase,
        headers=parse_headers(lines[1:]),
        raw=data,
    )

    log.debug(f"Parsed response: {response.status} headers={sorted(response.headers)}")
    return response
