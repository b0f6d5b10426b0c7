"""SIP REGISTER request builder."""

from typing import Optional

from sipprobe.config import RegisterConfig
from sipprobe.sip.session import RegisterSession
from sipprobe.sip.models import RegisterRequest


def build_register(
    config: RegisterConfig,
    session: RegisterSession,
    local_ip: str,
    local_port: int,
    authorization: Optional[str] = None,
) -> RegisterRequest:
    """Build a REGISTER request for the current transmission attempt.

    Args:
        config: Probe configuration (user, domain, expires, user agent)
        session: Transaction identifiers (Call-ID, tag, branch, CSeq)
        local_ip: Address advertised in Via and Contact
        local_port: Port the UDP socket is bound to
        authorization: Complete authorization header line, if answering a challenge

    Returns:
        RegisterRequest ready to send
    """
    return RegisterRequest(
        request_uri=config.request_uri,
        via=f"SIP/2.0/UDP {local_ip}:{local_port};branch={session.branch};rport",
        from_header=f"<{config.aor}>;tag={session.from_tag}",
        to_header=f"<{config.aor}>",
        call_id=session.call_id,
        cseq=session.cseq,
        contact=f"<sip:{config.username}@{local_ip}:{local_port}>",
        authorization=authorization,
        user_agent=config.user_agent,
        expires=config.expires,
    )
