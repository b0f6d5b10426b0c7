"""Per-run REGISTER transaction identifiers.

Call-ID and From-tag are fixed for the run; branch and CSeq change on every
transmission attempt.
"""

import time
import uuid
from dataclasses import dataclass, field

# RFC 3261 magic cookie for branch parameters
BRANCH_MAGIC_COOKIE = "z9hG4bK"


def generate_branch() -> str:
    """Generate a unique Via branch parameter."""
    return f"{BRANCH_MAGIC_COOKIE}-{uuid.uuid4().hex[:16]}"


def generate_tag() -> str:
    """Generate a From tag."""
    return uuid.uuid4().hex[:12]


def generate_call_id() -> str:
    """Generate a Call-ID from the current time in milliseconds."""
    return f"{int(time.time() * 1000)}@sip-test"


@dataclass
class RegisterSession:
    """Identifiers for the single REGISTER transaction of a probe run."""

    call_id: str = field(default_factory=generate_call_id)
    from_tag: str = field(default_factory=generate_tag)
    branch: str = field(default_factory=generate_branch)
    cseq: int = 1

    # Authenticated requests sent so far
    auth_attempts: int = 0

    def next_attempt(self) -> None:
        """Advance to the next transmission: bump CSeq, fresh branch."""
        self.cseq += 1
        self.branch = generate_branch()
