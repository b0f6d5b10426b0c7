"""Configuration for the SIP REGISTER probe.

Environment-based defaults with a frozen per-run config object built by the CLI.
"""

import os
from dataclasses import dataclass, field
from typing import Optional

# Target server
DEFAULT_HOST = os.getenv("SIPPROBE_HOST", "localhost")
DEFAULT_PORT = int(os.getenv("SIPPROBE_PORT", "5060"))
DEFAULT_DOMAIN = os.getenv("SIPPROBE_DOMAIN", "")

# Credentials
DEFAULT_USER = os.getenv("SIPPROBE_USER", "1001")
DEFAULT_PASSWORD = os.getenv("SIPPROBE_PASSWORD", "")

# Request tuning
DEFAULT_TIMEOUT = float(os.getenv("SIPPROBE_TIMEOUT", "5.0"))  # seconds per awaited step
DEFAULT_EXPIRES = int(os.getenv("SIPPROBE_EXPIRES", "60"))
DEFAULT_MAX_AUTH_ATTEMPTS = int(os.getenv("SIPPROBE_MAX_AUTH_ATTEMPTS", "1"))
USER_AGENT = os.getenv("SIPPROBE_USER_AGENT", "SIP-Test/1.0")
MAX_FORWARDS = 70

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")
LOG_FORMAT = os.getenv("SIPPROBE_LOG_FORMAT", "text")  # text, json


@dataclass(frozen=True)
class RegisterConfig:
    """Read-only settings for one probe run."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    username: str = DEFAULT_USER
    password: str = DEFAULT_PASSWORD
    domain: str = ""
    timeout: float = DEFAULT_TIMEOUT
    expires: int = DEFAULT_EXPIRES
    max_auth_attempts: int = DEFAULT_MAX_AUTH_ATTEMPTS
    user_agent: str = USER_AGENT
    local_ip: Optional[str] = None

    # Unknown CLI flags, kept but not used
    extra: dict = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.username:
            object.__setattr__(self, "username", DEFAULT_USER)
        if not self.domain:
            object.__setattr__(self, "domain", DEFAULT_DOMAIN or self.host or "localhost")

    @property
    def request_uri(self) -> str:
        """Request-URI and digest URI for REGISTER."""
        return f"sip:{self.domain}"

    @property
    def aor(self) -> str:
        """Address of record used in From and To."""
        return f"sip:{self.username}@{self.domain}"


def validate_config(config: RegisterConfig) -> list[str]:
    """Validate configuration and return list of issues."""
    issues = []

    if not config.host:
        issues.append("Host must not be empty")
    if not 1 <= config.port <= 65535:
        issues.append(f"Invalid port: {config.port}")
    if config.timeout <= 0:
        issues.append(f"Timeout must be positive: {config.timeout}")
    if config.expires < 0:
        issues.append(f"Expires must not be negative: {config.expires}")
    if config.max_auth_attempts < 0:
        issues.append(f"max_auth_attempts must not be negative: {config.max_auth_attempts}")

    return issues
