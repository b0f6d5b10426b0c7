"""REGISTER probe orchestration."""

from sipprobe.sip.session import RegisterSession
from sipprobe.register.probe import (
    RegisterOutcome,
    RegisterProbe,
    RegisterState,
    run_probe,
)

__all__ = [
    "RegisterSession",
    "RegisterOutcome",
    "RegisterProbe",
    "RegisterState",
    "run_probe",
]
