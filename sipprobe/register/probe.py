"""REGISTER probe state machine.

Sequences one REGISTER transaction:
1. Open the UDP transport and send an unauthenticated REGISTER
2. Wait for a final response within the timeout
3. On 401/407, answer the Digest challenge with a new branch and CSeq
4. Finish on 2xx (DONE) or on any failure (FAILED)

The transport and reporter are injected so the state machine runs the same
against a real socket or a fake one.
"""

import asyncio
import logging
import time
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Optional

from sipprobe.config import RegisterConfig, validate_config
from sipprobe.exceptions import (
    AuthenticationFailed,
    AuthRequiredNoCredentials,
    ConfigurationError,
    ProtocolError,
    RegisterTimeout,
    RegistrationRejected,
    ResponseError,
    SIPProbeError,
    UnexpectedResponse,
)
from sipprobe.sip.builder import build_register
from sipprobe.sip.digest import build_authorization_header
from sipprobe.sip.models import RegisterRequest, SIPResponse
from sipprobe.sip.parser import parse_sip_response
from sipprobe.sip.session import RegisterSession
from sipprobe.sip.transport import UDPTransport

log = logging.getLogger(__name__)


class RegisterState(str, Enum):
    """Probe lifecycle states."""

    INIT = "INIT"
    AWAITING_RESPONSE = "AWAITING_RESPONSE"
    AUTHENTICATING = "AUTHENTICATING"
    AWAITING_AUTH_RESPONSE = "AWAITING_AUTH_RESPONSE"
    DONE = "DONE"
    FAILED = "FAILED"


@dataclass
class RegisterOutcome:
    """Result of a probe run."""

    state: RegisterState
    status_code: int = 0
    status_text: str = ""
    contact: Optional[str] = None
    expires: Optional[str] = None
    error_kind: Optional[str] = None
    message: str = ""
    requests_sent: int = 0
    elapsed_ms: float = 0.0

    @property
    def success(self) -> bool:
        return self.state == RegisterState.DONE

    @property
    def exit_code(self) -> int:
        return 0 if self.success else 1

    def to_dict(self) -> dict:
        """Plain dict for JSON output."""
        result = asdict(self)
        result["state"] = self.state.value
        result["success"] = self.success
        return result


class Reporter:
    """Receives progress events from the probe. Silent by default."""

    def started(self, config: RegisterConfig) -> None:
        pass

    def sending(self, config: RegisterConfig, request: RegisterRequest) -> None:
        pass

    def received(self, response: SIPResponse) -> None:
        pass

    def ignored(self, response: SIPResponse, reason: str) -> None:
        pass

    def authenticating(self, response: SIPResponse) -> None:
        pass

    def finished(self, outcome: RegisterOutcome) -> None:
        pass


class RegisterProbe:
    """Runs a single REGISTER transaction against one server."""

    def __init__(
        self,
        config: RegisterConfig,
        transport,
        reporter: Optional[Reporter] = None,
        session: Optional[RegisterSession] = None,
    ):
        """Initialize probe.

        Args:
            config: Probe configuration
            transport: Object with open/send/receive/close (see UDPTransport)
            reporter: Progress listener (silent if None)
            session: Transaction identifiers (fresh if None)
        """
        self._config = config
        self._transport = transport
        self._reporter = reporter or Reporter()
        self.session = session or RegisterSession()
        self.state = RegisterState.INIT
        self.requests_sent = 0

    async def run(self) -> RegisterOutcome:
        """Run the probe to completion. Never raises SIPProbeError.

        Returns:
            RegisterOutcome in state DONE or FAILED
        """
        start = time.monotonic()
        self._reporter.started(self._config)

        try:
            outcome = await self._run()
        except SIPProbeError as e:
            outcome = self._failed(e)
        finally:
            self._transport.close()

        outcome.requests_sent = self.requests_sent
        outcome.elapsed_ms = round((time.monotonic() - start) * 1000, 1)

        log.info(f"REGISTER probe finished: {outcome.state.value} {outcome.message}")
        self._reporter.finished(outcome)
        return outcome

    async def _run(self) -> RegisterOutcome:
        issues = validate_config(self._config)
        if issues:
            raise ConfigurationError("; ".join(issues))

        await self._transport.open(self._config.host, self._config.port)

        self._send(self._build_request())
        self._transition(RegisterState.AWAITING_RESPONSE)

        while True:
            response = await self._await_final_response()
            outcome = self._handle_final_response(response)
            if outcome is not None:
                return outcome

    # -------------------------------------------------------------------------
    # Request side
    # -------------------------------------------------------------------------

    def _build_request(self, authorization: Optional[str] = None) -> RegisterRequest:
        local_ip = self._config.local_ip or self._transport.local_ip
        return build_register(
            self._config,
            self.session,
            local_ip,
            self._transport.local_port,
            authorization=authorization,
        )

    def _send(self, request: RegisterRequest) -> None:
        self._reporter.sending(self._config, request)
        log.debug(f"Sending request:\n{request.to_text()}")
        self._transport.send(request.to_bytes())
        self.requests_sent += 1

    def _authenticate(self, response: SIPResponse) -> None:
        """Answer a 401/407 challenge with an authenticated REGISTER."""
        challenge = response.challenge
        if not self._config.password or not challenge:
            raise AuthRequiredNoCredentials(
                "Authentication required but no password provided"
                if not self._config.password
                else "Authentication required but no challenge header in response",
                response.status_code,
                response.reason_phrase,
            )

        if self.session.auth_attempts >= self._config.max_auth_attempts:
            raise AuthenticationFailed(
                f"Authentication failed - {response.status}",
                response.status_code,
                response.reason_phrase,
            )

        self._transition(RegisterState.AUTHENTICATING)
        self._reporter.authenticating(response)

        self.session.next_attempt()
        self.session.auth_attempts += 1

        authorization = build_authorization_header(
            challenge,
            username=self._config.username,
            password=self._config.password,
            method="REGISTER",
            uri=self._config.request_uri,
            default_realm=self._config.domain,
            proxy="www-authenticate" not in response.headers,
        )
        self._send(self._build_request(authorization))
        self._transition(RegisterState.AWAITING_AUTH_RESPONSE)

    # -------------------------------------------------------------------------
    # Response side
    # -------------------------------------------------------------------------

    async def _await_final_response(self) -> SIPResponse:
        """Wait for a final response to the current attempt.

        Provisional, unparseable and stray datagrams are skipped; they do not
        extend the deadline.
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self._config.timeout

        while True:
            remaining = deadline - loop.time()
            if remaining <= 0:
                raise self._timeout()

            try:
                data = await self._transport.receive(remaining)
            except RegisterTimeout:
                raise self._timeout() from None

            response = parse_sip_response(data)
            log.debug(f"Received response:\n{data.decode('utf-8', errors='replace')}")

            try:
                self._check_response(response)
            except ProtocolError as e:
                log.info(f"Ignoring {response.status}: {e}")
                self._reporter.ignored(response, str(e))
                continue

            self._reporter.received(response)

            if response.is_provisional:
                continue

            return response

    def _check_response(self, response: SIPResponse) -> None:
        """Raise ProtocolError unless the response answers the current attempt."""
        if not response.is_valid:
            raise ProtocolError("unparseable status line")
        if response.call_id and response.call_id != self.session.call_id:
            raise ProtocolError(f"Call-ID {response.call_id} does not match")
        cseq = response.cseq_number
        if cseq is not None and cseq != self.session.cseq:
            raise ProtocolError(f"stale response to CSeq {cseq}")

    def _handle_final_response(self, response: SIPResponse) -> Optional[RegisterOutcome]:
        """Branch on a final status code.

        Returns:
            Outcome when the probe is done, None when a retry was sent
        """
        if response.is_auth_challenge:
            self._authenticate(response)
            return None

        if response.is_success:
            self._transition(RegisterState.DONE)
            return RegisterOutcome(
                state=RegisterState.DONE,
                status_code=response.status_code,
                status_text=response.reason_phrase,
                contact=response.contact,
                expires=response.expires,
                message=f"Registered - {response.status}",
            )

        if response.is_redirect:
            raise UnexpectedResponse(
                f"Redirect not followed - {response.status}",
                response.status_code,
                response.reason_phrase,
            )

        raise RegistrationRejected(
            f"FAILED - {response.status}",
            response.status_code,
            response.reason_phrase,
        )

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _transition(self, state: RegisterState) -> None:
        log.debug(f"State {self.state.value} -> {state.value}")
        self.state = state

    def _timeout(self) -> RegisterTimeout:
        if self.state == RegisterState.AWAITING_AUTH_RESPONSE:
            return RegisterTimeout("Timeout waiting for auth response")
        return RegisterTimeout("Timeout - no response from server")

    def _failed(self, error: SIPProbeError) -> RegisterOutcome:
        self._transition(RegisterState.FAILED)
        outcome = RegisterOutcome(
            state=RegisterState.FAILED,
            error_kind=error.error_kind,
            message=str(error),
        )
        if isinstance(error, ResponseError):
            outcome.status_code = error.status_code
            outcome.status_text = error.status_text
        return outcome


async def run_probe(
    config: RegisterConfig,
    reporter: Optional[Reporter] = None,
) -> RegisterOutcome:
    """Run a REGISTER probe over a real UDP socket.

    Args:
        config: Probe configuration
        reporter: Progress listener

    Returns:
        RegisterOutcome
    """
    transport = UDPTransport(local_ip=config.local_ip)
    probe = RegisterProbe(config, transport, reporter=reporter)
    return await probe.run()
