"""Human-readable console progress for the REGISTER probe."""

import typer

from sipprobe.config import RegisterConfig
from sipprobe.register.probe import RegisterOutcome, Reporter
from sipprobe.sip.models import RegisterRequest, SIPResponse

# Hints printed under a failure, by error kind
FAILURE_HINTS = {
    "timeout": "Check that the SIP server is running and accessible",
    "auth_required": "Use --pass <password> to provide credentials",
    "auth_failed": "Check the username, password and domain",
    "transport": "Check the host name and local network configuration",
    "configuration": "Run with --help to see valid option values",
}


class ConsoleReporter(Reporter):
    """Prints send/receive/auth/success/failure lines as the probe runs."""

    def started(self, config: RegisterConfig) -> None:
        typer.echo("")
        typer.secho("SIP REGISTER Test (UDP)", bold=True)
        typer.echo("")
        typer.echo(f"   Server:   {config.host}:{config.port}")
        typer.echo(f"   Username: {config.username}")
        typer.echo(f"   Domain:   {config.domain}")
        typer.echo("")

    def sending(self, config: RegisterConfig, request: RegisterRequest) -> None:
        kind = "authenticated REGISTER" if request.authorization else "REGISTER"
        typer.echo(
            f"→ Sending {kind} to {config.host}:{config.port} (CSeq {request.cseq})..."
        )

    def received(self, response: SIPResponse) -> None:
        typer.echo(f"← Received: {response.status}")

    def ignored(self, response: SIPResponse, reason: str) -> None:
        typer.echo(f"← Ignored: {response.status} ({reason})")

    def authenticating(self, response: SIPResponse) -> None:
        typer.echo("→ Authenticating...")

    def finished(self, outcome: RegisterOutcome) -> None:
        if outcome.success:
            typer.echo("")
            typer.secho(
                f"SUCCESS - Registered ({outcome.status_code} {outcome.status_text})",
                fg=typer.colors.GREEN,
                bold=True,
            )
            if outcome.contact:
                typer.echo(f"   Contact: {outcome.contact}")
            if outcome.expires:
                typer.echo(f"   Expires: {outcome.expires}s")
            return

        typer.echo("", err=True)
        typer.secho(f"ERROR: {outcome.message}", fg=typer.colors.RED, bold=True, err=True)
        hint = FAILURE_HINTS.get(outcome.error_kind or "")
        if hint:
            typer.echo(f"   {hint}", err=True)
