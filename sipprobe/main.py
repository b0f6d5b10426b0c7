"""SIP REGISTER probe command line.

Sends one REGISTER over UDP, answers a Digest challenge if credentials are
given, and exits 0 on success or 1 on failure.

Usage:
    sip-register-test --host pbx.example.com --user 1001 --pass secret
    sip-register-test --host 10.0.0.5 --port 5080 --domain example.com --json

Exit codes:
    0  Registered (2xx)
    1  Any failure (invalid configuration, rejected, auth failure, timeout,
       socket error)
"""

import asyncio
import json
import logging
from typing import Optional

import typer

from sipprobe.config import (
    DEFAULT_EXPIRES,
    DEFAULT_HOST,
    DEFAULT_MAX_AUTH_ATTEMPTS,
    DEFAULT_PASSWORD,
    DEFAULT_PORT,
    DEFAULT_TIMEOUT,
    DEFAULT_USER,
    RegisterConfig,
)
from sipprobe.console import ConsoleReporter
from sipprobe.logging_config import configure_logging
from sipprobe.register.probe import run_probe

log = logging.getLogger(__name__)

app = typer.Typer(
    name="sip-register-test",
    help="Send a SIP REGISTER over UDP and report whether registration succeeds.",
    add_completion=False,
)


def parse_extra_args(args: list[str]) -> dict:
    """Collect unrecognised --flags.

    "--name value" and "--name=value" store the value; a flag with no
    following value stores True. Bare values not attached to a flag are
    dropped.
    """
    extra = {}
    i = 0
    while i < len(args):
        arg = args[i]
        i += 1
        if not arg.startswith("--"):
            continue

        name = arg[2:]
        if "=" in name:
            name, value = name.split("=", 1)
            extra[name] = value
        elif i < len(args) and not args[i].startswith("--"):
            extra[name] = args[i]
            i += 1
        else:
            extra[name] = True
    return extra


@app.command(
    context_settings={"allow_extra_args": True, "ignore_unknown_options": True},
)
def register(
    ctx: typer.Context,
    host: str = typer.Option(DEFAULT_HOST, "--host", help="SIP server hostname or IP"),
    port: int = typer.Option(DEFAULT_PORT, "--port", help="SIP server UDP port"),
    user: str = typer.Option(DEFAULT_USER, "--user", help="SIP username"),
    password: str = typer.Option(DEFAULT_PASSWORD, "--pass", help="SIP password"),
    domain: str = typer.Option("", "--domain", help="SIP domain (default: same as host)"),
    timeout: float = typer.Option(
        DEFAULT_TIMEOUT, "--timeout", help="Seconds to wait for each response"
    ),
    expires: int = typer.Option(DEFAULT_EXPIRES, "--expires", help="Requested binding lifetime"),
    max_auth_attempts: int = typer.Option(
        DEFAULT_MAX_AUTH_ATTEMPTS,
        "--max-auth-attempts",
        help="Authenticated retries allowed before giving up",
    ),
    local_ip: Optional[str] = typer.Option(
        None, "--local-ip", help="Address to advertise in Via/Contact"
    ),
    json_output: bool = typer.Option(False, "--json", help="Print the outcome as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log raw SIP messages"),
) -> None:
    """Register once with a SIP server to verify connectivity and credentials."""
    configure_logging(log_level="DEBUG" if verbose else None)

    config = RegisterConfig(
        host=host,
        port=port,
        username=user,
        password=password,
        domain=domain,
        timeout=timeout,
        expires=expires,
        max_auth_attempts=max_auth_attempts,
        local_ip=local_ip,
        extra=parse_extra_args(ctx.args),
    )
    if config.extra:
        log.debug(f"Ignoring unknown options: {sorted(config.extra)}")

    outcome = asyncio.run(run_probe(config, reporter=ConsoleReporter()))

    if json_output:
        typer.echo(json.dumps(outcome.to_dict(), indent=2))

    raise typer.Exit(outcome.exit_code)


def run() -> None:
    """Run the command line tool."""
    app()


if __name__ == "__main__":
    run()
