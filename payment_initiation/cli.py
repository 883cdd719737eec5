"""
Payment Initiation command line entry point.

Initiates a payment from the payment catalog and walks it through Strong
Customer Authentication with the bank:

    payment-initiation <payment name>

Settings come from appsettings.json, .env or PIS_* environment variables.
The client secret and the production certificate password are prompted for
when they are not configured.
"""

import argparse
import asyncio
import getpass
import logging
import secrets
import signal
import sys
from typing import Optional

import httpx
from pydantic import SecretStr

from payment_initiation.catalog import find_payment
from payment_initiation.clients.api import PaymentApiClient, client_certificate_context
from payment_initiation.clients.auth import AuthClient
from payment_initiation.config import Settings, settings
from payment_initiation.engine.errors import ConfigurationError, PaymentFlowError
from payment_initiation.engine.orchestrator import PaymentResult, execute_payment
from payment_initiation.engine.sca_flow import ScaFlowController
from payment_initiation.interaction.callback import CallbackCodeSource
from payment_initiation.interaction.console import ConsoleCodeSource
from payment_initiation.interaction.desktop import DesktopRenderer
from payment_initiation.models.payment import PsuContext
from payment_initiation.server import create_app, start_callback_server, stop_callback_server

logger = logging.getLogger("payment_initiation.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="payment-initiation",
        description="Initiate a catalog payment and complete SCA against the Open Banking Platform.",
    )
    parser.add_argument("payment_name", help="Name of the payment in the payment catalog")
    parser.add_argument("--payments-file", help="Payment catalog (default: settings payments_file)")
    parser.add_argument("--state", help="OAuth state passed through the SCA redirect (default: random)")
    parser.add_argument(
        "--callback-server",
        action="store_true",
        help="Receive the authorisation code on the redirect URI instead of prompting for it",
    )
    parser.add_argument("--log-level", help="Override the configured log level")
    return parser


def _secret(value: Optional[SecretStr], prompt: str) -> str:
    if value is not None:
        return value.get_secret_value()
    return getpass.getpass(prompt)


def _api_verify(cfg: Settings):
    if not cfg.use_production_environment:
        logger.info("Using sandbox")
        return True

    logger.info("Using production")
    if not cfg.production_client_certificate_file:
        raise ConfigurationError("production_client_certificate_file is required in production")
    password = _secret(cfg.production_certificate_password, "Enter Certificate Password: ")
    return client_certificate_context(
        cfg.production_client_certificate_file,
        cfg.production_client_key_file,
        password or None,
    )


def _install_cancel_handler(cancel: asyncio.Event) -> None:
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGTERM, cancel.set)
    except (NotImplementedError, RuntimeError):
        # No signal handlers on this platform's event loop
        pass


async def run(args: argparse.Namespace, cfg: Settings) -> PaymentResult:
    entry = find_payment(args.payment_name, args.payments_file or cfg.payments_file)
    if not cfg.client_id or not cfg.redirect_uri:
        raise ConfigurationError("client_id and redirect_uri must be configured")

    client_secret = _secret(cfg.client_secret, "Enter your Client Secret: ")
    verify = _api_verify(cfg)
    state = args.state or secrets.token_urlsafe(16)

    cancel = asyncio.Event()
    _install_cancel_handler(cancel)

    server = task = None
    if args.callback_server:
        code_source = CallbackCodeSource(timeout=cfg.sca_status_max_wait_seconds)
        server, task = start_callback_server(
            create_app(code_source), cfg.callback_host, cfg.callback_port, cfg.log_level
        )
    else:
        code_source = ConsoleCodeSource(cancel=cancel)

    psu = PsuContext(
        psu_ip_address=cfg.psu_ip_address,
        psu_user_agent=cfg.psu_user_agent,
        psu_corporate_id=entry.psu_corporate_id,
    )
    try:
        async with AuthClient(
            cfg.auth_uri,
            cfg.client_id,
            client_secret,
            cfg.redirect_uri,
            timeout=cfg.request_timeout_seconds,
        ) as auth, PaymentApiClient(
            cfg.api_uri,
            psu,
            timeout=cfg.request_timeout_seconds,
            verify=verify,
        ) as api:
            sca_flow = ScaFlowController(
                api,
                auth,
                DesktopRenderer(),
                code_source,
                scope=entry.scope,
                poll_interval=cfg.poll_interval,
                max_wait=cfg.sca_status_max_wait_seconds,
                decoupled_return_uri=cfg.decoupled_return_uri,
                cancel=cancel,
            )
            return await execute_payment(
                entry,
                auth,
                api,
                sca_flow,
                state=state,
                authentication_method_id=cfg.authentication_method_id,
                poll_interval=cfg.poll_interval,
                max_wait=cfg.payment_status_max_wait_seconds,
                cancel=cancel,
            )
    finally:
        if server is not None:
            await stop_callback_server(server, task)


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    level = (args.log_level or settings.log_level).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        result = asyncio.run(run(args, settings))
    except (PaymentFlowError, httpx.HTTPError) as e:
        logger.error("Payment initiation aborted: %s", e)
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130

    if not result.sca_success:
        print("SCA failed")
        return 1

    print("SCA completed successfully")
    print(f"transactionStatus: {result.transaction_status}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
