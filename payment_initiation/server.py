"""
Redirect callback server.

Receives the OAuth redirect in place of the operator typing the code. Runs
on the same event loop as the payment run:

    payment-initiation <payment name> --callback-server

The redirect URI registered for the client must point at
http://<callback_host>:<callback_port>/callback.
"""

import asyncio

import uvicorn
from fastapi import FastAPI

from payment_initiation import __version__
from payment_initiation.api.callback import router as callback_router
from payment_initiation.interaction.callback import CallbackCodeSource


def create_app(code_source: CallbackCodeSource) -> FastAPI:
    app = FastAPI(
        title="Payment Initiation Callback",
        description="Receives OAuth SCA redirects and hands the authorisation code to the waiting payment run.",
        version=__version__,
    )
    app.state.code_source = code_source
    app.include_router(callback_router)
    return app


def start_callback_server(app: FastAPI, host: str, port: int, log_level: str = "info") -> tuple[uvicorn.Server, asyncio.Task]:
    """Serve the app in the background of the running event loop."""
    config = uvicorn.Config(app, host=host, port=port, log_level=log_level.lower())
    server = uvicorn.Server(config)
    return server, asyncio.create_task(server.serve())


async def stop_callback_server(server: uvicorn.Server, task: asyncio.Task) -> None:
    server.should_exit = True
    await task
