from __future__ import annotations

import logging
import threading
import time

import uvicorn
from fastapi import FastAPI

from ..core.errors import ServerStartError
from ..core.service import WordService
from .routes_words import router as words_router

logger = logging.getLogger(__name__)

API_PREFIX = "/api"

START_TIMEOUT_SECONDS = 10.0


def create_gateway_app(service: WordService) -> FastAPI:
    """
    REST translation of the RPC surface. The routes are declared without the
    /api prefix and mounted under it, so the prefix is stripped before routing.
    """
    api = FastAPI(
        title="My Word Of The Day",
        version="0.1.0",
    )
    api.state.word_service = service
    api.include_router(words_router)

    app = FastAPI(docs_url=None, redoc_url=None, openapi_url=None)
    app.mount(API_PREFIX, api)
    return app


def start_gateway(
    app: FastAPI,
    port: int,
    host: str = "0.0.0.0",
    timeout: float = START_TIMEOUT_SECONDS,
) -> uvicorn.Server:
    """
    Serve the gateway on a daemon thread and return the uvicorn server once it
    is listening. Set `should_exit` on the returned server to stop it.

    Raises ServerStartError when uvicorn cannot bind or does not come up in
    time; uvicorn itself only logs the failure and ends its thread.
    """
    server = uvicorn.Server(
        uvicorn.Config(app, host=host, port=port, log_config=None, access_log=False)
    )

    thread = threading.Thread(target=server.run, name="http-proxy", daemon=True)
    thread.start()

    deadline = time.monotonic() + timeout
    while not server.started:
        if not thread.is_alive() or time.monotonic() > deadline:
            server.should_exit = True
            raise ServerStartError(f"unable to start http proxy server on {host}:{port}")
        time.sleep(0.05)

    logger.info("Starting http proxy server port=%d", gateway_port(server))
    return server


def gateway_port(server: uvicorn.Server) -> int:
    """The port actually bound, which differs from the configured one for 0."""
    return server.servers[0].sockets[0].getsockname()[1]
