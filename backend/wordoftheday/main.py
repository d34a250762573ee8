from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import grpc
import uvicorn
from apscheduler.schedulers.background import BackgroundScheduler

from .api.gateway import create_gateway_app, start_gateway
from .api.grpc_service import create_grpc_server
from .config import Settings, load_settings
from .core.errors import ConfigError, ServerStartError, StoreError
from .core.notifications import SMTPNotifier
from .core.scheduler import parse_schedule, start_word_scheduler
from .core.service import WordService
from .core.store import WordStore

logger = logging.getLogger(__name__)

SHUTDOWN_GRACE_SECONDS = 5


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stdout,
    )


@dataclass
class Application:
    settings: Settings
    store: WordStore
    service: WordService
    grpc_server: grpc.Server
    grpc_port: int
    scheduler: Optional[BackgroundScheduler] = None
    gateway: Optional[uvicorn.Server] = None

    def stop(self) -> None:
        if self.scheduler is not None and self.scheduler.running:
            self.scheduler.shutdown(wait=False)
        if self.gateway is not None:
            self.gateway.should_exit = True
        self.grpc_server.stop(SHUTDOWN_GRACE_SECONDS).wait()
        self.store.engine.dispose()


def build_application(settings: Settings) -> Application:
    """
    Wire every component from one settings object. Raises ConfigError,
    StoreError or ServerStartError when the process must not start.
    """
    store = WordStore.from_settings(settings.db)
    store.ping()
    store.create_schema()

    service = WordService.from_store(store)

    scheduler = None
    if settings.smtp.enabled:
        notifier = SMTPNotifier(settings.smtp)
        trigger = parse_schedule(settings.smtp.schedule)
        scheduler = start_word_scheduler(trigger, service, notifier)

    grpc_server, grpc_port = create_grpc_server(
        service,
        port=settings.server.port,
        max_workers=settings.server.max_workers,
    )

    gateway = None
    if settings.http_proxy.enabled:
        try:
            gateway = start_gateway(create_gateway_app(service), settings.http_proxy.port)
        except ServerStartError:
            if scheduler is not None:
                scheduler.shutdown(wait=False)
            grpc_server.stop(None)
            store.engine.dispose()
            raise

    return Application(
        settings=settings,
        store=store,
        service=service,
        grpc_server=grpc_server,
        grpc_port=grpc_port,
        scheduler=scheduler,
        gateway=gateway,
    )


def main(argv: Optional[list] = None) -> None:
    parser = argparse.ArgumentParser(prog="wordoftheday", description="My Word Of The Day server")
    parser.add_argument("--config", type=Path, default=None, help="path to a YAML config file")
    args = parser.parse_args(argv)

    try:
        settings = load_settings(args.config)
    except ConfigError as exc:
        configure_logging()
        logger.critical("Unable to load config: %s", exc)
        raise SystemExit(1)

    configure_logging(settings.logging.level)
    logger.info("Config initialised %s", settings.summary())

    try:
        app = build_application(settings)
    except (ConfigError, StoreError, ServerStartError) as exc:
        logger.critical("Unable to initialise server: %s", exc)
        raise SystemExit(1)

    app.grpc_server.start()
    logger.info("Starting grpc server port=%d", app.grpc_port)

    try:
        app.grpc_server.wait_for_termination()
    except KeyboardInterrupt:
        logger.info("Shutting down")
    finally:
        app.stop()


if __name__ == "__main__":
    main()
