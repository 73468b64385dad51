"""
Crieur - Real-time group messaging bus

Orchestrates Clean Architecture components to serve named channels
over WebSockets with a thin REST surface.
"""

import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from shared.reporter import SystemReporter
from shared.reporter.emojis import Emoji

from crieur import __version__
from crieur.config.settings import Settings, load_config
from crieur.di import Container
from crieur.presentation.api.dependencies import set_container
from crieur.presentation.api.errors import register_exception_handlers
from crieur.presentation.api.routes import (
    channels_router,
    health_router,
    metrics_router,
    publish_router,
    websocket_router,
)

SHUTDOWN_CLOSE_CODE = 1001


class CrieurApp:
    """
    Crieur application orchestrator.

    Thin coordination layer that initializes and connects
    all Clean Architecture components.

    Responsibilities:
        - Initialize DI container
        - Setup FastAPI application
        - Register API routes
        - Run the liveness monitor for the app's lifetime
        - Close every connection on shutdown
        - Run uvicorn server
    """

    def __init__(self, settings: Settings, reporter: Optional[SystemReporter] = None):
        """
        Initialize Crieur application.

        Args:
            settings: Application settings
            reporter: Optional SystemReporter (created from settings if None)
        """
        self.settings = settings

        # Initialize reporter FIRST
        self.reporter = reporter or self._create_reporter()

        self.container = Container(settings, reporter=self.reporter)

        self.app = self._create_app()

        # Set global container for FastAPI dependencies
        set_container(self.container)

        # Server instance (set during serve)
        self.server: Optional[uvicorn.Server] = None

        self.reporter.info(
            f"{Emoji.SYSTEM.CONFIG} Crieur initialized (env: {settings.env})",
            context="Crieur",
            verbose_level=1,
        )

    def _create_reporter(self) -> SystemReporter:
        return SystemReporter(
            name="crieur",
            level=getattr(logging, self.settings.log_level.upper()),
            verbose=3 if self.settings.log_level == "debug" else 1,
            log_file=self.settings.log_file,
        )

    def _create_app(self) -> FastAPI:
        """
        Create FastAPI application with lifespan management.

        Returns:
            Configured FastAPI application
        """

        @asynccontextmanager
        async def lifespan(app: FastAPI):
            await self._on_startup()
            yield
            await self._on_shutdown()

        app = FastAPI(
            title="Crieur",
            description="Real-time group messaging bus",
            version=__version__,
            lifespan=lifespan,
        )

        register_exception_handlers(app)

        app.include_router(websocket_router)
        app.include_router(channels_router)
        app.include_router(publish_router)
        app.include_router(metrics_router)
        app.include_router(health_router)

        return app

    async def _on_startup(self):
        """Build the broker and start liveness probing."""
        self.reporter.info(
            f"{Emoji.SYSTEM.STARTUP} Crieur starting...",
            context="Crieur",
            verbose_level=1,
        )

        broker = self.container.broker
        self.container.liveness_monitor.start()

        self.reporter.info(
            f"Host: {self.settings.host}:{self.settings.port}",
            context="Crieur",
            verbose_level=1,
        )
        self.reporter.info(
            f"Authentication: {'ENABLED' if self.settings.require_auth else 'DISABLED'}",
            context="Crieur",
            verbose_level=1,
        )
        self.reporter.info(
            f"{Emoji.SYSTEM.READY} Channels ready: "
            f"{', '.join(c['name'] for c in broker.list_channels())}",
            context="Crieur",
            verbose_level=1,
        )

    async def _on_shutdown(self):
        """Stop probing and close every live connection."""
        self.reporter.info(
            f"{Emoji.SYSTEM.SHUTDOWN} Crieur shutting down...",
            context="Crieur",
            verbose_level=1,
        )

        await self.container.liveness_monitor.stop()
        await self._close_all_connections()

        self.reporter.info(
            "Crieur stopped",
            context="Crieur",
            verbose_level=1,
        )

    async def _close_all_connections(self):
        broker = self.container.broker
        registry = self.container.registry

        sinks = []
        for handle in registry.handles():
            connection = broker.teardown(handle)
            if connection is not None and connection.sink is not None:
                sinks.append(connection.sink)

        if not sinks:
            return

        timeout = self.settings.probe_timeout_ms / 1000
        await asyncio.gather(
            *(
                asyncio.wait_for(
                    sink.close(code=SHUTDOWN_CLOSE_CODE, reason="Server shutdown"),
                    timeout=timeout,
                )
                for sink in sinks
            ),
            return_exceptions=True,
        )

        self.reporter.info(
            f"{Emoji.SYSTEM.CLEANUP} Closed {len(sinks)} connections",
            context="Crieur",
            verbose_level=1,
        )

    async def serve(self):
        """
        Run server with proper signal handling.

        Uses uvicorn.Server API for proper shutdown control.
        """
        config = uvicorn.Config(
            self.app,
            host=self.settings.host,
            port=self.settings.port,
            log_level=self.settings.log_level,
            ws_max_size=self.settings.max_frame_size,
        )
        self.server = uvicorn.Server(config)
        await self.server.serve()

    def start(self):
        """
        Start Crieur server.

        Blocks until server is stopped.
        """
        asyncio.run(self.serve())


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI app without serving it.

    Args:
        settings: Settings to use (loaded from config files if None)

    Returns:
        FastAPI application
    """
    return CrieurApp(settings or load_config()).app


def main():
    """
    Main entry point for Crieur application.

    Loads configuration and starts the server.
    """
    config = load_config()

    # Allow port override from command line
    if len(sys.argv) > 1:
        try:
            config.port = int(sys.argv[1])
        except ValueError:
            print(f"Invalid port: {sys.argv[1]}")
            sys.exit(1)

    app = CrieurApp(config)

    try:
        app.start()
    except KeyboardInterrupt:
        print("\nCrieur stopped by user")
        sys.exit(0)


if __name__ == "__main__":
    main()
