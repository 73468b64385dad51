"""
Dependency Injection container for Crieur.

Manages lifecycle and dependencies of all application components.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from shared.reporter import SystemReporter

from crieur.application.use_cases import (
    AuthenticateWebSocketUseCase,
    ManageChannelUseCase,
    ParseFrameUseCase,
)
from crieur.config.settings import Settings
from crieur.infrastructure.auth import JWTVerifier
from crieur.infrastructure.channels import ChannelStore
from crieur.infrastructure.monitoring import CrieurHealthChecker, LivenessMonitor
from crieur.infrastructure.websocket import (
    Broker,
    ConnectionRegistry,
    SlowConsumerPolicy,
    WebSocketSink,
)

SYSTEM_USER = "system"


class Container:
    """
    Dependency Injection container.

    Creates and manages all application dependencies.
    Implements singleton pattern for shared resources.
    """

    def __init__(self, settings: Settings, reporter: Optional[SystemReporter] = None):
        """
        Initialize container with settings.

        Args:
            settings: Application settings
            reporter: Shared SystemReporter (created from settings if None)
        """
        self.settings = settings
        self.reporter = reporter or SystemReporter(
            name="crieur",
            level=getattr(logging, settings.log_level.upper()),
            log_file=settings.log_file,
        )

        self._channel_store: Optional[ChannelStore] = None
        self._registry: Optional[ConnectionRegistry] = None
        self._broker: Optional[Broker] = None
        self._liveness_monitor: Optional[LivenessMonitor] = None
        self._jwt_verifier: Optional[JWTVerifier] = None
        self._parse_frame_use_case: Optional[ParseFrameUseCase] = None

        # Statistics
        self.stats = {
            "total_connections": 0,
            "total_frames_received": 0,
            "protocol_errors": 0,
            "auth_rejections": 0,
            "start_time": datetime.now(timezone.utc),
        }

    @property
    def channel_store(self) -> ChannelStore:
        """
        Get ChannelStore singleton with configured channels pre-created.

        Returns:
            ChannelStore instance
        """
        if self._channel_store is None:
            self._channel_store = ChannelStore(
                max_messages=self.settings.max_messages,
                reporter=self.reporter,
            )
            for name in self.settings.channels:
                if not self._channel_store.exists(name):
                    self._channel_store.create(name, SYSTEM_USER)
        return self._channel_store

    @property
    def registry(self) -> ConnectionRegistry:
        if self._registry is None:
            self._registry = ConnectionRegistry(reporter=self.reporter)
        return self._registry

    @property
    def broker(self) -> Broker:
        """
        Get Broker singleton owning the channel store and registry.

        Returns:
            Broker instance
        """
        if self._broker is None:
            self._broker = Broker(
                channel_store=self.channel_store,
                registry=self.registry,
                max_text_length=self.settings.max_text_length,
                max_username_length=self.settings.max_username_length,
                max_channel_name_length=self.settings.max_channel_name_length,
                reporter=self.reporter,
            )
        return self._broker

    @property
    def liveness_monitor(self) -> LivenessMonitor:
        if self._liveness_monitor is None:
            self._liveness_monitor = LivenessMonitor(
                broker=self.broker,
                registry=self.registry,
                interval_ms=self.settings.heartbeat_interval_ms,
                probe_timeout_ms=self.settings.probe_timeout_ms,
                reporter=self.reporter,
            )
        return self._liveness_monitor

    @property
    def jwt_verifier(self) -> Optional[JWTVerifier]:
        """
        Get JWTVerifier singleton.

        Returns:
            JWTVerifier instance if auth enabled, None otherwise
        """
        if not self.settings.require_auth:
            return None

        if self._jwt_verifier is None:
            if not self.settings.jwt_secret:
                raise ValueError(
                    "JWT authentication enabled but jwt_secret not configured"
                )

            self._jwt_verifier = JWTVerifier(
                secret=self.settings.jwt_secret,
                algorithm=self.settings.jwt_algorithm,
            )

        return self._jwt_verifier

    def get_authenticate_use_case(self) -> Optional[AuthenticateWebSocketUseCase]:
        """
        Get AuthenticateWebSocketUseCase.

        Returns:
            Use case instance if auth enabled, None otherwise
        """
        if not self.settings.require_auth:
            return None

        return AuthenticateWebSocketUseCase(self.jwt_verifier)

    def get_manage_channel_use_case(self) -> ManageChannelUseCase:
        return ManageChannelUseCase(self.broker)

    def get_parse_frame_use_case(self) -> ParseFrameUseCase:
        """
        Get ParseFrameUseCase singleton with configured size limit.

        Returns:
            Use case instance
        """
        if self._parse_frame_use_case is None:
            self._parse_frame_use_case = ParseFrameUseCase(
                max_frame_size=self.settings.max_frame_size,
            )
        return self._parse_frame_use_case

    def get_health_checker(self) -> CrieurHealthChecker:
        return CrieurHealthChecker(
            broker=self.broker,
            liveness_monitor=self.liveness_monitor,
        )

    def create_sink(self, handle: str, websocket) -> WebSocketSink:
        """
        Wrap an accepted WebSocket in an outbound sink.

        A writer failure tears the handle down through the Broker.

        Args:
            handle: Connection handle
            websocket: Accepted WebSocket

        Returns:
            WebSocketSink (not yet started)
        """
        return WebSocketSink(
            handle=handle,
            websocket=websocket,
            max_queue_size=self.settings.outbound_queue_size,
            policy=SlowConsumerPolicy(self.settings.slow_consumer_policy),
            on_failure=self.broker.teardown,
            reporter=self.reporter,
        )

    def increment_stat(self, stat_name: str, amount: int = 1) -> None:
        """
        Increment a statistic counter.

        Args:
            stat_name: Name of statistic to increment
            amount: Amount to increment by
        """
        if stat_name in self.stats:
            self.stats[stat_name] += amount

    def get_uptime_seconds(self) -> float:
        """
        Get server uptime in seconds.

        Returns:
            Uptime in seconds
        """
        return (datetime.now(timezone.utc) - self.stats["start_time"]).total_seconds()
