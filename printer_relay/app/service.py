"""Embedded relay server for the desktop host process.

The host creates one :class:`EmbeddedPrinterService`, calls :meth:`start`
when it boots and :meth:`stop` when it quits. The relay runs under uvicorn
on a daemon thread so the host keeps its own main loop.
"""

from __future__ import annotations

import errno
import logging
import os
import socket
import threading
import time
from enum import Enum
from typing import Optional

import uvicorn
from fastapi import FastAPI

from config import get_settings

from .main import create_app

ADDR_IN_USE = {errno.EADDRINUSE, getattr(errno, "WSAEADDRINUSE", errno.EADDRINUSE)}
STARTUP_TIMEOUT_SECS = 5.0

logger = logging.getLogger("printer_relay.service")


class ServiceState(str, Enum):
    STOPPED = "stopped"
    STARTING = "starting"
    RUNNING = "running"


class EmbeddedPrinterService:
    """Start and stop the relay inside the host process.

    A port that is already taken never raises: :meth:`start` logs it and the
    handle stays :attr:`ServiceState.STOPPED`, leaving the other listener
    alone. Any other bind failure propagates.
    """

    def __init__(
        self,
        port: Optional[int] = None,
        host: Optional[str] = None,
        app: Optional[FastAPI] = None,
        startup_timeout: float = STARTUP_TIMEOUT_SECS,
    ) -> None:
        settings = get_settings()
        self.port = settings.relay_port if port is None else port
        self.host = host or settings.relay_host
        self.app = app or create_app()
        self.startup_timeout = startup_timeout
        self._state = ServiceState.STOPPED
        self._server: Optional[uvicorn.Server] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def state(self) -> ServiceState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is ServiceState.RUNNING

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}"

    def _bind(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        # Windows lets SO_REUSEADDR steal a port another process listens on
        if os.name != "nt":
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((self.host, self.port))
            sock.listen(socket.SOMAXCONN)
        except OSError:
            sock.close()
            raise
        return sock

    def start(self) -> ServiceState:
        """Bind the port and serve the relay on a background thread."""
        if self._state is not ServiceState.STOPPED:
            logger.info("printer relay already %s", self._state.value)
            return self._state

        self._state = ServiceState.STARTING
        try:
            sock = self._bind()
        except OSError as exc:
            self._state = ServiceState.STOPPED
            if exc.errno in ADDR_IN_USE:
                logger.error("printer relay port %s is already in use", self.port)
                return self._state
            raise
        self.port = sock.getsockname()[1]

        config = uvicorn.Config(self.app, log_config=None, access_log=False)
        server = uvicorn.Server(config)
        thread = threading.Thread(
            target=server.run,
            kwargs={"sockets": [sock]},
            name="printer-relay",
            daemon=True,
        )
        thread.start()

        deadline = time.monotonic() + self.startup_timeout
        while not server.started:
            if not thread.is_alive() or time.monotonic() > deadline:
                server.should_exit = True
                thread.join(self.startup_timeout)
                sock.close()
                self._state = ServiceState.STOPPED
                raise RuntimeError(f"printer relay failed to start on {self.url}")
            time.sleep(0.01)

        self._server = server
        self._thread = thread
        self._state = ServiceState.RUNNING
        logger.info("printer relay started on %s", self.url)
        return self._state

    def stop(self) -> ServiceState:
        """Shut the server down. Stopping a stopped relay does nothing."""
        if self._server is None or self._thread is None:
            return self._state
        self._server.should_exit = True
        self._thread.join(self.startup_timeout)
        self._server = None
        self._thread = None
        self._state = ServiceState.STOPPED
        logger.info("printer relay stopped")
        return self._state
