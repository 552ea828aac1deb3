"""Application bootstrap for ProdTrail.

Wires all components in dependency order and manages the asyncio lifecycle.
Startup order: config -> logging -> state store -> repository -> identity
              -> REST

The repository and its audit log are built once here and handed to the
REST layer by reference; nothing reaches them through module globals.
"""

from __future__ import annotations

import asyncio
import signal
from typing import TYPE_CHECKING

from prodtrail.config import load_config
from prodtrail.models.config import ProdTrailConfig
from prodtrail.observability.logging import get_logger, setup_logging

if TYPE_CHECKING:
    import structlog

    from prodtrail.catalog.repository import ProductRepository
    from prodtrail.identity import IdentityProvider
    from prodtrail.storage.base import StateStore

_SHUTDOWN_GRACE_SECONDS = 15


class _ComponentError(Exception):
    """Raised when a mandatory component fails to start."""

    def __init__(self, component: str, cause: Exception) -> None:
        super().__init__(f"Component '{component}' failed to start: {cause}")
        self.component = component
        self.cause = cause


class ProdTrailApp:
    """Application root.  Owns every component and coordinates their lifecycle.

    Calling ``stop()`` on an app that was never started (or already
    stopped) is safe.
    """

    def __init__(self, config: ProdTrailConfig | None = None) -> None:
        self.config = config
        self.store: StateStore | None = None
        self.repository: ProductRepository | None = None
        self.identity: IdentityProvider | None = None

        self._rest_server: object | None = None
        self._background_tasks: list[asyncio.Task[None]] = []

        self._running = False
        self._log: structlog.stdlib.BoundLogger | None = None

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    async def start(self, serve_rest: bool = True) -> None:
        """Start all components in dependency order.

        Raises _ComponentError if a mandatory component cannot start.
        """
        if self.config is None:
            self.config = load_config()

        setup_logging(self.config.log.level, self.config.log.format)
        self._log = get_logger("app")
        self._log.info("prodtrail starting", version=_prodtrail_version())

        await self._start_store()
        await self._start_repository()
        self._start_identity()
        if serve_rest:
            await self._start_rest()

        self._running = True
        self._log.info("prodtrail started", port=self.config.api.port, rest=serve_rest)

    async def _start_store(self) -> None:
        assert self._log is not None
        assert self.config is not None
        try:
            from prodtrail.storage import build_state_store

            self.store = build_state_store(self.config.storage.backend, self.config.storage.path)
            self._log.info(
                "state store ready",
                backend=self.config.storage.backend,
                path=self.config.storage.path,
            )
        except Exception as exc:
            raise _ComponentError("store", exc) from exc

    async def _start_repository(self) -> None:
        """Load products and history once; seed them on first run."""
        assert self._log is not None
        assert self.config is not None
        assert self.store is not None
        try:
            from prodtrail.catalog.repository import ProductRepository

            self.repository = await ProductRepository.load(
                self.store,
                seed_on_empty=self.config.repository.seed_on_empty,
                mutation_delay_ms=self.config.repository.mutation_delay_ms,
            )
            self._log.info(
                "repository started",
                products=len(self.repository),
                history=len(self.repository.audit_log),
            )
        except Exception as exc:
            raise _ComponentError("repository", exc) from exc

    def _start_identity(self) -> None:
        assert self.config is not None
        from prodtrail.identity import StaticIdentityProvider

        self.identity = StaticIdentityProvider(self.config.identity.default_actor)

    async def _start_rest(self) -> None:
        """Start the uvicorn REST server."""
        assert self._log is not None
        assert self.config is not None
        assert self.repository is not None
        assert self.identity is not None
        try:
            import uvicorn

            from prodtrail.api import create_app

            fastapi_app = create_app(repository=self.repository, identity=self.identity)
            uv_config = uvicorn.Config(
                app=fastapi_app,
                host="0.0.0.0",
                port=self.config.api.port,
                log_config=None,  # structlog handles all logging
                access_log=False,
            )
            server = uvicorn.Server(uv_config)
            task = asyncio.create_task(server.serve(), name="rest-server")
            self._background_tasks.append(task)
            self._rest_server = server
            self._log.info("rest api started", port=self.config.api.port)
        except Exception as exc:
            raise _ComponentError("rest", exc) from exc

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    async def stop(self) -> None:
        """Stop the REST server and cancel background tasks."""
        if not self._running and self._log is None:
            return

        log = self._log or get_logger("app")
        log.info("prodtrail shutting down")
        self._running = False

        server = self._rest_server
        if server is not None:
            server.should_exit = True  # type: ignore[attr-defined]

        if self._background_tasks:
            try:
                await asyncio.wait_for(
                    asyncio.gather(*self._background_tasks, return_exceptions=True),
                    timeout=_SHUTDOWN_GRACE_SECONDS,
                )
            except TimeoutError:
                log.warning("rest server stop timed out", timeout=_SHUTDOWN_GRACE_SECONDS)
                for task in self._background_tasks:
                    task.cancel()
        self._background_tasks.clear()
        self._rest_server = None

        log.info("prodtrail stopped")


def _prodtrail_version() -> str:
    from prodtrail import __version__

    return __version__


# ---------------------------------------------------------------------------
# Async entrypoint
# ---------------------------------------------------------------------------


async def main() -> None:
    """Create the app, register OS signals, run until shutdown is requested."""
    app = ProdTrailApp()
    loop = asyncio.get_running_loop()

    shutdown_triggered = False

    def _request_shutdown() -> None:
        nonlocal shutdown_triggered
        if shutdown_triggered:
            return
        shutdown_triggered = True
        asyncio.create_task(app.stop(), name="shutdown")

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, _request_shutdown)

    try:
        await app.start()
        while app._running:
            await asyncio.sleep(1)
    except _ComponentError as exc:
        log = get_logger("app")
        log.critical(
            "fatal startup error",
            component=exc.component,
            error=str(exc.cause),
        )
        await app.stop()
        raise SystemExit(1) from exc
    finally:
        if app._running:
            await app.stop()


def run() -> None:
    """Console-script entry point."""
    asyncio.run(main())
