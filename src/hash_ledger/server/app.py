"""Flask application for the hash-ledger service."""

import logging
import signal
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from threading import Lock
from typing import Optional

from flask import Flask, Response, jsonify, request

from hash_ledger import __version__
from hash_ledger.config.schema import Config, ServerConfig
from hash_ledger.ledger.context import LedgerContext
from hash_ledger.store.facade import RecordStore

from .endpoints import EXTENSION_KEY, records_bp

logger = logging.getLogger(__name__)


@dataclass
class ServerState:
    """Per-application state shared by the request handlers.

    Attributes:
        store: Record store the endpoints delegate to
        strict_status_codes: Map error kinds to HTTP status codes
        started_at: Application start time (UTC)
        request_count: Requests handled so far
    """

    store: RecordStore
    strict_status_codes: bool = False
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    request_count: int = 0
    _lock: Lock = field(default_factory=Lock, repr=False)

    def count_request(self) -> int:
        with self._lock:
            self.request_count += 1
            return self.request_count


def create_app(store: RecordStore, config: Optional[ServerConfig] = None) -> Flask:
    """Create the Flask application around a record store.

    Args:
        store: Record store (its ledger context should already be open)
        config: HTTP service configuration

    Returns:
        Configured Flask application
    """
    config = config or ServerConfig()
    app = Flask(__name__)
    state = ServerState(store=store, strict_status_codes=config.strict_status_codes)
    app.extensions[EXTENSION_KEY] = state

    @app.before_request
    def log_request() -> None:
        """Log all incoming requests."""
        count = state.count_request()
        logger.info(
            f"Request #{count}: {request.method} {request.path} "
            f"(Content-Length: {request.content_length or 0})"
        )
        if request.data and logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"Request body: {request.get_data(as_text=True)[:500]}")

    @app.route("/health", methods=["GET"])
    def health_check() -> tuple[Response, int]:
        """Health check endpoint."""
        uptime_seconds = int((datetime.now(timezone.utc) - state.started_at).total_seconds())
        context = store.context
        return jsonify({
            "status": "healthy" if context.is_open else "starting",
            "version": __version__,
            "identity": str(context.owner),
            "program_id": str(context.program_id),
            "rpc_url": context.client.rpc_url,
            "endpoints": ["/health", "/store", "/fetch"],
            "uptime_seconds": uptime_seconds,
            "request_count": state.request_count,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }), 200

    @app.errorhandler(404)
    def not_found(error) -> tuple[Response, int]:
        return jsonify({"status": "Error", "detail": "Unknown endpoint"}), 404

    @app.errorhandler(405)
    def method_not_allowed(error) -> tuple[Response, int]:
        return jsonify({"status": "Error", "detail": "Method not allowed"}), 405

    @app.errorhandler(500)
    def internal_error(error) -> tuple[Response, int]:
        logger.exception(f"Unhandled error: {error}")
        return jsonify({"status": "Error"}), 500

    app.register_blueprint(records_bp)
    logger.info("hash-ledger application initialized")
    return app


def setup_graceful_shutdown(context: LedgerContext) -> None:
    """Close the ledger context on SIGTERM and SIGINT.

    Signal handlers can only be registered in the main thread; elsewhere this
    logs a warning and returns.
    """
    def shutdown_handler(signum, frame):
        logger.info(f"Received shutdown signal ({signum}), closing ledger context...")
        context.close()
        logger.info("hash-ledger shutdown complete")
        sys.exit(0)

    try:
        signal.signal(signal.SIGTERM, shutdown_handler)
        signal.signal(signal.SIGINT, shutdown_handler)
        logger.info("Graceful shutdown handlers registered successfully")
    except ValueError as e:
        logger.warning(
            f"Could not register signal handlers (not in main thread): {e}. "
            f"Graceful shutdown via signals will not be available."
        )


def run_server(
    config: Config,
    host: Optional[str] = None,
    port: Optional[int] = None,
    debug: bool = False,
) -> None:
    """Open the ledger context and serve until interrupted.

    Args:
        config: Root configuration
        host: Host address (overrides config)
        port: Port number (overrides config)
        debug: Enable Flask debug mode

    Raises:
        ConfigurationError: If keys or program id cannot be loaded
        LedgerStartupError: If the ledger cannot be reached or funding fails
    """
    host = host or config.server.host
    port = port or config.server.port

    context = LedgerContext.from_config(config).open()
    try:
        setup_graceful_shutdown(context)
        app = create_app(RecordStore(context), config.server)

        logger.info(f"Starting hash-ledger on http://{host}:{port}")
        logger.info(f"Health check available at: http://{host}:{port}/health")

        app.run(
            host=host,
            port=port,
            debug=debug,
            threaded=True,
            use_reloader=False,  # Reloader would open a second ledger context
        )
    finally:
        context.close()
