"""
Web API server — Flask app factory.

Exposes the runtime operations as a JSON API for a graphical front
end.  The app holds one ``RuntimeManager``; the threaded development
server lets requests for different kinds run side by side while the
manager serializes work on the same kind.
"""

from __future__ import annotations

import logging

from flask import Flask, jsonify

from rtswitch.core.services.runtimes.orchestration.manager import RuntimeManager

logger = logging.getLogger(__name__)


def create_app(manager: RuntimeManager) -> Flask:
    """Create and configure the Flask application.

    Args:
        manager: The manager every route delegates to.

    Returns:
        Configured Flask application.
    """
    app = Flask(__name__)
    app.config["RUNTIME_MANAGER"] = manager
    app.json.sort_keys = False

    from rtswitch.ui.web.routes_runtimes import runtimes_bp

    app.register_blueprint(runtimes_bp, url_prefix="/api")

    @app.errorhandler(404)
    def _not_found(error):  # type: ignore[no-untyped-def]
        return jsonify({"ok": False, "error": "Not found", "code": "not-found"}), 404

    @app.errorhandler(405)
    def _method_not_allowed(error):  # type: ignore[no-untyped-def]
        return jsonify({"ok": False, "error": "Method not allowed", "code": "method-not-allowed"}), 405

    logger.info("Web API app created (root=%s)", manager.root)
    return app


def run_server(
    app: Flask,
    host: str = "127.0.0.1",
    port: int = 8000,
    debug: bool = False,
) -> None:
    """Run the Flask development server."""
    logger.info("Starting web API on %s:%d", host, port)
    app.run(host=host, port=port, debug=debug, use_reloader=False, threaded=True)
