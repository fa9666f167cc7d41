"""
API gateway: combines the user and events blueprints.
This is the entrypoint for development and deployment.

Usage:
    python -m eventqa.gateway.server
"""

import logging

from flask import Flask, jsonify
from flask_cors import CORS

from eventqa.auth_service.routes import auth_bp
from eventqa.common.responses import register_app_error_handlers
from eventqa.config import LOG_LEVEL, PORT, get_cors_origins
from eventqa.events_service.routes import events_bp

# Basic console logging during API requests
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
    format="[%(levelname)s] %(asctime)s - %(message)s"
)


def create_app() -> Flask:
    """
    Application factory for creating the Flask app.

    Returns:
        Flask: The configured Flask application.
    """
    app = Flask(__name__)
    CORS(app, resources={
        r"/api/*": {
            "origins": get_cors_origins(),
            "methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            "allow_headers": ["Content-Type", "Authorization"],
            "supports_credentials": True
        }
    })

    # --- REGISTER BLUEPRINTS ---
    app.register_blueprint(auth_bp, url_prefix="/api/user")
    app.register_blueprint(events_bp, url_prefix="/api/events")
    register_app_error_handlers(app)
    logging.info("All blueprints registered successfully.")

    # --- BASIC HEALTH CHECKPOINTS ---
    @app.route("/")
    def ping():
        """
        Root URL for simple 'online' check.
        """
        return jsonify({"status": "gateway_ok"}), 200

    @app.route("/health")
    def health():
        """
        Health check endpoint.
        """
        return jsonify({"status": "ok"}), 200

    return app


if __name__ == "__main__":
    app = create_app()
    app.run(host="0.0.0.0", port=PORT)
